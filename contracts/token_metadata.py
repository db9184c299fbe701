"""Token metadata (symbol, decimals) resolution and caching.

Metadata is read from the token contract with two read-only calls and kept for
the lifetime of the cache.
"""

import asyncio
import logging
from typing import Dict, Optional

from eth_abi import decode as abi_decode
from eth_abi.exceptions import DecodingError
from pydantic import BaseModel, ConfigDict

from node import UpstreamError
from .gateway import ContractCallGateway

logger = logging.getLogger(__name__)

# ERC20 function selectors
SYMBOL_SELECTOR = '95d89b41'    # symbol()
DECIMALS_SELECTOR = '313ce567'  # decimals()

class TokenMetadata(BaseModel):
    """Resolved token metadata. Immutable once cached."""
    model_config = ConfigDict(frozen=True)

    symbol: Optional[str] = None
    decimals: Optional[int] = None

def decode_single(abi_type: str, output: bytes, field: str):
    """Decode a single ABI value from a call output."""
    try:
        values = abi_decode([abi_type], output)
    except (DecodingError, UnicodeDecodeError) as e:
        raise UpstreamError(f"Unable to decode {field}() output: {e}") from e
    return values[0] if values else None

class TokenMetadataCache:
    """Process-lifetime cache of token metadata keyed by contract address.

    Concurrent lookups of an address that is not cached yet share a single
    in-flight resolution. Failed resolutions are not cached.
    """

    def __init__(self, gateway: ContractCallGateway):
        self.gateway = gateway
        self._entries: Dict[str, TokenMetadata] = {}
        self._pending: Dict[str, asyncio.Task] = {}

    def __contains__(self, address: str) -> bool:
        return address in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    async def resolve(self, address: str) -> TokenMetadata:
        """Get metadata for a token contract, resolving it on first use.

        Raises:
            NotFoundError: If the contract does not exist
            UpstreamError: If a call fails or its output cannot be decoded
        """
        cached = self._entries.get(address)
        if cached is not None:
            return cached

        task = self._pending.get(address)
        if task is None:
            task = asyncio.create_task(self._resolve(address))
            self._pending[address] = task
            task.add_done_callback(lambda done: self._forget(address, done))

        # A cancelled waiter must not cancel the lookup for the others
        return await asyncio.shield(task)

    def _forget(self, address: str, task: asyncio.Task) -> None:
        self._pending.pop(address, None)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Token metadata lookup failed for {address}: {task.exception()}")

    async def _resolve(self, address: str) -> TokenMetadata:
        symbol_output, decimals_output = await asyncio.gather(
            self.gateway.call_output(address, SYMBOL_SELECTOR),
            self.gateway.call_output(address, DECIMALS_SELECTOR)
        )

        metadata = TokenMetadata(
            symbol=decode_single('string', symbol_output, 'symbol'),
            decimals=decode_single('uint8', decimals_output, 'decimals')
        )

        self._entries[address] = metadata
        logger.info(f"Cached token metadata for {address}: {metadata.symbol} ({metadata.decimals} decimals)")
        return metadata
