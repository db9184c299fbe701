"""Contracts module for the explorer API.

This module provides functionality for:
- Read-only contract calls
- Token metadata lookup with a process-lifetime cache
- Contract account info
"""

from typing import Any, Dict, Optional

from node import NodeService
from .gateway import ContractCallGateway
from .token_metadata import (
    TokenMetadataCache, TokenMetadata, SYMBOL_SELECTOR, DECIMALS_SELECTOR
)

class ContractService:
    """Entry point for contract lookups used by the API routers."""

    def __init__(self, node: NodeService, token_cache: Optional[TokenMetadataCache] = None):
        """Initialize the contract service.

        Args:
            node: Node service to call through
            token_cache: Shared token metadata cache. Pass the application's
                         cache so every request sees the same entries.
        """
        self.node = node
        self.gateway = ContractCallGateway(node)
        self.token_cache = token_cache or TokenMetadataCache(self.gateway)

    async def call_contract(
        self,
        address: str,
        data: str,
        amount: Optional[Any] = None,
        sender: Optional[str] = None,
        gas_limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self.gateway.call(
            address, data, amount=amount, sender=sender, gas_limit=gas_limit
        )

    async def get_token_info(self, address: str) -> Dict[str, Any]:
        metadata = await self.token_cache.resolve(address)
        return metadata.model_dump()

    async def get_account_info(self, address: str) -> Dict[str, Any]:
        return await self.node.get_account_info(address)

__all__ = [
    'ContractService',
    'ContractCallGateway',
    'TokenMetadataCache',
    'TokenMetadata',
    'SYMBOL_SELECTOR',
    'DECIMALS_SELECTOR',
]
