"""Transactions module for the explorer API.

This module provides functionality for:
- Projecting node transactions into the API transaction shape
- Listing transactions by block or by address, a page at a time
- Attaching receipts to QRC20 transfer transactions
- Raw transaction lookup, broadcast and receipt lookup
"""

from typing import Any, Dict, Optional

from node import NodeService, InvalidParameterError
from .models import ProjectionOptions, PAGE_LENGTH
from .projector import TransactionProjector, format_coins
from .receipts import ReceiptEnricher
from .address_history import AddressHistoryAggregator, dedupe_transactions
from .block_transactions import BlockTransactionLister
from .address_type import address_type

class TransactionService:
    """Entry point for transaction lookups used by the API routers."""

    def __init__(self, node: NodeService, projector: Optional[TransactionProjector] = None):
        """Initialize the transaction service.

        Args:
            node: Node service to read from
            projector: Optional projector, e.g. with a fixed clock for tests
        """
        self.node = node
        self.projector = projector or TransactionProjector()
        self.enricher = ReceiptEnricher(node)
        self.address_history = AddressHistoryAggregator(node, self.enricher, self.projector)
        self.block_transactions = BlockTransactionLister(node, self.projector)

    async def get_transaction(
        self,
        txid: str,
        options: Optional[ProjectionOptions] = None
    ) -> Dict[str, Any]:
        """Get a single projected transaction.

        Raises:
            NotFoundError: If the node does not know the transaction
        """
        tx = await self.node.get_detailed_transaction(txid)
        chain_height = await self.node.get_height()
        return self.projector.project(tx, chain_height, options)

    async def get_raw_transaction(self, txid: str) -> Dict[str, str]:
        return {'rawtx': await self.node.get_transaction(txid)}

    async def list_transactions(
        self,
        block: Optional[str] = None,
        address: Optional[str] = None,
        page: int = 0,
        options: Optional[ProjectionOptions] = None
    ) -> Dict[str, Any]:
        """List transactions of a block or an address.

        Args:
            block: Block hash, takes precedence over address
            address: Address to list history for
            page: Zero-based page number
            options: Projection options

        Returns:
            Dict with 'pagesTotal' and 'txs'

        Raises:
            InvalidParameterError: If neither block nor address is given
        """
        if block:
            return await self.block_transactions.list_by_block(
                block, page, PAGE_LENGTH, options
            )
        if address:
            return await self.address_history.list_by_address(
                address, page, PAGE_LENGTH, options
            )
        raise InvalidParameterError("Block hash or address expected")

    async def send_transaction(self, rawtx: str) -> Dict[str, str]:
        return {'txid': await self.node.send_transaction(rawtx)}

    async def get_transaction_receipt(self, txid: str) -> Any:
        return await self.node.get_transaction_receipt(txid)

__all__ = [
    'TransactionService',
    'TransactionProjector',
    'ReceiptEnricher',
    'AddressHistoryAggregator',
    'BlockTransactionLister',
    'ProjectionOptions',
    'dedupe_transactions',
    'format_coins',
    'address_type',
    'PAGE_LENGTH',
]
