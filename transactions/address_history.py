"""Paginated transaction history for an address."""

import logging
import math
from typing import Any, Dict, List, Optional

from node import NodeService, ExplorerError, ReceiptUpdateError
from node.models import DetailedTransaction
from .models import ProjectionOptions, PAGE_LENGTH
from .projector import TransactionProjector
from .receipts import ReceiptEnricher

logger = logging.getLogger(__name__)

def dedupe_transactions(txs: List[DetailedTransaction]) -> List[DetailedTransaction]:
    """Drop repeated transactions by hash, keeping each at its first position."""
    seen = set()
    unique = []
    for tx in txs:
        if tx.hash not in seen:
            seen.add(tx.hash)
            unique.append(tx)
    return unique

class AddressHistoryAggregator:
    """Lists an address's transactions a page at a time.

    Each page is deduplicated, enriched with receipts one transaction at a
    time, then projected. A page either succeeds as a whole or fails.
    """

    def __init__(
        self,
        node: NodeService,
        enricher: ReceiptEnricher,
        projector: TransactionProjector
    ):
        self.node = node
        self.enricher = enricher
        self.projector = projector

    async def list_by_address(
        self,
        address: str,
        page: int,
        page_length: int = PAGE_LENGTH,
        options: Optional[ProjectionOptions] = None
    ) -> Dict[str, Any]:
        """List one page of an address's history.

        Args:
            address: Address to list
            page: Zero-based page number
            page_length: Transactions per page
            options: Projection options

        Returns:
            Dict with 'pagesTotal' and 'txs' (projected transactions in node history order)

        Raises:
            ReceiptUpdateError: If any receipt lookup fails
        """
        history = await self.node.get_address_history(
            address,
            from_=page * page_length,
            to=(page + 1) * page_length
        )

        txs = dedupe_transactions([item['tx'] for item in history['items']])

        enriched = []
        for tx in txs:
            try:
                enriched.append(await self.enricher.ensure_receipt(tx))
            except ExplorerError as e:
                logger.warning(f"Receipt lookup failed for {tx.hash} (address {address}): {e}")
                raise ReceiptUpdateError() from e

        chain_height = await self.node.get_height()

        return {
            'pagesTotal': math.ceil(history['totalCount'] / page_length),
            'txs': [self.projector.project(tx, chain_height, options) for tx in enriched]
        }
