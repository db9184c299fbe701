"""Paginated transaction listing for a block."""

import math
from typing import Any, Dict, Optional

from node import NodeService
from .models import ProjectionOptions, PAGE_LENGTH
from .projector import TransactionProjector

class BlockTransactionLister:
    """Lists a block's transactions in block order, without receipts."""

    def __init__(self, node: NodeService, projector: TransactionProjector):
        self.node = node
        self.projector = projector

    async def list_by_block(
        self,
        block_hash: str,
        page: Optional[int] = None,
        page_length: int = PAGE_LENGTH,
        options: Optional[ProjectionOptions] = None
    ) -> Dict[str, Any]:
        """List a page of a block's transactions, or all of them when page is None."""
        block = await self.node.get_block_overview(block_hash)
        txids = block['txids']

        pages_total = 1
        if page is not None:
            start = page * page_length
            pages_total = math.ceil(len(txids) / page_length)
            txids = txids[start:start + page_length]

        chain_height = await self.node.get_height()

        txs = []
        for txid in txids:
            tx = await self.node.get_detailed_transaction(txid)
            txs.append(self.projector.project(tx, chain_height, options))

        return {'pagesTotal': pages_total, 'txs': txs}
