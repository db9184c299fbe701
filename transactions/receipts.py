"""Receipt enrichment for token transfer transactions."""

import logging

from node import NodeService
from node.models import DetailedTransaction

logger = logging.getLogger(__name__)

class ReceiptEnricher:
    """Attaches execution receipts to QRC20 transfer transactions."""

    def __init__(self, node: NodeService):
        self.node = node

    async def ensure_receipt(self, tx: DetailedTransaction) -> DetailedTransaction:
        """Return the transaction with its receipt attached if it is a token transfer.

        Transactions that are not transfers, or already carry a receipt, are
        returned unchanged. Receipt lookup errors propagate to the caller.
        """
        if not tx.is_qrc20_transfer or tx.receipt is not None:
            return tx

        receipt = await self.node.get_transaction_receipt(tx.hash)
        logger.debug(f"Attached receipt to transfer {tx.hash}")
        return tx.model_copy(update={'receipt': receipt})
