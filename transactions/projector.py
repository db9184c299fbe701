"""Projection of node transaction records into the API's transaction shape."""

import time
from decimal import Decimal
from typing import Any, Callable, Dict, Optional

from node.models import DetailedTransaction, TransactionInput, TransactionOutput
from .address_type import address_type
from .models import ProjectionOptions

COIN = 1e8
COIN_DECIMAL = Decimal(100_000_000)
EIGHT_PLACES = Decimal('0.00000001')

def format_coins(satoshis: int) -> str:
    """Render satoshis as a coin amount with exactly eight decimals."""
    return format((Decimal(satoshis) / COIN_DECIMAL).quantize(EIGHT_PLACES), 'f')

class TransactionProjector:
    """Turns DetailedTransaction records into API transaction dicts.

    Projection does no I/O. The only non-determinism is the clock used for
    transactions that carry neither a block timestamp nor a received time.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock

    def project(
        self,
        tx: DetailedTransaction,
        chain_height: int,
        options: Optional[ProjectionOptions] = None
    ) -> Dict[str, Any]:
        """Project a transaction.

        Args:
            tx: Transaction assembled by the node service
            chain_height: Current chain height, for confirmations
            options: Fields to omit

        Returns:
            Dict in the external transaction shape
        """
        options = options or ProjectionOptions()

        confirmations = 0
        if tx.height >= 0:
            confirmations = chain_height - tx.height + 1

        transformed: Dict[str, Any] = {
            'txid': tx.hash,
            'version': tx.version,
            'locktime': tx.locktime,
            'receipt': tx.receipt,
            'isqrc20Transfer': tx.is_qrc20_transfer,
        }

        if tx.coinbase:
            transformed['vin'] = [{
                'coinbase': tx.inputs[0].script,
                'sequence': tx.inputs[0].sequence,
                'n': 0
            }]
        else:
            transformed['vin'] = [
                self.project_input(tx_input, n, options)
                for n, tx_input in enumerate(tx.inputs)
            ]

        transformed['vout'] = [
            self.project_output(output, n, options)
            for n, output in enumerate(tx.outputs)
        ]

        transformed['blockhash'] = tx.block_hash
        transformed['blockheight'] = tx.height
        transformed['confirmations'] = confirmations

        if tx.block_timestamp:
            transformed['time'] = tx.block_timestamp
        elif tx.received_time:
            transformed['time'] = tx.received_time
        else:
            transformed['time'] = round(self.clock())

        if confirmations > 0:
            transformed['blocktime'] = transformed['time']

        if tx.coinbase:
            transformed['isCoinBase'] = True

        transformed['valueOut'] = tx.output_satoshis / COIN
        transformed['size'] = len(tx.hex) // 2

        if not tx.coinbase:
            transformed['valueIn'] = tx.input_satoshis / COIN
            transformed['fees'] = tx.fee_satoshis / COIN

        return transformed

    def project_input(
        self,
        tx_input: TransactionInput,
        n: int,
        options: ProjectionOptions
    ) -> Dict[str, Any]:
        transformed: Dict[str, Any] = {
            'txid': tx_input.prev_tx_id,
            'vout': tx_input.output_index,
            'sequence': tx_input.sequence,
            'n': n
        }

        if not options.omit_script_sig:
            transformed['scriptSig'] = {'hex': tx_input.script}
            if not options.omit_asm:
                transformed['scriptSig']['asm'] = tx_input.script_asm

        satoshis = tx_input.satoshis or 0
        transformed['addr'] = tx_input.address
        transformed['valueSat'] = satoshis
        transformed['value'] = satoshis / COIN
        # Double spend detection is not tracked
        transformed['doubleSpentTxID'] = None

        return transformed

    def project_output(
        self,
        output: TransactionOutput,
        n: int,
        options: ProjectionOptions
    ) -> Dict[str, Any]:
        transformed: Dict[str, Any] = {
            'value': format_coins(output.satoshis),
            'n': n,
            'scriptPubKey': {'hex': output.script}
        }

        if not options.omit_asm:
            transformed['scriptPubKey']['asm'] = output.script_asm

        if not options.omit_spent_info:
            transformed['spentTxId'] = output.spent_tx_id or None
            transformed['spentIndex'] = output.spent_index
            transformed['spentHeight'] = output.spent_height or None

        if output.address:
            transformed['scriptPubKey']['addresses'] = [output.address]
            kind = address_type(output.address)
            if kind:
                transformed['scriptPubKey']['type'] = kind

        return transformed
