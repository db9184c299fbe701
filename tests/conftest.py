"""Shared fixtures for the explorer tests."""

from unittest.mock import MagicMock

import base58
import pytest

from node import NodeService
from node.models import DetailedTransaction, TransactionInput, TransactionOutput
from transactions import TransactionProjector

# Fixed clock for projections of transactions without any timestamp
FIXED_NOW = 1_700_000_000.4

def make_address(version: int = 0x3a, body: bytes = b'\x11' * 20) -> str:
    """Build a valid base58check address with the given version byte."""
    return base58.b58encode_check(bytes([version]) + body).decode('ascii')

def _make_tx(
    txid: str = 'aa' * 32,
    height: int = 100,
    coinbase: bool = False,
    is_qrc20_transfer: bool = False,
    **overrides
) -> DetailedTransaction:
    if coinbase:
        inputs = [TransactionInput(sequence=4294967295, script='03a08601')]
        input_satoshis = 0
        fee_satoshis = 0
    else:
        inputs = [
            TransactionInput(
                prev_tx_id='bb' * 32,
                output_index=1,
                sequence=4294967294,
                script='4830450221',
                script_asm='30450221[ALL]',
                address=make_address(),
                satoshis=300_000_000
            )
        ]
        input_satoshis = 300_000_000
        fee_satoshis = 100_000

    outputs = [
        TransactionOutput(
            satoshis=123_456_789,
            script='76a914' + '11' * 20 + '88ac',
            script_asm='OP_DUP OP_HASH160 ' + '11' * 20 + ' OP_EQUALVERIFY OP_CHECKSIG',
            address=make_address()
        ),
        TransactionOutput(
            satoshis=176_443_211,
            script='a914' + '22' * 20 + '87',
            script_asm='OP_HASH160 ' + '22' * 20 + ' OP_EQUAL',
            address=make_address(0x32, b'\x22' * 20),
            spent_tx_id='cc' * 32,
            spent_index=0,
            spent_height=120
        )
    ]

    fields = dict(
        hash=txid,
        version=2,
        locktime=0,
        hex='ab' * 225,
        height=height,
        block_hash='dd' * 32 if height >= 0 else None,
        block_timestamp=1_600_000_000 if height >= 0 else None,
        received_time=None,
        input_satoshis=input_satoshis,
        output_satoshis=299_900_000,
        fee_satoshis=fee_satoshis,
        coinbase=coinbase,
        is_qrc20_transfer=is_qrc20_transfer,
        inputs=inputs,
        outputs=outputs
    )
    fields.update(overrides)
    return DetailedTransaction(**fields)

@pytest.fixture
def make_tx():
    """Factory for DetailedTransaction records."""
    return _make_tx

@pytest.fixture
def address():
    return make_address()

@pytest.fixture
def projector():
    return TransactionProjector(clock=lambda: FIXED_NOW)

@pytest.fixture
def node():
    """NodeService double; async methods are AsyncMocks."""
    node = MagicMock(spec=NodeService)
    node.get_height.return_value = 105
    return node
