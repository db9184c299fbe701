"""Tests for the node service adapter."""

from unittest.mock import MagicMock, call

import pytest

from node import (
    NodeService, NotFoundError, UpstreamError,
    is_qrc20_transfer_script, to_satoshis
)
from rpc import QtepError, NodeConnectionError

TXID = 'aa' * 32
PREV_TXID = 'bb' * 32
BLOCK_HASH = 'dd' * 32

TRANSFER_ASM = (
    '4 250000 40 a9059cbb' + '00' * 64 + ' f2703e93f87b846a7aacec1247beaec1c583daa4 OP_CALL'
)

def raw_tx(txid=TXID, blockhash=BLOCK_HASH, vin=None, vout=None):
    raw = {
        'txid': txid,
        'hash': txid,
        'version': 2,
        'locktime': 0,
        'hex': 'ab' * 200,
        'vin': vin if vin is not None else [{
            'txid': PREV_TXID,
            'vout': 0,
            'scriptSig': {'asm': '3045[ALL]', 'hex': '483045'},
            'sequence': 4294967294,
            'address': 'QdmtW6hizj8pWhoiZsm2K1ByXDSpDoXELT',
            'valueSat': 500_000_000,
        }],
        'vout': vout if vout is not None else [
            {
                'value': 1.5,
                'n': 0,
                'scriptPubKey': {
                    'asm': 'OP_DUP OP_HASH160 11 OP_EQUALVERIFY OP_CHECKSIG',
                    'hex': '76a914',
                    'addresses': ['QjGZ8ZWVYS8nuvsVtYqN9NFoaYYQyUHxZr'],
                },
            },
            {
                'value': 3.49,
                'n': 1,
                'scriptPubKey': {'asm': 'OP_HASH160 22 OP_EQUAL', 'hex': 'a914'},
            },
        ],
    }
    if blockhash:
        raw['blockhash'] = blockhash
        raw['blocktime'] = 1_600_000_000
    return raw

def not_found(method='getrawtransaction'):
    return QtepError('No such mempool or blockchain transaction', -5, method)

@pytest.fixture
def rpc():
    rpc = MagicMock()
    rpc.getblockheader.return_value = {'hash': BLOCK_HASH, 'height': 100, 'time': 1_599_999_999}
    rpc.getspentinfo.side_effect = not_found('getspentinfo')
    return rpc

@pytest.fixture
def service(rpc):
    return NodeService(rpc)

@pytest.mark.asyncio
async def test_detailed_transaction(service, rpc):
    """Test assembly of a confirmed transaction."""
    rpc.getrawtransaction.return_value = raw_tx()

    tx = await service.get_detailed_transaction(TXID)

    rpc.getrawtransaction.assert_called_once_with(TXID, True)
    rpc.getblockheader.assert_called_once_with(BLOCK_HASH)
    assert tx.hash == TXID
    assert tx.height == 100
    assert tx.block_hash == BLOCK_HASH
    assert tx.block_timestamp == 1_600_000_000
    assert tx.coinbase is False
    assert tx.is_qrc20_transfer is False
    assert tx.input_satoshis == 500_000_000
    assert tx.output_satoshis == 499_000_000
    assert tx.fee_satoshis == 1_000_000
    assert tx.inputs[0].prev_tx_id == PREV_TXID
    assert tx.inputs[0].script_asm == '3045[ALL]'
    assert tx.outputs[0].satoshis == 150_000_000
    assert tx.outputs[0].address == 'QjGZ8ZWVYS8nuvsVtYqN9NFoaYYQyUHxZr'
    assert tx.outputs[1].address is None
    assert tx.outputs[0].spent_tx_id is None

@pytest.mark.asyncio
async def test_spent_info_lookup(service, rpc):
    """Test that spent outputs are resolved through getspentinfo."""
    rpc.getrawtransaction.return_value = raw_tx()

    def spent_info(query):
        if query['index'] == 1:
            return {'txid': 'cc' * 32, 'index': 3, 'height': 120}
        raise not_found('getspentinfo')

    rpc.getspentinfo.side_effect = spent_info

    tx = await service.get_detailed_transaction(TXID)

    assert tx.outputs[0].spent_tx_id is None
    assert tx.outputs[1].spent_tx_id == 'cc' * 32
    assert tx.outputs[1].spent_index == 3
    assert tx.outputs[1].spent_height == 120
    assert rpc.getspentinfo.call_args_list == [
        call({'txid': TXID, 'index': 0}),
        call({'txid': TXID, 'index': 1}),
    ]

@pytest.mark.asyncio
async def test_spent_info_skipped_without_index(rpc):
    """Test that getspentinfo is not used when the node lacks spentindex."""
    rpc.getrawtransaction.return_value = raw_tx()

    await NodeService(rpc, spent_index=False).get_detailed_transaction(TXID)

    rpc.getspentinfo.assert_not_called()

@pytest.mark.asyncio
async def test_input_value_from_previous_output(service, rpc):
    """Test the prevout lookup when the node does not report input values."""
    vin = [
        {'txid': PREV_TXID, 'vout': 1, 'scriptSig': {'asm': '', 'hex': ''}, 'sequence': 1},
        {'txid': PREV_TXID, 'vout': 0, 'scriptSig': {'asm': '', 'hex': ''}, 'sequence': 1},
    ]
    prev = raw_tx(PREV_TXID, vout=[
        {'value': 2.0, 'n': 0, 'scriptPubKey': {'hex': '', 'addresses': ['QPrevA']}},
        {'value': 3.5, 'n': 1, 'scriptPubKey': {'hex': '', 'address': 'QPrevB'}},
    ])
    rpc.getrawtransaction.side_effect = lambda txid, verbose: prev if txid == PREV_TXID else raw_tx(vin=vin)

    tx = await service.get_detailed_transaction(TXID)

    assert [i.satoshis for i in tx.inputs] == [350_000_000, 200_000_000]
    assert [i.address for i in tx.inputs] == ['QPrevB', 'QPrevA']
    assert tx.input_satoshis == 550_000_000
    # Both inputs spend the same transaction, fetched once
    assert rpc.getrawtransaction.call_count == 2

@pytest.mark.asyncio
async def test_coinbase_transaction(service, rpc):
    """Test that coinbase transactions carry no input value or fee."""
    vin = [{'coinbase': '03a08601', 'sequence': 4294967295}]
    rpc.getrawtransaction.return_value = raw_tx(vin=vin)

    tx = await service.get_detailed_transaction(TXID)

    assert tx.coinbase is True
    assert tx.inputs[0].script == '03a08601'
    assert tx.input_satoshis == 0
    assert tx.fee_satoshis == 0

@pytest.mark.asyncio
async def test_mempool_transaction(service, rpc):
    """Test that unconfirmed transactions get the mempool received time."""
    rpc.getrawtransaction.return_value = raw_tx(blockhash=None)
    rpc.getmempoolentry.return_value = {'time': 1_650_000_000}

    tx = await service.get_detailed_transaction(TXID)

    assert tx.height == -1
    assert tx.block_hash is None
    assert tx.received_time == 1_650_000_000
    rpc.getblockheader.assert_not_called()

@pytest.mark.asyncio
async def test_transfer_detection(service, rpc):
    """Test that OP_CALL transfer outputs flag the transaction."""
    vout = [{'value': 0, 'n': 0, 'scriptPubKey': {'asm': TRANSFER_ASM, 'hex': 'c4'}}]
    rpc.getrawtransaction.return_value = raw_tx(vout=vout)

    tx = await service.get_detailed_transaction(TXID)

    assert tx.is_qrc20_transfer is True

def test_transfer_script_detection():
    """Test recognition of transfer() contract calls."""
    assert is_qrc20_transfer_script(TRANSFER_ASM)
    assert not is_qrc20_transfer_script(TRANSFER_ASM.replace('a9059cbb', '095ea7b3'))
    assert not is_qrc20_transfer_script('OP_DUP OP_HASH160 11 OP_EQUALVERIFY OP_CHECKSIG')
    assert not is_qrc20_transfer_script(None)

def test_to_satoshis():
    """Test coin to satoshi conversion without float drift."""
    assert to_satoshis(1.23456789) == 123_456_789
    assert to_satoshis(0.1) == 10_000_000
    assert to_satoshis(0) == 0

@pytest.mark.asyncio
async def test_not_found_is_translated(service, rpc):
    """Test that code -5 becomes NotFoundError."""
    rpc.getrawtransaction.side_effect = not_found()

    with pytest.raises(NotFoundError):
        await service.get_detailed_transaction(TXID)

@pytest.mark.asyncio
async def test_other_node_errors_are_upstream(service, rpc):
    """Test that other node error codes become UpstreamError."""
    rpc.sendrawtransaction.side_effect = QtepError('bad-txns-inputs-missingorspent', -25, 'sendrawtransaction')

    with pytest.raises(UpstreamError) as exc_info:
        await service.send_transaction('0200')

    assert exc_info.value.code == -25
    assert 'bad-txns-inputs-missingorspent' in str(exc_info.value)
    assert exc_info.value.unavailable is False

@pytest.mark.asyncio
async def test_connection_errors_are_unavailable(service, rpc):
    """Test that connection failures are flagged as unavailable."""
    rpc.getblockcount.side_effect = NodeConnectionError("Failed to connect to Qtep node")

    with pytest.raises(UpstreamError) as exc_info:
        await service.get_height()

    assert exc_info.value.unavailable is True

@pytest.mark.asyncio
async def test_block_overview(service, rpc):
    """Test the block overview shape."""
    rpc.getblock.return_value = {'hash': BLOCK_HASH, 'height': 100, 'tx': ['t1', 't2']}

    block = await service.get_block_overview(BLOCK_HASH)

    assert block == {'hash': BLOCK_HASH, 'height': 100, 'txids': ['t1', 't2']}

@pytest.mark.asyncio
async def test_address_history(service, rpc):
    """Test history order, duplicate mempool items and the window."""
    address = 'QdmtW6hizj8pWhoiZsm2K1ByXDSpDoXELT'
    rpc.getaddressmempool.return_value = [
        {'txid': 'm1', 'satoshis': -500, 'timestamp': 10},
        {'txid': 'm1', 'satoshis': 400, 'timestamp': 10},
        {'txid': 'm2', 'satoshis': 100, 'timestamp': 20},
    ]
    rpc.getaddresstxids.return_value = ['c1', 'c2', 'c3']
    rpc.getrawtransaction.side_effect = lambda txid, verbose: raw_tx(txid)

    result = await service.get_address_history(address, from_=0, to=10)

    rpc.getaddresstxids.assert_called_once_with({'addresses': [address]})
    assert result['totalCount'] == 6
    assert [item['tx'].hash for item in result['items']] == ['m2', 'm1', 'm1', 'c3', 'c2', 'c1']
    assert result['items'][1]['tx'] is result['items'][2]['tx']
    assert rpc.getrawtransaction.call_count == 5

@pytest.mark.asyncio
async def test_address_history_window(service, rpc):
    """Test that only the requested window is fetched."""
    rpc.getaddressmempool.return_value = []
    rpc.getaddresstxids.return_value = [f't{n}' for n in range(25)]
    rpc.getrawtransaction.side_effect = lambda txid, verbose: raw_tx(txid)

    result = await service.get_address_history('Qaddr', from_=20, to=30)

    assert result['totalCount'] == 25
    assert [item['tx'].hash for item in result['items']] == ['t4', 't3', 't2', 't1', 't0']

@pytest.mark.asyncio
async def test_call_contract_arguments(service, rpc):
    """Test that optional contract call arguments are positional with null gaps."""
    rpc.callcontract.return_value = {'executionResult': {'output': ''}}

    await service.call_contract('f2703e93', '95d89b41')
    await service.call_contract('f2703e93', '95d89b41', gas_limit=250000)
    await service.call_contract('f2703e93', '95d89b41', amount=1.5, sender='Qsender', gas_limit=250000)

    assert rpc.callcontract.call_args_list == [
        call('f2703e93', '95d89b41'),
        call('f2703e93', '95d89b41', None, 250000),
        call('f2703e93', '95d89b41', 'Qsender', 250000, 1.5),
    ]

@pytest.mark.asyncio
async def test_raw_transaction_and_receipt(service, rpc):
    """Test pass-through lookups."""
    rpc.getrawtransaction.return_value = '0200'
    rpc.gettransactionreceipt.return_value = [{'log': []}]
    rpc.getaccountinfo.return_value = {'address': 'f2703e93', 'balance': 0}

    assert await service.get_transaction(TXID) == '0200'
    rpc.getrawtransaction.assert_called_once_with(TXID, False)
    assert await service.get_transaction_receipt(TXID) == [{'log': []}]
    assert await service.get_account_info('f2703e93') == {'address': 'f2703e93', 'balance': 0}
