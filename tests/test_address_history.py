"""Tests for address history listing."""

import pytest

from node import NotFoundError, ReceiptUpdateError, UpstreamError
from transactions import (
    AddressHistoryAggregator, ReceiptEnricher, dedupe_transactions
)

def txid(n: int) -> str:
    return f'{n:064x}'

@pytest.fixture
def aggregator(node, projector):
    return AddressHistoryAggregator(node, ReceiptEnricher(node), projector)

def history(txs, total_count=None):
    return {
        'items': [{'tx': tx} for tx in txs],
        'totalCount': len(txs) if total_count is None else total_count
    }

@pytest.mark.asyncio
async def test_duplicates_keep_first_position(aggregator, node, make_tx, address):
    """Test that a transaction listed on both legs appears once, at its first position."""
    a, b = make_tx(txid(1)), make_tx(txid(2))
    node.get_address_history.return_value = history([a, b, a], total_count=3)

    result = await aggregator.list_by_address(address, 0)

    assert [tx['txid'] for tx in result['txs']] == [txid(1), txid(2)]
    assert result['pagesTotal'] == 1

@pytest.mark.asyncio
async def test_pagination(aggregator, node, make_tx, address):
    """Test the requested window and page count for the last page."""
    last_page = [make_tx(txid(n)) for n in range(20, 25)]
    node.get_address_history.return_value = history(last_page, total_count=25)

    result = await aggregator.list_by_address(address, 2)

    node.get_address_history.assert_awaited_once_with(address, from_=20, to=30)
    assert result['pagesTotal'] == 3
    assert len(result['txs']) == 5
    assert [tx['txid'] for tx in result['txs']] == [txid(n) for n in range(20, 25)]

@pytest.mark.asyncio
async def test_custom_page_length(aggregator, node, make_tx, address):
    """Test pagination with a non-default page length."""
    node.get_address_history.return_value = history([make_tx(txid(1))], total_count=7)

    result = await aggregator.list_by_address(address, 1, page_length=5)

    node.get_address_history.assert_awaited_once_with(address, from_=5, to=10)
    assert result['pagesTotal'] == 2

@pytest.mark.asyncio
async def test_empty_history(aggregator, node, address):
    """Test an address without transactions."""
    node.get_address_history.return_value = history([])

    result = await aggregator.list_by_address(address, 0)

    assert result == {'pagesTotal': 0, 'txs': []}

@pytest.mark.asyncio
async def test_transfers_are_enriched(aggregator, node, make_tx, address):
    """Test that only transfer transactions get receipts, once per transaction."""
    transfer = make_tx(txid(1), is_qrc20_transfer=True)
    plain = make_tx(txid(2))
    node.get_address_history.return_value = history([transfer, plain, transfer])
    node.get_transaction_receipt.return_value = [{'log': []}]

    result = await aggregator.list_by_address(address, 0)

    node.get_transaction_receipt.assert_awaited_once_with(txid(1))
    assert result['txs'][0]['receipt'] == [{'log': []}]
    assert result['txs'][0]['isqrc20Transfer'] is True
    assert result['txs'][1]['receipt'] is None

@pytest.mark.asyncio
async def test_enrichment_failure_fails_page(aggregator, node, make_tx, address):
    """Test that one failed receipt fails the page with the generic error."""
    txs = [make_tx(txid(n), is_qrc20_transfer=True) for n in range(3)]
    node.get_address_history.return_value = history(txs)
    node.get_transaction_receipt.side_effect = UpstreamError("Error processing transaction")

    with pytest.raises(ReceiptUpdateError) as exc_info:
        await aggregator.list_by_address(address, 0)

    assert str(exc_info.value) == "Receipt update error"
    # Enrichment is sequential, so nothing after the failure is requested
    assert node.get_transaction_receipt.await_count == 1

@pytest.mark.asyncio
async def test_missing_receipt_also_fails_page(aggregator, node, make_tx, address):
    """Test that not-found receipts are reported as the generic error too."""
    node.get_address_history.return_value = history([make_tx(is_qrc20_transfer=True)])
    node.get_transaction_receipt.side_effect = NotFoundError()

    with pytest.raises(ReceiptUpdateError):
        await aggregator.list_by_address(address, 0)

@pytest.mark.asyncio
async def test_history_errors_propagate(aggregator, node, address):
    """Test that address history failures are surfaced unchanged."""
    node.get_address_history.side_effect = UpstreamError("Address index not enabled")

    with pytest.raises(UpstreamError):
        await aggregator.list_by_address(address, 0)

def test_dedupe_transactions(make_tx):
    """Test order-preserving deduplication."""
    a, b, c = make_tx(txid(1)), make_tx(txid(2)), make_tx(txid(3))

    result = dedupe_transactions([b, a, b, c, a])

    assert [tx.hash for tx in result] == [txid(2), txid(1), txid(3)]
