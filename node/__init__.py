"""Node module providing async access to a Qtep node.

NodeService wraps the blocking QtepRPC client and exposes the capabilities the
explorer services consume:
- Detailed transaction assembly (inputs, outputs, spent info, chain context)
- Block overviews and chain height
- Address history windows
- Transaction receipts, contract calls and account info
- Raw transaction broadcast

Every RPC runs in a worker thread so awaiting it only suspends the calling
request. RPC errors are translated to the explorer error hierarchy here.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

from rpc import QtepRPC, RPCError, QtepError, NodeConnectionError, NodeAuthError
from .exceptions import (
    ExplorerError, NotFoundError, UpstreamError,
    ReceiptUpdateError, InvalidParameterError
)
from .models import DetailedTransaction, TransactionInput, TransactionOutput

logger = logging.getLogger(__name__)

SATOSHIS_PER_COIN = Decimal(100_000_000)

# transfer(address,uint256)
QRC20_TRANSFER_SELECTOR = 'a9059cbb'

def to_satoshis(value: Any) -> int:
    """Convert a coin amount as reported by the node to satoshis."""
    return int((Decimal(str(value)) * SATOSHIS_PER_COIN).to_integral_value())

def is_qrc20_transfer_script(script_asm: Optional[str]) -> bool:
    """Check whether an output script is a contract call to transfer().

    OP_CALL scripts read ``<version> <gas limit> <gas price> <data> <contract> OP_CALL``.
    """
    if not script_asm:
        return False
    tokens = script_asm.split()
    return (
        len(tokens) >= 6
        and tokens[-1] == 'OP_CALL'
        and tokens[-3].startswith(QRC20_TRANSFER_SELECTOR)
    )

def _output_satoshis(vout: Dict[str, Any]) -> int:
    if vout.get('valueSat') is not None:
        return int(vout['valueSat'])
    return to_satoshis(vout.get('value', 0))

def _output_address(vout: Dict[str, Any]) -> Optional[str]:
    script_pub_key = vout.get('scriptPubKey') or {}
    addresses = script_pub_key.get('addresses')
    if addresses:
        return addresses[0]
    return script_pub_key.get('address')

class NodeService:
    """Async adapter over the Qtep RPC client."""

    def __init__(self, rpc: QtepRPC, spent_index: bool = True):
        """Initialize the node service.

        Args:
            rpc: RPC client for the node
            spent_index: Whether the node runs with -spentindex, enabling getspentinfo
        """
        self.rpc = rpc
        self.spent_index = spent_index

    async def _call(self, method: str, *args) -> Any:
        """Run a blocking RPC method in a worker thread and translate its errors."""
        try:
            return await asyncio.to_thread(getattr(self.rpc, method), *args)
        except QtepError as e:
            if e.is_not_found:
                raise NotFoundError(e.node_message) from e
            raise UpstreamError(str(e), code=e.code) from e
        except (NodeConnectionError, NodeAuthError) as e:
            logger.error(f"Node unavailable during {method}: {e}")
            raise UpstreamError(str(e), unavailable=True) from e
        except RPCError as e:
            raise UpstreamError(str(e), code=e.code) from e

    async def get_height(self) -> int:
        """Current chain height."""
        return await self._call('getblockcount')

    async def get_transaction(self, txid: str) -> str:
        """Serialized transaction as hex."""
        return await self._call('getrawtransaction', txid, False)

    async def get_detailed_transaction(self, txid: str) -> DetailedTransaction:
        """Fetch a transaction with input values, spent info and chain context."""
        raw = await self._call('getrawtransaction', txid, True)
        return await self._build_detailed_transaction(raw)

    async def _build_detailed_transaction(self, raw: Dict[str, Any]) -> DetailedTransaction:
        txid = raw['txid']
        vin = raw.get('vin', [])
        coinbase = bool(vin) and 'coinbase' in vin[0]

        prev_txs: Dict[str, Dict[str, Any]] = {}
        inputs = []
        for entry in vin:
            inputs.append(await self._build_input(entry, prev_txs))

        outputs = []
        for n, entry in enumerate(raw.get('vout', [])):
            outputs.append(await self._build_output(txid, n, entry))

        height = -1
        block_timestamp = None
        received_time = None
        if raw.get('blockhash'):
            header = await self._call('getblockheader', raw['blockhash'])
            height = header['height']
            block_timestamp = raw.get('blocktime', header.get('time'))
        else:
            try:
                entry = await self._call('getmempoolentry', txid)
                received_time = entry.get('time')
            except NotFoundError:
                # Dropped from the mempool between the two calls
                logger.debug(f"Transaction {txid} not in mempool")

        output_satoshis = sum(output.satoshis for output in outputs)
        input_satoshis = 0
        fee_satoshis = 0
        if not coinbase:
            input_satoshis = sum(i.satoshis or 0 for i in inputs)
            fee_satoshis = input_satoshis - output_satoshis

        return DetailedTransaction(
            hash=txid,
            version=raw['version'],
            locktime=raw['locktime'],
            hex=raw['hex'],
            height=height,
            block_hash=raw.get('blockhash'),
            block_timestamp=block_timestamp,
            received_time=received_time,
            input_satoshis=input_satoshis,
            output_satoshis=output_satoshis,
            fee_satoshis=fee_satoshis,
            coinbase=coinbase,
            is_qrc20_transfer=any(is_qrc20_transfer_script(o.script_asm) for o in outputs),
            inputs=inputs,
            outputs=outputs
        )

    async def _build_input(
        self,
        entry: Dict[str, Any],
        prev_txs: Dict[str, Dict[str, Any]]
    ) -> TransactionInput:
        if 'coinbase' in entry:
            return TransactionInput(sequence=entry['sequence'], script=entry['coinbase'])

        script_sig = entry.get('scriptSig') or {}
        address = entry.get('address')
        satoshis = entry.get('valueSat')

        # Nodes without the explorer patches do not report prevout values
        if satoshis is None:
            prev_txid = entry['txid']
            if prev_txid not in prev_txs:
                prev_txs[prev_txid] = await self._call('getrawtransaction', prev_txid, True)
            prev_out = prev_txs[prev_txid]['vout'][entry['vout']]
            satoshis = _output_satoshis(prev_out)
            address = _output_address(prev_out)

        return TransactionInput(
            prev_tx_id=entry['txid'],
            output_index=entry['vout'],
            sequence=entry['sequence'],
            script=script_sig.get('hex', ''),
            script_asm=script_sig.get('asm'),
            address=address,
            satoshis=satoshis
        )

    async def _build_output(self, txid: str, n: int, entry: Dict[str, Any]) -> TransactionOutput:
        script_pub_key = entry.get('scriptPubKey') or {}
        output = TransactionOutput(
            satoshis=_output_satoshis(entry),
            script=script_pub_key.get('hex', ''),
            script_asm=script_pub_key.get('asm'),
            address=_output_address(entry)
        )

        if 'spentTxId' in entry:
            output.spent_tx_id = entry['spentTxId']
            output.spent_index = entry.get('spentIndex')
            output.spent_height = entry.get('spentHeight')
        elif self.spent_index:
            try:
                spent = await self._call('getspentinfo', {'txid': txid, 'index': n})
            except NotFoundError:
                # Unspent
                return output
            output.spent_tx_id = spent.get('txid')
            output.spent_index = spent.get('index')
            output.spent_height = spent.get('height')

        return output

    async def get_block_overview(self, block_hash: str) -> Dict[str, Any]:
        """Block hash, height and ordered transaction ids."""
        block = await self._call('getblock', block_hash)
        return {
            'hash': block['hash'],
            'height': block.get('height'),
            'txids': block.get('tx', [])
        }

    async def get_address_history(self, address: str, from_: int, to: int) -> Dict[str, Any]:
        """Window of an address's transaction history, newest first.

        Unconfirmed activity comes first, one item per mempool delta, so a
        transaction touching the address on both legs appears twice. Confirmed
        transactions follow in descending height order.

        Returns:
            Dict with 'items' (each {'tx': DetailedTransaction}) and 'totalCount'
        """
        query = {'addresses': [address]}
        mempool = await self._call('getaddressmempool', query)
        confirmed = await self._call('getaddresstxids', query)

        mempool = sorted(mempool, key=lambda delta: delta.get('timestamp', 0), reverse=True)
        txids: List[str] = [delta['txid'] for delta in mempool] + list(reversed(confirmed))

        fetched: Dict[str, DetailedTransaction] = {}
        items = []
        for txid in txids[from_:to]:
            if txid not in fetched:
                fetched[txid] = await self.get_detailed_transaction(txid)
            items.append({'tx': fetched[txid]})

        return {'items': items, 'totalCount': len(txids)}

    async def get_transaction_receipt(self, txid: str) -> Any:
        return await self._call('gettransactionreceipt', txid)

    async def send_transaction(self, rawtx: str) -> str:
        txid = await self._call('sendrawtransaction', rawtx)
        logger.info(f"Broadcast transaction {txid}")
        return txid

    async def get_account_info(self, address: str) -> Dict[str, Any]:
        return await self._call('getaccountinfo', address)

    async def call_contract(
        self,
        address: str,
        data: str,
        amount: Optional[Any] = None,
        sender: Optional[str] = None,
        gas_limit: Optional[int] = None
    ) -> Dict[str, Any]:
        """Execute a read-only contract call.

        Optional arguments are positional on the node (sender, gas limit, amount),
        so unset ones before a set one are sent as null.
        """
        optional = [sender, gas_limit, amount]
        while optional and optional[-1] is None:
            optional.pop()
        return await self._call('callcontract', address, data, *optional)

__all__ = [
    'NodeService',
    'ExplorerError',
    'NotFoundError',
    'UpstreamError',
    'ReceiptUpdateError',
    'InvalidParameterError',
    'DetailedTransaction',
    'TransactionInput',
    'TransactionOutput',
    'to_satoshis',
    'is_qrc20_transfer_script',
]
