"""Records assembled from node RPC results."""
from typing import Any, List, Optional
from pydantic import BaseModel, Field


class TransactionInput(BaseModel):
    prev_tx_id: Optional[str] = None
    output_index: Optional[int] = None
    sequence: int
    script: str = ''
    script_asm: Optional[str] = None
    address: Optional[str] = None
    satoshis: Optional[int] = None


class TransactionOutput(BaseModel):
    satoshis: int
    script: str = ''
    script_asm: Optional[str] = None
    address: Optional[str] = None
    spent_tx_id: Optional[str] = None
    spent_index: Optional[int] = None
    spent_height: Optional[int] = None


class DetailedTransaction(BaseModel):
    """Transaction as assembled from the node, before projection."""
    hash: str
    version: int
    locktime: int
    hex: str

    height: int = -1
    block_hash: Optional[str] = None
    block_timestamp: Optional[int] = None
    received_time: Optional[int] = None

    input_satoshis: int = 0
    output_satoshis: int = 0
    fee_satoshis: int = 0

    coinbase: bool = False
    is_qrc20_transfer: bool = False
    receipt: Optional[Any] = None

    inputs: List[TransactionInput] = Field(default_factory=list)
    outputs: List[TransactionOutput] = Field(default_factory=list)

