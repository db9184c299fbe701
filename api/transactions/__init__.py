"""Transaction API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from typing import Any, Dict, Optional
from pydantic import BaseModel

from transactions import TransactionService, ProjectionOptions
from ..dependencies import get_transaction_service
from ..errors import run_request

router = APIRouter(tags=["Transactions"])

class SendTransactionRequest(BaseModel):
    """Request model for broadcasting a raw transaction."""
    rawtx: str

def projection_options(
    noScriptSig: bool = Query(False),
    noAsm: bool = Query(False),
    noSpent: bool = Query(False)
) -> ProjectionOptions:
    """Projection options from the legacy query flags."""
    return ProjectionOptions(
        omit_script_sig=noScriptSig,
        omit_asm=noAsm,
        omit_spent_info=noSpent
    )

@router.get("/tx/{txid}")
async def get_transaction(
    txid: str,
    request: Request,
    options: ProjectionOptions = Depends(projection_options),
    service: TransactionService = Depends(get_transaction_service)
) -> Dict[str, Any]:
    """Get a transaction by id."""
    return await run_request(request, service.get_transaction(txid, options))

@router.get("/rawtx/{txid}")
async def get_raw_transaction(
    txid: str,
    request: Request,
    service: TransactionService = Depends(get_transaction_service)
) -> Dict[str, str]:
    """Get a transaction's serialized hex."""
    return await run_request(request, service.get_raw_transaction(txid))

@router.get("/txs")
async def list_transactions(
    request: Request,
    block: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    pageNum: int = Query(0, ge=0),
    options: ProjectionOptions = Depends(projection_options),
    service: TransactionService = Depends(get_transaction_service)
) -> Dict[str, Any]:
    """List transactions of a block or an address, ten per page."""
    return await run_request(
        request,
        service.list_transactions(block=block, address=address, page=pageNum, options=options)
    )

@router.post("/tx/send")
async def send_transaction(
    body: SendTransactionRequest,
    request: Request,
    service: TransactionService = Depends(get_transaction_service)
) -> Dict[str, str]:
    """Broadcast a raw transaction."""
    return await run_request(request, service.send_transaction(body.rawtx))

@router.get("/txs/{txid}/receipt")
async def get_transaction_receipt(
    txid: str,
    request: Request,
    service: TransactionService = Depends(get_transaction_service)
) -> Any:
    """Get the execution receipt of a contract transaction."""
    return await run_request(request, service.get_transaction_receipt(txid))

__all__ = ['router']
