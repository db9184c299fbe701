"""Contract API endpoints."""

from fastapi import APIRouter, Depends, Query, Request
from typing import Any, Dict, Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field

from contracts import ContractService
from ..dependencies import get_contract_service
from ..errors import run_request

router = APIRouter(tags=["Contracts"])

class CallContractRequest(BaseModel):
    """Request model for a read-only contract call."""
    model_config = ConfigDict(populate_by_name=True)

    address: str
    data: str
    amount: Optional[Decimal] = None
    sender: Optional[str] = Field(None, alias='from')
    gas_limit: Optional[int] = Field(None, alias='gasLimit')

@router.post("/contracts/call")
async def post_call_contract(
    body: CallContractRequest,
    request: Request,
    service: ContractService = Depends(get_contract_service)
) -> Any:
    """Call a contract with ABI-encoded data."""
    return await run_request(
        request,
        service.call_contract(
            body.address,
            body.data,
            amount=float(body.amount) if body.amount is not None else None,
            sender=body.sender,
            gas_limit=body.gas_limit
        )
    )

@router.get("/contracts/{contractaddress}/hash/{contracthash}/call")
async def call_contract(
    contractaddress: str,
    contracthash: str,
    request: Request,
    sender: Optional[str] = Query(None, alias='from'),
    gasLimit: Optional[int] = Query(None),
    amount: Optional[Decimal] = Query(None),
    service: ContractService = Depends(get_contract_service)
) -> Any:
    """Call a contract with data given in the path."""
    return await run_request(
        request,
        service.call_contract(
            contractaddress,
            contracthash,
            amount=float(amount) if amount is not None else None,
            sender=sender,
            gas_limit=gasLimit
        )
    )

@router.get("/erc20/{contractaddress}")
async def get_erc20_info(
    contractaddress: str,
    request: Request,
    service: ContractService = Depends(get_contract_service)
) -> Dict[str, Any]:
    """Get a token contract's symbol and decimals."""
    return await run_request(request, service.get_token_info(contractaddress))

@router.get("/contracts/{contractaddress}/info")
async def get_account_info(
    contractaddress: str,
    request: Request,
    service: ContractService = Depends(get_contract_service)
) -> Any:
    """Get a contract account's balance, code and storage."""
    return await run_request(request, service.get_account_info(contractaddress))

__all__ = ['router']
