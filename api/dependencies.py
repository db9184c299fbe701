"""Request dependencies resolving the services built at startup."""

from fastapi import Request

from contracts import ContractService
from transactions import TransactionService

def get_transaction_service(request: Request) -> TransactionService:
    return request.app.state.transactions

def get_contract_service(request: Request) -> ContractService:
    return request.app.state.contracts
