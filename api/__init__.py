"""REST API module for the Qtep explorer.

This module provides HTTP endpoints for:
- Looking up transactions, raw transactions and receipts
- Listing transactions by block or address
- Broadcasting raw transactions
- Read-only contract calls and token metadata
- Contract account info
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config import load_config
from contracts import ContractService
from node import NodeService
from rpc import QtepRPC
from transactions import TransactionService
from .transactions import router as transactions_router
from .contracts import router as contracts_router

logger = logging.getLogger(__name__)

API_NAME = "Qtep Insight API"
API_VERSION = "1.0.0"

def init_services(app: FastAPI, node: NodeService, settings: Optional[Dict[str, Any]] = None) -> None:
    """Build the services shared by all requests, including the token metadata cache."""
    app.state.settings = settings or {}
    app.state.node = node
    app.state.transactions = TransactionService(node)
    app.state.contracts = ContractService(node)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Handle startup and shutdown events."""
    logger.info("Initializing API...")
    rpc = None

    # Services may already be injected by create_app
    if getattr(app.state, 'node', None) is None:
        config = load_config()
        rpc = QtepRPC(config['node'], timeout=config['settings']['rpc_timeout'])
        node = NodeService(rpc, spent_index=bool(config['node'].get('spentindex')))
        init_services(app, node, config['settings'])
        logger.info(f"Connected to Qtep node RPC at {rpc.url}")

    yield

    logger.info("Shutting down API...")
    if rpc is not None:
        rpc.session.close()

def create_app(
    node: Optional[NodeService] = None,
    settings: Optional[Dict[str, Any]] = None
) -> FastAPI:
    """Create the API application.

    Args:
        node: Optional node service. If not provided, one is built from
              settings.conf and qtep.conf at startup.
        settings: Optional settings (e.g. request_timeout) used with an injected node
    """
    app = FastAPI(
        title=API_NAME,
        description="REST API over a Qtep full node",
        version=API_VERSION,
        lifespan=lifespan
    )
    app.state.node = None

    if node is not None:
        init_services(app, node, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {
            "name": API_NAME,
            "version": API_VERSION,
            "status": "running"
        }

    app.include_router(transactions_router)
    app.include_router(contracts_router)

    return app

app = create_app()
