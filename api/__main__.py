"""Command line interface for running the API server."""
import asyncio
import logging
import uvicorn

from config import load_config
from node import NodeService
from rpc import QtepRPC
from . import create_app

logger = logging.getLogger(__name__)

class UvicornServer:
    """Wrapper for running uvicorn with proper lifecycle management."""

    def __init__(self, app, host: str = "0.0.0.0", port: int = 3001, log_level: str = "info"):
        self.config = uvicorn.Config(
            app,
            host=host,
            port=port,
            log_level=log_level
        )
        self.server = uvicorn.Server(self.config)

    async def run(self):
        """Run the server until it receives SIGINT or SIGTERM."""
        await self.server.serve()

async def main():
    """Load configuration, connect to the node and serve the API."""
    config = load_config()
    settings = config['settings']

    logging.basicConfig(
        level=settings['log_level'],
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    rpc = QtepRPC(config['node'], timeout=settings['rpc_timeout'])
    node = NodeService(rpc, spent_index=bool(config['node'].get('spentindex')))
    app = create_app(node, settings)

    server = UvicornServer(
        app,
        host=settings['api_host'],
        port=settings['api_port'],
        log_level=settings['log_level'].lower()
    )

    logger.info(f"Serving {rpc.url} on {settings['api_host']}:{settings['api_port']}")
    try:
        await server.run()
    finally:
        rpc.session.close()
        logger.info("Cleanup complete.")

if __name__ == "__main__":
    asyncio.run(main())
