"""Read-only contract call capability."""

from typing import Any, Dict, Optional

from node import NodeService, UpstreamError

class ContractCallGateway:
    """Issues read-only contract calls and hands back the node's raw result."""

    def __init__(self, node: NodeService):
        self.node = node

    async def call(
        self,
        address: str,
        data: str,
        amount: Optional[Any] = None,
        sender: Optional[str] = None,
        gas_limit: Optional[int] = None
    ) -> Dict[str, Any]:
        return await self.node.call_contract(
            address, data, amount=amount, sender=sender, gas_limit=gas_limit
        )

    async def call_output(self, address: str, data: str) -> bytes:
        """Call with default parameters and return executionResult.output as bytes."""
        result = await self.call(address, data)
        try:
            return bytes.fromhex(result['executionResult']['output'])
        except (KeyError, TypeError, ValueError) as e:
            raise UpstreamError(f"Malformed contract call result for {address}: {e}") from e
