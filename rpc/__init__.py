"""RPC module for interacting with a Qtep node"""
import threading
import requests
from typing import Any, Dict, Optional

class RPCError(Exception):
    """Base exception for RPC errors"""
    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        self.code = code
        self.method = method
        super().__init__(f"RPC Error [{code}] in {method}: {message}" if code else message)

class NodeConnectionError(RPCError):
    """Raised when connection to node fails"""
    pass

class NodeAuthError(RPCError):
    """Raised when authentication failed"""
    pass

class QtepError(RPCError):
    """Qtep-specific error codes and messages

    Common error codes:
    -1  - General error during processing
    -3  - Unexpected type was passed as parameter
    -5  - Invalid address or key (also: transaction or block not found)
    -8  - Invalid parameter
    -22 - Error parsing or validating structure in raw format
    -25 - Error processing transaction
    -26 - Transaction or block was rejected by network rules
    -27 - Transaction already in chain
    """
    ERROR_MESSAGES = {
        -1: "General error during processing",
        -3: "Unexpected type was passed as parameter",
        -5: "Invalid address or key",
        -8: "Invalid parameter",
        -22: "Error parsing or validating structure in raw format",
        -25: "Error processing transaction",
        -26: "Transaction or block was rejected by network rules",
        -27: "Transaction already in chain",
    }

    NOT_FOUND = -5

    def __init__(self, message: str, code: int, method: str):
        self.code = code
        self.method = method
        self.node_message = message
        standard_msg = self.ERROR_MESSAGES.get(code, "Unknown error")
        # Combine standard message with specific message if different
        full_msg = f"{standard_msg} - {message}" if message != standard_msg else message
        super().__init__(full_msg, code, method)

    @property
    def is_not_found(self) -> bool:
        return self.code == self.NOT_FOUND

class RPCMethod:
    """Descriptor class for RPC methods"""
    def __init__(self, method_name: str):
        self.method_name = method_name

    def __get__(self, obj, objtype=None):
        if obj is None:
            return self

        def caller(*args) -> Any:
            return obj._call_method(self.method_name, *args)

        return caller

class QtepRPC:
    """Qtep RPC client"""

    def __init__(self, node_conf: Dict[str, Any], timeout: float = 10):
        """Initialize RPC client from parsed qtep.conf settings

        Args:
            node_conf: Parsed node configuration (see config.load_qtep_conf)
            timeout: Per-call HTTP timeout in seconds
        """
        self.rpc_user = node_conf['rpcuser']
        self.rpc_password = node_conf['rpcpassword']
        self.rpc_port = node_conf['rpcport']
        self.timeout = timeout

        # Use rpcbind from config, fallback to localhost if not specified
        rpc_host = node_conf.get('rpcbind', '127.0.0.1')
        if rpc_host == '0.0.0.0':
            rpc_host = '127.0.0.1'
        self.rpc_host = rpc_host

        self.url = f"http://{self.rpc_host}:{self.rpc_port}"

        # One session shared by the worker threads that run RPC calls
        self.session = requests.Session()
        self.session.auth = (self.rpc_user, self.rpc_password)
        self.session.headers['content-type'] = 'application/json'

        self._request_id = 0
        self._request_id_lock = threading.Lock()

    def _get_request_id(self) -> int:
        """Get unique request ID"""
        with self._request_id_lock:
            self._request_id += 1
            return self._request_id

    def _call_method(self, method: str, *args) -> Any:
        """Make RPC call to the Qtep node

        Args:
            method: RPC method name
            *args: Method arguments

        Returns:
            Response from node

        Raises:
            NodeConnectionError: Connection to node failed
            NodeAuthError: Authentication failed
            QtepError: Node returned a Qtep-specific error
        """
        payload = {
            "jsonrpc": "1.0",
            "method": method,
            "params": list(args),
            "id": self._get_request_id()
        }

        result = None
        try:
            response = self.session.post(self.url, json=payload, timeout=self.timeout)

            if response.status_code == 401:
                raise NodeAuthError("Authentication failed - check rpcuser/rpcpassword")

            # The node reports RPC errors with a 500 status, so parse first
            result = response.json()

            if 'error' in result and result['error'] is not None:
                error = result['error']
                raise QtepError(
                    error.get('message', 'Unknown error'),
                    error.get('code', -1),
                    method
                )

            response.raise_for_status()

            return result['result']

        except requests.exceptions.Timeout as e:
            raise NodeConnectionError(
                f"Request timed out after {self.timeout} seconds"
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise NodeConnectionError(
                f"Failed to connect to Qtep node at {self.url}"
            ) from e
        except requests.exceptions.HTTPError as e:
            raise NodeConnectionError(
                f"HTTP error occurred: {str(e)}"
            ) from e
        except requests.exceptions.RequestException as e:
            raise NodeConnectionError(
                f"Request failed: {str(e)}"
            ) from e
        except (KeyError, ValueError) as e:
            raise NodeConnectionError(
                f"Invalid response format: {str(e)}"
            ) from e

    # Blockchain methods
    getblock = RPCMethod('getblock')
    getblockcount = RPCMethod('getblockcount')
    getblockheader = RPCMethod('getblockheader')
    getmempoolentry = RPCMethod('getmempoolentry')

    # Index methods (require addressindex/spentindex)
    getaddresstxids = RPCMethod('getaddresstxids')
    getaddressmempool = RPCMethod('getaddressmempool')
    getspentinfo = RPCMethod('getspentinfo')

    # Raw transaction methods
    getrawtransaction = RPCMethod('getrawtransaction')
    sendrawtransaction = RPCMethod('sendrawtransaction')

    # Contract methods
    callcontract = RPCMethod('callcontract')
    getaccountinfo = RPCMethod('getaccountinfo')
    gettransactionreceipt = RPCMethod('gettransactionreceipt')

__all__ = [
    'RPCError',
    'NodeConnectionError',
    'NodeAuthError',
    'QtepError',
    'RPCMethod',
    'QtepRPC',
]
