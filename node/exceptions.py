"""Errors surfaced by the explorer services.

Node-level RPC failures are translated into these once, at the NodeService
boundary, so routers only need to know this hierarchy.
"""


class ExplorerError(Exception):
    """Base exception for explorer operations."""
    pass


class NotFoundError(ExplorerError):
    """Raised when a transaction, block or other node object does not exist.

    The node's own message is kept on ``detail`` for logging only; it is not
    returned to API callers.
    """
    def __init__(self, detail: str = "Not found"):
        self.detail = detail
        super().__init__(detail)


class UpstreamError(ExplorerError):
    """Raised for any other node failure (fetch, call, send)."""
    def __init__(self, message: str, code=None, unavailable: bool = False):
        self.code = code
        self.unavailable = unavailable
        super().__init__(message)


class ReceiptUpdateError(ExplorerError):
    """Raised when receipt enrichment fails while listing address history."""
    MESSAGE = "Receipt update error"

    def __init__(self):
        super().__init__(self.MESSAGE)


class InvalidParameterError(ExplorerError):
    """Raised when a request is missing a required disambiguating parameter."""
    pass
