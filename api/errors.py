"""Mapping of explorer errors to HTTP responses."""

import asyncio
import logging
from typing import Any, Awaitable

from fastapi import HTTPException, Request, status

from node import (
    ExplorerError, NotFoundError, UpstreamError,
    ReceiptUpdateError, InvalidParameterError
)

logger = logging.getLogger(__name__)

DEFAULT_REQUEST_TIMEOUT = 30.0

def to_http_exception(error: ExplorerError) -> HTTPException:
    """Translate an explorer error into the HTTP error returned to callers."""
    if isinstance(error, NotFoundError):
        # Node detail is not passed on
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Not found")
    if isinstance(error, InvalidParameterError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    if isinstance(error, ReceiptUpdateError):
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=ReceiptUpdateError.MESSAGE
        )
    if isinstance(error, UpstreamError) and error.unavailable:
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(error))
    return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(error))

async def run_request(request: Request, operation: Awaitable[Any]) -> Any:
    """Await a service operation within the request timeout, mapping failures to HTTP errors."""
    settings = getattr(request.app.state, 'settings', None) or {}
    timeout = settings.get('request_timeout', DEFAULT_REQUEST_TIMEOUT)

    try:
        return await asyncio.wait_for(operation, timeout=timeout)
    except asyncio.TimeoutError:
        logger.error(f"{request.method} {request.url.path} timed out after {timeout}s")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Node request timed out"
        )
    except ExplorerError as e:
        if not isinstance(e, (NotFoundError, InvalidParameterError)):
            logger.error(f"{request.method} {request.url.path} failed: {e}")
        raise to_http_exception(e)
