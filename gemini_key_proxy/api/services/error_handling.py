"""Error handling services for the proxy endpoints.

All synthesized error responses share one shape::

    {"error": "<message>"}

and carry the proxy's CORS header, matching successful responses.
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from gemini_key_proxy.api.headers import cors_headers
from gemini_key_proxy.core.exceptions import ProxyError

logger = logging.getLogger(__name__)


class ErrorResponseBuilder:
    """Centralized builder for consistent error responses."""

    @staticmethod
    def error(status_code: int, message: str) -> JSONResponse:
        return JSONResponse(
            status_code=status_code,
            content={"error": message},
            headers=cors_headers(),
        )

    @staticmethod
    def from_proxy_error(exc: ProxyError) -> JSONResponse:
        return ErrorResponseBuilder.error(exc.status_code, exc.message)


async def proxy_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """FastAPI exception handler rendering ProxyError subclasses."""
    if not isinstance(exc, ProxyError):
        raise exc
    logger.info(
        f"{request.method} {request.url.path} -> {exc.status_code} "
        f"({exc.error_type.value}): {exc.message}"
    )
    return ErrorResponseBuilder.from_proxy_error(exc)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Render unexpected failures as a CORS-enabled 500."""
    logger.error(
        f"{request.method} {request.url.path} failed: {type(exc).__name__}: {exc}",
        exc_info=exc,
    )
    return ErrorResponseBuilder.error(500, ProxyError.default_message)
