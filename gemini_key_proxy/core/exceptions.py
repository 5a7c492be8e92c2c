"""
Exception hierarchy for errors the proxy surfaces to clients.

All exceptions inherit from ProxyError, which carries the HTTP status and
the message rendered into the ``{"error": "<message>"}`` response body.
"""

from __future__ import annotations

from gemini_key_proxy.core.error_types import ErrorType


class ProxyError(Exception):
    """Base exception for all client-facing proxy errors.

    Attributes:
        status_code: HTTP status returned to the client
        message: Message placed in the JSON error body
        error_type: Category used in logs
    """

    status_code: int = 500
    default_message: str = "internal error"
    error_type: ErrorType = ErrorType.UPSTREAM_SERVER_ERROR

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status_code={self.status_code}, message={self.message!r})"


class AuthRejected(ProxyError):
    """Raised when the bearer token does not match the proxy credential."""

    status_code = 401
    default_message = "Unauthorized"
    error_type = ErrorType.AUTH_REJECTED


class MissingKeys(ProxyError):
    """Raised when neither the request nor the config supplies a key list."""

    status_code = 400
    default_message = "no keys provided"
    error_type = ErrorType.MISSING_KEYS


class EmptyKeys(ProxyError):
    """Raised when the key list source contains no usable keys."""

    status_code = 400
    default_message = "keys list is empty"
    error_type = ErrorType.EMPTY_KEYS


class AllKeysFailed(ProxyError):
    """Raised when every key was rejected (4xx) or unreachable."""

    status_code = 502
    default_message = "all keys failed"
    error_type = ErrorType.ALL_KEYS_FAILED
