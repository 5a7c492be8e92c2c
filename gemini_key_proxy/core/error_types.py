"""Error type enumeration for Gemini Key Proxy.

Provides type-safe error categorization for logs and error responses.
"""

from enum import Enum


class ErrorType(str, Enum):
    """Error type categories.

    The first group is surfaced to clients; the second group describes
    per-attempt failures that are only ever logged.
    """

    # Surfaced to the client
    AUTH_REJECTED = "auth_rejected"  # Proxy credential mismatch
    MISSING_KEYS = "missing_keys"  # No key list in header or config
    EMPTY_KEYS = "empty_keys"  # Key list parsed to nothing
    ALL_KEYS_FAILED = "all_keys_failed"  # Every key was rejected or unreachable
    UPSTREAM_SERVER_ERROR = "upstream_server_error"  # Non-retryable upstream status

    # Per-attempt, logged only
    UPSTREAM_KEY_REJECTED = "upstream_key_rejected"  # Upstream 4xx for one key
    TRANSPORT_FAILURE = "transport_failure"  # No response obtained
