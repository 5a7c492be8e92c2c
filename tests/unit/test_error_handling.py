import json

import pytest

from gemini_key_proxy.api.services.error_handling import ErrorResponseBuilder
from gemini_key_proxy.core.error_types import ErrorType
from gemini_key_proxy.core.exceptions import (
    AllKeysFailed,
    AuthRejected,
    EmptyKeys,
    MissingKeys,
    ProxyError,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("exc", "status", "message", "error_type"),
    [
        (AuthRejected(), 401, "Unauthorized", ErrorType.AUTH_REJECTED),
        (MissingKeys(), 400, "no keys provided", ErrorType.MISSING_KEYS),
        (EmptyKeys(), 400, "keys list is empty", ErrorType.EMPTY_KEYS),
        (AllKeysFailed(), 502, "all keys failed", ErrorType.ALL_KEYS_FAILED),
    ],
)
def test_proxy_error_rendering(exc, status, message, error_type):
    assert isinstance(exc, ProxyError)
    assert exc.error_type is error_type

    response = ErrorResponseBuilder.from_proxy_error(exc)

    assert response.status_code == status
    assert json.loads(response.body) == {"error": message}
    assert response.headers["access-control-allow-origin"] == "*"
    assert response.headers["content-type"] == "application/json"


@pytest.mark.unit
def test_custom_message_overrides_default():
    exc = AllKeysFailed("upstream unavailable")
    assert exc.message == "upstream unavailable"
    assert str(exc) == "upstream unavailable"
    assert "502" in repr(exc)
