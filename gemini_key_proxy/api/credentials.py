"""Proxy authorization and upstream key list selection."""

from __future__ import annotations

import hmac
import logging
from collections.abc import Mapping

from gemini_key_proxy.api.headers import KEY_OVERRIDE_HEADER, extract_bearer_token
from gemini_key_proxy.core.exceptions import AuthRejected, EmptyKeys, MissingKeys
from gemini_key_proxy.core.key_list import parse_key_list

logger = logging.getLogger(__name__)


class CredentialResolver:
    """Validate the proxy credential and pick the key list for a request.

    Args:
        proxy_api_key: Token clients must present as ``Authorization: Bearer``.
            Empty or None puts the proxy in open mode.
        default_keys: Comma-separated upstream keys used when the request
            carries no ``x-google-api-key`` override.
    """

    def __init__(self, proxy_api_key: str | None, default_keys: str | None) -> None:
        self.proxy_api_key = proxy_api_key or None
        self.default_keys = default_keys or None

    @property
    def open_mode(self) -> bool:
        return self.proxy_api_key is None

    def authorize(self, headers: Mapping[str, str]) -> None:
        """Raise AuthRejected unless the bearer token matches the proxy key."""
        if self.open_mode:
            return

        token = extract_bearer_token(headers.get("authorization"))
        if token is None or not hmac.compare_digest(
            token.encode("utf-8"), self.proxy_api_key.encode("utf-8")  # type: ignore[union-attr]
        ):
            logger.warning("Rejected request with invalid proxy credential")
            raise AuthRejected()

    def resolve_keys(self, headers: Mapping[str, str]) -> list[str]:
        """Return the upstream key list for this request.

        Raises:
            MissingKeys: Neither the override header nor the default is set.
            EmptyKeys: The chosen source contains no usable keys.
        """
        source = headers.get(KEY_OVERRIDE_HEADER) or self.default_keys
        if not source:
            raise MissingKeys()

        keys = parse_key_list(source)
        if not keys:
            raise EmptyKeys()
        return keys

    def resolve(self, headers: Mapping[str, str]) -> list[str]:
        """Authorize the request, then resolve its key list."""
        self.authorize(headers)
        return self.resolve_keys(headers)
