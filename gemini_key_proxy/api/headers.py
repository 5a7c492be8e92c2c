"""Header translation between the client, the proxy and the upstream API."""

from __future__ import annotations

from collections.abc import Iterable
from urllib.parse import urlsplit

KEY_OVERRIDE_HEADER = "x-google-api-key"
UPSTREAM_KEY_HEADER = "x-goog-api-key"

# Hop-by-hop headers never travel across the proxy (RFC 9110 section 7.6.1)
HOP_BY_HOP_HEADERS = frozenset(
    {
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
    }
)

# Headers the proxy consumes itself and must not leak upstream
PROXY_ONLY_HEADERS = frozenset({"authorization", KEY_OVERRIDE_HEADER})


def cors_headers() -> dict[str, str]:
    # Every response, including synthesized errors, carries this header.
    return {"Access-Control-Allow-Origin": "*"}


def preflight_headers() -> dict[str, str]:
    return {
        **cors_headers(),
        "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
        "Access-Control-Allow-Headers": f"Content-Type, Authorization, {KEY_OVERRIDE_HEADER}",
    }


def build_upstream_headers(
    inbound: Iterable[tuple[str, str]], *, upstream_base_url: str, api_key: str
) -> list[tuple[str, str]]:
    """Copy inbound headers for an upstream attempt.

    The host header is pointed at the upstream. Proxy-only and hop-by-hop
    headers are dropped. The upstream credential header is set to
    ``api_key``, replacing any value the client sent.

    Returns a list of pairs so repeated headers survive the copy.
    """
    skipped = HOP_BY_HOP_HEADERS | PROXY_ONLY_HEADERS | {"host", UPSTREAM_KEY_HEADER}
    headers = [(name, value) for name, value in inbound if name.lower() not in skipped]
    if not any(name.lower() == "accept-encoding" for name, _ in headers):
        # Stop the HTTP client from asking for compression the caller never requested.
        headers.append(("accept-encoding", "identity"))
    headers.append(("host", urlsplit(upstream_base_url).netloc))
    headers.append((UPSTREAM_KEY_HEADER, api_key))
    return headers


def build_client_headers(upstream: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    """Copy upstream response headers for relay to the client.

    ``content-length`` is dropped because the body is relayed as a chunked
    stream, and any upstream CORS origin is replaced by the proxy's own.
    """
    cors = cors_headers()
    skipped = HOP_BY_HOP_HEADERS | {"content-length"} | {name.lower() for name in cors}
    headers = [(name, value) for name, value in upstream if name.lower() not in skipped]
    headers.extend(cors.items())
    return headers


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token of a ``Bearer`` authorization header, if any."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer":
        return None
    return token or None
