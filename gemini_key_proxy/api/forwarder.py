"""Retry-over-keys forwarding to the upstream API.

Each request walks the key list once, starting from the index stored in the
rotation state for that list. Every attempt is classified into a tagged
outcome:

- ``Success`` (2xx/3xx): advance the rotation state past this key and relay
  the upstream response.
- ``RetryableFailure`` (4xx or no response): try the next key.
- ``TerminalFailure`` (anything else, e.g. 5xx): relay the upstream response
  as-is without trying further keys.

If every key fails with a retryable outcome, the rotation state is reset to 0
and ``AllKeysFailed`` is raised. A request body too large to retain for
replay gets a single attempt.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Mapping
from dataclasses import dataclass

import httpx
from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from gemini_key_proxy.api.headers import build_client_headers, build_upstream_headers
from gemini_key_proxy.core.config import GOOGLE_API_HOST
from gemini_key_proxy.core.error_types import ErrorType
from gemini_key_proxy.core.exceptions import AllKeysFailed
from gemini_key_proxy.core.key_list import list_identity, mask_key
from gemini_key_proxy.core.rotation_store import RotationStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success:
    response: httpx.Response
    key_index: int


@dataclass(frozen=True)
class RetryableFailure:
    key_index: int
    error_type: ErrorType
    status_code: int | None = None
    # Open 4xx response, None after a transport failure
    response: httpx.Response | None = None


@dataclass(frozen=True)
class TerminalFailure:
    response: httpx.Response
    key_index: int


AttemptOutcome = Success | RetryableFailure | TerminalFailure


def classify_response(response: httpx.Response, key_index: int) -> AttemptOutcome:
    """Map an upstream status code onto an attempt outcome."""
    status = response.status_code
    if 200 <= status < 400:
        return Success(response=response, key_index=key_index)
    if 400 <= status < 500:
        return RetryableFailure(
            key_index=key_index,
            error_type=ErrorType.UPSTREAM_KEY_REJECTED,
            status_code=status,
            response=response,
        )
    return TerminalFailure(response=response, key_index=key_index)


def has_request_body(headers: Mapping[str, str]) -> bool:
    if "transfer-encoding" in headers:
        return True
    content_length = headers.get("content-length")
    return bool(content_length) and content_length.strip() != "0"


class ReplayableBody:
    """Inbound request body that can be sent to more than one upstream attempt.

    The first attempt streams straight from the client while the chunks read
    so far are retained. A later attempt replays the retained chunks and then
    continues reading from the client where the previous attempt stopped.

    At most ``max_bytes`` are retained. Once the body grows past that, the
    retained chunks are dropped, the body keeps streaming to the current
    attempt and ``replayable`` becomes False.
    """

    def __init__(self, source: AsyncIterator[bytes], max_bytes: int | None = None) -> None:
        self._source = source
        self._max_bytes = max_bytes
        self._chunks: list[bytes] = []
        self._retained = 0
        self._exhausted = False
        self.replayable = True

    def _retain(self, chunk: bytes) -> None:
        if not self.replayable:
            return
        self._retained += len(chunk)
        if self._max_bytes is not None and self._retained > self._max_bytes:
            self.replayable = False
            self._chunks.clear()
            return
        self._chunks.append(chunk)

    async def replay(self) -> AsyncIterator[bytes]:
        if not self.replayable:
            raise RuntimeError("request body exceeded the replay limit")
        index = 0
        while index < len(self._chunks):
            yield self._chunks[index]
            index += 1
        if self._exhausted:
            return
        async for chunk in self._source:
            if not chunk:
                continue
            self._retain(chunk)
            yield chunk
        self._exhausted = True


async def _relay_upstream_body(response: httpx.Response) -> AsyncIterator[bytes]:
    # Raw bytes keep any content-encoding intact for the client.
    try:
        async for chunk in response.aiter_raw():
            yield chunk
    finally:
        await response.aclose()


def relay_response(response: httpx.Response) -> StreamingResponse:
    """Stream an upstream response back to the client with CORS headers."""
    streaming = StreamingResponse(
        _relay_upstream_body(response),
        status_code=response.status_code,
        # Closes the upstream response even if the body is never iterated
        background=BackgroundTask(response.aclose),
    )
    for name, value in build_client_headers(response.headers.multi_items()):
        streaming.headers.append(name, value)
    return streaming


class RotatingForwarder:
    """Forward requests upstream, rotating over and failing over between keys.

    Args:
        client: Shared HTTP client used for all upstream attempts.
        store: Rotation state keyed by key list identity.
        upstream_base_url: Scheme and host of the upstream API.
        replay_body_max_bytes: Largest request body retained for failover.
            A larger body gets a single attempt: a 4xx for it is relayed
            as-is instead of being retried with the next key.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        store: RotationStore,
        upstream_base_url: str = GOOGLE_API_HOST,
        replay_body_max_bytes: int | None = None,
    ) -> None:
        self.client = client
        self.store = store
        self.upstream_base_url = upstream_base_url.rstrip("/")
        self.replay_body_max_bytes = replay_body_max_bytes

    def upstream_url(self, request: Request) -> str:
        """Map the inbound path and query verbatim onto the upstream host."""
        raw_path = request.scope.get("raw_path")
        path = raw_path.decode("latin-1") if raw_path else request.url.path
        query = request.scope.get("query_string", b"").decode("latin-1")
        url = f"{self.upstream_base_url}{path}"
        return f"{url}?{query}" if query else url

    def start_index(self, identity: str, key_count: int) -> int:
        # The stored index may predate a resize of the list behind this identity.
        return self.store.get(identity) % key_count

    async def forward(self, request: Request, keys: list[str]) -> StreamingResponse:
        """Send ``request`` upstream using ``keys`` in rotation order.

        Raises:
            AllKeysFailed: Every key returned 4xx or could not be reached, or
                the only attempt an oversized body allowed could not connect.
        """
        if not keys:
            raise ValueError("keys must not be empty")

        identity = list_identity(keys)
        key_count = len(keys)
        start = self.start_index(identity, key_count)
        url = self.upstream_url(request)
        body = (
            ReplayableBody(request.stream(), max_bytes=self.replay_body_max_bytes)
            if has_request_body(request.headers)
            else None
        )

        logger.debug(
            f"Forwarding {request.method} {request.url.path} with {key_count} key(s), "
            f"starting at index {start}"
        )

        for offset in range(key_count):
            key_index = (start + offset) % key_count
            outcome = await self.attempt(request, url, keys[key_index], key_index, body)

            if isinstance(outcome, Success):
                self.store.set(identity, (key_index + 1) % key_count)
                logger.info(
                    f"Key {key_index + 1}/{key_count} succeeded with "
                    f"{outcome.response.status_code}"
                )
                return relay_response(outcome.response)

            if isinstance(outcome, TerminalFailure):
                logger.warning(
                    f"Upstream returned {outcome.response.status_code} for key "
                    f"{key_index + 1}/{key_count}; not retrying "
                    f"({ErrorType.UPSTREAM_SERVER_ERROR.value})"
                )
                return relay_response(outcome.response)

            if body is not None and not body.replayable:
                logger.warning(
                    f"Request body exceeds {self.replay_body_max_bytes} bytes; "
                    f"not failing over after key {key_index + 1}/{key_count}"
                )
                if outcome.response is not None:
                    return relay_response(outcome.response)
                raise AllKeysFailed()

            if outcome.response is not None:
                await outcome.response.aclose()

        self.store.set(identity, 0)
        logger.error(f"All {key_count} key(s) failed for {request.method} {request.url.path}")
        raise AllKeysFailed()

    async def attempt(
        self,
        request: Request,
        url: str,
        key: str,
        key_index: int,
        body: ReplayableBody | None,
    ) -> AttemptOutcome:
        """Make one upstream attempt with ``key`` and classify the result.

        A 4xx outcome still holds the open upstream response; the caller
        either closes it or relays it.
        """
        upstream_request = self.client.build_request(
            request.method,
            url,
            headers=build_upstream_headers(
                request.headers.items(),
                upstream_base_url=self.upstream_base_url,
                api_key=key,
            ),
            content=body.replay() if body is not None else None,
        )

        try:
            response = await self.client.send(upstream_request, stream=True)
        except httpx.TransportError as e:
            logger.warning(
                f"Key {key_index + 1} ({mask_key(key)}) could not reach upstream: "
                f"{type(e).__name__}: {e}"
            )
            return RetryableFailure(key_index=key_index, error_type=ErrorType.TRANSPORT_FAILURE)

        outcome = classify_response(response, key_index)
        if isinstance(outcome, RetryableFailure):
            logger.info(
                f"Key {key_index + 1} ({mask_key(key)}) rejected with {response.status_code}"
            )
        return outcome
