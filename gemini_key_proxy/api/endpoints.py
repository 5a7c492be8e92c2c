import uuid

from fastapi import APIRouter, Request, Response

from gemini_key_proxy.api.credentials import CredentialResolver
from gemini_key_proxy.api.forwarder import RotatingForwarder
from gemini_key_proxy.api.headers import preflight_headers
from gemini_key_proxy.core.logging import ConversationLogger, conversation_logger

router = APIRouter()


def get_credential_resolver(request: Request) -> CredentialResolver:
    return request.app.state.credential_resolver


def get_forwarder(request: Request) -> RotatingForwarder:
    return request.app.state.forwarder


@router.options("/{full_path:path}", include_in_schema=False)
async def preflight(full_path: str) -> Response:
    """Answer CORS preflight without authentication or upstream calls."""
    return Response(status_code=204, headers=preflight_headers())


async def proxy(request: Request) -> Response:
    """Forward any non-OPTIONS request upstream with key rotation."""
    request_id = str(uuid.uuid4())

    with ConversationLogger.correlation_context(request_id):
        conversation_logger.debug(f"START | {request.method} {request.url.path}")
        keys = get_credential_resolver(request).resolve(request.headers)
        return await get_forwarder(request).forward(request, keys)


# methods=None: every HTTP method is proxied, extension methods included
router.add_route("/{full_path:path}", proxy, methods=None, include_in_schema=False)
