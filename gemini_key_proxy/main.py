import sys
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import FastAPI

from gemini_key_proxy import __version__
from gemini_key_proxy.api.credentials import CredentialResolver
from gemini_key_proxy.api.endpoints import router as api_router
from gemini_key_proxy.api.forwarder import RotatingForwarder
from gemini_key_proxy.api.services.error_handling import (
    proxy_error_handler,
    unhandled_error_handler,
)
from gemini_key_proxy.core.config import Config, get_config
from gemini_key_proxy.core.exceptions import ProxyError
from gemini_key_proxy.core.logging import configure_root_logging
from gemini_key_proxy.core.rotation_store import InMemoryRotationStore, RotationStore


def build_upstream_client(config: Config) -> httpx.AsyncClient:
    """Create the shared upstream client.

    Only connection setup is bounded by default; reads are unlimited unless
    UPSTREAM_TIMEOUT_SECONDS is set, so long streams are never cut off.
    """
    timeout = httpx.Timeout(config.upstream_timeout, connect=config.upstream_connect_timeout)
    return httpx.AsyncClient(timeout=timeout, follow_redirects=False)


def create_app(
    config: Config | None = None,
    rotation_store: RotationStore | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        config: Settings to use; defaults to the process-wide config.
        rotation_store: Rotation state backend; defaults to an in-memory store
            bounded by ROTATION_STATE_MAX_ENTRIES.
    """
    cfg = config if config is not None else get_config()
    store = (
        rotation_store
        if rotation_store is not None
        else InMemoryRotationStore(max_entries=cfg.rotation_state_max_entries)
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        async with build_upstream_client(cfg) as client:
            app.state.forwarder = RotatingForwarder(
                client,
                store,
                upstream_base_url=cfg.upstream_base_url,
                replay_body_max_bytes=cfg.replay_body_max_bytes,
            )
            yield

    app = FastAPI(
        title="Gemini Key Proxy",
        version=__version__,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.config = cfg
    app.state.rotation_store = store
    app.state.credential_resolver = CredentialResolver(
        proxy_api_key=cfg.proxy_api_key,
        default_keys=cfg.google_api_keys,
    )
    app.add_exception_handler(ProxyError, proxy_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
    app.include_router(api_router)
    return app


app = create_app()


def main() -> None:
    if len(sys.argv) > 1 and sys.argv[1] == "--help":
        print(f"Gemini Key Proxy v{__version__}")
        print("")
        print("Usage: python -m gemini_key_proxy.main")
        print("       or: gkp start")
        print("")
        print("Optional environment variables:")
        print("  PROXY_API_KEY   - Bearer token clients must present (unset = open mode)")
        print("  GOOGLE_API_KEYS - Default comma-separated upstream keys")
        print("  HOST - Server host (default: 0.0.0.0)")
        print("  PORT - Server port (default: 8000)")
        print("  LOG_LEVEL - Logging level (default: INFO)")
        print("  UPSTREAM_TIMEOUT_SECONDS - Upstream read timeout (default: unlimited)")
        print("")
        print("For more options, use the gkp CLI:")
        print("  gkp config show     - Show current configuration")
        print("  gkp config validate - Check environment variables")
        sys.exit(0)

    config = get_config()
    configure_root_logging(config.log_level)

    print(f"🚀 Gemini Key Proxy v{__version__}")
    print(f"   Upstream: {config.upstream_base_url}")
    print(f"   Default keys: {config.default_key_count}")
    print(f"   Client API Key Validation: {'Disabled' if config.open_mode else 'Enabled'}")
    print(f"   Server: {config.host}:{config.port}")
    print("")

    uvicorn.run(
        "gemini_key_proxy.main:app",
        host=config.host,
        port=config.port,
        log_level=config.log_level.lower(),
        access_log=config.log_level == "DEBUG",
        reload=False,
    )


if __name__ == "__main__":
    main()
