"""Shared pytest configuration and fixtures for Gemini Key Proxy tests."""

import pytest
from fastapi.testclient import TestClient

from gemini_key_proxy.core.config import config as config_module
from gemini_key_proxy.core.config.context import temporary_config
from gemini_key_proxy.core.config.schema import ConfigSchema
from gemini_key_proxy.core.rotation_store import InMemoryRotationStore
from gemini_key_proxy.main import create_app

# HTTP mocking fixtures
from tests.fixtures.mock_http import (  # noqa: F401
    generate_content_response,
    mock_google_api,
    streaming_chunks,
)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests (fast, no external deps)")
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (full app, mocked upstream)"
    )


def pytest_collection_modifyitems(config, items):
    """Add markers to tests based on their location."""
    for item in items:
        path = str(item.fspath)
        if "tests/unit/" in path or "tests/cli/" in path:
            item.add_marker(pytest.mark.unit)
        elif "tests/api/" in path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    """Keep the host environment and earlier tests from leaking config."""
    for spec in ConfigSchema.all_specs().values():
        monkeypatch.delenv(spec.name, raising=False)
    monkeypatch.setattr(config_module, "config", None)
    yield


@pytest.fixture
def rotation_store():
    return InMemoryRotationStore()


@pytest.fixture
def proxy_client(rotation_store):
    """Factory for a TestClient around a freshly configured app.

    Example:
        client = proxy_client({"PROXY_API_KEY": "secret", "GOOGLE_API_KEYS": "a,b"})
    """
    clients: list[TestClient] = []

    def _make(env: dict[str, str] | None = None, **client_kwargs) -> TestClient:
        with temporary_config(env) as cfg:
            app = create_app(cfg, rotation_store=rotation_store)
        client = TestClient(app, **client_kwargs)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)
