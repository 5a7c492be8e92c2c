import pytest

from gemini_key_proxy.core.config.context import temporary_config
from gemini_key_proxy.core.rotation_store import InMemoryRotationStore
from gemini_key_proxy.main import create_app


@pytest.mark.unit
class TestCreateApp:
    def test_uses_injected_empty_store(self):
        store = InMemoryRotationStore()
        assert len(store) == 0

        with temporary_config() as cfg:
            app = create_app(cfg, rotation_store=store)

        assert app.state.rotation_store is store

    def test_default_store_honours_configured_bound(self):
        with temporary_config({"ROTATION_STATE_MAX_ENTRIES": "1"}) as cfg:
            app = create_app(cfg)

        store = app.state.rotation_store
        store.set("a", 1)
        store.set("b", 1)
        assert "a" not in store
        assert len(store) == 1

    def test_credential_resolver_follows_config(self):
        with temporary_config({"PROXY_API_KEY": "secret", "GOOGLE_API_KEYS": "k1,k2"}) as cfg:
            app = create_app(cfg)

        resolver = app.state.credential_resolver
        assert resolver.open_mode is False
        assert resolver.resolve({"authorization": "Bearer secret"}) == ["k1", "k2"]
