import pytest

from gemini_key_proxy.api.credentials import CredentialResolver
from gemini_key_proxy.core.exceptions import AuthRejected, EmptyKeys, MissingKeys


@pytest.mark.unit
class TestAuthorize:
    def test_open_mode_accepts_any_or_no_token(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys="k1")
        assert resolver.open_mode is True
        resolver.authorize({})
        resolver.authorize({"authorization": "Bearer whatever"})

    def test_empty_proxy_key_means_open_mode(self):
        assert CredentialResolver(proxy_api_key="", default_keys=None).open_mode is True

    def test_matching_token_is_accepted(self):
        resolver = CredentialResolver(proxy_api_key="secret", default_keys="k1")
        resolver.authorize({"authorization": "Bearer secret"})

    @pytest.mark.parametrize(
        "headers",
        [
            {},
            {"authorization": "Bearer wrong"},
            {"authorization": "secret"},
            {"authorization": "Basic secret"},
            {"authorization": "Bearer secret-but-longer"},
            {"authorization": "Bearer "},
        ],
    )
    def test_rejects_missing_or_mismatched_token(self, headers):
        resolver = CredentialResolver(proxy_api_key="secret", default_keys="k1")
        with pytest.raises(AuthRejected) as exc_info:
            resolver.authorize(headers)
        assert exc_info.value.status_code == 401


@pytest.mark.unit
class TestResolveKeys:
    def test_uses_default_keys(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys="k1, k2")
        assert resolver.resolve_keys({}) == ["k1", "k2"]

    def test_header_override_wins(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys="k1,k2")
        assert resolver.resolve_keys({"x-google-api-key": "h1,h2,h3"}) == ["h1", "h2", "h3"]

    def test_empty_header_falls_back_to_default(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys="k1")
        assert resolver.resolve_keys({"x-google-api-key": ""}) == ["k1"]

    def test_no_source_raises_missing_keys(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys=None)
        with pytest.raises(MissingKeys) as exc_info:
            resolver.resolve_keys({})
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "no keys provided"

    def test_blank_entries_raise_empty_keys(self):
        resolver = CredentialResolver(proxy_api_key=None, default_keys="k1")
        with pytest.raises(EmptyKeys) as exc_info:
            resolver.resolve_keys({"x-google-api-key": " , , "})
        assert exc_info.value.status_code == 400
        assert exc_info.value.message == "keys list is empty"


@pytest.mark.unit
def test_resolve_checks_auth_before_keys():
    resolver = CredentialResolver(proxy_api_key="secret", default_keys=None)
    with pytest.raises(AuthRejected):
        resolver.resolve({})
