import pytest

from gemini_key_proxy.core.key_list import list_identity, mask_key, parse_key_list


@pytest.mark.unit
class TestParseKeyList:
    def test_splits_and_trims(self):
        assert parse_key_list(" k1 , k2,k3 ") == ["k1", "k2", "k3"]

    def test_drops_empty_entries(self):
        assert parse_key_list("k1,,  ,k2,") == ["k1", "k2"]

    def test_all_blank_yields_empty_list(self):
        assert parse_key_list(" , , ") == []

    def test_keeps_duplicates_and_order(self):
        assert parse_key_list("b,a,b") == ["b", "a", "b"]


@pytest.mark.unit
class TestListIdentity:
    def test_is_deterministic(self):
        assert list_identity(["a", "b"]) == list_identity(["a", "b"])

    def test_is_order_sensitive(self):
        assert list_identity(["a", "b"]) != list_identity(["b", "a"])

    def test_differs_by_content(self):
        assert list_identity(["a", "b"]) != list_identity(["a", "c"])

    def test_is_sha256_hex_and_hides_keys(self):
        identity = list_identity(["secret-key-1", "secret-key-2"])
        assert len(identity) == 64
        assert int(identity, 16) >= 0
        assert "secret" not in identity

    def test_same_source_string_maps_to_same_identity(self):
        assert list_identity(parse_key_list("a, b")) == list_identity(parse_key_list("a,b"))


@pytest.mark.unit
def test_mask_key_never_reveals_key():
    masked = mask_key("AIzaSyVerySecret")
    assert masked.startswith("sha256:")
    assert "AIza" not in masked
    assert mask_key("AIzaSyVerySecret") == masked
