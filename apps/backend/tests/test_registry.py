"""Tests for provider registry loading."""

import json

import pytest

from sourcing.models import ProviderDescriptor
from sourcing.registry import ProviderRegistry, load_registry

SITE_CONFIG = {
    "api_site": {
        "alpha": {"name": "Alpha Films", "api": "https://alpha.example.com/api.php/provide/vod/at/xml/"},
        "beta": {"name": "Beta TV", "api": "https://beta.example.com/api.php/provide/vod/at/xml/"},
        "gamma": {"name": "Gamma", "api": "https://gamma.example.com/api.php/provide/vod/at/xml/"},
    }
}


class TestProviderRegistry:
    def test_from_mapping_keeps_config_order(self):
        registry = ProviderRegistry.from_mapping(SITE_CONFIG)
        assert registry.keys() == ["alpha", "beta", "gamma"]
        assert registry.get("beta").display_name == "Beta TV"

    def test_bare_mapping_accepted(self):
        registry = ProviderRegistry.from_mapping(SITE_CONFIG["api_site"])
        assert len(registry) == 3

    def test_entries_without_endpoint_are_skipped(self):
        registry = ProviderRegistry.from_mapping(
            {"api_site": {"ok": {"name": "OK", "api": "https://ok.example.com/"}, "broken": {"name": "No API"}, "junk": "x"}}
        )
        assert registry.keys() == ["ok"]

    def test_missing_name_falls_back_to_key(self):
        registry = ProviderRegistry.from_mapping({"solo": {"api": "https://solo.example.com/"}})
        assert registry.get("solo").display_name == "solo"

    def test_select_respects_cap(self):
        registry = ProviderRegistry.from_mapping(SITE_CONFIG)
        assert [d.key for d in registry.select(2)] == ["alpha", "beta"]
        assert [d.key for d in registry.select(None)] == ["alpha", "beta", "gamma"]
        assert registry.select(0) == []
        assert len(registry.select(10)) == 3

    def test_duplicate_keys_keep_first(self):
        registry = ProviderRegistry([
            ProviderDescriptor(key="a", display_name="first", endpoint_template="https://1.example.com/"),
            ProviderDescriptor(key="a", display_name="second", endpoint_template="https://2.example.com/"),
        ])
        assert len(registry) == 1
        assert registry.get("a").display_name == "first"

    def test_registry_is_read_only(self):
        registry = ProviderRegistry.from_mapping(SITE_CONFIG)
        with pytest.raises(TypeError):
            registry._descriptors["new"] = registry.get("alpha")

    def test_membership_and_lookup(self):
        registry = ProviderRegistry.from_mapping(SITE_CONFIG)
        assert "alpha" in registry
        assert "delta" not in registry
        assert registry.get("delta") is None
        assert [d.key for d in registry] == ["alpha", "beta", "gamma"]

    def test_empty(self):
        assert ProviderRegistry().is_empty is True
        assert ProviderRegistry.from_mapping({"api_site": {}}).is_empty is True


class TestLoadRegistry:
    def test_load_from_file(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PROVIDER_CONFIG_JSON", raising=False)
        path = tmp_path / "providers.json"
        path.write_text(json.dumps(SITE_CONFIG), encoding="utf-8")

        registry = load_registry(path=str(path))

        assert registry.keys() == ["alpha", "beta", "gamma"]

    def test_load_from_env_json(self, monkeypatch):
        monkeypatch.setenv("PROVIDER_CONFIG_JSON", json.dumps(SITE_CONFIG))
        monkeypatch.delenv("PROVIDER_CONFIG_PATH", raising=False)

        assert len(load_registry()) == 3

    def test_load_from_env_path(self, tmp_path, monkeypatch):
        path = tmp_path / "providers.json"
        path.write_text(json.dumps(SITE_CONFIG), encoding="utf-8")
        monkeypatch.delenv("PROVIDER_CONFIG_JSON", raising=False)
        monkeypatch.setenv("PROVIDER_CONFIG_PATH", str(path))

        assert len(load_registry()) == 3

    def test_nothing_configured_gives_empty_registry(self, monkeypatch):
        monkeypatch.delenv("PROVIDER_CONFIG_JSON", raising=False)
        monkeypatch.delenv("PROVIDER_CONFIG_PATH", raising=False)

        assert load_registry().is_empty

    def test_missing_file_gives_empty_registry(self, tmp_path, monkeypatch):
        monkeypatch.delenv("PROVIDER_CONFIG_JSON", raising=False)
        assert load_registry(path=str(tmp_path / "nope.json")).is_empty

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", "\"text\""])
    def test_invalid_documents_give_empty_registry(self, raw):
        assert load_registry(raw_json=raw).is_empty
