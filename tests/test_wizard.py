# ABOUTME: Tests for the collaborators bound into the interactive wizard
import json
from pathlib import Path
from unittest.mock import patch

import pytest

from mcpwire.catalog import SOURCE_CURATED, SOURCE_REGISTRY, from_registry
from mcpwire.config import Config
from mcpwire.credentials import FileSource
from mcpwire.models import EnvVar, Service
from mcpwire.registry import RegistryCache, ServerJSON, ServerResponse
from mcpwire.wizard import WizardContext, load_catalog, run


def write_cache(path: Path, *names: str) -> RegistryCache:
    path.parent.mkdir(parents=True, exist_ok=True)
    servers = [{"server": {"name": n, "description": f"{n} server"}} for n in names]
    path.write_text(json.dumps({"servers": servers, "last_synced": "2025-09-02T08:00:00Z"}))
    return RegistryCache(path)


@pytest.fixture
def cache(tmp_path: Path) -> RegistryCache:
    return write_cache(tmp_path / "servers.json", "io.acme/docs", "sentry")


@pytest.fixture
def context(cache: RegistryCache, tmp_path: Path) -> WizardContext:
    return WizardContext(config=Config(), cache=cache, file_source=FileSource(tmp_path / "credentials"))


class TestLoadCatalog:
    """Tests for building the catalog per source choice."""

    def test_curated_only(self, cache):
        catalog = load_catalog("curated", cache)
        assert catalog.find("github").source == SOURCE_CURATED
        assert catalog.find("io.acme/docs") is None
        assert cache.loaded is False

    def test_registry_only(self, cache):
        catalog = load_catalog("registry", cache)
        assert [e.name for e in catalog.all()] == ["io.acme/docs", "sentry"]
        assert all(e.source == SOURCE_REGISTRY for e in catalog.all())

    def test_all_prefers_curated(self, cache):
        """Test a registry server sharing a curated name is dropped."""
        catalog = load_catalog("all", cache)
        assert catalog.find("sentry").source == SOURCE_CURATED
        assert catalog.find("io.acme/docs").source == SOURCE_REGISTRY

    def test_missing_cache_is_empty(self, tmp_path):
        catalog = load_catalog("registry", RegistryCache(tmp_path / "nope.json"))
        assert catalog.count() == 0


class TestWizardContext:
    """Tests for WizardContext."""

    def test_registry_flag_from_config(self, context):
        assert context.registry_enabled is False
        context.config = Config(features={"registry": True})
        assert context.registry_enabled is True

    def test_sync_status_only_while_loading(self, context):
        assert context.registry_sync_status() == "Loading registry cache..."
        context.load_catalog("all")
        assert context.registry_sync_status() == ""

    def test_refresh_registry_entry(self, context):
        stale = from_registry(ServerResponse(server=ServerJSON(name="IO.ACME/DOCS")))
        fresh = context.refresh_registry_entry(stale)
        assert fresh.registry.server.description == "io.acme/docs server"

    def test_refresh_unknown_entry_unchanged(self, context):
        entry = from_registry(ServerResponse(server=ServerJSON(name="io.other/x")))
        assert context.refresh_registry_entry(entry) is entry

    def test_credentials_round_trip(self, context, monkeypatch):
        """Test stored values resolve and can be removed again."""
        monkeypatch.delenv("WIZ_TOKEN", raising=False)
        service = Service(name="svc", env=[EnvVar(name="WIZ_TOKEN", required=True)])

        resolved, missing = context.resolve_credentials(service)
        assert resolved == {}
        assert [v.name for v in missing] == ["WIZ_TOKEN"]

        context.store_credential("WIZ_TOKEN", "abc")
        resolved, missing = context.resolve_credentials(service)
        assert resolved == {"WIZ_TOKEN": "abc"}
        assert missing == []

        assert context.remove_stored_credentials(["WIZ_TOKEN"]) == 1
        assert context.file_source.get("WIZ_TOKEN") is None

    def test_open_url_without_browser(self, context, caplog):
        with patch("mcpwire.wizard.webbrowser.open", return_value=False):
            context.open_url("https://example.com")
        assert "No browser available" in caplog.text

    def test_callbacks(self, context):
        callbacks = context.callbacks()
        assert callbacks.registry_enabled is False
        assert callbacks.load_catalog("curated").find("github") is not None
        assert callbacks.apply.remove_stored_credentials is not None
        assert callbacks.render_targets_list is not None


def test_run_starts_wizard(context):
    with patch("mcpwire.wizard.run_wizard") as run_wizard:
        run(context)

    run_wizard.assert_called_once()
    assert run_wizard.call_args.kwargs["version"]
