# ABOUTME: Tests for the mcp-wire command line: install, uninstall, list, status, feature
# ABOUTME: Targets are replaced with in-memory fakes; the wizard is never started
import io
import json
import os
import subprocess
import sys
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from mcpwire.cli import (
    EXIT_CONFIG_ERROR,
    EXIT_FATAL,
    EXIT_PARTIAL,
    EXIT_SUCCESS,
    exit_code_for,
    find_service,
    main,
    maybe_remove_credentials,
    parse_scope,
    prompt_credentials,
    resolve_targets,
)
from mcpwire.credentials import FileSource
from mcpwire.models import EnvVar, Service

SRC_DIR = Path(__file__).resolve().parent.parent / "src"


class TtyStringIO(io.StringIO):
    def isatty(self) -> bool:
        return True


@pytest.fixture
def targets(monkeypatch, make_target, make_scoped_target):
    """Two installed fakes and one missing one, wired into the CLI lookups."""
    fakes = [
        make_scoped_target("Claude Code", "claude"),
        make_target("Codex CLI", "codex"),
        make_target("Gemini CLI", "gemini", installed=False),
    ]

    def find(slug, targets=None):
        for t in fakes:
            if t.slug == slug.strip().lower():
                return t
        return None

    monkeypatch.setattr("mcpwire.cli.all_targets", lambda: list(fakes))
    monkeypatch.setattr("mcpwire.cli.installed_targets", lambda targets=None: [t for t in fakes if t.installed])
    monkeypatch.setattr("mcpwire.cli.find_target", find)
    return fakes


class TestHelpers:
    """Tests for argument and result helpers."""

    def test_parse_scope(self):
        """Test scope defaults to user and rejects unknown values."""
        assert parse_scope(None) == "user"
        assert parse_scope(" Project ") == "project"
        with pytest.raises(ValueError, match="Invalid scope"):
            parse_scope("effective")

    def test_exit_code_for(self):
        """Test success, partial and total failure."""
        assert exit_code_for(0, 3) == EXIT_SUCCESS
        assert exit_code_for(1, 3) == EXIT_PARTIAL
        assert exit_code_for(3, 3) == EXIT_FATAL

    def test_resolve_targets_defaults_to_installed(self, targets):
        """Test no --target means every installed target."""
        assert [t.slug for t in resolve_targets(None)] == ["claude", "codex"]

    def test_resolve_targets_explicit(self, targets):
        """Test explicit slugs are deduplicated and kept in order."""
        assert [t.slug for t in resolve_targets(["codex", "CLAUDE", "codex"])] == ["codex", "claude"]

    def test_resolve_targets_errors(self, targets):
        """Test unknown and uninstalled slugs are rejected."""
        with pytest.raises(ValueError, match="not known"):
            resolve_targets(["vim"])
        with pytest.raises(ValueError, match="not installed"):
            resolve_targets(["gemini"])

    def test_resolve_targets_none_installed(self, monkeypatch):
        monkeypatch.setattr("mcpwire.cli.installed_targets", lambda targets=None: [])
        with pytest.raises(ValueError, match="No installed targets"):
            resolve_targets([])

    def test_find_service(self):
        """Test exact and case-insensitive lookup and the not-found message."""
        services = {"Sentry": Service(name="Sentry")}
        assert find_service(services, "Sentry").name == "Sentry"
        assert find_service(services, "sentry").name == "Sentry"
        with pytest.raises(ValueError, match="available: Sentry"):
            find_service(services, "nope")
        with pytest.raises(ValueError, match="required"):
            find_service(services, " ")

    def test_find_service_registry_fallback(self, wire_home):
        """Test registry lookup when the feature is on."""
        cache = wire_home / "cache" / "servers.json"
        cache.parent.mkdir(parents=True)
        cache.write_text(json.dumps({"servers": [{"server": {
            "name": "io.acme/docs",
            "remotes": [{"type": "streamable-http", "url": "https://acme.dev/mcp"}],
        }}]}))

        service = find_service({}, "io.acme/docs", registry_enabled=True)
        assert service.transport == "http"

        with pytest.raises(ValueError, match="not found"):
            find_service({}, "io.acme/docs", registry_enabled=False)


class TestPromptCredentials:
    """Tests for credential prompting."""

    SERVICE = Service(name="github", env=[EnvVar(name="WIRE_CLI_TOKEN", required=True, setup_url="https://x.dev")])

    def test_resolved_without_prompt(self, tmp_path, monkeypatch):
        """Test values already in the environment need no prompt."""
        monkeypatch.setenv("WIRE_CLI_TOKEN", "env-value")
        resolved = prompt_credentials(self.SERVICE, FileSource(tmp_path / "c"), no_prompt=True)
        assert resolved == {"WIRE_CLI_TOKEN": "env-value"}

    def test_no_prompt_fails(self, tmp_path, monkeypatch):
        """Test --no-prompt refuses to ask."""
        monkeypatch.delenv("WIRE_CLI_TOKEN", raising=False)
        with pytest.raises(ValueError, match="WIRE_CLI_TOKEN"):
            prompt_credentials(self.SERVICE, FileSource(tmp_path / "c"), no_prompt=True)

    def test_non_tty_fails(self, tmp_path, monkeypatch):
        monkeypatch.delenv("WIRE_CLI_TOKEN", raising=False)
        with pytest.raises(ValueError, match="prompting is disabled"):
            prompt_credentials(self.SERVICE, FileSource(tmp_path / "c"), False, io.StringIO(), io.StringIO())

    def test_prompts_and_saves(self, tmp_path, monkeypatch):
        """Test an interactive prompt and saving the answer."""
        monkeypatch.delenv("WIRE_CLI_TOKEN", raising=False)
        store = FileSource(tmp_path / "c")
        stdout = io.StringIO()

        with patch("mcpwire.cli.getpass.getpass", side_effect=["", "typed"]):
            resolved = prompt_credentials(self.SERVICE, store, False, TtyStringIO("y\n"), stdout)

        assert resolved == {"WIRE_CLI_TOKEN": "typed"}
        assert store.get("WIRE_CLI_TOKEN") == "typed"
        assert "Value cannot be empty." in stdout.getvalue()
        assert "https://x.dev" in stdout.getvalue()

    def test_prompt_without_saving(self, tmp_path, monkeypatch):
        monkeypatch.delenv("WIRE_CLI_TOKEN", raising=False)
        store = FileSource(tmp_path / "c")

        with patch("mcpwire.cli.getpass.getpass", return_value="typed"):
            prompt_credentials(self.SERVICE, store, False, TtyStringIO("\n"), io.StringIO())

        assert store.get("WIRE_CLI_TOKEN") is None


class TestInstall:
    """Tests for the install command."""

    def test_install_into_installed_targets(self, targets, capsys):
        """Test sentry installs everywhere and prints OAuth hints."""
        assert main(["install", "sentry"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "Installing to: Claude Code, Codex CLI" in out
        assert "Claude Code: configured" in out
        assert "Complete OAuth authentication" in out
        assert "sentry" in targets[0].services
        assert "sentry" in targets[1].services
        assert targets[2].calls == []

    def test_install_project_scope_partial(self, targets, capsys):
        """Test project scope fails on the user-only target only."""
        code = main(["install", "sentry", "--scope", "project"])

        out = capsys.readouterr().out
        assert code == EXIT_PARTIAL
        assert targets[0].scopes_used == ["project"]
        assert "Codex CLI: failed" in out

    def test_install_all_fail(self, targets, capsys):
        for t in targets:
            t.fail = True
        assert main(["install", "sentry"]) == EXIT_FATAL

    def test_install_unknown_service(self, targets, capsys):
        assert main(["install", "nope"]) == EXIT_CONFIG_ERROR
        assert "not found" in capsys.readouterr().out

    def test_install_unknown_target(self, targets, capsys):
        assert main(["install", "sentry", "--target", "vim"]) == EXIT_CONFIG_ERROR

    def test_install_missing_credentials_no_prompt(self, targets, monkeypatch, capsys):
        """Test required credentials block the install without touching targets."""
        monkeypatch.delenv("GITHUB_TOKEN", raising=False)
        assert main(["install", "github", "--no-prompt"]) == EXIT_CONFIG_ERROR
        assert targets[0].calls == []

    def test_install_substitutes_resolved_env(self, targets, monkeypatch):
        monkeypatch.setenv("GITHUB_TOKEN", "ghp_x")
        assert main(["install", "github", "--target", "codex"]) == EXIT_SUCCESS
        assert targets[1].services["github"] == {"GITHUB_TOKEN": "ghp_x"}


class TestUninstall:
    """Tests for the uninstall command."""

    def test_uninstall(self, targets, capsys):
        """Test removal from every installed target."""
        for t in targets:
            t.services["sentry"] = {}

        assert main(["uninstall", "sentry"]) == EXIT_SUCCESS

        assert "sentry" not in targets[0].services
        assert "sentry" not in targets[1].services
        assert "Codex CLI: removed" in capsys.readouterr().out

    def test_uninstall_partial(self, targets):
        targets[1].fail = True
        assert main(["uninstall", "sentry"]) == EXIT_PARTIAL

    def test_maybe_remove_credentials(self, wire_home):
        """Test stored credentials are removed after confirming."""
        FileSource().store("GITHUB_TOKEN", "x")
        stdout = io.StringIO()

        maybe_remove_credentials("github", TtyStringIO("yes\n"), stdout)

        assert FileSource().get("GITHUB_TOKEN") is None
        assert "Stored credentials removed." in stdout.getvalue()

    def test_maybe_remove_credentials_skipped_without_tty(self, wire_home):
        FileSource().store("GITHUB_TOKEN", "x")
        maybe_remove_credentials("github", io.StringIO("yes\n"), io.StringIO())
        assert FileSource().get("GITHUB_TOKEN") == "x"


class TestList:
    """Tests for the list command."""

    def test_list_services(self, capsys):
        assert main(["list", "services"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Available services:" in out
        assert "sentry" in out

    def test_list_targets(self, targets, capsys):
        assert main(["list", "targets"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "gemini" in out
        assert "not found" in out

    def test_registry_source_needs_feature(self, capsys):
        assert main(["list", "services", "--source", "all"]) == EXIT_CONFIG_ERROR
        assert "registry feature" in capsys.readouterr().out

    def test_all_sources_with_feature(self, wire_home, capsys):
        """Test merged listing marks curated entries."""
        main(["feature", "enable", "registry"])
        cache = wire_home / "cache" / "servers.json"
        cache.parent.mkdir(parents=True)
        cache.write_text(json.dumps({"servers": [{"server": {"name": "io.acme/docs"}}]}))
        capsys.readouterr()

        assert main(["list", "services", "--source", "all"]) == EXIT_SUCCESS

        out = capsys.readouterr().out
        assert "* sentry" in out
        assert "io.acme/docs" in out
        assert "* = curated by mcp-wire" in out


class TestStatus:
    """Tests for the status command."""

    def test_status_matrix(self, targets, capsys):
        targets[1].services["sentry"] = {}
        assert main(["status"]) == EXIT_SUCCESS
        out = capsys.readouterr().out
        assert "Status:" in out
        assert "Codex CLI" in out

    def test_status_read_error(self, targets, monkeypatch, capsys):
        """Test an unreadable target yields exit 1."""
        targets[1].list_services = MagicMock(side_effect=ValueError("bad toml"))
        assert main(["status"]) == EXIT_PARTIAL
        assert "Error reading codex: bad toml" in capsys.readouterr().out


class TestFeature:
    """Tests for the feature command."""

    def test_list(self, capsys):
        assert main(["feature", "list"]) == EXIT_SUCCESS
        assert "registry" in capsys.readouterr().out

    def test_enable_disable(self, wire_home, capsys):
        assert main(["feature", "enable", "registry"]) == EXIT_SUCCESS
        assert json.loads((wire_home / "config.json").read_text())["features"] == {"registry": True}
        assert main(["feature", "disable", "registry"]) == EXIT_SUCCESS
        assert json.loads((wire_home / "config.json").read_text())["features"] == {"registry": False}

    def test_unknown(self, capsys):
        assert main(["feature", "enable", "teleport"]) == EXIT_CONFIG_ERROR
        assert "Unknown feature" in capsys.readouterr().out


def test_wizard_requires_terminal(capsys):
    """Without a subcommand the wizard runs, but only on a TTY."""
    with patch("mcpwire.cli.run_wizard") as run:
        assert main([]) == EXIT_CONFIG_ERROR
    run.assert_not_called()
    assert "needs a terminal" in capsys.readouterr().out


class TestCliIntegration:
    """Integration tests that run the CLI via subprocess."""

    def run_cli(self, *args: str, home: Path) -> subprocess.CompletedProcess:
        env = dict(os.environ, MCP_WIRE_HOME=str(home), PYTHONPATH=str(SRC_DIR))
        return subprocess.run(
            [sys.executable, "-m", "mcpwire", *args],
            capture_output=True,
            text=True,
            timeout=10,
            env=env,
        )

    def test_integration_version(self, wire_home):
        """Test that the module can be invoked and reports its version."""
        result = self.run_cli("--version", home=wire_home)
        assert result.returncode == 0
        assert "mcp-wire v" in result.stdout

    def test_integration_list_services(self, wire_home):
        """Test the bundled service list from a fresh process."""
        result = self.run_cli("list", "services", home=wire_home)
        assert result.returncode == 0
        assert "context7" in result.stdout

    def test_integration_no_tty(self, wire_home):
        """Test that the wizard refuses to run without a terminal."""
        result = self.run_cli(home=wire_home)
        assert result.returncode == EXIT_CONFIG_ERROR
