# ABOUTME: Shared fixtures; every test gets an isolated mcp-wire home
# ABOUTME: so backups, credentials and config never touch the real ~/.mcp-wire
from pathlib import Path
from types import SimpleNamespace

import pytest

from mcpwire.models import SCOPE_PROJECT, SCOPE_USER, Service
from mcpwire.tui.screen import BatchMsg, KeyMsg, QuitMsg, quit_cmd
from mcpwire.tui.theme import Theme, new_theme


@pytest.fixture(autouse=True)
def wire_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home = tmp_path / "wire-home"
    monkeypatch.setenv("MCP_WIRE_HOME", str(home))
    return home


class FakeTarget:
    """In-memory user-scope-only target."""

    def __init__(self, name: str, slug: str, installed: bool = True, fail: bool = False) -> None:
        self._name = name
        self._slug = slug
        self.installed = installed
        self.fail = fail
        self.services: dict[str, dict[str, str]] = {}
        self.calls: list[tuple[str, str]] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def slug(self) -> str:
        return self._slug

    def is_installed(self) -> bool:
        return self.installed

    def install(self, service: Service, resolved_env: dict[str, str]) -> None:
        self.calls.append(("install", service.name))
        if self.fail:
            raise RuntimeError(f"{self._slug} exploded")
        self.services[service.name] = dict(resolved_env)

    def uninstall(self, service_name: str) -> None:
        self.calls.append(("uninstall", service_name))
        if self.fail:
            raise RuntimeError(f"{self._slug} exploded")
        self.services.pop(service_name, None)

    def list_services(self) -> list[str]:
        return sorted(self.services)


class FakeScopedTarget(FakeTarget):
    """Target that also supports the project scope."""

    def __init__(self, name: str, slug: str, installed: bool = True, fail: bool = False) -> None:
        super().__init__(name, slug, installed, fail)
        self.scopes_used: list[str] = []

    def supported_scopes(self) -> list[str]:
        return [SCOPE_USER, SCOPE_PROJECT]

    def install_with_scope(self, service: Service, resolved_env: dict[str, str], scope: str) -> None:
        self.scopes_used.append(scope)
        self.install(service, resolved_env)

    def uninstall_with_scope(self, service_name: str, scope: str) -> None:
        self.scopes_used.append(scope)
        self.uninstall(service_name)

    def list_with_scope(self, scope: str) -> list[str]:
        return self.list_services()


@pytest.fixture
def fake_target() -> FakeTarget:
    return FakeTarget("Fake Tool", "fake")


@pytest.fixture
def scoped_target() -> FakeScopedTarget:
    return FakeScopedTarget("Scoped Tool", "scoped")


@pytest.fixture
def make_target() -> type[FakeTarget]:
    return FakeTarget


@pytest.fixture
def make_scoped_target() -> type[FakeScopedTarget]:
    return FakeScopedTarget


@pytest.fixture
def theme() -> Theme:
    return new_theme(color=False)


def pump(model, cmd, limit: int = 100) -> bool:
    """Run cmd and feed every resulting message back into model synchronously.

    Returns True when the chain ends in a quit.
    """
    pending = [cmd]
    while pending and limit > 0:
        limit -= 1
        current = pending.pop(0)
        if current is None:
            continue
        if current is quit_cmd:
            return True
        msg = current()
        if msg is None:
            continue
        if isinstance(msg, QuitMsg):
            return True
        if isinstance(msg, BatchMsg):
            pending.extend(msg.cmds)
            continue
        pending.append(model.update(msg))
    return False


def press(model, *keys: str) -> bool:
    """Deliver key presses one by one, pumping the commands each produces."""
    for key in keys:
        if pump(model, model.update(KeyMsg(key=key))):
            return True
    return False


@pytest.fixture
def driver():
    """Synchronous stand-in for the program loop: driver.pump / driver.press."""
    return SimpleNamespace(pump=pump, press=press)
