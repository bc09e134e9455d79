# Codex CLI target adapter
import logging
import shutil
from pathlib import Path
from typing import Any

import tomli
import tomli_w

from mcpwire.models import Service
from mcpwire.targets.base import Which, normalize_env, require_name, require_transport
from mcpwire.utils.backup import create_backup

logger = logging.getLogger(__name__)

SERVERS_KEY = "mcp_servers"


def pick_bearer_env_var(service: Service, resolved_env: dict[str, str]) -> str:
    """Choose the env var Codex should read a bearer token from.

    The first declared variable that was resolved wins, falling back to
    the alphabetically first resolved name.
    """
    for name in service.env_names():
        if name in resolved_env:
            return name
    names = sorted(normalize_env(resolved_env))
    return names[0] if names else ""


class CodexTarget:
    """Adapter for Codex CLI (~/.codex/config.toml).

    ABOUTME: Uses snake_case mcp_servers key (not mcpServers)
    ABOUTME: Only the user scope exists; there is no project config
    ABOUTME: Remote servers reference tokens by env var name, never by value
    """

    def __init__(self, config_path: Path | None = None, which: Which = shutil.which) -> None:
        self._config_path = config_path if config_path else Path.home() / ".codex" / "config.toml"
        self._which = which

    @property
    def name(self) -> str:
        return "Codex CLI"

    @property
    def slug(self) -> str:
        return "codex"

    def config_path(self) -> Path:
        return self._config_path

    def is_installed(self) -> bool:
        return self._which("codex") is not None

    def build_server_config(self, service: Service, resolved_env: dict[str, str]) -> dict[str, Any]:
        transport = require_transport(service, ("http", "sse", "stdio"))
        entry: dict[str, Any] = {}

        if transport == "stdio":
            entry["command"] = service.command.strip()
            if service.args:
                entry["args"] = list(service.args)
            env = normalize_env(resolved_env)
            if env:
                entry["env"] = env
            return entry

        entry["url"] = service.url.strip()
        bearer = pick_bearer_env_var(service, resolved_env)
        if bearer:
            entry["bearer_token_env_var"] = bearer
        return entry

    def install(self, service: Service, resolved_env: dict[str, str]) -> None:
        """Add or replace the service table.

        Raises:
            ValueError: If the TOML is invalid or the service incomplete
        """
        name = require_name(service.name)
        entry = self.build_server_config(service, resolved_env)
        config = self._read()
        self._servers(config, create=True)[name] = entry
        self._write(config)
        logger.info(f"Installed '{name}' into {self._config_path}")

    def uninstall(self, service_name: str) -> None:
        name = require_name(service_name)
        if not self._config_path.exists():
            return
        config = self._read()
        servers = self._servers(config, create=False)
        if name not in servers:
            return
        del servers[name]
        self._write(config)
        logger.info(f"Removed '{name}' from {self._config_path}")

    def list_services(self) -> list[str]:
        return sorted(self._servers(self._read(), create=False))

    def oauth_hint(self) -> str:
        return "Run 'codex mcp login' with the server name to authenticate"

    def _read(self) -> dict[str, Any]:
        if not self._config_path.exists():
            return {}
        try:
            with open(self._config_path, "rb") as f:
                return tomli.load(f)
        except tomli.TOMLDecodeError as e:
            raise ValueError(f"Invalid TOML in {self._config_path}: {e}") from e

    def _servers(self, config: dict[str, Any], create: bool) -> dict[str, Any]:
        servers = config.get(SERVERS_KEY)
        if servers is None:
            servers = {}
            if create:
                config[SERVERS_KEY] = servers
        if not isinstance(servers, dict):
            raise ValueError(f"Invalid config {self._config_path}: '{SERVERS_KEY}' must be a table")
        return servers

    def _write(self, config: dict[str, Any]) -> None:
        create_backup(self._config_path)
        self._config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._config_path, "wb") as f:
            tomli_w.dump(config, f)
