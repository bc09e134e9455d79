# Shared helpers for target adapters
import json
import logging
import shutil
from collections.abc import Callable
from pathlib import Path
from typing import Any, cast

from mcpwire.models import SCOPE_EFFECTIVE, SCOPE_PROJECT, SCOPE_USER, ConfigScope, Service
from mcpwire.utils.backup import create_backup
from mcpwire.utils.env import substitute_headers

logger = logging.getLogger(__name__)

# ABOUTME: Signature of shutil.which, injectable for tests
Which = Callable[[str], str | None]


def read_json_file(path: Path) -> dict[str, Any]:
    """Read JSON file with error handling.

    ABOUTME: Returns empty dict if file doesn't exist or is blank
    ABOUTME: Raises ValueError for invalid JSON or a non-object document
    """
    if not path.exists():
        return {}

    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}

    try:
        result = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from e

    if not isinstance(result, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return cast(dict[str, Any], result)


def write_json_file(path: Path, data: dict[str, Any]) -> None:
    """Back up the current file, then write the new document.

    ABOUTME: Creates parent directories if needed
    ABOUTME: Uses 2-space indentation and keeps key order
    """
    create_backup(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")
    logger.debug(f"Wrote {path}")


def servers_section(config: dict[str, Any], key: str, path: Path) -> dict[str, Any] | None:
    """Return the mutable server table stored under key, or None if absent.

    Raises:
        ValueError: If the key holds something other than an object
    """
    section = config.get(key)
    if section is None:
        return None
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config {path}: '{key}' must be an object")
    return section


def ensure_servers_section(config: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    section = servers_section(config, key, path)
    if section is None:
        section = {}
        config[key] = section
    return section


def require_name(name: str) -> str:
    trimmed = name.strip()
    if not trimmed:
        raise ValueError("Service name is required")
    return trimmed


def normalize_env(resolved_env: dict[str, str]) -> dict[str, str]:
    return {k.strip(): v for k, v in resolved_env.items() if k.strip()}


def service_headers(service: Service, resolved_env: dict[str, str]) -> dict[str, str]:
    """Headers with ${VAR} placeholders filled from resolved_env."""
    return substitute_headers(service.headers, resolved_env)


def require_transport(service: Service, allowed: tuple[str, ...]) -> str:
    """Check transport support and the fields it needs.

    Raises:
        ValueError: If the transport is unsupported or incomplete
    """
    transport = service.transport.strip().lower()
    if transport not in allowed:
        raise ValueError(f"Unsupported transport '{service.transport}'")
    if transport in ("http", "sse") and not service.url.strip():
        raise ValueError(f"{transport} service requires url")
    if transport == "stdio" and not service.command.strip():
        raise ValueError("stdio service requires command")
    return transport


class JsonConfigTarget:
    """Scoped target whose config is a JSON document with a server table.

    ABOUTME: Subclasses supply paths, binary name and the entry builder
    ABOUTME: Keys outside the server table are preserved on write
    """

    servers_key = "mcpServers"
    binary = ""

    def __init__(
        self,
        config_path: Path,
        project_dir: Path | None = None,
        which: Which = shutil.which,
    ) -> None:
        self._config_path = config_path
        self._project_dir = project_dir
        self._which = which

    def is_installed(self) -> bool:
        return self._which(self.binary) is not None

    def supported_scopes(self) -> list[ConfigScope]:
        return [SCOPE_USER, SCOPE_PROJECT]

    def project_config_path(self, project_dir: Path) -> Path:
        raise NotImplementedError

    def build_server_config(self, service: Service, resolved_env: dict[str, str]) -> dict[str, Any]:
        raise NotImplementedError

    def config_path(self, scope: ConfigScope = SCOPE_USER) -> Path:
        if scope == SCOPE_PROJECT:
            return self.project_config_path(self._project_dir if self._project_dir else Path.cwd())
        return self._config_path

    def install(self, service: Service, resolved_env: dict[str, str]) -> None:
        self.install_with_scope(service, resolved_env, SCOPE_USER)

    def uninstall(self, service_name: str) -> None:
        self.uninstall_with_scope(service_name, SCOPE_USER)

    def list_services(self) -> list[str]:
        return self.list_with_scope(SCOPE_USER)

    def install_with_scope(
        self, service: Service, resolved_env: dict[str, str], scope: ConfigScope
    ) -> None:
        """Add or replace the service entry in the scope's config file.

        Raises:
            ValueError: If the file is invalid or the service incomplete
        """
        name = require_name(service.name)
        path = self.config_path(writable_scope(scope))
        entry = self.build_server_config(service, resolved_env)
        config = read_json_file(path)
        ensure_servers_section(config, self.servers_key, path)[name] = entry
        write_json_file(path, config)
        logger.info(f"Installed '{name}' into {path}")

    def uninstall_with_scope(self, service_name: str, scope: ConfigScope) -> None:
        """Remove the entry; a missing file or entry is not an error."""
        name = require_name(service_name)
        path = self.config_path(writable_scope(scope))
        if not path.exists():
            return
        config = read_json_file(path)
        servers = servers_section(config, self.servers_key, path)
        if not servers or name not in servers:
            logger.debug(f"'{name}' not configured in {path}")
            return
        del servers[name]
        write_json_file(path, config)
        logger.info(f"Removed '{name}' from {path}")

    def list_with_scope(self, scope: ConfigScope) -> list[str]:
        if scope == SCOPE_EFFECTIVE:
            names = set(self._list_file(self.config_path(SCOPE_USER)))
            names.update(self._list_file(self.config_path(SCOPE_PROJECT)))
            return sorted(names)
        return self._list_file(self.config_path(scope))

    def _list_file(self, path: Path) -> list[str]:
        servers = servers_section(read_json_file(path), self.servers_key, path)
        return sorted(servers) if servers else []


def writable_scope(scope: ConfigScope) -> ConfigScope:
    if scope == SCOPE_EFFECTIVE:
        raise ValueError("Cannot write to the effective scope")
    return scope
