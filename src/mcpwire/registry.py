# MCP Registry data model and local cache
# ABOUTME: Mirrors the registry's server.json schema (only the fields we read)
# ABOUTME: Registry data is read from a cache file; no network access here
import json
import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any

from mcpwire.config import get_home_dir

logger = logging.getLogger(__name__)

CACHE_FILE_NAME = "servers.json"


@dataclass(frozen=True)
class KeyValueInput:
    """Named environment variable or header declared by a server."""
    name: str
    description: str = ""
    is_required: bool = False
    is_secret: bool = False
    value: str = ""
    default: str = ""
    placeholder: str = ""


@dataclass(frozen=True)
class RemoteTransport:
    type: str
    url: str = ""
    headers: list[KeyValueInput] = field(default_factory=list)


@dataclass(frozen=True)
class Package:
    """Package-backed install method (npm, pypi, oci, ...)."""
    registry_type: str
    identifier: str
    transport: RemoteTransport
    version: str = ""
    environment_variables: list[KeyValueInput] = field(default_factory=list)
    runtime_hint: str = ""


@dataclass(frozen=True)
class Repository:
    url: str = ""
    source: str = ""


@dataclass(frozen=True)
class ServerJSON:
    name: str
    description: str = ""
    version: str = ""
    title: str = ""
    website_url: str = ""
    repository: Repository | None = None
    packages: list[Package] = field(default_factory=list)
    remotes: list[RemoteTransport] = field(default_factory=list)


@dataclass(frozen=True)
class ServerResponse:
    """A server definition plus registry-managed metadata."""
    server: ServerJSON
    status: str = ""
    is_latest: bool = False
    updated_at: str = ""


def _str(value: Any) -> str:
    """JSON null and missing fields both read as an empty string."""
    return "" if value is None else str(value)


def _key_value_from_dict(data: dict[str, Any]) -> KeyValueInput:
    return KeyValueInput(
        name=_str(data.get("name")),
        description=_str(data.get("description")),
        is_required=bool(data.get("isRequired", False)),
        is_secret=bool(data.get("isSecret", False)),
        value=_str(data.get("value")),
        default=_str(data.get("default")),
        placeholder=_str(data.get("placeholder")),
    )


def _transport_from_dict(data: Any) -> RemoteTransport:
    if not isinstance(data, dict):
        data = {}
    return RemoteTransport(
        type=_str(data.get("type")),
        url=_str(data.get("url")),
        headers=[_key_value_from_dict(h) for h in data.get("headers") or [] if isinstance(h, dict)],
    )


def server_response_from_dict(data: dict[str, Any]) -> ServerResponse:
    """Parse one entry of the registry's server list.

    ABOUTME: Accepts both the wrapped {"server": ..., "_meta": ...} form
    ABOUTME: and a bare server.json object
    ABOUTME: Raises ValueError when the server has no name

    Args:
        data: Decoded JSON object

    Returns:
        Parsed ServerResponse
    """
    server_data = data.get("server", data)
    if not isinstance(server_data, dict):
        raise ValueError("Registry server entry is not an object")
    name = _str(server_data.get("name")).strip()
    if not name:
        raise ValueError("Registry server is missing required 'name' field")

    repo_data = server_data.get("repository")
    repository = None
    if isinstance(repo_data, dict):
        repository = Repository(
            url=_str(repo_data.get("url")),
            source=_str(repo_data.get("source")),
        )

    packages = [
        Package(
            registry_type=_str(pkg.get("registryType")),
            identifier=_str(pkg.get("identifier")),
            transport=_transport_from_dict(pkg.get("transport")),
            version=_str(pkg.get("version")),
            environment_variables=[
                _key_value_from_dict(ev) for ev in pkg.get("environmentVariables") or [] if isinstance(ev, dict)
            ],
            runtime_hint=_str(pkg.get("runtimeHint")),
        )
        for pkg in server_data.get("packages") or []
        if isinstance(pkg, dict)
    ]

    server = ServerJSON(
        name=name,
        description=_str(server_data.get("description")),
        version=_str(server_data.get("version")),
        title=_str(server_data.get("title")),
        website_url=_str(server_data.get("websiteUrl")),
        repository=repository,
        packages=packages,
        remotes=[_transport_from_dict(r) for r in server_data.get("remotes") or [] if isinstance(r, dict)],
    )

    official = (data.get("_meta") or {}).get("io.modelcontextprotocol.registry/official") or {}
    return ServerResponse(
        server=server,
        status=_str(official.get("status")),
        is_latest=bool(official.get("isLatest", False)),
        updated_at=_str(official.get("updatedAt")),
    )


def get_cache_path() -> Path:
    """Return ~/.mcp-wire/cache/servers.json (honours MCP_WIRE_HOME)."""
    return get_home_dir() / "cache" / CACHE_FILE_NAME


class RegistryCache:
    """In-memory view of the on-disk registry cache.

    ABOUTME: A missing or corrupt cache file loads as empty (logged)
    ABOUTME: Thread-safe so the wizard can poll status while loading
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path else get_cache_path()
        self._lock = threading.Lock()
        self._servers: list[ServerResponse] = []
        self._last_synced = ""
        self._loaded = False

    @property
    def path(self) -> Path:
        return self._path

    @property
    def loaded(self) -> bool:
        with self._lock:
            return self._loaded

    def load(self) -> None:
        """Read the cache file into memory."""
        if not self._path.exists():
            logger.debug(f"Registry cache not found at {self._path}")
            with self._lock:
                self._servers = []
                self._loaded = True
            return

        try:
            with open(self._path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            logger.warning(f"Ignoring corrupt registry cache {self._path}: {e}")
            data = {}
        if not isinstance(data, dict):
            logger.warning(f"Ignoring registry cache {self._path}: top level is not an object")
            data = {}

        raw_servers = data.get("servers") or []
        if not isinstance(raw_servers, list):
            logger.warning(f"Ignoring registry cache {self._path}: servers is not a list")
            raw_servers = []

        servers: list[ServerResponse] = []
        for raw in raw_servers:
            if not isinstance(raw, dict):
                logger.warning(f"Skipping registry entry that is not an object: {raw!r}")
                continue
            try:
                servers.append(server_response_from_dict(raw))
            except ValueError as e:
                logger.warning(f"Skipping registry entry: {e}")

        with self._lock:
            self._servers = servers
            self._last_synced = _str(data.get("last_synced"))
            self._loaded = True

    def all(self) -> list[ServerResponse]:
        with self._lock:
            return list(self._servers)

    def find(self, name: str) -> ServerResponse | None:
        """Case-insensitive lookup by server name."""
        wanted = name.strip().lower()
        with self._lock:
            for srv in self._servers:
                if srv.server.name.lower() == wanted:
                    return srv
        return None

    def status_line(self) -> str:
        """Short status for the service screen; empty when nothing to say."""
        with self._lock:
            if not self._loaded:
                return "Loading registry cache..."
            if not self._servers:
                return ""
            count = len(self._servers)
            last_synced = self._last_synced

        if last_synced:
            try:
                synced = datetime.fromisoformat(last_synced.replace("Z", "+00:00"))
                return f"Registry cache: {count} servers (synced {synced:%Y-%m-%d})"
            except ValueError:
                pass
        return f"Registry cache: {count} servers"
