# Catalog of installable services merged from curated and registry sources
from dataclasses import dataclass
from typing import Literal

from mcpwire.models import EnvVar, Service
from mcpwire.registry import ServerResponse

Source = Literal["curated", "registry"]

SOURCE_CURATED: Source = "curated"
SOURCE_REGISTRY: Source = "registry"

# ABOUTME: Wizard source choices; "all" means both sources merged
SOURCE_CHOICES = ("curated", "registry", "all")


@dataclass(frozen=True)
class Entry:
    """One catalog record wrapping either a curated or a registry definition.

    ABOUTME: Exactly one of curated/registry is set, selected by source
    ABOUTME: Accessors give a uniform read-only view over both shapes
    """
    source: Source
    name: str
    curated: Service | None = None
    registry: ServerResponse | None = None

    def display_name(self) -> str:
        if self.source == SOURCE_CURATED and self.curated is not None:
            return self.curated.name
        if self.registry is not None:
            return self.registry.server.title or self.registry.server.name
        return self.name

    def description(self) -> str:
        if self.source == SOURCE_CURATED and self.curated is not None:
            return self.curated.description
        if self.registry is not None:
            return self.registry.server.description
        return ""

    def env_vars(self) -> list[EnvVar]:
        """Environment variables this entry needs.

        Registry entries combine package variables with secret remote
        headers, deduplicated by name.
        """
        if self.source == SOURCE_CURATED and self.curated is not None:
            return list(self.curated.env)
        if self.registry is not None:
            return env_vars_from_registry(self.registry)
        return []

    def transport(self) -> str:
        if self.source == SOURCE_CURATED and self.curated is not None:
            return self.curated.transport
        if self.registry is not None:
            if self.registry.server.remotes:
                return self.registry.server.remotes[0].type
            if self.registry.server.packages:
                return self.registry.server.packages[0].transport.type
        return ""

    def repository_url(self) -> str:
        if self.registry is not None and self.registry.server.repository is not None:
            return self.registry.server.repository.url
        return ""

    def website_url(self) -> str:
        if self.registry is not None:
            return self.registry.server.website_url
        return ""

    def has_remotes(self) -> bool:
        if self.source == SOURCE_CURATED and self.curated is not None:
            return self.curated.transport.strip().lower() in ("http", "sse")
        if self.registry is not None:
            return len(self.registry.server.remotes) > 0
        return False

    def has_packages(self) -> bool:
        if self.registry is not None:
            return len(self.registry.server.packages) > 0
        return False

    def install_type(self) -> str:
        """Return "remote", "package", "remote/package" or ""."""
        has_remotes = self.has_remotes()
        has_packages = self.has_packages()
        if has_remotes and has_packages:
            return "remote/package"
        if has_remotes:
            return "remote"
        if has_packages:
            return "package"
        return ""

    def package_types(self) -> list[str] | None:
        """Unique package registry types in first-seen order.

        Returns None (not an empty list) when there are no packages.
        """
        if self.registry is None:
            return None
        types: list[str] = []
        for pkg in self.registry.server.packages:
            if pkg.registry_type and pkg.registry_type not in types:
                types.append(pkg.registry_type)
        return types or None


def from_curated(service: Service) -> Entry:
    return Entry(source=SOURCE_CURATED, name=service.name, curated=service)


def from_curated_map(services: dict[str, Service]) -> list[Entry]:
    return [from_curated(svc) for svc in services.values()]


def from_registry(response: ServerResponse) -> Entry:
    return Entry(source=SOURCE_REGISTRY, name=response.server.name, registry=response)


def from_registry_list(servers: list[ServerResponse]) -> list[Entry]:
    return [from_registry(srv) for srv in servers]


def env_vars_from_registry(response: ServerResponse) -> list[EnvVar]:
    """Combine package env vars and secret remote headers.

    ABOUTME: Package variables first, then headers flagged secret only
    ABOUTME: Duplicates OR their required flag and backfill empty descriptions
    ABOUTME: Empty names are skipped; first-appearance order is kept
    """
    merged: dict[str, EnvVar] = {}

    def merge(name: str, description: str, required: bool) -> None:
        if not name:
            return
        existing = merged.get(name)
        if existing is None:
            merged[name] = EnvVar(name=name, description=description, required=required)
            return
        merged[name] = EnvVar(
            name=name,
            description=existing.description or description,
            required=existing.required or required,
        )

    for pkg in response.server.packages:
        for ev in pkg.environment_variables:
            merge(ev.name, ev.description, ev.is_required)

    for remote in response.server.remotes:
        for header in remote.headers:
            if not header.is_secret:
                continue
            merge(header.name, header.description, header.is_required)

    return list(merged.values())


def _sort_key(entry: Entry) -> str:
    return entry.name.lower()


class Catalog:
    """Merged, read-only collection of entries.

    ABOUTME: Built once per source selection and never mutated in place
    ABOUTME: Every accessor returns a freshly sorted list
    """

    def __init__(self, entries: list[Entry] | None = None) -> None:
        self._entries: tuple[Entry, ...] = tuple(entries or ())

    def all(self) -> list[Entry]:
        return sorted(self._entries, key=_sort_key)

    def by_source(self, source: Source) -> list[Entry]:
        return sorted((e for e in self._entries if e.source == source), key=_sort_key)

    def search(self, query: str) -> list[Entry]:
        """Case-insensitive substring match on name, display name or description."""
        if query == "":
            return self.all()
        q = query.lower()
        results = [
            e for e in self._entries
            if q in e.name.lower()
            or q in e.display_name().lower()
            or q in e.description().lower()
        ]
        return sorted(results, key=_sort_key)

    def find(self, name: str) -> Entry | None:
        wanted = name.lower()
        for entry in self._entries:
            if entry.name.lower() == wanted:
                return entry
        return None

    def count(self) -> int:
        return len(self._entries)


def merge(curated: list[Entry], registry: list[Entry]) -> Catalog:
    """Build a catalog where curated entries win on case-insensitive name collision.

    Examples:
        >>> cat = merge([from_curated(Service(name="Sentry"))], registry_entries)
        >>> cat.find("sentry").source
        'curated'
    """
    seen: set[str] = set()
    merged: list[Entry] = []

    for entry in curated:
        seen.add(entry.name.lower())
        merged.append(entry)

    for entry in registry:
        key = entry.name.lower()
        if key in seen:
            continue
        seen.add(key)
        merged.append(entry)

    return Catalog(merged)


def entry_to_service(entry: Entry) -> Service | None:
    """Convert a catalog entry into an installable Service.

    ABOUTME: Curated entries return their definition unchanged
    ABOUTME: Registry entries prefer a remote transport, then a package
    ABOUTME: Returns None when no supported install method exists
    """
    if entry.source == SOURCE_CURATED:
        return entry.curated
    if entry.registry is None:
        return None

    server = entry.registry.server
    env = env_vars_from_registry(entry.registry)

    for remote in server.remotes:
        transport = remote.type.strip().lower()
        if transport == "streamable-http":
            transport = "http"
        if transport not in ("http", "sse") or not remote.url:
            continue
        headers = {}
        for header in remote.headers:
            if not header.name:
                continue
            if header.is_secret:
                headers[header.name] = "${" + header.name + "}"
            elif header.value or header.default:
                headers[header.name] = header.value or header.default
        return Service(
            name=server.name,
            description=server.description,
            transport=transport,
            url=remote.url,
            env=env,
            headers=headers,
        )

    for pkg in server.packages:
        if pkg.transport.type and pkg.transport.type != "stdio":
            continue
        command_args = _package_command(pkg.registry_type, pkg.identifier, pkg.version, pkg.runtime_hint)
        if command_args is None:
            continue
        command, args = command_args
        return Service(
            name=server.name,
            description=server.description,
            transport="stdio",
            command=command,
            args=args,
            env=env,
        )

    return None


def _package_command(
    registry_type: str, identifier: str, version: str, runtime_hint: str
) -> tuple[str, list[str]] | None:
    if not identifier:
        return None
    kind = registry_type.strip().lower()
    if kind == "npm":
        spec = f"{identifier}@{version}" if version else identifier
        return runtime_hint or "npx", ["-y", spec]
    if kind == "pypi":
        spec = f"{identifier}=={version}" if version else identifier
        return runtime_hint or "uvx", [spec]
    if kind == "oci":
        return runtime_hint or "docker", ["run", "-i", "--rm", identifier]
    return None
