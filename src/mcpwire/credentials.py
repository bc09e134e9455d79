# Credential lookup and storage
# ABOUTME: Values are resolved from the process environment, then the credential file
# ABOUTME: The credential file holds KEY=VALUE lines and is kept at mode 0600
import logging
import os
from pathlib import Path
from typing import Protocol, runtime_checkable

from mcpwire.config import get_home_dir
from mcpwire.models import EnvVar, Service

logger = logging.getLogger(__name__)

CREDENTIALS_FILE_NAME = "credentials"


class StoreNotSupportedError(Exception):
    """Raised by sources that cannot persist values."""


@runtime_checkable
class CredentialSource(Protocol):
    @property
    def name(self) -> str:
        ...

    def get(self, env_name: str) -> str | None:
        ...

    def store(self, env_name: str, value: str) -> None:
        ...


class EnvSource:
    """Reads credentials from os.environ."""

    @property
    def name(self) -> str:
        return "environment"

    def get(self, env_name: str) -> str | None:
        key = env_name.strip()
        if not key:
            return None
        return os.environ.get(key)

    def store(self, env_name: str, value: str) -> None:
        raise StoreNotSupportedError("Environment variables cannot be stored")


def get_credentials_path() -> Path:
    return get_home_dir() / CREDENTIALS_FILE_NAME


class FileSource:
    """Credential store backed by a KEY=VALUE file.

    ABOUTME: Blank lines and # comments are ignored on read
    ABOUTME: Writes keep keys sorted and force mode 0600
    """

    def __init__(self, path: Path | None = None) -> None:
        self._path = path if path else get_credentials_path()

    @property
    def name(self) -> str:
        return "file"

    @property
    def path(self) -> Path:
        return self._path

    def get(self, env_name: str) -> str | None:
        key = env_name.strip()
        if not key:
            return None
        try:
            entries = self._read_all()
        except OSError as e:
            logger.warning(f"Cannot read credentials file {self._path}: {e}")
            return None
        return entries.get(key)

    def store(self, env_name: str, value: str) -> None:
        """Save or update one credential.

        Raises:
            ValueError: If env_name is empty
            OSError: If the file cannot be written
        """
        key = env_name.strip()
        if not key:
            raise ValueError("Environment variable name is required")

        entries = self._read_all()
        entries[key] = value
        self._write_all(entries)
        logger.info(f"Stored credential {key} in {self._path}")

    def delete_many(self, env_names: list[str]) -> int:
        """Remove the given keys and return how many were present.

        The file is only rewritten when something was removed.
        """
        if not env_names or not self._path.exists():
            return 0

        entries = self._read_all()
        removed = 0
        for raw in env_names:
            key = raw.strip()
            if key and key in entries:
                del entries[key]
                removed += 1

        if removed:
            self._write_all(entries)
            logger.info(f"Removed {removed} credential(s) from {self._path}")
        return removed

    def _read_all(self) -> dict[str, str]:
        entries: dict[str, str] = {}
        if not self._path.exists():
            return entries

        with open(self._path, encoding="utf-8") as f:
            for raw_line in f:
                line = raw_line.strip()
                if not line or line.startswith("#"):
                    continue
                key, sep, value = line.partition("=")
                if not sep or not key.strip():
                    continue
                entries[key.strip()] = value.strip()
        return entries

    def _write_all(self, entries: dict[str, str]) -> None:
        self._path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        content = "".join(f"{key}={entries[key]}\n" for key in sorted(entries))

        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.chmod(self._path, 0o600)


class Resolver:
    """Looks a credential up in each source, in order."""

    def __init__(self, sources: list[CredentialSource]) -> None:
        self._sources = list(sources)

    def resolve(self, env_name: str) -> tuple[str, str] | None:
        """Return (value, source name) or None when no source has it."""
        key = env_name.strip()
        if not key:
            return None
        for source in self._sources:
            value = source.get(key)
            if value is not None:
                return value, source.name
        return None


def default_resolver(file_source: FileSource | None = None) -> Resolver:
    return Resolver([EnvSource(), file_source if file_source else FileSource()])


def unresolved_required(service: Service, resolver: Resolver) -> tuple[dict[str, str], list[EnvVar]]:
    """Split a service's env vars into resolved values and missing required ones.

    ABOUTME: Optional variables that cannot be resolved are left out entirely
    ABOUTME: Each name is considered once, in declaration order

    Returns:
        (resolved values by name, required EnvVars still missing)
    """
    resolved: dict[str, str] = {}
    missing: list[EnvVar] = []
    seen: set[str] = set()

    for env_var in service.env:
        name = env_var.name.strip()
        if not name or name in seen:
            continue
        seen.add(name)

        found = resolver.resolve(name)
        if found is not None:
            resolved[name] = found[0]
        elif env_var.required:
            missing.append(env_var)

    return resolved, missing


def remove_stored_credentials(names: list[str], file_source: FileSource | None = None) -> int:
    """Delete credentials from the file store.

    Returns:
        Number of credentials actually removed

    Raises:
        OSError: If the credentials file cannot be rewritten
    """
    source = file_source if file_source else FileSource()
    return source.delete_many(names)
