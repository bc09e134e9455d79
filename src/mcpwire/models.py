# Core data models for mcp-wire
from dataclasses import dataclass, field
from typing import Literal, Protocol, runtime_checkable

# ABOUTME: Config scopes a target may support
ConfigScope = Literal["user", "project", "effective"]

SCOPE_USER: ConfigScope = "user"
SCOPE_PROJECT: ConfigScope = "project"
SCOPE_EFFECTIVE: ConfigScope = "effective"

Transport = Literal["http", "sse", "stdio"]


@dataclass(frozen=True)
class EnvVar:
    """Environment variable a service needs at install time.

    ABOUTME: Uses frozen dataclass so catalog views can share instances
    ABOUTME: setup_url/setup_hint are shown while prompting for the value
    """
    name: str
    description: str = ""
    required: bool = False
    default: str = ""
    setup_url: str = ""
    setup_hint: str = ""


@dataclass(frozen=True)
class Service:
    """Immutable MCP service definition.

    ABOUTME: Curated definitions load straight into this type
    ABOUTME: Registry entries are converted into it before install
    ABOUTME: Supports http, sse and stdio transports
    """
    name: str
    description: str = ""
    transport: str = "stdio"
    auth: str = ""
    url: str = ""
    command: str = ""
    args: list[str] = field(default_factory=list)
    env: list[EnvVar] = field(default_factory=list)
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def uses_oauth(self) -> bool:
        return self.auth.strip().lower() == "oauth"

    def env_names(self) -> list[str]:
        """Deduplicated, non-empty env var names in declaration order."""
        names: list[str] = []
        for env_var in self.env:
            name = env_var.name.strip()
            if name and name not in names:
                names.append(name)
        return names


@runtime_checkable
class Target(Protocol):
    """Protocol for AI tools that can hold MCP service configuration.

    ABOUTME: Defines interface all target adapters must implement
    ABOUTME: Uses @runtime_checkable for isinstance() support
    """

    @property
    def name(self) -> str:
        """Human-readable target name."""
        ...

    @property
    def slug(self) -> str:
        """CLI-friendly identifier used by --target."""
        ...

    def is_installed(self) -> bool:
        """Report whether the tool is available on this system."""
        ...

    def install(self, service: Service, resolved_env: dict[str, str]) -> None:
        """Write a service into the target's user configuration."""
        ...

    def uninstall(self, service_name: str) -> None:
        """Remove a service from the target's user configuration."""
        ...

    def list_services(self) -> list[str]:
        """Return names of configured services."""
        ...


@runtime_checkable
class ScopedTarget(Target, Protocol):
    """Target that can write to more than one configuration scope."""

    def supported_scopes(self) -> list[ConfigScope]:
        ...

    def install_with_scope(
        self, service: Service, resolved_env: dict[str, str], scope: ConfigScope
    ) -> None:
        ...

    def uninstall_with_scope(self, service_name: str, scope: ConfigScope) -> None:
        ...

    def list_with_scope(self, scope: ConfigScope) -> list[str]:
        ...


def supports_scope(target: Target, scope: ConfigScope) -> bool:
    """Check whether a target advertises the given scope."""
    if not isinstance(target, ScopedTarget):
        return False
    return scope in target.supported_scopes()


def any_target_supports_project_scope(targets: list[Target]) -> bool:
    return any(supports_scope(t, SCOPE_PROJECT) for t in targets)
