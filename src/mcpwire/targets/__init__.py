# ABOUTME: Target registry and scope-aware dispatch helpers
# ABOUTME: Exports all target adapters and lookup functions

import logging

from mcpwire.models import SCOPE_USER, ConfigScope, ScopedTarget, Service, Target
from mcpwire.targets.claude import ClaudeCodeTarget
from mcpwire.targets.codex import CodexTarget
from mcpwire.targets.gemini import GeminiTarget

logger = logging.getLogger(__name__)

__all__ = [
    "ClaudeCodeTarget",
    "CodexTarget",
    "GeminiTarget",
    "all_targets",
    "installed_targets",
    "find_target",
    "install_target",
    "uninstall_target",
    "list_target_services",
    "oauth_manual_hint",
    "service_uses_oauth",
]

DEFAULT_OAUTH_HINT = "Complete OAuth authentication in the tool"


def all_targets() -> list[Target]:
    """Fresh instances of every known target, in display order."""
    return [ClaudeCodeTarget(), CodexTarget(), GeminiTarget()]


def installed_targets(targets: list[Target] | None = None) -> list[Target]:
    return [t for t in (targets if targets is not None else all_targets()) if t.is_installed()]


def find_target(slug: str, targets: list[Target] | None = None) -> Target | None:
    wanted = slug.strip().lower()
    for target in targets if targets is not None else all_targets():
        if target.slug.lower() == wanted:
            return target
    return None


def install_target(
    service: Service, resolved_env: dict[str, str], target: Target, scope: ConfigScope
) -> None:
    """Install into a target, honouring scope when the target supports it.

    Raises:
        ValueError: If a non-user scope is requested from an unscoped target
    """
    if isinstance(target, ScopedTarget):
        target.install_with_scope(service, resolved_env, scope or SCOPE_USER)
        return
    if scope and scope != SCOPE_USER:
        raise ValueError(f"{target.name} does not support {scope} scope")
    target.install(service, resolved_env)


def uninstall_target(service_name: str, target: Target, scope: ConfigScope) -> None:
    if isinstance(target, ScopedTarget):
        target.uninstall_with_scope(service_name, scope or SCOPE_USER)
        return
    if scope and scope != SCOPE_USER:
        raise ValueError(f"{target.name} does not support {scope} scope")
    target.uninstall(service_name)


def list_target_services(target: Target, scope: ConfigScope | None = None) -> list[str]:
    if scope and isinstance(target, ScopedTarget):
        return target.list_with_scope(scope)
    return target.list_services()


def service_uses_oauth(service: Service) -> bool:
    return service.uses_oauth


def oauth_manual_hint(target: Target) -> str:
    """Instruction shown after installing an OAuth service into target."""
    hint = getattr(target, "oauth_hint", None)
    if callable(hint):
        return str(hint())
    return DEFAULT_OAUTH_HINT
