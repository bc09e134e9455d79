# CLI interface for mcp-wire
import argparse
import getpass
import logging
import os
import sys
from typing import TextIO

from mcpwire import __version__
from mcpwire.catalog import SOURCE_CHOICES, SOURCE_REGISTRY, entry_to_service, from_registry
from mcpwire.config import FEATURES, ensure_home_dir, load_config, set_feature
from mcpwire.credentials import FileSource, default_resolver, remove_stored_credentials, unresolved_required
from mcpwire.models import SCOPE_EFFECTIVE, SCOPE_PROJECT, SCOPE_USER, ConfigScope, Service, Target
from mcpwire.registry import RegistryCache
from mcpwire.reports import write_catalog_entries, write_services_list, write_status, write_targets_list
from mcpwire.services import load_services
from mcpwire.targets import (
    all_targets,
    find_target,
    install_target,
    installed_targets,
    oauth_manual_hint,
    service_uses_oauth,
    uninstall_target,
)
from mcpwire.utils.validation import has_errors, validate_service
from mcpwire.wizard import load_catalog, run as run_wizard

logger = logging.getLogger(__name__)

# ABOUTME: Exit codes
# 0 = success, 1 = partial success, 2 = config error, 3 = fatal
EXIT_SUCCESS = 0
EXIT_PARTIAL = 1
EXIT_CONFIG_ERROR = 2
EXIT_FATAL = 3

LOG_FILE_NAME = "mcp-wire.log"
LOG_LEVEL_ENV_VAR = "MCP_WIRE_LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(verbose: bool = False) -> None:
    """Send logs to ~/.mcp-wire/mcp-wire.log.

    ABOUTME: The wizard owns the terminal, so nothing is logged to stderr
    ABOUTME: --verbose wins over MCP_WIRE_LOG_LEVEL, which wins over INFO
    """
    level_name = os.environ.get(LOG_LEVEL_ENV_VAR, "INFO").strip().upper()
    level = logging.DEBUG if verbose else getattr(logging, level_name, logging.INFO)
    try:
        log_path = ensure_home_dir() / LOG_FILE_NAME
        logging.basicConfig(filename=log_path, level=level, format=LOG_FORMAT)
    except OSError:
        logging.basicConfig(level=logging.WARNING, format=LOG_FORMAT)


def parse_scope(value: str | None) -> ConfigScope:
    """Normalise an install/uninstall --scope value.

    Raises:
        ValueError: If the scope is not user or project
    """
    scope = (value or "").strip().lower() or SCOPE_USER
    if scope not in (SCOPE_USER, SCOPE_PROJECT):
        raise ValueError(f"Invalid scope '{value}' (supported: user, project)")
    return scope  # type: ignore[return-value]


def resolve_targets(slugs: list[str] | None) -> list[Target]:
    """Pick targets from --target flags, defaulting to every installed one.

    Raises:
        ValueError: If a slug is unknown or not installed, or nothing is installed
    """
    wanted = [s.strip().lower() for s in slugs or [] if s.strip()]
    if not wanted:
        targets = installed_targets()
        if not targets:
            raise ValueError("No installed targets found")
        return targets

    targets: list[Target] = []
    seen: set[str] = set()
    for slug in wanted:
        if slug in seen:
            continue
        target = find_target(slug)
        if target is None:
            raise ValueError(f"Target '{slug}' is not known")
        if not target.is_installed():
            raise ValueError(f"Target '{slug}' is not installed")
        targets.append(target)
        seen.add(slug)
    return targets


def find_service(services: dict[str, Service], name: str, registry_enabled: bool = False) -> Service:
    """Find a curated service by name, falling back to the registry cache.

    Raises:
        ValueError: If no service matches
    """
    wanted = name.strip()
    if not wanted:
        raise ValueError("Service name is required")
    if wanted in services:
        return services[wanted]
    for key, service in services.items():
        if key.lower() == wanted.lower():
            return service

    if registry_enabled:
        cache = RegistryCache()
        cache.load()
        found = cache.find(wanted)
        if found is not None:
            service = entry_to_service(from_registry(found))
            if service is None:
                raise ValueError(f"Registry service '{wanted}' has no supported install method")
            return service

    if not services:
        raise ValueError(f"Service '{wanted}' not found (no service definitions available)")
    raise ValueError(f"Service '{wanted}' not found (available: {', '.join(sorted(services))})")


def ask_yes_no(prompt: str, stdin: TextIO, stdout: TextIO) -> bool:
    """Ask a [y/N] question; anything but y/yes counts as no."""
    stdout.write(prompt)
    stdout.flush()
    answer = stdin.readline().strip().lower()
    return answer in ("y", "yes")


def prompt_credentials(
    service: Service,
    file_source: FileSource,
    no_prompt: bool,
    stdin: TextIO | None = None,
    stdout: TextIO | None = None,
) -> dict[str, str]:
    """Resolve a service's env vars, prompting for missing required ones.

    Raises:
        ValueError: If a required value is missing and prompting is not possible
    """
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    resolved, missing = unresolved_required(service, default_resolver(file_source))
    if not missing:
        return resolved

    if no_prompt or not stdin.isatty():
        raise ValueError(f"Required credential '{missing[0].name}' not found and prompting is disabled")

    print(f"\nConfiguring: {service.name}\n", file=stdout)
    for env_var in missing:
        if env_var.description:
            print(f"  {env_var.name} is required ({env_var.description}).", file=stdout)
        else:
            print(f"  {env_var.name} is required.", file=stdout)
        if env_var.setup_url:
            print(f"  -> Create one here: {env_var.setup_url}", file=stdout)
        if env_var.setup_hint:
            print(f"     Tip: {env_var.setup_hint}", file=stdout)

        value = ""
        while not value:
            value = getpass.getpass("  Enter value: ").strip()
            if not value:
                print("  Value cannot be empty.", file=stdout)
        resolved[env_var.name] = value

        if ask_yes_no("  Save to credential store? [y/N]: ", stdin, stdout):
            file_source.store(env_var.name, value)
            print("  Saved.", file=stdout)
        print(file=stdout)

    return resolved


def exit_code_for(failures: int, total: int) -> int:
    if failures == 0:
        return EXIT_SUCCESS
    if failures == total:
        return EXIT_FATAL
    return EXIT_PARTIAL


def cmd_install(args: argparse.Namespace) -> int:
    """Execute install command.

    ABOUTME: Resolves the service and targets, prompts for missing credentials,
    ABOUTME: then installs into each target in order
    """
    print(f"mcp-wire install v{__version__}")
    print()

    try:
        scope = parse_scope(args.scope)
        config = load_config()
        service = find_service(load_services(), args.name, config.is_feature_enabled("registry"))

        problems = validate_service(service)
        for problem in problems:
            prefix = "Error" if problem.severity == "error" else "Warning"
            print(f"  {prefix}: {problem.message}")
        if has_errors(problems):
            print()
            print("Service definition is invalid. Fix errors above and try again.")
            return EXIT_CONFIG_ERROR

        targets = resolve_targets(args.target)
        resolved_env = prompt_credentials(service, FileSource(), args.no_prompt)
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL

    print(f"Installing to: {', '.join(t.name for t in targets)}")
    failures = 0
    for target in targets:
        try:
            install_target(service, resolved_env, target, scope)
        except Exception as e:
            logger.error(f"Install of {service.name} on {target.slug} failed: {e}")
            print(f"  {target.name}: failed ({e})")
            failures += 1
            continue
        print(f"  {target.name}: configured")
        if service_uses_oauth(service):
            print(f"     {oauth_manual_hint(target)}")

    return exit_code_for(failures, len(targets))


def maybe_remove_credentials(service_name: str, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
    """Offer to delete stored credentials for a known curated service."""
    stdin = stdin or sys.stdin
    stdout = stdout or sys.stdout
    if not stdin.isatty():
        return

    try:
        service = find_service(load_services(), service_name)
    except ValueError:
        return
    names = service.env_names()
    if not names:
        return

    if not ask_yes_no("\nRemove stored credentials for this service? [y/N]: ", stdin, stdout):
        return
    removed = remove_stored_credentials(names)
    if removed == 0:
        print("No stored credentials found.", file=stdout)
    else:
        print("Stored credentials removed.", file=stdout)


def cmd_uninstall(args: argparse.Namespace) -> int:
    """Execute uninstall command."""
    print(f"mcp-wire uninstall v{__version__}")
    print()

    try:
        scope = parse_scope(args.scope)
        name = args.name.strip()
        if not name:
            raise ValueError("Service name is required")
        targets = resolve_targets(args.target)
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    print(f"Uninstalling from: {', '.join(t.name for t in targets)}")
    failures = 0
    for target in targets:
        try:
            uninstall_target(name, target, scope)
        except Exception as e:
            logger.error(f"Uninstall of {name} from {target.slug} failed: {e}")
            print(f"  {target.name}: failed ({e})")
            failures += 1
            continue
        print(f"  {target.name}: removed")

    if failures:
        return exit_code_for(failures, len(targets))

    try:
        maybe_remove_credentials(name)
    except OSError as e:
        print(f"Error removing credentials: {e}")
        return EXIT_PARTIAL
    return EXIT_SUCCESS


def cmd_list(args: argparse.Namespace) -> int:
    """Execute list command."""
    if args.what == "targets":
        write_targets_list(sys.stdout, all_targets())
        return EXIT_SUCCESS

    try:
        config = load_config()
        source = args.source
        registry_enabled = config.is_feature_enabled("registry")
        if source != "curated" and not registry_enabled:
            print("Error: --source requires the registry feature (enable with: mcp-wire feature enable registry)")
            return EXIT_CONFIG_ERROR

        if source == "curated":
            write_services_list(sys.stdout, load_services())
            return EXIT_SUCCESS

        cache = RegistryCache()
        catalog = load_catalog(source, cache)
        entries = catalog.by_source(SOURCE_REGISTRY) if source == SOURCE_REGISTRY else catalog.all()
        write_catalog_entries(sys.stdout, entries, show_source=source == "all")
        status = cache.status_line()
        if status:
            print()
            print(status)
        return EXIT_SUCCESS
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_status(args: argparse.Namespace) -> int:
    """Execute status command.

    ABOUTME: Shows which curated services each installed target has configured
    """
    try:
        services = load_services()
    except (ValueError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR

    ok = write_status(sys.stdout, list(services), installed_targets(), args.scope)
    return EXIT_SUCCESS if ok else EXIT_PARTIAL


def cmd_feature(args: argparse.Namespace) -> int:
    """Execute feature command."""
    try:
        if args.action == "list":
            config = load_config()
            print("Feature flags:")
            print()
            width = max(len(name) for name in FEATURES)
            for name in sorted(FEATURES):
                status = "enabled" if config.is_feature_enabled(name) else "disabled"
                print(f"  {name:<{width}}  {status:<8}  {FEATURES[name].description}")
            return EXIT_SUCCESS

        enabled = args.action == "enable"
        set_feature(args.name, enabled)
        print(f"Feature '{args.name.strip()}' {'enabled' if enabled else 'disabled'}.")
        return EXIT_SUCCESS
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except OSError as e:
        print(f"Fatal error: {e}")
        return EXIT_FATAL


def cmd_wizard() -> int:
    """Start the interactive wizard when attached to a terminal."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        print("Error: the interactive wizard needs a terminal. Run 'mcp-wire --help' for commands.")
        return EXIT_CONFIG_ERROR

    try:
        run_wizard()
    except ValueError as e:
        print(f"Error: {e}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.exception("Wizard crashed")
        print(f"Fatal error: {e}")
        return EXIT_FATAL
    return EXIT_SUCCESS


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-wire",
        description="Install and remove MCP services across AI coding assistants"
    )
    parser.add_argument(
        "--version", "-V",
        action="version",
        version=f"mcp-wire v{__version__}"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Write debug logs to ~/.mcp-wire/mcp-wire.log"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # install command
    install_parser = subparsers.add_parser(
        "install",
        help="Install a service into one or more targets"
    )
    install_parser.add_argument("name", help="Service name")
    install_parser.add_argument(
        "--target",
        action="append",
        metavar="SLUG",
        help="Install to a specific target; can be repeated (default: all installed)"
    )
    install_parser.add_argument(
        "--scope",
        choices=[SCOPE_USER, SCOPE_PROJECT],
        default=SCOPE_USER,
        help="Config scope for targets that support it"
    )
    install_parser.add_argument(
        "--no-prompt",
        action="store_true",
        help="Fail when required credentials are missing instead of prompting"
    )

    # uninstall command
    uninstall_parser = subparsers.add_parser(
        "uninstall",
        help="Remove a service from one or more targets"
    )
    uninstall_parser.add_argument("name", help="Service name")
    uninstall_parser.add_argument(
        "--target",
        action="append",
        metavar="SLUG",
        help="Uninstall from a specific target; can be repeated (default: all installed)"
    )
    uninstall_parser.add_argument(
        "--scope",
        choices=[SCOPE_USER, SCOPE_PROJECT],
        default=SCOPE_USER,
        help="Config scope for targets that support it"
    )

    # list command
    list_parser = subparsers.add_parser(
        "list",
        help="List available services or known targets"
    )
    list_sub = list_parser.add_subparsers(dest="what", required=True)
    services_parser = list_sub.add_parser("services", help="List available service definitions")
    services_parser.add_argument(
        "--source",
        choices=list(SOURCE_CHOICES),
        default="curated",
        help="Filter by source (registry and all need the registry feature)"
    )
    list_sub.add_parser("targets", help="List known targets and their install status")

    # status command
    status_parser = subparsers.add_parser(
        "status",
        help="Show service status across installed targets"
    )
    status_parser.add_argument(
        "--scope",
        choices=[SCOPE_USER, SCOPE_PROJECT, SCOPE_EFFECTIVE],
        default=SCOPE_EFFECTIVE,
        help="Which configuration to inspect"
    )

    # feature command
    feature_parser = subparsers.add_parser(
        "feature",
        help="Manage feature flags"
    )
    feature_sub = feature_parser.add_subparsers(dest="action", required=True)
    feature_sub.add_parser("list", help="Show feature flags")
    enable_parser = feature_sub.add_parser("enable", help="Enable a feature")
    enable_parser.add_argument("name", help="Feature name")
    disable_parser = feature_sub.add_parser("disable", help="Disable a feature")
    disable_parser.add_argument("name", help="Feature name")

    return parser


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    ABOUTME: Parses args and dispatches to appropriate command
    ABOUTME: Returns exit code for sys.exit()
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "install":
        return cmd_install(args)
    elif args.command == "uninstall":
        return cmd_uninstall(args)
    elif args.command == "list":
        return cmd_list(args)
    elif args.command == "status":
        return cmd_status(args)
    elif args.command == "feature":
        return cmd_feature(args)
    else:
        return cmd_wizard()


if __name__ == "__main__":
    sys.exit(main())
