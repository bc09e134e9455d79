# Plain-text reports shared by the CLI and the wizard's output screen
# ABOUTME: Every writer takes an output stream so the wizard can capture it
import logging
from typing import TextIO

from mcpwire.catalog import SOURCE_CURATED, Entry
from mcpwire.models import SCOPE_EFFECTIVE, ConfigScope, Service, Target
from mcpwire.targets import list_target_services

logger = logging.getLogger(__name__)


def write_services_list(out: TextIO, services: dict[str, Service]) -> None:
    print("Available services:", file=out)
    print(file=out)

    if not services:
        print("  (none)", file=out)
        return

    names = sorted(services)
    width = max(len(name) for name in names)
    for name in names:
        description = services[name].description.strip()
        if description:
            print(f"  {name:<{width}}  {description}", file=out)
        else:
            print(f"  {name}", file=out)


def write_catalog_entries(out: TextIO, entries: list[Entry], show_source: bool) -> None:
    """List catalog entries; curated ones are marked with * when sources are mixed."""
    print("Available services:", file=out)
    print(file=out)

    if not entries:
        print("  (none)", file=out)
        return

    width = max(len(e.name) for e in entries)
    for entry in entries:
        marker = ""
        if show_source:
            marker = "* " if entry.source == SOURCE_CURATED else "  "
        description = entry.description().strip()
        if description:
            print(f"  {marker}{entry.name:<{width}}  {description}", file=out)
        else:
            print(f"  {marker}{entry.name}", file=out)

    if show_source:
        print(file=out)
        print("  * = curated by mcp-wire", file=out)


def write_targets_list(out: TextIO, targets: list[Target]) -> None:
    print("Targets:", file=out)
    print(file=out)

    if not targets:
        print("  (none)", file=out)
        return

    rows = sorted(((t.slug.strip(), t.name.strip(), t.is_installed()) for t in targets), key=lambda r: r[0])
    slug_width = max(len(r[0]) for r in rows)
    name_width = max(len(r[1]) for r in rows)
    for slug, name, installed in rows:
        status = "installed" if installed else "not found"
        print(f"  {slug:<{slug_width}}  {name:<{name_width}}  {status}", file=out)


def configured_services_by_target(
    targets: list[Target], scope: ConfigScope = SCOPE_EFFECTIVE
) -> tuple[dict[str, set[str]], dict[str, str]]:
    """Collect configured service names per target slug.

    Returns:
        (names by slug, error message by slug for targets that could not be read)
    """
    configured: dict[str, set[str]] = {}
    errors: dict[str, str] = {}
    for target in targets:
        try:
            names = list_target_services(target, scope)
        except Exception as e:
            logger.warning(f"Could not list services for {target.slug}: {e}")
            errors[target.slug] = str(e)
            continue
        configured[target.slug] = {n.strip() for n in names if n.strip()}
    return configured, errors


def write_status(
    out: TextIO, service_names: list[str], targets: list[Target], scope: ConfigScope = SCOPE_EFFECTIVE
) -> bool:
    """Print a service x target matrix of yes/no.

    Returns:
        False when any target could not be read
    """
    print("Status:", file=out)
    print(file=out)

    if not targets:
        print("  (no installed targets found)", file=out)
        return True
    if not service_names:
        print("  (no services found)", file=out)
        return True

    configured, errors = configured_services_by_target(targets, scope)
    ordered = sorted(targets, key=lambda t: t.slug)
    names = sorted(service_names)

    service_width = max(len("service"), *(len(n) for n in names))
    widths = [max(len(t.name), len("yes")) for t in ordered]

    header = f"  {'service':<{service_width}}"
    for target, width in zip(ordered, widths):
        header += f"  {target.name:<{width}}"
    print(header.rstrip(), file=out)

    for name in names:
        row = f"  {name:<{service_width}}"
        for target, width in zip(ordered, widths):
            if target.slug in errors:
                value = "?"
            else:
                value = "yes" if name in configured.get(target.slug, set()) else "no"
            row += f"  {value:<{width}}"
        print(row.rstrip(), file=out)

    if errors:
        print(file=out)
        for slug, message in sorted(errors.items()):
            print(f"  Error reading {slug}: {message}", file=out)
    return not errors
