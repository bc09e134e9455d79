# Curated service definitions: bundled JSON plus user overrides
# ABOUTME: Bundled definitions ship in mcpwire/data/services.json
# ABOUTME: ~/.mcp-wire/services/*.json override bundled ones by name
import json
import logging
from importlib import resources
from pathlib import Path
from typing import Any

from mcpwire.config import get_home_dir
from mcpwire.models import EnvVar, Service
from mcpwire.utils.validation import has_errors, validate_service

logger = logging.getLogger(__name__)

BUNDLED_FILE = "services.json"


def get_user_services_dir() -> Path:
    return get_home_dir() / "services"


def service_from_dict(data: dict[str, Any]) -> Service:
    """Build a Service from one JSON definition.

    ABOUTME: String fields are trimmed; transport is lower-cased
    ABOUTME: Raises ValueError on structurally invalid input

    Args:
        data: Decoded JSON object

    Returns:
        Service instance (not yet validated)
    """
    if not isinstance(data, dict):
        raise ValueError("Service definition must be a JSON object")

    env_data = data.get("env") or []
    if not isinstance(env_data, list):
        raise ValueError(f"'env' must be a list in service '{data.get('name', '')}'")

    env = []
    for item in env_data:
        if not isinstance(item, dict):
            raise ValueError(f"Invalid env entry in service '{data.get('name', '')}'")
        env.append(EnvVar(
            name=str(item.get("name", "")).strip(),
            description=str(item.get("description", "")).strip(),
            required=bool(item.get("required", False)),
            default=str(item.get("default", "")),
            setup_url=str(item.get("setup_url", "")).strip(),
            setup_hint=str(item.get("setup_hint", "")).strip(),
        ))

    args = data.get("args") or []
    headers = data.get("headers") or {}
    if not isinstance(args, list) or not isinstance(headers, dict):
        raise ValueError(f"Invalid args/headers in service '{data.get('name', '')}'")

    return Service(
        name=str(data.get("name", "")).strip(),
        description=str(data.get("description", "")).strip(),
        transport=str(data.get("transport", "")).strip().lower(),
        auth=str(data.get("auth", "")).strip(),
        url=str(data.get("url", "")).strip(),
        command=str(data.get("command", "")).strip(),
        args=[str(a) for a in args],
        env=env,
        headers={str(k): str(v) for k, v in headers.items()},
    )


def _parse_definitions(text: str, origin: str) -> list[dict[str, Any]]:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {origin}: {e}") from e

    # A file may hold one definition or a {"services": [...]} list
    if isinstance(data, dict) and "services" in data:
        data = data["services"]
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise ValueError(f"{origin} must contain a service object or list")


def _add_definitions(services: dict[str, Service], definitions: list[dict[str, Any]], origin: str) -> None:
    for raw in definitions:
        try:
            service = service_from_dict(raw)
        except ValueError as e:
            logger.warning(f"Skipping service in {origin}: {e}")
            continue

        errors = validate_service(service)
        for err in errors:
            if err.severity == "warning":
                logger.debug(f"{origin}: {err.server_name}: {err.message}")
        if has_errors(errors):
            messages = "; ".join(e.message for e in errors if e.severity == "error")
            logger.warning(f"Skipping invalid service '{service.name}' in {origin}: {messages}")
            continue

        services[service.name] = service


def load_bundled_services() -> dict[str, Service]:
    text = resources.files("mcpwire.data").joinpath(BUNDLED_FILE).read_text(encoding="utf-8")
    services: dict[str, Service] = {}
    _add_definitions(services, _parse_definitions(text, BUNDLED_FILE), BUNDLED_FILE)
    return services


def load_services(user_dir: Path | None = None, include_bundled: bool = True) -> dict[str, Service]:
    """Load curated services keyed by name.

    ABOUTME: Later definitions with the same name win (user over bundled)
    ABOUTME: Unreadable or invalid user files are skipped with a warning

    Args:
        user_dir: Directory of user *.json files (defaults to ~/.mcp-wire/services)
        include_bundled: Whether to start from the bundled definitions

    Returns:
        Mapping of service name to Service
    """
    services = load_bundled_services() if include_bundled else {}

    directory = user_dir if user_dir else get_user_services_dir()
    if not directory.is_dir():
        return services

    for path in sorted(directory.glob("*.json")):
        try:
            definitions = _parse_definitions(path.read_text(encoding="utf-8"), str(path))
        except (OSError, ValueError) as e:
            logger.warning(f"Skipping service file {path}: {e}")
            continue
        _add_definitions(services, definitions, str(path))

    logger.debug(f"Loaded {len(services)} curated services")
    return services
