# ABOUTME: Validation of curated service definitions
# ABOUTME: Errors make a definition unusable; warnings are informational
import shutil
from dataclasses import dataclass
from urllib.parse import urlparse

from mcpwire.models import Service
from mcpwire.utils.env import referenced_vars

VALID_TRANSPORTS = ("http", "sse", "stdio")
VALID_AUTH = ("", "oauth", "header", "none")


@dataclass(frozen=True)
class ValidationError:
    """Represents a validation error or warning.

    ABOUTME: Uses frozen dataclass for immutability
    ABOUTME: Severity level distinguishes between blocking errors and warnings
    """
    server_name: str
    message: str
    severity: str  # 'error' or 'warning'


def validate_command_exists(command: str) -> ValidationError | None:
    """Check that a command is on PATH.

    ABOUTME: Uses shutil.which() for cross-platform command lookup

    Returns:
        ValidationError if command not found, None otherwise
    """
    if shutil.which(command) is None:
        return ValidationError(
            server_name="",
            message=f"Command not found: {command}",
            severity="warning"
        )
    return None


def validate_url(url: str) -> ValidationError | None:
    """Validate that a URL is properly formatted.

    ABOUTME: Requires HTTP or HTTPS scheme and a host
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return ValidationError(
            server_name="",
            message=f"URL must use HTTP or HTTPS scheme: {url}",
            severity="error"
        )
    if not parsed.netloc:
        return ValidationError(
            server_name="",
            message=f"URL missing host/domain: {url}",
            severity="error"
        )
    return None


def validate_service(service: Service) -> list[ValidationError]:
    """Validate a curated service definition.

    ABOUTME: Remote transports need a valid URL, stdio needs a command
    ABOUTME: Header placeholders must name a declared env var
    ABOUTME: Returns list of all validation errors/warnings

    Args:
        service: Service to check

    Returns:
        List of ValidationError instances (empty if valid)

    Examples:
        >>> validate_service(Service(name="x", transport="http", url="https://x.dev/mcp"))
        []
    """
    name = service.name
    errors: list[ValidationError] = []

    def add(message: str, severity: str = "error") -> None:
        errors.append(ValidationError(server_name=name, message=message, severity=severity))

    if not name.strip():
        add("Service name is required")

    transport = service.transport.strip().lower()
    if transport not in VALID_TRANSPORTS:
        add(f"Unsupported transport '{service.transport}' (expected one of {', '.join(VALID_TRANSPORTS)})")

    if service.auth.strip().lower() not in VALID_AUTH:
        add(f"Unsupported auth '{service.auth}'", "warning")

    if transport in ("http", "sse"):
        if not service.url:
            add(f"Transport '{transport}' requires a url")
        else:
            url_error = validate_url(service.url)
            if url_error:
                add(url_error.message)
    elif transport == "stdio":
        if not service.command:
            add("Transport 'stdio' requires a command")
        else:
            cmd_error = validate_command_exists(service.command)
            if cmd_error:
                add(cmd_error.message, cmd_error.severity)

    for env_var in service.env:
        if not env_var.name.strip():
            add("Environment variable with empty name")

    declared = set(service.env_names())
    for key, value in service.headers.items():
        for var_name in referenced_vars(value):
            if var_name not in declared:
                add(f"Header '{key}' references undeclared variable '{var_name}'", "warning")

    return errors


def has_errors(errors: list[ValidationError]) -> bool:
    return any(e.severity == "error" for e in errors)
