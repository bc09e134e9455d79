# ABOUTME: Utility modules for mcp-wire
# ABOUTME: Exports placeholder substitution, backup, and validation functions

from mcpwire.utils.backup import create_backup, get_backup_dir
from mcpwire.utils.env import substitute_env_vars, substitute_headers
from mcpwire.utils.validation import (
    ValidationError,
    has_errors,
    validate_command_exists,
    validate_service,
)

__all__ = [
    "substitute_env_vars",
    "substitute_headers",
    "ValidationError",
    "has_errors",
    "validate_command_exists",
    "validate_service",
    "create_backup",
    "get_backup_dir",
]
