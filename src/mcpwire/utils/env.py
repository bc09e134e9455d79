# Placeholder substitution for service headers and arguments
import logging
import re

logger = logging.getLogger(__name__)

# ABOUTME: Pattern matches ${VAR_NAME} where VAR_NAME is uppercase with underscores
ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')


def substitute_env_vars(value: str, resolved_env: dict[str, str]) -> str:
    """Replace ${VAR} references with values from the resolved environment.

    ABOUTME: Only the resolved map is consulted, never os.environ
    ABOUTME: Unknown references are kept verbatim (logged at debug level)

    Args:
        value: String potentially containing ${VAR} references
        resolved_env: Credential values gathered for this install

    Returns:
        String with known references substituted

    Examples:
        >>> substitute_env_vars("Bearer ${API_TOKEN}", {"API_TOKEN": "abc"})
        'Bearer abc'
        >>> substitute_env_vars("Bearer ${MISSING}", {})
        'Bearer ${MISSING}'
    """
    def replace_var(match: re.Match[str]) -> str:
        var_name = match.group(1)
        if var_name in resolved_env:
            return resolved_env[var_name]
        logger.debug(f"No value for '{var_name}', keeping placeholder")
        return match.group(0)

    return ENV_VAR_PATTERN.sub(replace_var, value)


def substitute_headers(headers: dict[str, str], resolved_env: dict[str, str]) -> dict[str, str]:
    return {key: substitute_env_vars(val, resolved_env) for key, val in headers.items()}


def referenced_vars(value: str) -> list[str]:
    """Names referenced as ${VAR} in value, in order of appearance."""
    names: list[str] = []
    for match in ENV_VAR_PATTERN.finditer(value):
        if match.group(1) not in names:
            names.append(match.group(1))
    return names
