# Configuration loading and feature flags for mcp-wire
import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

# ABOUTME: Environment variable that relocates the mcp-wire home directory
HOME_ENV_VAR = "MCP_WIRE_HOME"

CONFIG_FILE_NAME = "config.json"


@dataclass(frozen=True)
class FeatureDefinition:
    name: str
    description: str
    default: bool


# ABOUTME: All known feature flags and their defaults
FEATURES: dict[str, FeatureDefinition] = {
    "registry": FeatureDefinition(
        name="registry",
        description="Community MCP Registry services in the catalog",
        default=False,
    ),
}


@dataclass
class Config:
    """mcp-wire settings loaded from config.json.

    ABOUTME: Unknown top-level keys are kept so saving never drops them
    """
    features: dict[str, bool] = field(default_factory=dict)
    extra: dict[str, object] = field(default_factory=dict)

    def is_feature_enabled(self, name: str) -> bool:
        """Return the explicit flag value, else the registered default.

        Unknown feature names are always disabled.
        """
        key = name.strip()
        if key in self.features:
            return self.features[key]
        definition = FEATURES.get(key)
        return definition.default if definition else False


def get_home_dir() -> Path:
    """Return the mcp-wire home directory.

    ABOUTME: Defaults to ~/.mcp-wire, overridable with MCP_WIRE_HOME
    ABOUTME: Directory may not exist yet - use ensure_home_dir() first
    """
    override = os.environ.get(HOME_ENV_VAR, "").strip()
    if override:
        return Path(override).expanduser()
    return Path.home() / ".mcp-wire"


def get_config_path() -> Path:
    return get_home_dir() / CONFIG_FILE_NAME


def ensure_home_dir() -> Path:
    """Create the home directory if it doesn't exist and return it."""
    home = get_home_dir()
    home.mkdir(parents=True, exist_ok=True)
    return home


def load_config(path: Path | None = None) -> Config:
    """Load mcp-wire config from JSON.

    ABOUTME: A missing file yields defaults rather than an error
    ABOUTME: Fail-fast on parse errors with clear error messages

    Args:
        path: Path to config.json (defaults to get_config_path())

    Returns:
        Parsed Config object

    Raises:
        ValueError: If the JSON is invalid or 'features' is malformed
    """
    config_path = path if path else get_config_path()
    if not config_path.exists():
        return Config()

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise ValueError(f"Config {config_path} must contain a JSON object")

    raw_features = data.pop("features", {})
    if not isinstance(raw_features, dict) or not all(
        isinstance(v, bool) for v in raw_features.values()
    ):
        raise ValueError(f"'features' in {config_path} must map names to true/false")

    return Config(features=dict(raw_features), extra=data)


def save_config(config: Config, path: Path | None = None) -> None:
    """Write config back to disk, creating the parent directory if needed."""
    config_path = path if path else get_config_path()
    data: dict[str, object] = dict(config.extra)
    data["features"] = dict(sorted(config.features.items()))

    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)
        f.write("\n")


def set_feature(name: str, enabled: bool, path: Path | None = None) -> Config:
    """Persist a feature flag.

    Raises:
        ValueError: If the feature name is unknown
    """
    key = name.strip()
    if key not in FEATURES:
        known = ", ".join(sorted(FEATURES))
        raise ValueError(f"Unknown feature '{name}' (known: {known})")

    config = load_config(path)
    config.features[key] = enabled
    save_config(config, path)
    logger.info(f"Feature '{key}' set to {enabled}")
    return config
