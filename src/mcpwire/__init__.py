# mcp-wire - Install MCP services into AI coding assistants
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models and catalog helpers
from mcpwire.catalog import Catalog, Entry, entry_to_service, merge
from mcpwire.config import Config, get_home_dir, load_config
from mcpwire.models import EnvVar, ScopedTarget, Service, Target

__all__ = [
    "__version__",
    "Catalog",
    "Config",
    "Entry",
    "EnvVar",
    "ScopedTarget",
    "Service",
    "Target",
    "entry_to_service",
    "get_home_dir",
    "load_config",
    "merge",
]
