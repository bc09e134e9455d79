# Claude Code target adapter
import shutil
from pathlib import Path
from typing import Any

from mcpwire.models import Service
from mcpwire.targets.base import (
    JsonConfigTarget,
    Which,
    normalize_env,
    require_transport,
    service_headers,
)

PROJECT_FILE = ".mcp.json"


class ClaudeCodeTarget(JsonConfigTarget):
    """Adapter for Claude Code.

    ABOUTME: User scope lives in ~/.claude.json under 'mcpServers'
    ABOUTME: Project scope lives in <project>/.mcp.json
    """

    binary = "claude"

    def __init__(
        self,
        config_path: Path | None = None,
        project_dir: Path | None = None,
        which: Which = shutil.which,
    ) -> None:
        super().__init__(
            config_path if config_path else Path.home() / ".claude.json",
            project_dir,
            which,
        )

    @property
    def name(self) -> str:
        return "Claude Code"

    @property
    def slug(self) -> str:
        return "claude"

    def project_config_path(self, project_dir: Path) -> Path:
        return project_dir / PROJECT_FILE

    def build_server_config(self, service: Service, resolved_env: dict[str, str]) -> dict[str, Any]:
        """Entry shaped as {"type": ..., "url"/"command", ...}."""
        transport = require_transport(service, ("http", "sse", "stdio"))
        entry: dict[str, Any] = {"type": transport}

        if transport == "stdio":
            entry["command"] = service.command.strip()
            if service.args:
                entry["args"] = list(service.args)
            env = normalize_env(resolved_env)
            if env:
                entry["env"] = env
        else:
            entry["url"] = service.url.strip()
            headers = service_headers(service, resolved_env)
            if headers:
                entry["headers"] = headers

        return entry

    def oauth_hint(self) -> str:
        return "Run /mcp in Claude Code to authenticate"
