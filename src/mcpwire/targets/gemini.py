# Gemini CLI target adapter
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


class GeminiTarget(JsonConfigTarget):
    """Adapter for Gemini CLI (~/.gemini/settings.json).

    ABOUTME: Streamable HTTP servers use 'httpUrl', SSE servers use 'url'
    ABOUTME: Entries carry no 'type' field
    """

    binary = "gemini"

    def __init__(
        self,
        config_path: Path | None = None,
        project_dir: Path | None = None,
        which: Which = shutil.which,
    ) -> None:
        super().__init__(
            config_path if config_path else Path.home() / ".gemini" / "settings.json",
            project_dir,
            which,
        )

    @property
    def name(self) -> str:
        return "Gemini CLI"

    @property
    def slug(self) -> str:
        return "gemini"

    def project_config_path(self, project_dir: Path) -> Path:
        return project_dir / ".gemini" / "settings.json"

    def build_server_config(self, service: Service, resolved_env: dict[str, str]) -> dict[str, Any]:
        transport = require_transport(service, ("http", "sse", "stdio"))
        entry: dict[str, Any] = {}

        if transport == "stdio":
            entry["command"] = service.command.strip()
            if service.args:
                entry["args"] = list(service.args)
            env = normalize_env(resolved_env)
            if env:
                entry["env"] = env
            return entry

        entry["httpUrl" if transport == "http" else "url"] = service.url.strip()
        headers = service_headers(service, resolved_env)
        if headers:
            entry["headers"] = headers
        return entry

    def oauth_hint(self) -> str:
        return "Run /mcp auth in Gemini CLI to authenticate"
