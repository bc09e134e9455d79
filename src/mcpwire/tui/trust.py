# Confirmation screen for community registry entries
from dataclasses import dataclass

from mcpwire.catalog import SOURCE_REGISTRY, Entry
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.theme import Theme, render_choices

TRUST_CHOICES = ["No, go back", "Yes, proceed"]


@dataclass(frozen=True)
class TrustConfirmMsg:
    confirmed: bool


def entry_needs_confirmation(entry: Entry) -> bool:
    return entry.source == SOURCE_REGISTRY


class TrustScreen:
    """Shows registry metadata and asks before continuing.

    ABOUTME: Cursor starts on "No, go back"
    """

    screen_id = ScreenID.TRUST

    def __init__(self, theme: Theme, entry: Entry) -> None:
        self.theme = theme
        self.entry = entry
        self.cursor = 0
        self.width = 0

    def init(self) -> Cmd | None:
        return None

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            return None
        if not isinstance(msg, KeyMsg):
            return None
        if msg.key in ("left", "h") and self.cursor > 0:
            self.cursor -= 1
        elif msg.key in ("right", "l") and self.cursor < 1:
            self.cursor += 1
        elif msg.key == "enter":
            return msg_cmd(TrustConfirmMsg(confirmed=self.cursor == 1))
        elif msg.key == "esc":
            return back_cmd
        return None

    def _meta_line(self, label: str, value: str) -> str:
        return self.theme.dim.render(f"  {label}:") + "  " + value

    def view(self) -> str:
        entry = self.entry
        lines = ["", self.theme.warning.render("  ⚠ Registry Service (not curated by mcp-wire)"), ""]

        display_name = entry.display_name()
        description = entry.description()
        if display_name:
            lines.append("  " + self.theme.active.render(display_name))
        if description:
            lines.append("  " + description)
        if display_name or description:
            lines.append("")

        lines.append(self._meta_line("Source", f"{entry.source} (community, not vetted by mcp-wire)"))

        install_type = entry.install_type()
        if install_type:
            lines.append(self._meta_line("Install", install_type))

        if entry.has_packages() and entry.registry is not None:
            pkg = entry.registry.server.packages[0]
            identifier = f"{pkg.identifier}@{pkg.version}" if pkg.version else pkg.identifier
            lines.append(self._meta_line("Package", f"{pkg.registry_type} ({identifier})"))
            if pkg.runtime_hint:
                lines.append(self._meta_line("Runtime", pkg.runtime_hint))

        transport = entry.transport()
        if transport:
            lines.append(self._meta_line("Transport", transport))

        if entry.registry is not None and entry.registry.server.remotes:
            url = entry.registry.server.remotes[0].url
            if url:
                lines.append(self._meta_line("URL", self.theme.active.render(url)))

        secrets = [v.name for v in entry.env_vars() if v.required]
        if secrets:
            lines.append(self._meta_line("Secrets", ", ".join(secrets)))

        repo_url = entry.repository_url()
        if repo_url:
            lines.append(self._meta_line("Repo", repo_url))

        lines += [
            "",
            self.theme.warning.render("  Registry services are community-published. Review before proceeding."),
            "",
            "  Proceed with this registry service?",
            "",
            render_choices(self.theme, TRUST_CHOICES, self.cursor, self.width),
        ]
        return "\n".join(lines)

    def status_hints(self) -> list[KeyHint]:
        return [KeyHint("←→", "choose"), KeyHint("Enter", "confirm"), KeyHint("Esc", "back")]
