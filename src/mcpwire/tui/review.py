# Review screen summarising the pending install or uninstall
from dataclasses import dataclass

from mcpwire.catalog import Entry
from mcpwire.models import SCOPE_PROJECT, Target, any_target_supports_project_scope
from mcpwire.tui.scope import scope_label
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.source import source_value_label
from mcpwire.tui.theme import Theme, render_choices

REVIEW_CHOICES = ["Apply", "Cancel"]

ACTION_INSTALL = "install"
ACTION_UNINSTALL = "uninstall"


@dataclass(frozen=True)
class ReviewConfirmMsg:
    confirmed: bool


def equivalent_command(action: str, service_name: str, targets: tuple[Target, ...], scope: str) -> str:
    """CLI invocation that performs the same operation without the wizard.

    Examples:
        >>> equivalent_command("install", "sentry", (claude,), "project")
        'mcp-wire install sentry --target claude --scope project'
    """
    parts = ["mcp-wire", action, service_name]
    for target in targets:
        parts += ["--target", target.slug]
    if scope == SCOPE_PROJECT:
        parts += ["--scope", SCOPE_PROJECT]
    return " ".join(parts)


class ReviewScreen:
    screen_id = ScreenID.REVIEW

    def __init__(
        self,
        theme: Theme,
        action: str,
        entry: Entry,
        targets: tuple[Target, ...],
        scope: str = "",
        source: str = "",
        registry_enabled: bool = False,
    ) -> None:
        self.theme = theme
        self.action = action
        self.entry = entry
        self.targets = targets
        self.scope = scope
        self.source = source
        self.registry_enabled = registry_enabled
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
        elif msg.key in ("right", "l") and self.cursor < len(REVIEW_CHOICES) - 1:
            self.cursor += 1
        elif msg.key == "enter":
            return msg_cmd(ReviewConfirmMsg(confirmed=self.cursor == 0))
        elif msg.key == "esc":
            return back_cmd
        return None

    def _summary_line(self, label: str, value: str) -> str:
        return self.theme.dim.render(f"  {label + ':':<13}") + value

    def view(self) -> str:
        lines = ["", "  Summary", ""]

        if self.registry_enabled and self.source:
            lines.append(self._summary_line("Source", source_value_label(self.source)))

        description = self.entry.description()
        service = f"{self.entry.name} - {description}" if description else self.entry.name
        lines.append(self._summary_line("Service", service))
        lines.append(self._summary_line("Targets", ", ".join(t.name for t in self.targets)))

        if self.scope and any_target_supports_project_scope(list(self.targets)):
            lines.append(self._summary_line("Scope", scope_label(self.scope)))

        if self.action == ACTION_INSTALL:
            lines.append(self._summary_line("Credentials", "prompt as needed"))

        lines += [
            "",
            self.theme.dim.render("  Equivalent command:"),
            "  " + equivalent_command(self.action, self.entry.name, self.targets, self.scope),
            "",
            render_choices(self.theme, REVIEW_CHOICES, self.cursor, self.width),
        ]
        return "\n".join(lines)

    def status_hints(self) -> list[KeyHint]:
        return [KeyHint("←→", "choose"), KeyHint("Enter", "confirm"), KeyHint("Esc", "back")]
