# Configuration scope selection screen
from dataclasses import dataclass

from mcpwire.models import SCOPE_PROJECT, SCOPE_USER, ConfigScope
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.theme import Theme, render_option


@dataclass(frozen=True)
class ScopeOption:
    label: str
    description: str
    value: ConfigScope


SCOPE_OPTIONS = [
    ScopeOption("User", "Apply to user/global configuration", SCOPE_USER),
    ScopeOption("Project", "Apply to current project only", SCOPE_PROJECT),
]


@dataclass(frozen=True)
class ScopeSelectMsg:
    scope: ConfigScope


def scope_label(scope: str) -> str:
    if scope == SCOPE_PROJECT:
        return "Project (current directory only)"
    if scope == SCOPE_USER:
        return "User (for targets that support it)"
    return scope


class ScopeScreen:
    screen_id = ScreenID.SCOPE

    def __init__(self, theme: Theme) -> None:
        self.theme = theme
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
        if msg.key in ("up", "k") and self.cursor > 0:
            self.cursor -= 1
        elif msg.key in ("down", "j") and self.cursor < len(SCOPE_OPTIONS) - 1:
            self.cursor += 1
        elif msg.key == "enter":
            return msg_cmd(ScopeSelectMsg(scope=SCOPE_OPTIONS[self.cursor].value))
        elif msg.key == "esc":
            return back_cmd
        return None

    def view(self) -> str:
        lines = [""]
        for i, opt in enumerate(SCOPE_OPTIONS):
            lines.append(render_option(self.theme, opt.label, i == self.cursor, self.width))
            lines.append(self.theme.dim.render("      " + opt.description))
        return "\n".join(lines) + "\n"

    def status_hints(self) -> list[KeyHint]:
        return [KeyHint("↑↓", "move"), KeyHint("Enter", "select"), KeyHint("Esc", "back")]
