# Service source selection screen
from dataclasses import dataclass

from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.theme import Theme, render_option


@dataclass(frozen=True)
class SourceOption:
    label: str
    description: str
    value: str


SOURCE_OPTIONS = [
    SourceOption("Curated services", "Bundled with mcp-wire (recommended)", "curated"),
    SourceOption("Registry services", "Community MCP Registry", "registry"),
    SourceOption("Both", "Curated and registry combined", "all"),
]

SOURCE_LABELS = {"curated": "Curated", "registry": "Registry", "all": "Both"}


def source_value_label(source: str) -> str:
    return SOURCE_LABELS.get(source, source)


@dataclass(frozen=True)
class SourceSelectMsg:
    source: str


class SourceScreen:
    screen_id = ScreenID.SOURCE

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
        elif msg.key in ("down", "j") and self.cursor < len(SOURCE_OPTIONS) - 1:
            self.cursor += 1
        elif msg.key == "enter":
            return msg_cmd(SourceSelectMsg(source=SOURCE_OPTIONS[self.cursor].value))
        elif msg.key == "esc":
            return back_cmd
        return None

    def view(self) -> str:
        lines = [""]
        for i, opt in enumerate(SOURCE_OPTIONS):
            lines.append(render_option(self.theme, opt.label, i == self.cursor, self.width))
            lines.append(self.theme.dim.render("      " + opt.description))
        return "\n".join(lines) + "\n"

    def status_hints(self) -> list[KeyHint]:
        return [KeyHint("↑↓", "move"), KeyHint("Enter", "select"), KeyHint("Esc", "back")]
