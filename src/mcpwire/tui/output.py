# Read-only output screen for the informational menu items
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd
from mcpwire.tui.theme import Theme, content_height_from_terminal, more_indicator


class OutputScreen:
    """Scrollable block of captured text; any other key returns to the menu."""

    screen_id = ScreenID.OUTPUT

    def __init__(self, theme: Theme, text: str, view_height: int) -> None:
        self.theme = theme
        self.lines = text.rstrip("\n").split("\n") if text else []
        self.view_height = view_height
        self.offset = 0

    def init(self) -> Cmd | None:
        return None

    def _max_offset(self) -> int:
        return max(len(self.lines) - self.view_height + 1, 0)

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.view_height = content_height_from_terminal(msg.height)
            self.offset = min(self.offset, self._max_offset())
            return None
        if not isinstance(msg, KeyMsg):
            return None
        if msg.key in ("up", "k"):
            self.offset = max(self.offset - 1, 0)
            return None
        if msg.key in ("down", "j"):
            self.offset = min(self.offset + 1, self._max_offset())
            return None
        return back_cmd

    def view(self) -> str:
        if len(self.lines) <= self.view_height:
            return "\n".join(self.lines)
        # last row is reserved for the scroll indicator
        visible = max(self.view_height - 1, 1)
        end = min(self.offset + visible, len(self.lines))
        shown = self.lines[self.offset:end]
        if end < len(self.lines):
            shown.append(more_indicator(self.theme, len(self.lines) - end))
        return "\n".join(shown)

    def status_hints(self) -> list[KeyHint]:
        return [KeyHint("↑↓", "scroll"), KeyHint("any key", "return to menu")]
