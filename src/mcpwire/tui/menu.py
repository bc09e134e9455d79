# Main menu screen
from dataclasses import dataclass

from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, msg_cmd, quit_cmd
from mcpwire.tui.theme import Theme

INSTALL = "Install service"
UNINSTALL = "Uninstall service"
STATUS = "Status"
LIST_SERVICES = "List services"
LIST_TARGETS = "List targets"
EXIT = "Exit"

MENU_ITEMS = [INSTALL, UNINSTALL, STATUS, LIST_SERVICES, LIST_TARGETS, EXIT]


@dataclass(frozen=True)
class MenuSelectMsg:
    item: str


class MenuScreen:
    screen_id = ScreenID.MENU

    def __init__(self, theme: Theme) -> None:
        self.theme = theme
        self.cursor = 0

    def init(self) -> Cmd | None:
        return None

    def update(self, msg: Msg) -> Cmd | None:
        if not isinstance(msg, KeyMsg):
            return None
        if msg.key in ("up", "k") and self.cursor > 0:
            self.cursor -= 1
        elif msg.key in ("down", "j") and self.cursor < len(MENU_ITEMS) - 1:
            self.cursor += 1
        elif msg.key == "enter":
            return msg_cmd(MenuSelectMsg(item=MENU_ITEMS[self.cursor]))
        elif msg.key == "q":
            return quit_cmd
        return None

    def view(self) -> str:
        lines = [""]
        for i, item in enumerate(MENU_ITEMS):
            if i == self.cursor:
                lines.append("  " + self.theme.cursor.render("▸ " + item))
            else:
                lines.append("    " + item)
        return "\n".join(lines) + "\n"

    def status_hints(self) -> list[KeyHint]:
        return [
            KeyHint("↑↓", "navigate"),
            KeyHint("enter", "select"),
            KeyHint("q", "quit"),
        ]
