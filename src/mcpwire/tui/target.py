# Target multi-select screen
from dataclasses import dataclass

from mcpwire.models import Target
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.theme import Theme


@dataclass(frozen=True)
class TargetSelectMsg:
    targets: tuple[Target, ...]


@dataclass
class TargetItem:
    target: Target
    installed: bool
    checked: bool = False


class TargetScreen:
    """Checkbox list of targets.

    ABOUTME: Installed targets sort first, then by slug
    ABOUTME: Only installed targets can be checked
    ABOUTME: Previously selected targets start checked
    """

    screen_id = ScreenID.TARGET

    def __init__(self, theme: Theme, all_targets: list[Target], pre_selected: tuple[Target, ...] = ()) -> None:
        self.theme = theme
        self.cursor = 0
        self.width = 0

        installed = {t.slug: t.is_installed() for t in all_targets}
        ordered = sorted(all_targets, key=lambda t: (not installed[t.slug], t.slug))
        pre_slugs = {t.slug for t in pre_selected}
        self.items = [
            TargetItem(target=t, installed=installed[t.slug], checked=installed[t.slug] and t.slug in pre_slugs)
            for t in ordered
        ]

    def init(self) -> Cmd | None:
        return None

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            return None
        if not isinstance(msg, KeyMsg):
            return None

        key = msg.key
        if key in ("up", "k") and self.cursor > 0:
            self.cursor -= 1
        elif key in ("down", "j") and self.cursor < len(self.items) - 1:
            self.cursor += 1
        elif key == " ":
            self._toggle_current()
        elif key == "a":
            for item in self.items:
                if item.installed:
                    item.checked = True
        elif key == "n":
            for item in self.items:
                item.checked = False
        elif key == "enter":
            selected = self.selected_targets()
            if selected:
                return msg_cmd(TargetSelectMsg(targets=tuple(selected)))
        elif key == "esc":
            return back_cmd
        return None

    def _toggle_current(self) -> None:
        if 0 <= self.cursor < len(self.items):
            item = self.items[self.cursor]
            if item.installed:
                item.checked = not item.checked

    def selected_targets(self) -> list[Target]:
        return [item.target for item in self.items if item.checked]

    def view(self) -> str:
        lines = ["", "  Select targets:", ""]
        for i, item in enumerate(self.items):
            check = "[x]" if item.checked else "[ ]"
            label = f"{item.target.name} ({item.target.slug})"
            if not item.installed:
                lines.append(self.theme.dim.render(f"    {check} {label} (not installed)"))
            elif i == self.cursor:
                line = f"  ❯ {check} {label}"
                if self.width > 0:
                    lines.append(self.theme.highlight.render(line, self.width))
                else:
                    lines.append(self.theme.cursor.render(line))
            elif item.checked:
                lines.append(f"    {self.theme.selected.render(check)} {label}")
            else:
                lines.append(f"    {check} {label}")

        count = len(self.selected_targets())
        lines.append("")
        if count == 0:
            lines.append(self.theme.warning.render("  Select at least one target"))
        else:
            lines.append(self.theme.dim.render(f"  {count} target(s) selected"))
        return "\n".join(lines)

    def status_hints(self) -> list[KeyHint]:
        return [
            KeyHint("↑↓", "move"),
            KeyHint("Space", "toggle"),
            KeyHint("a", "all"),
            KeyHint("n", "none"),
            KeyHint("Enter", "confirm"),
            KeyHint("Esc", "back"),
        ]
