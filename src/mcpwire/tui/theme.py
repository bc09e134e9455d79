# Terminal styling for the wizard
import os
from dataclasses import dataclass

# ABOUTME: Terminal codes for interactive UI
RESET = "\033[0m"
BOLD = "1"
GREEN = "32"
YELLOW = "33"
RED = "31"
CYAN = "36"
BLUE = "34"
GREY = "90"
WHITE = "97"
BG_BLUE = "44"

# ABOUTME: Content area height used before the terminal size is known
CONTENT_HEIGHT = 13

# ABOUTME: Title bar + separator + status bar
CHROME_LINES = 3


@dataclass(frozen=True)
class Style:
    """ANSI SGR style; renders plain text when disabled."""
    codes: tuple[str, ...] = ()
    enabled: bool = True

    def render(self, text: str, width: int = 0) -> str:
        if width > 0 and len(text) < width:
            text = text.ljust(width)
        if not self.enabled or not self.codes:
            return text
        return f"\033[{';'.join(self.codes)}m{text}{RESET}"


@dataclass(frozen=True)
class Theme:
    title: Style
    active: Style
    completed: Style
    dim: Style
    warning: Style
    error: Style
    normal: Style
    status_bar: Style
    status_key: Style
    cursor: Style
    selected: Style
    bread_sep: Style
    highlight: Style
    separator: Style


def new_theme(color: bool | None = None) -> Theme:
    """Build the default palette.

    ABOUTME: color=None honours the NO_COLOR convention
    """
    if color is None:
        color = "NO_COLOR" not in os.environ

    def style(*codes: str) -> Style:
        return Style(codes=codes, enabled=color)

    return Theme(
        title=style(BOLD),
        active=style(BOLD, CYAN),
        completed=style(GREEN),
        dim=style(GREY),
        warning=style(YELLOW),
        error=style(RED),
        normal=style(),
        status_bar=style(GREY),
        status_key=style(BOLD, GREY),
        cursor=style(BOLD, CYAN),
        selected=style(GREEN),
        bread_sep=style(GREY),
        highlight=style(BOLD, WHITE, BG_BLUE),
        separator=style(BLUE),
    )


def content_height_from_terminal(term_height: int) -> int:
    if term_height <= 0:
        return CONTENT_HEIGHT
    return max(term_height - CHROME_LINES, 1)


def render_choices(theme: Theme, labels: list[str], cursor: int, width: int) -> str:
    """Render a horizontal choice row such as [Apply]  Cancel."""
    parts = []
    for i, label in enumerate(labels):
        if i == cursor:
            if width > 0:
                parts.append(theme.highlight.render(f" {label} "))
            else:
                parts.append(theme.cursor.render(f"[{label}]"))
        else:
            parts.append(theme.dim.render(f" {label} "))
    return "  " + "  ".join(parts)


def render_option(theme: Theme, label: str, is_cursor: bool, width: int) -> str:
    """One row of a vertical list, highlighted when under the cursor."""
    if not is_cursor:
        return "    " + label
    line = "  ❯ " + label
    if width > 0:
        return theme.highlight.render(line, width)
    return theme.cursor.render(line)


def more_indicator(theme: Theme, remaining: int) -> str:
    return theme.dim.render(f"  ▼ ... {remaining} more")
