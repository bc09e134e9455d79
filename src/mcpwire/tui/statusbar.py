# Key hint line at the bottom of the wizard
from mcpwire.tui.screen import KeyHint
from mcpwire.tui.theme import Theme


def render_status_bar(theme: Theme, hints: list[KeyHint]) -> str:
    parts = [f"{theme.status_key.render(h.key)} {h.desc}" for h in hints]
    return theme.status_bar.render("  ".join(parts))
