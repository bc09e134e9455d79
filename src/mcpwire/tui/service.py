# Service selection screen with live search
# ABOUTME: The catalog loads through a command so the screen renders immediately
# ABOUTME: A registry status poll refreshes every 0.5s until the status is empty
import itertools
import logging
from collections.abc import Callable
from dataclasses import dataclass

from mcpwire.catalog import SOURCE_CURATED, Catalog, Entry
from mcpwire.tui.screen import (
    Cmd,
    KeyHint,
    KeyMsg,
    Msg,
    ScreenID,
    WindowSizeMsg,
    back_cmd,
    batch,
    msg_cmd,
    tick,
)
from mcpwire.tui.textinput import TextInput
from mcpwire.tui.theme import Theme, content_height_from_terminal, more_indicator, render_option

logger = logging.getLogger(__name__)

# search input + count line + blank
HEADER_LINES = 3

SYNC_POLL_SECONDS = 0.5

_screen_serial = itertools.count(1)

LoadCatalogFn = Callable[[str], Catalog]
SyncStatusFn = Callable[[], str]


@dataclass(frozen=True)
class CatalogLoadedMsg:
    token: int
    catalog: Catalog | None = None
    error: Exception | None = None


@dataclass(frozen=True)
class SyncStatusMsg:
    token: int
    status: str


@dataclass(frozen=True)
class ServiceSelectMsg:
    entry: Entry


class ServiceScreen:
    """Searchable, scrollable list of catalog entries.

    ABOUTME: Each instance tags its async messages with a token and ignores
    ABOUTME: messages addressed to earlier instances
    """

    screen_id = ScreenID.SERVICE

    def __init__(
        self,
        theme: Theme,
        source: str,
        view_height: int,
        load_fn: LoadCatalogFn | None,
        sync_fn: SyncStatusFn | None,
    ) -> None:
        self.theme = theme
        self.source = source
        self.view_height = view_height
        self.width = 0
        self.search = TextInput(prompt="  Search > ", placeholder="type to filter...", char_limit=100)
        self.catalog: Catalog | None = None
        self.filtered: list[Entry] = []
        self.cursor = 0
        self.offset = 0
        self.show_markers = source == "all"
        self.sync_status = ""
        self.loading = True
        self.load_error: Exception | None = None
        self._load_fn = load_fn
        self._sync_fn = sync_fn
        self.token = next(_screen_serial)

    def init(self) -> Cmd | None:
        return batch(self._load_catalog_cmd(), self._tick_sync_status() if self._sync_fn else None)

    def _load_catalog_cmd(self) -> Cmd:
        load_fn = self._load_fn
        source = self.source
        token = self.token

        def run() -> CatalogLoadedMsg:
            if load_fn is None:
                return CatalogLoadedMsg(token=token)
            try:
                return CatalogLoadedMsg(token=token, catalog=load_fn(source))
            except Exception as e:
                logger.warning(f"Failed to load {source} catalog: {e}")
                return CatalogLoadedMsg(token=token, error=e)

        return run

    def _tick_sync_status(self) -> Cmd:
        sync_fn = self._sync_fn
        token = self.token
        return tick(SYNC_POLL_SECONDS, lambda: SyncStatusMsg(token=token, status=sync_fn() if sync_fn else ""))

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.view_height = content_height_from_terminal(msg.height)
            self.width = msg.width
            return None

        if isinstance(msg, CatalogLoadedMsg):
            if msg.token != self.token:
                return None
            self.loading = False
            if msg.error is not None:
                self.load_error = msg.error
                return None
            self.catalog = msg.catalog
            self._apply_filter()
            return None

        if isinstance(msg, SyncStatusMsg):
            if msg.token != self.token:
                return None
            if self.load_error is not None:
                # the cache may never finish loading after a failed catalog load
                self.sync_status = ""
                return None
            self.sync_status = msg.status
            return self._tick_sync_status() if msg.status else None

        if isinstance(msg, KeyMsg):
            if self.loading or self.load_error is not None:
                return back_cmd if msg.key == "esc" else None
            return self._handle_key(msg.key)

        return None

    def _handle_key(self, key: str) -> Cmd | None:
        if key == "up":
            if self.cursor > 0:
                self.cursor -= 1
                self._ensure_visible()
            return None
        if key == "down":
            if self.cursor < len(self.filtered) - 1:
                self.cursor += 1
                self._ensure_visible()
            return None
        if key == "enter":
            if 0 <= self.cursor < len(self.filtered):
                return msg_cmd(ServiceSelectMsg(entry=self.filtered[self.cursor]))
            return None
        if key == "esc":
            return back_cmd

        if self.search.handle_key(key):
            self._apply_filter()
        return None

    def _apply_filter(self) -> None:
        self.filtered = self.catalog.search(self.search.value) if self.catalog else []
        self.cursor = 0
        self.offset = 0

    def max_visible_entries(self) -> int:
        lines = self.view_height - HEADER_LINES
        if lines < 2:
            return 1
        return lines // 2

    def _ensure_visible(self) -> None:
        max_visible = self.max_visible_entries()
        if self.cursor >= self.offset + max_visible:
            self.offset = self.cursor - max_visible + 1
        if self.cursor < self.offset:
            self.offset = self.cursor

    def view(self) -> str:
        lines = [self.search.view(self.theme), self._count_line()]

        if self.loading:
            lines += ["", self.theme.dim.render("  Loading...")]
            return "\n".join(lines)
        if self.load_error is not None:
            lines += ["", self.theme.error.render(f"  Error: {self.load_error}")]
            return "\n".join(lines)
        if not self.filtered:
            lines += ["", self.theme.dim.render("  No matching services")]
            return "\n".join(lines)

        end = min(self.offset + self.max_visible_entries(), len(self.filtered))
        has_more = end < len(self.filtered)
        if has_more and end - self.offset > 1:
            # room for the scroll indicator
            end -= 1

        lines.append("")
        for i in range(self.offset, end):
            entry = self.filtered[i]
            name = entry.name
            if self.show_markers:
                name = ("* " if entry.source == SOURCE_CURATED else "  ") + name
            lines.append(render_option(self.theme, name, i == self.cursor, self.width))
            desc = entry.description()
            lines.append(self.theme.dim.render("      " + desc) if desc else "")

        if has_more:
            lines.append(more_indicator(self.theme, len(self.filtered) - end))
        return "\n".join(lines)

    def _count_line(self) -> str:
        if self.loading:
            return self.theme.dim.render("  Loading catalog...")
        if self.load_error is not None or self.catalog is None:
            return ""

        total = self.catalog.count()
        matched = len(self.filtered)
        if not self.search.value.strip() or matched == total:
            count = f"{total} services"
        else:
            count = f"{matched} matches"

        left = f"  {self.sync_status}" if self.sync_status else ""
        if self.width > 0:
            gap = max(self.width - len(left) - len(count), 1)
            return self.theme.dim.render(left + " " * gap + count)
        if left:
            return self.theme.dim.render(f"{left}  {count}")
        return self.theme.dim.render(f"  {count}")

    def status_hints(self) -> list[KeyHint]:
        if self.loading or self.load_error is not None:
            return [KeyHint("Esc", "back")]
        return [KeyHint("↑↓", "move"), KeyHint("Enter", "select"), KeyHint("Esc", "back")]
