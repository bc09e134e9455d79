# Credential prompt sub-flow for required environment variables
# ABOUTME: Walks the unresolved variables in order, one masked prompt each
# ABOUTME: Optionally offers to persist each value to the credential store
import logging
from collections.abc import Callable
from dataclasses import dataclass

from mcpwire.models import EnvVar
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, back_cmd, msg_cmd
from mcpwire.tui.textinput import TextInput
from mcpwire.tui.theme import Theme, render_choices

logger = logging.getLogger(__name__)

STATE_INPUT = "input"
STATE_SAVE = "save"

SAVE_CHOICES = ["No", "Yes"]

StoreCredentialFn = Callable[[str, str], None]
OpenURLFn = Callable[[str], None]


@dataclass(frozen=True)
class CredentialDoneMsg:
    resolved_env: dict[str, str]


class CredentialScreen:
    """Prompts for each missing variable and emits the merged environment.

    Args:
        theme: Styles for rendering
        missing: Required variables not resolved from any source, in order
        resolved: Values already resolved; entered values are merged over them
        store_fn: Persists a value; when None the save step is skipped
        open_url_fn: Opens a setup URL for ctrl+o; when None the key is ignored
    """

    screen_id = ScreenID.CREDENTIALS

    def __init__(
        self,
        theme: Theme,
        missing: list[EnvVar],
        resolved: dict[str, str] | None = None,
        store_fn: StoreCredentialFn | None = None,
        open_url_fn: OpenURLFn | None = None,
    ) -> None:
        self.theme = theme
        self.missing = list(missing)
        self.resolved = dict(resolved or {})
        self.entered: dict[str, str] = {}
        self.store_fn = store_fn
        self.open_url_fn = open_url_fn
        self.index = 0
        self.state = STATE_INPUT
        self.save_cursor = 0
        self.width = 0
        self.pending_value = ""
        self.input = TextInput(prompt="  Enter value: ", char_limit=500, masked=True)

    def init(self) -> Cmd | None:
        return self._done_cmd() if not self.missing else None

    def current(self) -> EnvVar | None:
        if 0 <= self.index < len(self.missing):
            return self.missing[self.index]
        return None

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            return None
        if not isinstance(msg, KeyMsg):
            return None
        if self.state == STATE_SAVE:
            return self._update_save(msg.key)
        return self._update_input(msg.key)

    def _update_input(self, key: str) -> Cmd | None:
        if key == "esc":
            return back_cmd
        if key == "ctrl+o":
            self._open_setup_url()
            return None
        if key == "enter":
            value = self.input.value.strip()
            if not value:
                return None
            self.pending_value = value
            if self.store_fn is None:
                return self._advance()
            self.state = STATE_SAVE
            self.save_cursor = 0
            return None
        self.input.handle_key(key)
        return None

    def _update_save(self, key: str) -> Cmd | None:
        if key in ("left", "h") and self.save_cursor > 0:
            self.save_cursor -= 1
        elif key in ("right", "l") and self.save_cursor < len(SAVE_CHOICES) - 1:
            self.save_cursor += 1
        elif key == "enter":
            if self.save_cursor == 1:
                self._store_pending()
            return self._advance()
        elif key == "esc":
            return self._advance()
        return None

    def _open_setup_url(self) -> None:
        var = self.current()
        if var is None or not var.setup_url or self.open_url_fn is None:
            return
        try:
            self.open_url_fn(var.setup_url)
        except Exception as e:
            logger.warning(f"Could not open {var.setup_url}: {e}")

    def _store_pending(self) -> None:
        var = self.current()
        if var is None or self.store_fn is None:
            return
        try:
            self.store_fn(var.name.strip(), self.pending_value)
        except Exception as e:
            logger.warning(f"Failed to store credential {var.name}: {e}")

    def _advance(self) -> Cmd | None:
        var = self.current()
        if var is not None:
            self.entered[var.name.strip()] = self.pending_value
        self.pending_value = ""
        self.index += 1
        self.state = STATE_INPUT
        self.save_cursor = 0
        self.input.reset()
        if self.current() is None:
            return self._done_cmd()
        return None

    def _done_cmd(self) -> Cmd:
        merged = dict(self.resolved)
        merged.update(self.entered)
        return msg_cmd(CredentialDoneMsg(resolved_env=merged))

    def view(self) -> str:
        var = self.current()
        if var is None:
            return ""

        header = f"  [{self.index + 1}/{len(self.missing)}] {var.name} required"
        if var.description:
            header += f" ({var.description})."
        lines = ["", self.theme.active.render(header), ""]

        if var.setup_url:
            lines.append(self.theme.dim.render("  URL:  ") + var.setup_url)
        if var.setup_hint:
            lines.append(self.theme.dim.render("  Hint: ") + var.setup_hint)
        if var.setup_url or var.setup_hint:
            lines.append("")

        if self.state == STATE_SAVE:
            lines += [
                self.theme.completed.render("  Value entered."),
                "",
                "  Save to credential store?",
                "",
                render_choices(self.theme, SAVE_CHOICES, self.save_cursor, self.width),
            ]
        else:
            lines.append(self.input.view(self.theme))
        return "\n".join(lines)

    def status_hints(self) -> list[KeyHint]:
        if self.state == STATE_SAVE:
            return [KeyHint("←→", "choose"), KeyHint("Enter", "confirm"), KeyHint("Esc", "skip")]
        hints = [KeyHint("Enter", "submit")]
        var = self.current()
        if var is not None and var.setup_url and self.open_url_fn is not None:
            hints.append(KeyHint("Ctrl+O", "open URL"))
        hints.append(KeyHint("Esc", "back"))
        return hints
