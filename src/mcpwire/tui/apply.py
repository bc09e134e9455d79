# Apply screen: runs install/uninstall against each selected target in turn
# ABOUTME: One target operation is outstanding at a time (the in-flight slot)
# ABOUTME: Failures are recorded per row and never stop the batch
import logging
from collections.abc import Callable
from dataclasses import dataclass

from mcpwire.models import ConfigScope, Service, Target
from mcpwire.tui.review import ACTION_INSTALL, equivalent_command
from mcpwire.tui.screen import Cmd, KeyHint, KeyMsg, Msg, ScreenID, WindowSizeMsg, msg_cmd
from mcpwire.tui.theme import Theme, render_choices, render_option

logger = logging.getLogger(__name__)

STATE_RUNNING = "running"
STATE_CRED_CLEANUP = "cred_cleanup"
STATE_DONE = "done"

STATUS_PENDING = "pending"
STATUS_RUNNING = "running"
STATUS_DONE = "done"
STATUS_FAILED = "failed"

POST_ANOTHER = "another"
POST_MENU = "menu"
POST_EXIT = "exit"

CLEANUP_CHOICES = ["No", "Yes"]


@dataclass
class TargetResult:
    name: str
    slug: str
    status: str = STATUS_PENDING
    error: str = ""
    auth_hint: str = ""


@dataclass(frozen=True)
class ApplyResultMsg:
    index: int
    error: str = ""
    auth_hint: str = ""


@dataclass(frozen=True)
class ApplyPostActionMsg:
    action: str


@dataclass
class ApplyCallbacks:
    """Operations the apply screen dispatches; any may be None."""
    install_target: Callable[[Service, dict[str, str], Target, ConfigScope], None] | None = None
    uninstall_target: Callable[[str, Target, ConfigScope], None] | None = None
    service_uses_oauth: Callable[[Service], bool] | None = None
    oauth_manual_hint: Callable[[Target], str] | None = None
    remove_stored_credentials: Callable[[list[str]], int] | None = None


class ApplyScreen:
    """Sequential per-target dispatch with a post-completion menu.

    ABOUTME: running -> [cred_cleanup] -> done
    ABOUTME: Results for any index other than the in-flight one are ignored
    """

    screen_id = ScreenID.APPLY

    def __init__(
        self,
        theme: Theme,
        action: str,
        service: Service,
        targets: tuple[Target, ...],
        scope: ConfigScope,
        resolved_env: dict[str, str] | None = None,
        callbacks: ApplyCallbacks | None = None,
    ) -> None:
        self.theme = theme
        self.action = action
        self.service = service
        self.targets = tuple(targets)
        self.scope = scope
        self.resolved_env = dict(resolved_env or {})
        self.callbacks = callbacks or ApplyCallbacks()
        self.results = [TargetResult(name=t.name, slug=t.slug) for t in self.targets]
        self.state = STATE_RUNNING
        self.in_flight: int | None = None
        self.has_failures = False
        self.cleanup_cursor = 0
        self.cleanup_message = ""
        self.cursor = 0
        self.width = 0

    def init(self) -> Cmd | None:
        if not self.targets:
            self.state = STATE_DONE
            return None
        return self._dispatch(0)

    def _dispatch(self, index: int) -> Cmd:
        self.in_flight = index
        self.results[index].status = STATUS_RUNNING

        target = self.targets[index]
        action = self.action
        service = self.service
        env = dict(self.resolved_env)
        scope = self.scope
        cb = self.callbacks

        def run() -> ApplyResultMsg:
            try:
                if action == ACTION_INSTALL:
                    if cb.install_target is None:
                        raise RuntimeError("install is not available")
                    cb.install_target(service, env, target, scope)
                else:
                    if cb.uninstall_target is None:
                        raise RuntimeError("uninstall is not available")
                    cb.uninstall_target(service.name, target, scope)
            except Exception as e:
                logger.error(f"{action} of {service.name} on {target.slug} failed: {e}")
                return ApplyResultMsg(index=index, error=str(e))

            hint = ""
            if action == ACTION_INSTALL:
                try:
                    if cb.service_uses_oauth is not None and cb.service_uses_oauth(service):
                        if cb.oauth_manual_hint is not None:
                            hint = cb.oauth_manual_hint(target)
                except Exception as e:
                    # the install itself succeeded; only the hint is lost
                    logger.warning(f"OAuth hint for {service.name} on {target.slug} failed: {e}")
                    hint = ""
            logger.info(f"{action} of {service.name} on {target.slug} succeeded")
            return ApplyResultMsg(index=index, auth_hint=hint)

        return run

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            return None
        if isinstance(msg, ApplyResultMsg):
            return self._handle_result(msg)
        if not isinstance(msg, KeyMsg):
            return None
        if self.state == STATE_CRED_CLEANUP:
            return self._update_cleanup(msg.key)
        if self.state == STATE_DONE:
            return self._update_done(msg.key)
        return None

    def _handle_result(self, msg: ApplyResultMsg) -> Cmd | None:
        if self.in_flight is None or msg.index != self.in_flight:
            return None
        if not 0 <= msg.index < len(self.results):
            return None

        self.in_flight = None
        row = self.results[msg.index]
        if msg.error:
            row.status = STATUS_FAILED
            row.error = msg.error
            self.has_failures = True
        else:
            row.status = STATUS_DONE
            row.auth_hint = msg.auth_hint

        next_index = msg.index + 1
        if next_index < len(self.results):
            return self._dispatch(next_index)

        if self._cleanup_applies():
            self.state = STATE_CRED_CLEANUP
            self.cleanup_cursor = 0
        else:
            self.state = STATE_DONE
        return None

    def _cleanup_applies(self) -> bool:
        return (
            self.action != ACTION_INSTALL
            and not self.has_failures
            and self.callbacks.remove_stored_credentials is not None
            and len(self.service.env_names()) > 0
        )

    def _update_cleanup(self, key: str) -> Cmd | None:
        if key in ("left", "h") and self.cleanup_cursor > 0:
            self.cleanup_cursor -= 1
        elif key in ("right", "l") and self.cleanup_cursor < len(CLEANUP_CHOICES) - 1:
            self.cleanup_cursor += 1
        elif key == "enter":
            if self.cleanup_cursor == 1:
                self._remove_credentials()
            self.state = STATE_DONE
        elif key == "esc":
            self.state = STATE_DONE
        return None

    def _remove_credentials(self) -> None:
        remove = self.callbacks.remove_stored_credentials
        if remove is None:
            return
        try:
            removed = remove(self.service.env_names())
        except Exception as e:
            logger.error(f"Error removing credentials for {self.service.name}: {e}")
            self.cleanup_message = f"Error removing credentials: {e}"
            return
        if removed > 0:
            self.cleanup_message = "Stored credentials removed."
        else:
            self.cleanup_message = "No stored credentials found."

    def post_action_labels(self) -> list[str]:
        another = "Install another" if self.action == ACTION_INSTALL else "Uninstall another"
        return [another, "Back to menu", "Exit"]

    def _update_done(self, key: str) -> Cmd | None:
        actions = [POST_ANOTHER, POST_MENU, POST_EXIT]
        if key in ("up", "k") and self.cursor > 0:
            self.cursor -= 1
        elif key in ("down", "j") and self.cursor < len(actions) - 1:
            self.cursor += 1
        elif key == "enter":
            return msg_cmd(ApplyPostActionMsg(action=actions[self.cursor]))
        elif key == "esc":
            return msg_cmd(ApplyPostActionMsg(action=POST_MENU))
        return None

    def done_header(self) -> str:
        failed = sum(1 for r in self.results if r.status == STATUS_FAILED)
        if self.results and failed == len(self.results):
            return "Operation failed."
        if failed:
            return "Completed with errors."
        return "Install complete!" if self.action == ACTION_INSTALL else "Uninstall complete!"

    def _row(self, row: TargetResult) -> str:
        installing = self.action == ACTION_INSTALL
        if row.status == STATUS_RUNNING:
            text = "configuring..." if installing else "removing..."
            return f"  {self.theme.active.render('◌')} {row.name:<14}{self.theme.dim.render(text)}"
        if row.status == STATUS_DONE:
            text = "configured" if installing else "removed"
            return f"  {self.theme.completed.render('✓')} {row.name:<14}{text}"
        if row.status == STATUS_FAILED:
            return f"  {self.theme.error.render('✗')} {row.name:<14}{self.theme.error.render(f'failed ({row.error})')}"
        return self.theme.dim.render(f"    {row.name}")

    def view(self) -> str:
        if self.state == STATE_RUNNING:
            heading = "Installing to targets..." if self.action == ACTION_INSTALL else "Removing from targets..."
            lines = ["", self.theme.active.render(f"  {heading}"), ""]
        else:
            style = self.theme.error if self.has_failures else self.theme.completed
            lines = ["", style.render(f"  {self.done_header()}"), ""]

        lines += [self._row(r) for r in self.results]

        hints = [r for r in self.results if r.auth_hint]
        if hints:
            lines.append("")
            for r in hints:
                lines.append(self.theme.warning.render(f"  [!] {r.name}: {r.auth_hint}"))

        if self.state == STATE_CRED_CLEANUP:
            lines += [
                "",
                "  Remove stored credentials?",
                "",
                render_choices(self.theme, CLEANUP_CHOICES, self.cleanup_cursor, self.width),
            ]
        elif self.state == STATE_DONE:
            if self.cleanup_message:
                lines += ["", self.theme.dim.render(f"  {self.cleanup_message}")]
            lines += [
                "",
                self.theme.dim.render("  Equivalent command:"),
                "  " + equivalent_command(self.action, self.service.name, self.targets, self.scope),
                "",
            ]
            for i, label in enumerate(self.post_action_labels()):
                lines.append(render_option(self.theme, label, i == self.cursor, self.width))
        return "\n".join(lines)

    def status_hints(self) -> list[KeyHint]:
        if self.state == STATE_CRED_CLEANUP:
            return [KeyHint("←→", "choose"), KeyHint("Enter", "confirm"), KeyHint("Esc", "skip")]
        if self.state == STATE_DONE:
            return [KeyHint("↑↓", "move"), KeyHint("Enter", "select"), KeyHint("Esc", "menu")]
        return [KeyHint("Ctrl+C", "quit")]
