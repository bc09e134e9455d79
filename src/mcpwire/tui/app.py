# Wizard navigator: owns the wizard state and decides which screen is active
# ABOUTME: Screens report choices through messages; the navigator applies them
# ABOUTME: to an immutable WizardState and builds the next screen
import io
import logging
from collections.abc import Callable
from dataclasses import dataclass, field, replace
from typing import TextIO

from mcpwire.catalog import SOURCE_CURATED, Catalog, Entry
from mcpwire.models import SCOPE_USER, EnvVar, Service, Target, any_target_supports_project_scope
from mcpwire.tui.apply import POST_ANOTHER, POST_EXIT, ApplyCallbacks, ApplyPostActionMsg, ApplyScreen
from mcpwire.tui.breadcrumb import BreadcrumbStep, render_breadcrumb
from mcpwire.tui.credential import CredentialDoneMsg, CredentialScreen
from mcpwire.tui.menu import EXIT, INSTALL, LIST_SERVICES, LIST_TARGETS, STATUS, UNINSTALL, MenuScreen, MenuSelectMsg
from mcpwire.tui.output import OutputScreen
from mcpwire.tui.review import ACTION_INSTALL, ACTION_UNINSTALL, ReviewConfirmMsg, ReviewScreen
from mcpwire.tui.scope import ScopeScreen, ScopeSelectMsg
from mcpwire.tui.screen import BackMsg, Cmd, KeyMsg, Msg, Screen, ScreenID, WindowSizeMsg, quit_cmd
from mcpwire.tui.service import ServiceScreen, ServiceSelectMsg
from mcpwire.tui.source import SourceScreen, SourceSelectMsg, source_value_label
from mcpwire.tui.statusbar import render_status_bar
from mcpwire.tui.target import TargetScreen, TargetSelectMsg
from mcpwire.tui.theme import CONTENT_HEIGHT, Theme, content_height_from_terminal, new_theme
from mcpwire.tui.trust import TrustConfirmMsg, TrustScreen, entry_needs_confirmation

logger = logging.getLogger(__name__)

DEFAULT_WIDTH = 40

RenderFn = Callable[[TextIO], None]


@dataclass(frozen=True)
class WizardState:
    """Choices made so far in one pass through the wizard."""
    action: str = ""
    source: str = ""
    entry: Entry | None = None
    targets: tuple[Target, ...] = ()
    scope: str = ""


@dataclass
class Callbacks:
    """Collaborators the wizard calls out to. Missing ones degrade gracefully."""
    load_catalog: Callable[[str], Catalog] | None = None
    registry_sync_status: Callable[[], str] | None = None
    refresh_registry_entry: Callable[[Entry], Entry] | None = None
    catalog_entry_to_service: Callable[[Entry], Service | None] | None = None
    resolve_credentials: Callable[[Service], tuple[dict[str, str], list[EnvVar]]] | None = None
    store_credential: Callable[[str, str], None] | None = None
    open_url: Callable[[str], None] | None = None
    all_targets: Callable[[], list[Target]] | None = None
    render_status: RenderFn | None = None
    render_services_list: RenderFn | None = None
    render_targets_list: RenderFn | None = None
    registry_enabled: bool = False
    apply: ApplyCallbacks = field(default_factory=ApplyCallbacks)


# Breadcrumb order; the trust screen shares the service step
STEP_ORDER = [
    ScreenID.SOURCE,
    ScreenID.SERVICE,
    ScreenID.TARGET,
    ScreenID.SCOPE,
    ScreenID.REVIEW,
    ScreenID.CREDENTIALS,
    ScreenID.APPLY,
]

STEP_LABELS = {
    ScreenID.SOURCE: "Source",
    ScreenID.SERVICE: "Service",
    ScreenID.TARGET: "Targets",
    ScreenID.SCOPE: "Scope",
    ScreenID.REVIEW: "Review",
    ScreenID.CREDENTIALS: "Credentials",
    ScreenID.APPLY: "Apply",
}


def render_to_output(fn: RenderFn | None) -> str:
    """Capture a report writer into a string for the output screen."""
    if fn is None:
        return "(not available)"
    buf = io.StringIO()
    try:
        fn(buf)
    except Exception as e:
        logger.error(f"Report failed: {e}")
        return f"Error: {e}"
    return buf.getvalue()


def targets_summary(targets: tuple[Target, ...]) -> str:
    if not targets:
        return ""
    if len(targets) == 1:
        return targets[0].name
    return f"{targets[0].name} +{len(targets) - 1}"


class WizardModel:
    """Top-level model driven by the program loop.

    Args:
        callbacks: Collaborators for catalog, credentials, targets and reports
        version: Shown in the title bar
        theme: Styles; defaults to new_theme()
    """

    def __init__(self, callbacks: Callbacks | None = None, version: str = "", theme: Theme | None = None) -> None:
        self.callbacks = callbacks or Callbacks()
        self.version = version
        self.theme = theme or new_theme()
        self.state = WizardState()
        self.width = 0
        self.height = 0
        self.pending_service: Service | None = None
        self.screen: Screen = MenuScreen(self.theme)

    def init(self) -> Cmd | None:
        return self.screen.init()

    def content_height(self) -> int:
        if self.height > 0:
            return content_height_from_terminal(self.height)
        return CONTENT_HEIGHT

    def _go(self, screen: Screen) -> Cmd | None:
        self.screen = screen
        if self.width > 0 or self.height > 0:
            screen.update(WindowSizeMsg(width=self.width, height=self.height))
        return screen.init()

    def _reset_to_menu(self) -> Cmd | None:
        self.state = WizardState()
        self.pending_service = None
        return self._go(MenuScreen(self.theme))

    def _all_targets(self) -> list[Target]:
        if self.callbacks.all_targets is None:
            return []
        return self.callbacks.all_targets()

    def _scope_relevant(self) -> bool:
        return any_target_supports_project_scope(list(self.state.targets))

    # screen builders

    def _service_screen(self) -> Cmd | None:
        source = self.state.source or SOURCE_CURATED
        sync_fn = self.callbacks.registry_sync_status if source != SOURCE_CURATED else None
        return self._go(
            ServiceScreen(self.theme, source, self.content_height(), self.callbacks.load_catalog, sync_fn)
        )

    def _start_pass(self, action: str) -> Cmd | None:
        self.pending_service = None
        if self.callbacks.registry_enabled:
            self.state = WizardState(action=action)
            return self._go(SourceScreen(self.theme))
        self.state = WizardState(action=action, source=SOURCE_CURATED)
        return self._service_screen()

    def _target_screen(self) -> Cmd | None:
        return self._go(TargetScreen(self.theme, self._all_targets(), self.state.targets))

    def _review_screen(self) -> Cmd | None:
        if self.state.entry is None:
            return self._reset_to_menu()
        return self._go(
            ReviewScreen(
                self.theme,
                self.state.action,
                self.state.entry,
                self.state.targets,
                self.state.scope,
                self.state.source,
                self.callbacks.registry_enabled,
            )
        )

    def _apply_screen(self, service: Service, resolved_env: dict[str, str]) -> Cmd | None:
        return self._go(
            ApplyScreen(
                self.theme,
                self.state.action,
                service,
                self.state.targets,
                self.state.scope or SCOPE_USER,
                resolved_env,
                self.callbacks.apply,
            )
        )

    # message handling

    def update(self, msg: Msg) -> Cmd | None:
        if isinstance(msg, KeyMsg) and msg.key == "ctrl+c":
            return quit_cmd
        if isinstance(msg, WindowSizeMsg):
            self.width = msg.width
            self.height = msg.height
            return self.screen.update(msg)
        if isinstance(msg, BackMsg):
            return self._handle_back()
        if isinstance(msg, MenuSelectMsg):
            return self._handle_menu(msg.item)
        if isinstance(msg, SourceSelectMsg):
            self.state = replace(self.state, source=msg.source, entry=None, targets=(), scope="")
            return self._service_screen()
        if isinstance(msg, ServiceSelectMsg):
            self.state = replace(self.state, entry=msg.entry)
            if entry_needs_confirmation(msg.entry):
                return self._go(TrustScreen(self.theme, msg.entry))
            return self._target_screen()
        if isinstance(msg, TrustConfirmMsg):
            return self._handle_trust(msg.confirmed)
        if isinstance(msg, TargetSelectMsg):
            self.state = replace(self.state, targets=msg.targets, scope="")
            if self._scope_relevant():
                return self._go(ScopeScreen(self.theme))
            self.state = replace(self.state, scope=SCOPE_USER)
            return self._review_screen()
        if isinstance(msg, ScopeSelectMsg):
            self.state = replace(self.state, scope=msg.scope)
            return self._review_screen()
        if isinstance(msg, ReviewConfirmMsg):
            return self._handle_review(msg.confirmed)
        if isinstance(msg, CredentialDoneMsg):
            if self.pending_service is None:
                return self._reset_to_menu()
            return self._apply_screen(self.pending_service, msg.resolved_env)
        if isinstance(msg, ApplyPostActionMsg):
            return self._handle_post_action(msg.action)
        return self.screen.update(msg)

    def _handle_menu(self, item: str) -> Cmd | None:
        if item == INSTALL:
            return self._start_pass(ACTION_INSTALL)
        if item == UNINSTALL:
            return self._start_pass(ACTION_UNINSTALL)
        if item == STATUS:
            return self._show_output(self.callbacks.render_status)
        if item == LIST_SERVICES:
            return self._show_output(self.callbacks.render_services_list)
        if item == LIST_TARGETS:
            return self._show_output(self.callbacks.render_targets_list)
        if item == EXIT:
            return quit_cmd
        return None

    def _show_output(self, fn: RenderFn | None) -> Cmd | None:
        return self._go(OutputScreen(self.theme, render_to_output(fn), self.content_height()))

    def _handle_trust(self, confirmed: bool) -> Cmd | None:
        if not confirmed:
            self.state = replace(self.state, entry=None)
            return self._service_screen()

        entry = self.state.entry
        refresh = self.callbacks.refresh_registry_entry
        if entry is not None and refresh is not None:
            try:
                entry = refresh(entry)
            except Exception as e:
                logger.warning(f"Could not refresh registry entry {entry.name}: {e}")
            self.state = replace(self.state, entry=entry)
        return self._target_screen()

    def _handle_review(self, confirmed: bool) -> Cmd | None:
        if not confirmed:
            if self._scope_relevant():
                self.state = replace(self.state, scope="")
                return self._go(ScopeScreen(self.theme))
            return self._target_screen()

        entry = self.state.entry
        if entry is None:
            return self._reset_to_menu()

        service = self._entry_service(entry)
        if service is None:
            logger.error(f"No supported install method for {entry.name}")
            return self._go(
                OutputScreen(
                    self.theme,
                    f"Error: {entry.name} has no supported install method",
                    self.content_height(),
                )
            )

        self.pending_service = service
        if self.state.action != ACTION_INSTALL or self.callbacks.resolve_credentials is None:
            return self._apply_screen(service, {})

        resolved, missing = self.callbacks.resolve_credentials(service)
        if not missing:
            return self._apply_screen(service, resolved)
        return self._go(
            CredentialScreen(
                self.theme,
                missing,
                resolved,
                self.callbacks.store_credential,
                self.callbacks.open_url,
            )
        )

    def _entry_service(self, entry: Entry) -> Service | None:
        convert = self.callbacks.catalog_entry_to_service
        service = convert(entry) if convert is not None else entry.curated
        if service is None and self.state.action == ACTION_UNINSTALL:
            # removal only needs the name and declared env names
            service = Service(name=entry.name, description=entry.description(), env=entry.env_vars())
        return service

    def _handle_post_action(self, action: str) -> Cmd | None:
        if action == POST_ANOTHER:
            return self._start_pass(self.state.action)
        if action == POST_EXIT:
            return quit_cmd
        return self._reset_to_menu()

    def _handle_back(self) -> Cmd | None:
        current = self.screen.screen_id
        if current == ScreenID.REVIEW:
            if self._scope_relevant():
                self.state = replace(self.state, scope="")
                return self._go(ScopeScreen(self.theme))
            self.state = replace(self.state, scope="")
            return self._target_screen()
        if current == ScreenID.SCOPE:
            self.state = replace(self.state, scope="")
            return self._target_screen()
        if current == ScreenID.TARGET:
            self.state = replace(self.state, entry=None, targets=(), scope="")
            return self._service_screen()
        if current == ScreenID.TRUST:
            self.state = replace(self.state, entry=None)
            return self._service_screen()
        if current == ScreenID.SERVICE and self.callbacks.registry_enabled:
            self.state = replace(self.state, source="", entry=None)
            return self._go(SourceScreen(self.theme))
        if current == ScreenID.CREDENTIALS and self.state.entry is not None:
            self.pending_service = None
            return self._review_screen()
        return self._reset_to_menu()

    # rendering

    def breadcrumb_steps(self) -> list[BreadcrumbStep]:
        """Trail for the active screen; unreached steps are omitted."""
        current = self.screen.screen_id
        if current == ScreenID.TRUST:
            current = ScreenID.SERVICE
        if current not in STEP_ORDER:
            return []
        current_pos = STEP_ORDER.index(current)

        values = {
            ScreenID.SOURCE: source_value_label(self.state.source) if self.state.source else "",
            ScreenID.SERVICE: self.state.entry.name if self.state.entry else "",
            ScreenID.TARGET: targets_summary(self.state.targets),
            ScreenID.SCOPE: self.state.scope,
        }

        steps = []
        for pos, step_id in enumerate(STEP_ORDER):
            visible = pos <= current_pos
            if step_id == ScreenID.SOURCE:
                visible = visible and self.callbacks.registry_enabled
            elif step_id == ScreenID.SCOPE:
                visible = visible and self._scope_relevant()
            elif step_id == ScreenID.CREDENTIALS:
                visible = current == ScreenID.CREDENTIALS
            steps.append(
                BreadcrumbStep(
                    label=STEP_LABELS[step_id],
                    value=values.get(step_id, ""),
                    active=pos == current_pos,
                    completed=pos < current_pos,
                    visible=visible,
                )
            )
        return steps

    def view(self) -> str:
        width = self.width if self.width > 0 else DEFAULT_WIDTH

        title = self.theme.title.render(f"mcp-wire v{self.version}" if self.version else "mcp-wire")
        trail = render_breadcrumb(self.theme, self.breadcrumb_steps())
        header = f"{title}  {trail}" if trail else title

        content = self.screen.view().split("\n")
        height = self.content_height()
        if len(content) < height:
            content += [""] * (height - len(content))

        return "\n".join(
            [
                header,
                self.theme.separator.render("─" * width),
                *content,
                render_status_bar(self.theme, self.screen.status_hints()),
            ]
        )
