# Screen protocol, messages and commands for the wizard message loop
# ABOUTME: A command is a zero-argument callable returning the next message
# ABOUTME: Screens mutate themselves in update() and return an optional command
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Protocol

Msg = Any
Cmd = Callable[[], Msg]


class ScreenID(Enum):
    MENU = "menu"
    SOURCE = "source"
    SERVICE = "service"
    TRUST = "trust"
    TARGET = "target"
    SCOPE = "scope"
    REVIEW = "review"
    CREDENTIALS = "credentials"
    APPLY = "apply"
    OUTPUT = "output"


@dataclass(frozen=True)
class KeyHint:
    key: str
    desc: str


@dataclass(frozen=True)
class KeyMsg:
    """A key press, normalised to names like 'up', 'enter', 'ctrl+c' or a character."""
    key: str


@dataclass(frozen=True)
class WindowSizeMsg:
    width: int
    height: int


@dataclass(frozen=True)
class BackMsg:
    pass


@dataclass(frozen=True)
class QuitMsg:
    pass


@dataclass(frozen=True)
class BatchMsg:
    cmds: list[Cmd] = field(default_factory=list)


def quit_cmd() -> QuitMsg:
    return QuitMsg()


def back_cmd() -> BackMsg:
    return BackMsg()


def msg_cmd(msg: Msg) -> Cmd:
    """Command that simply delivers msg on the next loop iteration."""
    return lambda: msg


def batch(*cmds: Cmd | None) -> Cmd | None:
    """Combine commands; the loop runs each one independently."""
    valid = [c for c in cmds if c is not None]
    if not valid:
        return None
    if len(valid) == 1:
        return valid[0]
    return lambda: BatchMsg(cmds=valid)


def tick(seconds: float, fn: Callable[[], Msg]) -> Cmd:
    """Command that sleeps, then produces fn()."""
    def run() -> Msg:
        time.sleep(seconds)
        return fn()
    return run


class Screen(Protocol):
    """Interface each wizard screen implements."""

    screen_id: ScreenID

    def init(self) -> Cmd | None:
        ...

    def update(self, msg: Msg) -> Cmd | None:
        ...

    def view(self) -> str:
        ...

    def status_hints(self) -> list[KeyHint]:
        ...
