# Terminal message loop driving the wizard model
# ABOUTME: Keys, resize signals and command results share one queue
# ABOUTME: Commands run on daemon threads and post their message back
import logging
import os
import queue
import select
import shutil
import signal
import sys
import threading
from typing import Protocol, TextIO

from mcpwire.tui.screen import BatchMsg, Cmd, KeyMsg, Msg, QuitMsg, WindowSizeMsg, quit_cmd

logger = logging.getLogger(__name__)

ENTER_ALT_SCREEN = "\033[?1049h"
EXIT_ALT_SCREEN = "\033[?1049l"
HIDE_CURSOR = "\033[?25l"
SHOW_CURSOR = "\033[?25h"
CLEAR = "\033[H\033[2J"

READ_TIMEOUT_SECONDS = 0.1

ARROWS = {"A": "up", "B": "down", "C": "right", "D": "left"}

CONTROL_KEYS = {
    "\r": "enter",
    "\n": "enter",
    "\x03": "ctrl+c",
    "\x0f": "ctrl+o",
    "\x15": "ctrl+u",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\t": "tab",
}


class Model(Protocol):
    def init(self) -> Cmd | None:
        ...

    def update(self, msg: Msg) -> Cmd | None:
        ...

    def view(self) -> str:
        ...


def parse_keys(data: str) -> list[str]:
    """Split raw terminal input into key names.

    ABOUTME: Arrow escape sequences map to up/down/left/right
    ABOUTME: A lone ESC byte is "esc"; other unknown sequences are dropped

    Examples:
        >>> parse_keys("\\x1b[Aab\\r")
        ['up', 'a', 'b', 'enter']
    """
    keys: list[str] = []
    i = 0
    while i < len(data):
        ch = data[i]
        if ch == "\x1b":
            if i + 2 < len(data) and data[i + 1] in ("[", "O"):
                final = data[i + 2]
                if final in ARROWS:
                    keys.append(ARROWS[final])
                    i += 3
                    continue
                # skip the rest of an unrecognised CSI sequence
                j = i + 2
                while j < len(data) and not ("@" <= data[j] <= "~"):
                    j += 1
                i = j + 1
                continue
            keys.append("esc")
            i += 1
            continue
        if ch in CONTROL_KEYS:
            keys.append(CONTROL_KEYS[ch])
        elif ch >= " ":
            keys.append(ch)
        i += 1
    return keys


def terminal_size_msg() -> WindowSizeMsg:
    size = shutil.get_terminal_size()
    return WindowSizeMsg(width=size.columns, height=size.lines)


class Program:
    """Runs a model against the real terminal until it quits.

    Args:
        model: Object with init(), update(msg) and view()
        stdin: Input stream; must be a TTY
        stdout: Output stream
    """

    def __init__(self, model: Model, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self.model = model
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self.messages: queue.Queue = queue.Queue()
        self._stop = threading.Event()

    def send(self, msg: Msg) -> None:
        self.messages.put(msg)

    def _run_cmd(self, cmd: Cmd | None) -> bool:
        """Start a command; return True when it asks to quit."""
        if cmd is None:
            return False
        if cmd is quit_cmd:
            return True

        def work() -> None:
            try:
                msg = cmd()
            except Exception as e:
                logger.exception(f"Command failed: {e}")
                return
            if msg is not None:
                self.send(msg)

        threading.Thread(target=work, daemon=True).start()
        return False

    def _read_keys(self, fd: int) -> None:
        while not self._stop.is_set():
            ready, _, _ = select.select([fd], [], [], READ_TIMEOUT_SECONDS)
            if not ready:
                continue
            data = os.read(fd, 1024)
            if not data:
                return
            for key in parse_keys(data.decode("utf-8", errors="ignore")):
                self.send(KeyMsg(key=key))

    def _render(self) -> None:
        frame = self.model.view().replace("\n", "\r\n")
        self.stdout.write(CLEAR + frame)
        self.stdout.flush()

    def run(self) -> None:
        import termios
        import tty

        fd = self.stdin.fileno()
        old_settings = termios.tcgetattr(fd)
        old_winch = None
        try:
            tty.setraw(fd)
            self.stdout.write(ENTER_ALT_SCREEN + HIDE_CURSOR)
            self.stdout.flush()

            if hasattr(signal, "SIGWINCH"):
                old_winch = signal.signal(signal.SIGWINCH, lambda signum, frame: self.send(terminal_size_msg()))

            threading.Thread(target=self._read_keys, args=(fd,), daemon=True).start()
            self.send(terminal_size_msg())
            self._loop()
        finally:
            self._stop.set()
            if old_winch is not None:
                signal.signal(signal.SIGWINCH, old_winch)
            termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)
            self.stdout.write(SHOW_CURSOR + EXIT_ALT_SCREEN)
            self.stdout.flush()

    def _loop(self) -> None:
        if self._run_cmd(self.model.init()):
            return
        self._render()

        while True:
            msg = self.messages.get()
            if isinstance(msg, QuitMsg):
                return
            if isinstance(msg, BatchMsg):
                if any(self._run_cmd(c) for c in msg.cmds):
                    return
                continue
            if self._run_cmd(self.model.update(msg)):
                return
            self._render()
