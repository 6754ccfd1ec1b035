"""POSIX terminal front end for the debugger: raw-mode keys and ANSI redraws."""
from __future__ import annotations

import os
import select
import shutil
import sys
import termios
import tty

from typing import Optional, TextIO, Tuple

from .config import DebuggerConfig
from .debugger import Frame, KeyEvent, KeySource
from .render import render_frame

ARROW_UP = '\x1b[A'
ARROW_DOWN = '\x1b[B'


def decode_key(seq: str, config: Optional[DebuggerConfig] = None) -> Optional[KeyEvent]:
    """Map one raw key sequence to a KeyEvent; None for sequences to ignore."""
    config = config or DebuggerConfig()
    if not seq:
        return None
    if seq == config.quit_key or seq == '\x03':  # ctrl-c is not delivered as a signal in raw mode
        return KeyEvent.QUIT
    if seq == config.continue_key:
        return KeyEvent.CONTINUE
    if seq == config.pause_key:
        return KeyEvent.PAUSE
    if seq == ARROW_UP:
        return KeyEvent.SPEED_UP
    if seq == ARROW_DOWN:
        return KeyEvent.SPEED_DOWN
    if seq == '\x1b':
        return None
    return KeyEvent.STEP


class TerminalKeys(KeySource):
    def __init__(self, stream: TextIO = sys.stdin, config: Optional[DebuggerConfig] = None):
        self.stream = stream
        self.fd = stream.fileno()
        self.config = config or DebuggerConfig()
        self._saved = None

    def __enter__(self) -> "TerminalKeys":
        self._saved = termios.tcgetattr(self.fd)
        tty.setraw(self.fd)
        # Keep output post-processing so '\n' still returns the carriage.
        attrs = termios.tcgetattr(self.fd)
        attrs[1] |= termios.OPOST | termios.ONLCR
        termios.tcsetattr(self.fd, termios.TCSADRAIN, attrs)
        return self

    def __exit__(self, *exc) -> None:
        if self._saved is not None:
            termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _ready(self, timeout: Optional[float]) -> bool:
        rlist, _, _ = select.select([self.fd], [], [], timeout)
        return bool(rlist)

    def _read_sequence(self) -> str:
        seq = os.read(self.fd, 1).decode('latin-1')
        if seq == '\x1b':
            while self._ready(0.01):
                seq += os.read(self.fd, 1).decode('latin-1')
                if seq[-1].isalpha() or seq[-1] == '~':
                    break
        return seq

    def wait(self) -> KeyEvent:
        while True:
            event = decode_key(self._read_sequence(), self.config)
            if event is not None:
                return event

    def poll(self) -> Optional[KeyEvent]:
        if not self._ready(0):
            return None
        return decode_key(self._read_sequence(), self.config)


class TerminalScreen:
    def __init__(self, out: TextIO = sys.stdout):
        self.out = out

    def __enter__(self) -> "TerminalScreen":
        self.out.write('\x1b[?1049h\x1b[?25l\x1b[2J')
        self.out.flush()
        return self

    def __exit__(self, *exc) -> None:
        self.out.write('\x1b[H\x1b[2J\x1b[?25h\x1b[?1049l')
        self.out.flush()

    def size(self) -> Tuple[int, int]:
        cols, rows = shutil.get_terminal_size((80, 24))
        return cols, rows

    def __call__(self, frame: Frame) -> None:
        lines = render_frame(frame, self.size())
        self.out.write('\x1b[H\x1b[2J' + '\n'.join(lines))
        self.out.flush()
