from __future__ import annotations

import logging
import time

from dataclasses import dataclass, replace
from enum import Enum
from typing import Callable, Optional

from .assembler import Program
from .config import DebuggerConfig
from .engine import Interpreter
from .tape import Tape

logger = logging.getLogger(__name__)


class KeyEvent(Enum):
    CONTINUE = 'continue'
    PAUSE = 'pause'
    QUIT = 'quit'
    SPEED_UP = 'speed_up'
    SPEED_DOWN = 'speed_down'
    STEP = 'step'  # any other key


class Mode(Enum):
    PAUSED = 'paused'
    RUNNING = 'running'
    TERMINATED = 'terminated'


@dataclass
class DebuggerState:
    mode: Mode = Mode.PAUSED
    throttle: int = 1
    countdown: int = 1
    quit_requested: bool = False
    redraws: int = 0
    ops_per_second: int = 0


@dataclass(frozen=True)
class Frame:
    """What one redraw shows.

    Counters and debugger state are copied when the frame is built; `tape`
    is the live tape and is only meaningful during the redraw call.
    """

    pc: int
    pointer: int
    halted: bool
    tape: Tape
    debugger: DebuggerState
    output: bytes
    program: Program
    steps: int


class KeySource:
    """Where key events come from.

    `wait` may block (used while paused); `poll` must return immediately
    with None when nothing is pending (used while running).
    """

    def wait(self) -> KeyEvent:
        raise NotImplementedError

    def poll(self) -> Optional[KeyEvent]:
        raise NotImplementedError


class Debugger:
    def __init__(
        self,
        interpreter: Interpreter,
        keys: KeySource,
        redraw: Callable[[Frame], None],
        config: Optional[DebuggerConfig] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.config = config or DebuggerConfig()
        self.interpreter = interpreter
        self.keys = keys
        self._redraw = redraw
        self._clock = clock
        self.state = DebuggerState(throttle=self.config.throttle, countdown=self.config.throttle)

        self._ops_counter = 0
        self._ops_reset = clock()

    @property
    def terminated(self) -> bool:
        return self.state.mode is Mode.TERMINATED

    def frame(self) -> Frame:
        it = self.interpreter
        return Frame(
            pc=it.state.pc,
            pointer=it.state.pointer,
            halted=it.state.halted,
            tape=it.state.tape,
            debugger=replace(self.state),
            output=bytes(it.output),
            program=it.program,
            steps=it.steps,
        )

    def redraw(self) -> None:
        self.state.redraws += 1
        self._redraw(self.frame())

    def handle(self, event: KeyEvent) -> None:
        mode = self.state.mode
        if mode is Mode.TERMINATED:
            return

        if event is KeyEvent.QUIT:
            self.state.quit_requested = True
            self._terminate()
            return

        if mode is Mode.PAUSED:
            if event is KeyEvent.CONTINUE:
                self.state.mode = Mode.RUNNING
                self.state.countdown = self.state.throttle
                logger.debug("running with throttle %d", self.state.throttle)
                return
            # Every other key is a manual single step.
            self._step()
            if not self.terminated:
                self.redraw()
            return

        if mode is Mode.RUNNING:
            if event is KeyEvent.PAUSE:
                self.state.mode = Mode.PAUSED
                self.redraw()
            elif event is KeyEvent.SPEED_UP:
                self.state.throttle *= 2
                self.state.countdown = min(self.state.countdown, self.state.throttle)
            elif event is KeyEvent.SPEED_DOWN:
                self.state.throttle = max(1, self.state.throttle // 2)
                self.state.countdown = min(self.state.countdown, self.state.throttle)
            return

        raise AssertionError(f"unhandled debugger mode {mode}")

    def tick(self) -> None:
        """One automatic step while running, redrawing every `throttle` steps."""
        if self.state.mode is not Mode.RUNNING:
            return
        self._step()
        if self.terminated:
            return
        self.state.countdown -= 1
        if self.state.countdown <= 0:
            self.state.countdown = self.state.throttle
            self.redraw()

    def run(self) -> DebuggerState:
        self.redraw()
        while not self.terminated:
            if self.state.mode is Mode.PAUSED:
                self.handle(self.keys.wait())
                continue
            event = self.keys.poll()
            if event is not None:
                self.handle(event)
            self.tick()
        return self.state

    def _step(self) -> None:
        self.interpreter.advance()
        self._count_op()
        if self.interpreter.halted:
            logger.debug("program halted after %d steps", self.interpreter.steps)
            self.state.mode = Mode.PAUSED
            self.redraw()
            self._terminate()

    def _count_op(self) -> None:
        now = self._clock()
        if now - self._ops_reset >= 1.0:
            self.state.ops_per_second = self._ops_counter
            self._ops_counter = 0
            self._ops_reset = now
        self._ops_counter += 1

    def _terminate(self) -> None:
        self.state.mode = Mode.TERMINATED
