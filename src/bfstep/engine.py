from __future__ import annotations

import logging

from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Callable, Optional, Union

from .assembler import Program
from .config import EngineConfig, EofPolicy, UnderflowPolicy
from .errors import PointerUnderflow, make_runtime_error
from .lexer import Token
from .tape import Tape

logger = logging.getLogger(__name__)


class OutcomeKind(Enum):
    CONTINUED = 'continued'
    HALTED = 'halted'
    NEEDS_INPUT = 'needs_input'
    PRODUCED_OUTPUT = 'produced_output'


@dataclass(frozen=True)
class StepOutcome:
    kind: OutcomeKind
    byte: Optional[int] = None  # set for PRODUCED_OUTPUT


CONTINUED = StepOutcome(OutcomeKind.CONTINUED)
HALTED = StepOutcome(OutcomeKind.HALTED)
NEEDS_INPUT = StepOutcome(OutcomeKind.NEEDS_INPUT)


@dataclass
class ExecutionState:
    tape: Tape = field(default_factory=Tape)
    pointer: int = 0
    pc: int = 0
    halted: bool = False


class Engine:
    """Executes one instruction of a resolved program at a time.

    The engine never touches real I/O. Output is handed back as a
    PRODUCED_OUTPUT outcome; an input instruction stops with NEEDS_INPUT and
    stays pending until the caller completes it with `feed`.
    """

    def __init__(self, program: Program, config: Optional[EngineConfig] = None):
        self.program = program
        self.config = config or EngineConfig()

    def new_state(self) -> ExecutionState:
        return ExecutionState(tape=Tape(self.config.tape_size))

    def step(self, state: ExecutionState) -> StepOutcome:
        program = self.program
        if state.halted or state.pc >= len(program):
            state.halted = True
            return HALTED

        ins = program[state.pc]
        token = ins.token
        tape = state.tape
        outcome = CONTINUED
        next_pc = state.pc + 1

        if token is Token.MOVE_RIGHT:
            state.pointer += 1
            tape.ensure(state.pointer)
        elif token is Token.MOVE_LEFT:
            self._move_left(state)
        elif token is Token.INCREMENT:
            tape.increment(state.pointer)
        elif token is Token.DECREMENT:
            tape.decrement(state.pointer)
        elif token is Token.OUTPUT:
            outcome = StepOutcome(OutcomeKind.PRODUCED_OUTPUT, tape[state.pointer])
        elif token is Token.INPUT:
            return NEEDS_INPUT
        elif token is Token.LOOP_OPEN:
            if tape[state.pointer] == 0:
                next_pc = ins.partner + 1
        elif token is Token.LOOP_CLOSE:
            if tape[state.pointer] != 0:
                next_pc = ins.partner + 1

        state.pc = next_pc
        return self._settle(state, outcome)

    def feed(self, state: ExecutionState, byte: Optional[int]) -> StepOutcome:
        """Complete a pending input instruction; None means the input is exhausted."""
        if state.halted or state.pc >= len(self.program) or self.program[state.pc].token is not Token.INPUT:
            raise ValueError(f"no input instruction pending at instruction {state.pc}")

        if byte is None:
            if self.config.eof is EofPolicy.ZERO:
                state.tape[state.pointer] = 0
        else:
            state.tape[state.pointer] = byte
        state.pc += 1
        return self._settle(state, CONTINUED)

    def _move_left(self, state: ExecutionState) -> None:
        if state.pointer > 0:
            state.pointer -= 1
            return

        policy = self.config.underflow
        if policy is UnderflowPolicy.CLAMP:
            return
        if policy is UnderflowPolicy.WRAP:
            state.pointer = len(state.tape) - 1
            return
        raise make_runtime_error(
            PointerUnderflow,
            message="data pointer moved left of cell 0",
            pc=state.pc,
            pointer=state.pointer,
        )

    def _settle(self, state: ExecutionState, outcome: StepOutcome) -> StepOutcome:
        if state.pc < len(self.program):
            return outcome
        state.halted = True
        # An output produced by the last instruction still has to reach the caller.
        return HALTED if outcome is CONTINUED else outcome


# ---------------- Input sources ----------------
class BytesInput:
    """Finite input held in memory: a file's contents or a fixed literal string."""

    def __init__(self, data: Union[bytes, str] = b''):
        if isinstance(data, str):
            data = data.encode('utf-8')
        self.data = bytes(data)
        self.pos = 0

    def read_byte(self) -> Optional[int]:
        if self.pos >= len(self.data):
            return None
        b = self.data[self.pos]
        self.pos += 1
        return b

    @property
    def remaining(self) -> bytes:
        return self.data[self.pos:]


class StreamInput:
    """Lazy input read one byte at a time from a binary stream such as stdin."""

    def __init__(self, stream: BinaryIO):
        self.stream = stream
        self.exhausted = False

    def read_byte(self) -> Optional[int]:
        if self.exhausted:
            return None
        chunk = self.stream.read(1)
        if not chunk:
            self.exhausted = True
            return None
        return chunk[0]


# ---------------- Caller-side driver ----------------
@dataclass
class RunResult:
    output: bytes
    state: ExecutionState
    steps: int


class Interpreter:
    """Drives an Engine, performing the I/O it asks for.

    `advance` executes exactly one instruction: pending input is resolved
    from the input source and produced bytes are collected in `output` and
    passed to `sink`.
    """

    def __init__(
        self,
        program: Program,
        input=None,
        sink: Optional[Callable[[int], None]] = None,
        config: Optional[EngineConfig] = None,
    ):
        self.engine = Engine(program, config)
        self.state = self.engine.new_state()
        self.input = input if input is not None else BytesInput(b'')
        self.sink = sink
        self.output = bytearray()
        self.steps = 0

    @property
    def program(self) -> Program:
        return self.engine.program

    @property
    def halted(self) -> bool:
        return self.state.halted

    def advance(self) -> StepOutcome:
        state = self.state
        executing = not state.halted and state.pc < len(self.engine.program)

        outcome = self.engine.step(state)
        if outcome.kind is OutcomeKind.NEEDS_INPUT:
            byte = self.input.read_byte()
            if byte is None:
                logger.debug("input exhausted at instruction %d", state.pc)
            outcome = self.engine.feed(state, byte)
        elif outcome.kind is OutcomeKind.PRODUCED_OUTPUT:
            self.output.append(outcome.byte)
            if self.sink is not None:
                self.sink(outcome.byte)

        if executing:
            self.steps += 1
        return outcome

    def run(self, max_steps: Optional[int] = None) -> RunResult:
        while not self.state.halted:
            if max_steps is not None and self.steps >= max_steps:
                logger.warning("stopped after %d steps without halting", self.steps)
                break
            self.advance()
        return RunResult(output=bytes(self.output), state=self.state, steps=self.steps)
