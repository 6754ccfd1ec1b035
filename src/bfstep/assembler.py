from __future__ import annotations

import logging

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import UnmatchedLoopClose, UnmatchedLoopOpen, make_syntax_error
from .lexer import Lexeme, Repeated, Token, group_repeats, scan

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Instruction:
    index: int
    token: Token
    partner: Optional[int] = None  # loop brackets only
    line: int = 0
    column: int = 0


class Program:
    """Flat, resolved instruction sequence.

    Indices are jump targets; nothing here is mutated after `assemble`.
    """

    def __init__(self, instructions: Sequence[Instruction], source: str = ""):
        self._instructions: Tuple[Instruction, ...] = tuple(instructions)
        self.source = source

    def __len__(self) -> int:
        return len(self._instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self._instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __repr__(self) -> str:
        return f"Program({self.code!r})"

    @property
    def code(self) -> str:
        return "".join(ins.token.char for ins in self._instructions)

    @property
    def needs_input(self) -> bool:
        return any(ins.token is Token.INPUT for ins in self._instructions)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'code': self.code,
            'needs_input': self.needs_input,
            'instructions': [
                {
                    'index': ins.index,
                    'op': ins.token.char,
                    'partner': ins.partner,
                    'line': ins.line,
                    'column': ins.column,
                }
                for ins in self._instructions
            ],
        }


def assemble(lexemes: Iterable[Lexeme], source: str = "") -> Program:
    lexemes = list(lexemes)
    partners: List[Optional[int]] = [None] * len(lexemes)
    stack: List[int] = []

    for index, lx in enumerate(lexemes):
        if lx.token is Token.LOOP_OPEN:
            stack.append(index)
        elif lx.token is Token.LOOP_CLOSE:
            if not stack:
                raise make_syntax_error(
                    UnmatchedLoopClose,
                    message="unmatched ']'",
                    source=source,
                    line=lx.line,
                    column=lx.column,
                    index=index,
                )
            open_index = stack.pop()
            partners[open_index] = index
            partners[index] = open_index

    if stack:
        # Earliest unmatched open is the bottom of the stack.
        first = lexemes[stack[0]]
        raise make_syntax_error(
            UnmatchedLoopOpen,
            message="unmatched '['",
            source=source,
            line=first.line,
            column=first.column,
            index=stack[0],
        )

    instructions = [
        Instruction(index=i, token=lx.token, partner=partners[i], line=lx.line, column=lx.column)
        for i, lx in enumerate(lexemes)
    ]
    logger.debug("assembled %d instructions", len(instructions))
    return Program(instructions, source)


def parse(source: str) -> Program:
    return assemble(scan(source), source)


# ---------------- Structured view ----------------
@dataclass(frozen=True)
class Run:
    ops: Tuple[Repeated, ...]


@dataclass(frozen=True)
class Loop:
    body: Tuple["Segment", ...]


Segment = Union[Run, Loop]


def segments(program: Program) -> List[Segment]:
    """Split the flat program into straight-line runs and nested loops."""
    return _segments_between(program, 0, len(program))


def _segments_between(program: Program, start: int, stop: int) -> List[Segment]:
    out: List[Segment] = []
    straight: List[Token] = []
    i = start
    while i < stop:
        ins = program[i]
        if ins.token is Token.LOOP_OPEN:
            if straight:
                out.append(Run(tuple(group_repeats(straight))))
                straight = []
            out.append(Loop(tuple(_segments_between(program, i + 1, ins.partner))))
            i = ins.partner + 1
            continue
        straight.append(ins.token)
        i += 1
    if straight:
        out.append(Run(tuple(group_repeats(straight))))
    return out
