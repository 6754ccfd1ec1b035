from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional


def _build_context(lines: List[str], line_no_1: int, column: int, *, context: int = 2) -> str:
    idx = max(1, line_no_1)
    start = max(1, idx - context)
    end = min(len(lines), idx + context)

    out: List[str] = []
    for i in range(start, end + 1):
        prefix = '>' if i == idx else ' '
        out.append(f"{prefix} {i:4d} | {lines[i - 1]}")
        if i == idx:
            out.append(f"       | {' ' * max(0, column - 1)}^")
    return "\n".join(out)


def _hint_for(message: str, *, kind: str) -> Optional[str]:
    msg = message.lower()
    if kind == 'syntax':
        if 'unmatched' in msg and "'['" in msg:
            return 'Every "[" needs a "]" later in the program. Check the loop nesting above this line.'
        if 'unmatched' in msg and "']'" in msg:
            return 'This "]" closes a loop that was never opened. Remove it or add the missing "[".'
        return None
    if kind == 'runtime':
        if 'underflow' in msg:
            return 'The program moved left of cell 0. Use --underflow clamp or wrap to keep running.'
        return None
    return None


@dataclass
class BFError(Exception):
    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class BFSyntaxError(BFError):
    line: int
    column: int
    index: int
    context: str


class UnmatchedLoopOpen(BFSyntaxError):
    pass


class UnmatchedLoopClose(BFSyntaxError):
    pass


@dataclass
class BFRuntimeError(BFError):
    pc: int
    pointer: int


class PointerUnderflow(BFRuntimeError):
    pass


def make_syntax_error(cls, *, message: str, source: str, line: int, column: int, index: int) -> BFSyntaxError:
    lines = source.split('\n') if source else []
    ctx = _build_context(lines, line, column) if lines else ''
    hint = _hint_for(message, kind='syntax')
    ctx_block = f"\n{ctx}" if ctx else ""
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"SyntaxError: {message} (line {line}, column {column}){ctx_block}{hint_block}",
        line=line,
        column=column,
        index=index,
        context=ctx,
    )


def make_runtime_error(cls, *, message: str, pc: int, pointer: int) -> BFRuntimeError:
    hint = _hint_for(message, kind='runtime')
    hint_block = f"\nHint: {hint}" if hint else ""
    return cls(
        message=f"RuntimeError: {message} (instruction {pc}, pointer {pointer}){hint_block}",
        pc=pc,
        pointer=pointer,
    )
