"""Python source generator for resolved programs.

Runs of identical instructions are folded into a single statement, which
makes the generated file much smaller but does not make it any faster.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .assembler import Loop, Program, Run, Segment, segments
from .lexer import Repeated, Token

INDENT = '    '


@dataclass(frozen=True)
class GeneratorOptions:
    memory_size: int = 30_000
    fixed_input: Optional[str] = None  # consumed instead of stdin when set
    eof_value: Optional[int] = 0  # stored at EOF; None leaves the cell unchanged


def _statements(op: Repeated, options: GeneratorOptions) -> List[str]:
    n = op.count
    t = op.token
    if t is Token.MOVE_RIGHT:
        return [f"ptr += {n}"]
    if t is Token.MOVE_LEFT:
        return [f"ptr -= {n}"]
    if t is Token.INCREMENT:
        return [f"tape[ptr] = (tape[ptr] + {n}) & 0xFF"]
    if t is Token.DECREMENT:
        return [f"tape[ptr] = (tape[ptr] - {n}) & 0xFF"]
    if t is Token.OUTPUT:
        write = "out.write(bytes((tape[ptr],)))" if n == 1 else f"out.write(bytes((tape[ptr],)) * {n})"
        return [write, "out.flush()"]
    if t is Token.INPUT:
        lines = ["if input_pos < len(data):", f"{INDENT}tape[ptr] = data[input_pos]", f"{INDENT}input_pos += 1"]
        if options.eof_value is not None:
            lines += ["else:", f"{INDENT}tape[ptr] = {options.eof_value & 0xFF}"]
        return lines
    raise ValueError(f"loop bracket {t.char!r} inside a straight-line run")


def _emit(segs: Sequence[Segment], depth: int, options: GeneratorOptions, out: List[str]) -> None:
    pad = INDENT * depth
    for seg in segs:
        if isinstance(seg, Run):
            for op in seg.ops:
                out.extend(pad + line for line in _statements(op, options))
        elif isinstance(seg, Loop):
            out.append(f"{pad}while tape[ptr]:")
            if seg.body:
                _emit(seg.body, depth + 1, options, out)
            else:
                out.append(f"{pad}{INDENT}pass")


def _input_block(program: Program, options: GeneratorOptions) -> List[str]:
    if options.fixed_input is not None:
        return [f"{INDENT}data = {options.fixed_input.encode('utf-8')!r}", f"{INDENT}input_pos = 0"]
    if program.needs_input:
        return [f"{INDENT}data = sys.stdin.buffer.read()", f"{INDENT}input_pos = 0"]
    return []


def generate_python(program: Program, options: Optional[GeneratorOptions] = None) -> str:
    options = options or GeneratorOptions()
    body: List[str] = []
    _emit(segments(program), 1, options, body)

    lines = [
        "import sys",
        "",
        "",
        "def main():",
        f"{INDENT}MEM_SIZE = {options.memory_size}",
        f"{INDENT}tape = bytearray(MEM_SIZE)",
        f"{INDENT}ptr = 0",
        f"{INDENT}out = sys.stdout.buffer",
    ]
    lines += _input_block(program, options)
    lines += body
    lines += [
        "",
        "",
        'if __name__ == "__main__":',
        f"{INDENT}main()",
        "",
    ]
    return "\n".join(lines)
