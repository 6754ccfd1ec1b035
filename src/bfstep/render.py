from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from .debugger import Frame


@dataclass(frozen=True)
class Bounds:
    start: int
    end: int
    rel: int


def region_bounds(width: int, length: int, pos: int) -> Bounds:
    """Which slice of a `length`-long buffer to show so that `pos` stays visible.

    The cursor sits mid-screen once it has moved past half the width.
    """
    width = max(1, width)
    start = max(0, pos - width // 2)
    end = min(start + width, length)
    return Bounds(start=start, end=end, rel=pos - start)


def _region(label: str, width: int, text: str, pos: int) -> List[str]:
    b = region_bounds(width, len(text), pos)
    return [f"{label}:", text[b.start:b.end], " " * b.rel + "^"]


def _memory(width: int, frame: Frame) -> List[str]:
    cell_count = max(1, width // 4)
    pointer = frame.pointer
    tape = frame.tape
    start = max(0, pointer - cell_count // 2)
    end = min(len(tape), start + cell_count)
    start = max(0, min(start, end - cell_count))
    cells = tape.window(start, end)
    return [
        "Memory:",
        " ".join(f"{b:03}" for b in cells),
        " " * ((pointer - start) * 4) + "^",
    ]


def _printable(data: bytes) -> str:
    return "".join(chr(b) if 32 <= b < 127 else "." for b in data)


def render_frame(frame: Frame, size: Tuple[int, int]) -> List[str]:
    """Lay out one debugger screen as plain text lines."""
    width, height = size
    dbg = frame.debugger

    lines: List[str] = []
    status = "HALTED" if frame.halted else dbg.mode.value.upper()
    lines.append(f"Pos: {frame.pc}/{len(frame.program)}   Steps: {frame.steps}   [{status}]")
    lines.append("")
    lines.extend(_memory(width, frame))
    lines.append(f"Pointer: {frame.pointer}   Tape: {len(frame.tape)} cells")
    lines.append("")
    out = _printable(frame.output)
    lines.extend(_region("Output", width, out, len(out)))
    lines.append("")
    lines.extend(_region("Code", width, frame.program.code, frame.pc))

    footer = [
        f"Update frequency: 1/{dbg.throttle} steps displayed",
        f"Ops/s: {dbg.ops_per_second}",
        "c: continue  p: pause  q: quit  up/down: throttle  any key: step",
    ]
    pad = max(0, height - len(lines) - len(footer))
    lines.extend([""] * pad)
    lines.extend(footer)
    return [line[:width] for line in lines[:max(height, len(footer))]]
