from __future__ import annotations

import json

from pathlib import Path
from typing import Callable, Optional, Union

from .assembler import Program, parse
from .codegen import GeneratorOptions, generate_python
from .config import EngineConfig
from .engine import BytesInput, Interpreter, RunResult


def read_source(path: Union[str, Path]) -> str:
    # Every byte maps to one character, so comments in any encoding are just ignored.
    return Path(path).read_bytes().decode("latin-1")


def parse_file(path: Union[str, Path]) -> Program:
    return parse(read_source(path))


def run_string(
    source: str,
    *,
    input: Union[bytes, str, None] = None,
    sink: Optional[Callable[[int], None]] = None,
    config: Optional[EngineConfig] = None,
    max_steps: Optional[int] = None,
) -> RunResult:
    program = parse(source)
    source_input = BytesInput(input if input is not None else b'')
    return Interpreter(program, source_input, sink=sink, config=config).run(max_steps=max_steps)


def run_file(path: Union[str, Path], **kwargs) -> RunResult:
    return run_string(read_source(path), **kwargs)


def transpile_string(source: str, *, options: Optional[GeneratorOptions] = None) -> str:
    return generate_python(parse(source), options)


def dump_program(program: Program, path: Union[str, Path]) -> None:
    Path(path).write_text(json.dumps(program.to_dict(), indent=2), encoding="utf-8")
