from __future__ import annotations

import argparse
import logging
import sys
import time

from pathlib import Path
from typing import List, Optional

from .api import dump_program, parse_file
from .codegen import GeneratorOptions, generate_python
from .config import DEFAULT_TAPE_SIZE, DebuggerConfig, EngineConfig, EofPolicy, UnderflowPolicy, log_level_from_env
from .debugger import Debugger
from .engine import BytesInput, Interpreter, StreamInput
from .errors import BFError

logger = logging.getLogger("bfstep")


def _positive_int(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {text!r}")
    if value < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {value}")
    return value


def _add_engine_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("program", type=Path, help="Brainfuck source file")
    src = p.add_mutually_exclusive_group()
    src.add_argument("--input", type=Path, help="Read program input from this file")
    src.add_argument("--fixed-input", help="Use the given string as the program input")
    p.add_argument("--tape-size", type=_positive_int, default=DEFAULT_TAPE_SIZE, help="Initial tape length (grows on demand)")
    p.add_argument(
        "--underflow",
        choices=[u.value for u in UnderflowPolicy],
        default=UnderflowPolicy.CLAMP.value,
        help="What '<' does at cell 0 (default: clamp)",
    )
    p.add_argument(
        "--eof",
        choices=[e.value for e in EofPolicy],
        default=EofPolicy.ZERO.value,
        help="What ',' stores once input is exhausted (default: zero)",
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bfstep", description="Brainfuck interpreter, stepping debugger and transpiler.")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="More logging (repeat for debug)")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a program to completion")
    _add_engine_args(run)
    run.add_argument("--max-steps", type=_positive_int, default=None, help="Stop after this many instructions")
    run.add_argument("--stats", action="store_true", help="Print timing and step count to stderr")

    debug = sub.add_parser("debug", help="Step through a program in the terminal")
    _add_engine_args(debug)
    debug.add_argument("--throttle", type=_positive_int, default=1, help="Instructions per redraw while running")

    tr = sub.add_parser("transpile", help="Generate an equivalent Python script")
    tr.add_argument("program", type=Path, help="Brainfuck source file")
    tr.add_argument("output", type=Path, help="Where to write the generated script")
    tr.add_argument("--dump-program", type=Path, help="Also dump the parsed program to this JSON file")
    tr.add_argument("--fixed-input", help="Bake this string in as the input instead of reading stdin")
    tr.add_argument("--memory-size", type=_positive_int, default=30_000, help="Tape size of the generated script")
    eof = tr.add_mutually_exclusive_group()
    eof.add_argument("--eof-value", type=int, default=0, help="Store this value on EOF (default: 0, as `run` does)")
    eof.add_argument("--eof-unchanged", action="store_true", help="Leave the cell unchanged on EOF")
    return parser


def _engine_config(args: argparse.Namespace) -> EngineConfig:
    return EngineConfig(
        tape_size=args.tape_size,
        underflow=UnderflowPolicy(args.underflow),
        eof=EofPolicy(args.eof),
    )


def _input_source(args: argparse.Namespace, *, allow_stdin: bool):
    if args.input is not None:
        return BytesInput(args.input.read_bytes())
    if args.fixed_input is not None:
        return BytesInput(args.fixed_input)
    if allow_stdin:
        return StreamInput(sys.stdin.buffer)
    return BytesInput(b'')


def _write_byte(b: int) -> None:
    sys.stdout.buffer.write(bytes((b,)))
    sys.stdout.buffer.flush()


def cmd_run(args: argparse.Namespace) -> int:
    program = parse_file(args.program)
    interp = Interpreter(program, _input_source(args, allow_stdin=True), sink=_write_byte, config=_engine_config(args))
    start = time.time()
    result = interp.run(max_steps=args.max_steps)
    end = time.time()
    if args.stats:
        print(f"\nExecution took {(end - start) * 1000:.2f} ms, {result.steps} steps", file=sys.stderr)
    if not result.state.halted:
        print(f"\nStopped after {result.steps} steps without halting (--max-steps)", file=sys.stderr)
        return 3
    return 0


def cmd_debug(args: argparse.Namespace) -> int:
    # Imported here: termios is POSIX-only and `run`/`transpile` must work without it.
    from .terminal import TerminalKeys, TerminalScreen

    if not sys.stdin.isatty():
        print("Error: debug needs an interactive terminal", file=sys.stderr)
        return 1

    program = parse_file(args.program)
    # stdin carries key presses, so program input comes from --input/--fixed-input only.
    interp = Interpreter(program, _input_source(args, allow_stdin=False), config=_engine_config(args))
    config = DebuggerConfig(throttle=args.throttle)
    with TerminalKeys(sys.stdin, config) as keys, TerminalScreen(sys.stdout) as screen:
        state = Debugger(interp, keys, screen, config).run()
    logger.info("debug session ended after %d steps (quit=%s)", interp.steps, state.quit_requested)
    sys.stdout.buffer.write(bytes(interp.output))
    sys.stdout.flush()
    return 0


def cmd_transpile(args: argparse.Namespace) -> int:
    program = parse_file(args.program)
    if args.dump_program is not None:
        dump_program(program, args.dump_program)
    options = GeneratorOptions(
        memory_size=args.memory_size,
        fixed_input=args.fixed_input,
        eof_value=None if args.eof_unchanged else args.eof_value,
    )
    args.output.write_text(generate_python(program, options), encoding="utf-8")
    logger.info("wrote %s (%d instructions)", args.output, len(program))
    return 0


COMMANDS = {
    "run": cmd_run,
    "debug": cmd_debug,
    "transpile": cmd_transpile,
}


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = log_level_from_env()
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    try:
        return COMMANDS[args.command](args)
    except BFError as e:
        print(e, file=sys.stderr)
        return 1
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
