from .assembler import Instruction, Program, assemble, parse
from .config import DebuggerConfig, EngineConfig, EofPolicy, UnderflowPolicy
from .debugger import Debugger, DebuggerState, Frame, KeyEvent, KeySource, Mode
from .engine import BytesInput, Engine, ExecutionState, Interpreter, OutcomeKind, StepOutcome, StreamInput
from .errors import BFError, BFRuntimeError, BFSyntaxError, PointerUnderflow, UnmatchedLoopClose, UnmatchedLoopOpen
from .lexer import Token, tokenize
from .api import dump_program, parse_file, run_file, run_string, transpile_string

__all__ = [
    'Instruction',
    'Program',
    'assemble',
    'parse',
    'Token',
    'tokenize',
    'Engine',
    'ExecutionState',
    'StepOutcome',
    'OutcomeKind',
    'Interpreter',
    'BytesInput',
    'StreamInput',
    'EngineConfig',
    'DebuggerConfig',
    'UnderflowPolicy',
    'EofPolicy',
    'Debugger',
    'DebuggerState',
    'Frame',
    'KeyEvent',
    'KeySource',
    'Mode',
    'BFError',
    'BFSyntaxError',
    'BFRuntimeError',
    'UnmatchedLoopOpen',
    'UnmatchedLoopClose',
    'PointerUnderflow',
    'parse_file',
    'run_string',
    'run_file',
    'transpile_string',
    'dump_program',
]
