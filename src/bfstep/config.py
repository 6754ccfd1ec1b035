from __future__ import annotations

import logging
import os

from dataclasses import dataclass
from enum import Enum

DEFAULT_TAPE_SIZE = 30_000
LOG_ENV_VAR = 'BFSTEP_LOG'


class UnderflowPolicy(Enum):
    """What `<` does at cell 0."""

    CLAMP = 'clamp'  # stay on cell 0
    FAIL = 'fail'  # raise PointerUnderflow
    WRAP = 'wrap'  # jump to the last cell of the current tape


class EofPolicy(Enum):
    """What `,` stores once the input source is exhausted."""

    ZERO = 'zero'
    UNCHANGED = 'unchanged'


@dataclass(frozen=True)
class EngineConfig:
    tape_size: int = DEFAULT_TAPE_SIZE
    underflow: UnderflowPolicy = UnderflowPolicy.CLAMP
    eof: EofPolicy = EofPolicy.ZERO

    def __post_init__(self) -> None:
        if self.tape_size < 1:
            raise ValueError(f"tape_size must be positive, got {self.tape_size}")


@dataclass(frozen=True)
class DebuggerConfig:
    throttle: int = 1
    continue_key: str = 'c'
    pause_key: str = 'p'
    quit_key: str = 'q'

    def __post_init__(self) -> None:
        if self.throttle < 1:
            raise ValueError(f"throttle must be at least 1, got {self.throttle}")


def log_level_from_env(default: int = logging.WARNING) -> int:
    raw = os.environ.get(LOG_ENV_VAR)
    if not raw:
        return default
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else default
