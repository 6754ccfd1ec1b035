import logging

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List

logger = logging.getLogger(__name__)


class Token(Enum):
    """The eight opcodes, valued by their source character."""

    MOVE_RIGHT = '>'
    MOVE_LEFT = '<'
    INCREMENT = '+'
    DECREMENT = '-'
    OUTPUT = '.'
    INPUT = ','
    LOOP_OPEN = '['
    LOOP_CLOSE = ']'

    @property
    def char(self) -> str:
        return self.value


_BY_CHAR = {t.value: t for t in Token}


@dataclass(frozen=True)
class Lexeme:
    token: Token
    offset: int
    line: int
    column: int


@dataclass(frozen=True)
class Repeated:
    token: Token
    count: int


def scan(source: str) -> Iterator[Lexeme]:
    line = 1
    column = 1
    for offset, ch in enumerate(source):
        token = _BY_CHAR.get(ch)
        if token is not None:
            yield Lexeme(token, offset, line, column)
        if ch == '\n':
            line += 1
            column = 1
        else:
            column += 1


def tokenize(source: str) -> List[Token]:
    tokens = [lx.token for lx in scan(source)]
    logger.debug("tokenizer found %d tokens", len(tokens))
    return tokens


def group_repeats(tokens: Iterable[Token]) -> List[Repeated]:
    """Collapse runs of identical tokens.

    Loop brackets and input are never merged: each `[`/`]` is a distinct
    structural marker and each `,` consumes its own byte.
    """
    out: List[Repeated] = []
    for token in tokens:
        if (
            out
            and out[-1].token is token
            and token not in (Token.LOOP_OPEN, Token.LOOP_CLOSE, Token.INPUT)
        ):
            out[-1] = Repeated(token, out[-1].count + 1)
        else:
            out.append(Repeated(token, 1))
    logger.debug("tokenizer grouped to %d runs", len(out))
    return out
