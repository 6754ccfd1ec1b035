#!/usr/bin/env python3
"""
Lexer: the source is a pure filter over the eight opcode characters.
"""

import sys
import os
sys.path.append(os.path.join(os.path.dirname(__file__), '..', 'src'))

from bfstep.lexer import Repeated, Token, group_repeats, scan, tokenize


def test_only_opcodes_survive():
    source = "hello +world- [>.<], # comment\n"
    tokens = tokenize(source)
    assert "".join(t.char for t in tokens) == "+-[>.<],"
    assert len(tokens) == sum(1 for ch in source if ch in "<>+-.,[]")


def test_empty_and_comment_only():
    assert tokenize("") == []
    assert tokenize("just words, no ops") == [Token.INPUT]
    assert tokenize("nothing here at all") == []


def test_every_character_maps():
    assert tokenize("><+-.,[]") == [
        Token.MOVE_RIGHT,
        Token.MOVE_LEFT,
        Token.INCREMENT,
        Token.DECREMENT,
        Token.OUTPUT,
        Token.INPUT,
        Token.LOOP_OPEN,
        Token.LOOP_CLOSE,
    ]


def test_scan_positions():
    lexemes = list(scan("a+\n  [b\n]"))
    assert [(lx.token, lx.line, lx.column) for lx in lexemes] == [
        (Token.INCREMENT, 1, 2),
        (Token.LOOP_OPEN, 2, 3),
        (Token.LOOP_CLOSE, 3, 1),
    ]
    assert [lx.offset for lx in lexemes] == [1, 5, 8]


def test_group_repeats():
    runs = group_repeats(tokenize("+++>>,,[[--]]"))
    assert runs == [
        Repeated(Token.INCREMENT, 3),
        Repeated(Token.MOVE_RIGHT, 2),
        Repeated(Token.INPUT, 1),
        Repeated(Token.INPUT, 1),
        Repeated(Token.LOOP_OPEN, 1),
        Repeated(Token.LOOP_OPEN, 1),
        Repeated(Token.DECREMENT, 2),
        Repeated(Token.LOOP_CLOSE, 1),
        Repeated(Token.LOOP_CLOSE, 1),
    ]
