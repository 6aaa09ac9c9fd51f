## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import NamedTuple

from .types import Token


CLOSERS = {'(': ')', '{': '}', '[': ']'}


class Capture(NamedTuple):
    span: list[Token]
    end: int
    closed: bool


def capture(tokens: list[Token], index: int) -> Capture:
    """Extract the tokens between the delimiter at `index` and its matching closer.

    Only the opener's own pair is counted, so braces and parentheses never match each other.  The
    returned `end` is the position just past the closer; when the block is never closed, the span
    runs to the end of `tokens` and `closed` is False.
    """
    opener = tokens[index].lexeme
    assert tokens[index].kind == Token.SYMBOL and opener in CLOSERS, f"Cannot capture from `{opener}`."
    closer = CLOSERS[opener]

    depth = 1
    for i in range(index + 1, len(tokens)):
        tok = tokens[i]
        if tok.kind != Token.SYMBOL: continue
        if tok.lexeme == opener:
            depth += 1
        elif tok.lexeme == closer:
            depth -= 1
            if depth == 0:
                return Capture(tokens[index+1:i], i + 1, True)
    return Capture(tokens[index+1:], len(tokens), False)


def skip_newlines(tokens: list[Token], index: int) -> int:
    while index < len(tokens) and tokens[index].kind == Token.NEWLINE:
        index += 1
    return index


def split_arguments(span: list[Token]) -> list[list[Token]]:
    """Split a captured span on the commas that are not nested inside parentheses."""
    parts, current, depth = [], [], 0
    for tok in span:
        if tok.is_symbol('('): depth += 1
        elif tok.is_symbol(')'): depth -= 1
        if depth == 0 and tok.is_symbol(','):
            parts.append(current)
            current = []
        else:
            current.append(tok)
    parts.append(current)
    return parts
