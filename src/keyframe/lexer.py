## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# keyframe — A tiny scripting language executed straight from its token stream.
#

from .types import Token


SYMBOLS = frozenset(':,(){}[]=+!')
KEYWORDS = frozenset({'dec', 'print', 'if', 'for', 'function', 'return', 'and', 'or'})
BOOLEANS = frozenset({'true', 'false'})

NOT_A_NUMBER, INTEGER, DECIMAL = 0, 1, 2


def number_kind(capture: str) -> int:
    """Classify a capture as NOT_A_NUMBER, INTEGER or DECIMAL: digits with at most one dot."""
    if not capture: return NOT_A_NUMBER

    points = 0
    for ch in capture:
        if ch == '.':
            points += 1
            if points > 1: return NOT_A_NUMBER
        elif not ch.isdigit() or not ch.isascii():
            return NOT_A_NUMBER
    return INTEGER if points == 0 else DECIMAL


def classify(capture: str) -> str:
    if capture in KEYWORDS: return Token.KEYWORD
    if capture in BOOLEANS: return Token.BOOLEAN
    if len(capture) >= 2 and capture[0] == '"' and capture[-1] == '"': return Token.STRING
    if number_kind(capture) != NOT_A_NUMBER: return Token.NUMBER
    return Token.IDENTIFIER


def tokenize(source: str) -> list[Token]:
    tokens: list[Token] = []
    capture, quoted = "", False
    line, column, start = 1, 1, 1

    def flush():
        nonlocal capture
        if capture:
            tokens.append(Token(classify(capture), capture, line, start))
        capture = ""

    for ch in source:
        if ch == '\n':
            flush()
            tokens.append(Token(Token.NEWLINE, '\n', line, column))
            # An unterminated string never spans lines.
            quoted = False
            line, column = line + 1, 1
            continue

        if ch in SYMBOLS:
            flush()
            tokens.append(Token(Token.SYMBOL, ch, line, column))
        elif ch.isspace() and not quoted:
            flush()
        else:
            if ch == '"': quoted = not quoted
            if not capture: start = column
            capture += ch
        column += 1

    flush()
    return tokens
