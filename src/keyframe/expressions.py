## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import TYPE_CHECKING

from .types import Token
from .blocks import capture
from .errors import KeyframeError, KeyframeSyntaxError, KeyframeTypeError, error_kind

if TYPE_CHECKING:
    from .interpreter import Interpreter


def operator_at(tokens: list[Token], index: int) -> tuple[str, int] | None:
    """Return the operator starting at `index` and how many tokens it spans, if any."""
    if index >= len(tokens): return None
    tok = tokens[index]
    if tok.is_symbol('+'): return '+', 1
    if tok.is_keyword('and') or tok.is_keyword('or'): return tok.lexeme, 1
    if (tok.is_symbol('=') or tok.is_symbol('!')) and index + 1 < len(tokens) and tokens[index+1].is_symbol('='):
        return tok.lexeme + '=', 2
    return None


def operand_extent(tokens: list[Token], index: int) -> int:
    """Index just past the operand starting at `index`: literal, variable, call `f ( )` or `( group )`."""
    if index >= len(tokens):
        raise KeyframeSyntaxError("Expected a value but the expression ended.")
    tok = tokens[index]
    if tok.is_symbol('('):
        return capture(tokens, index).end
    if tok.kind == Token.IDENTIFIER:
        if index + 2 < len(tokens) and tokens[index+1].is_symbol('(') and tokens[index+2].is_symbol(')'):
            return index + 3
        return index + 1
    if tok.is_literal:
        return index + 1
    raise KeyframeSyntaxError(f"Expected a value, found `{tok.lexeme.strip()}`.", kf_token=tok.lexeme, kf_line=tok.line)


def expression_extent(tokens: list[Token], index: int) -> int:
    """Index just past the expression `operand (operator operand)*` starting at `index`."""
    end = operand_extent(tokens, index)
    while (op := operator_at(tokens, end)) is not None:
        end = operand_extent(tokens, end + op[1])
    return end


## OPERATORS
def _same_type(op: str, lhs: Token, rhs: Token) -> bool:
    if lhs.kind != rhs.kind:
        raise KeyframeTypeError(f"Attempt to compare different types, `{lhs.kind}` {op} `{rhs.kind}`.", kf_line=lhs.line)
    return lhs.text == rhs.text

def _boolean(value: bool, line: int) -> Token:
    return Token(Token.BOOLEAN, 'true' if value else 'false', line)

def apply_operator(op: str, lhs: Token, rhs: Token) -> Token:
    for side in (lhs, rhs):
        if side.kind == Token.NONE:
            raise KeyframeTypeError(f"Operand of `{op}` has no value.", kf_line=lhs.line)

    match op:
        case '==':
            return _boolean(_same_type(op, lhs, rhs), lhs.line)
        case '!=':
            return _boolean(not _same_type(op, lhs, rhs), lhs.line)
        case '+':
            if lhs.kind != Token.STRING or rhs.kind != Token.STRING:
                raise KeyframeTypeError(f"Cannot concatenate `{lhs.kind}` with `{rhs.kind}`, only strings.", kf_line=lhs.line)
            return Token.literal(Token.STRING, lhs.text + rhs.text, lhs.line)
        case _:
            assert op in ('and', 'or'), op
            if lhs.kind != Token.BOOLEAN or rhs.kind != Token.BOOLEAN:
                raise KeyframeTypeError(f"Operator `{op}` expects booleans, got `{lhs.kind}` and `{rhs.kind}`.", kf_line=lhs.line)
            a, b = lhs.lexeme == 'true', rhs.lexeme == 'true'
            return _boolean(a and b if op == 'and' else a or b, lhs.line)


## EVALUATION
def _operand(tokens: list[Token], interp: "Interpreter") -> Token:
    head = tokens[0]
    if head.is_symbol('('):
        group = capture(tokens, 0)
        if not group.closed:
            raise KeyframeSyntaxError("Unterminated `(` in expression.", kf_token='(', kf_line=head.line)
        return _evaluate(group.span, interp)
    if head.kind == Token.IDENTIFIER:
        if len(tokens) == 3:
            return interp.call_function(head.lexeme, line=head.line)
        variable = interp.library.get_variable(head.lexeme, line=head.line)
        return variable.as_token(head.line)
    return head


def _evaluate(span: list[Token], interp: "Interpreter") -> Token:
    if not span:
        raise KeyframeSyntaxError("Empty expression.", kf_line=interp.line)

    end = operand_extent(span, 0)
    value = _operand(span[:end], interp)
    while end < len(span):
        if (op := operator_at(span, end)) is None:
            tok = span[end]
            raise KeyframeSyntaxError(f"Unexpected `{tok.lexeme}` in expression.", kf_token=tok.lexeme, kf_line=tok.line)
        name, width = op
        start, end = end + width, operand_extent(span, end + width)
        value = apply_operator(name, value, _operand(span[start:end], interp))
    return value


def evaluate(span: list[Token], interp: "Interpreter") -> Token:
    """Evaluate an expression span into a literal token, a `none` token, or an `error` token."""
    span = [tok for tok in span if tok.kind != Token.NEWLINE]
    try:
        return _evaluate(span, interp)
    except KeyframeError as exc:
        line = exc.kf_line or (span[0].line if span else interp.line)
        return Token.error(str(exc), error_kind(exc), line)
