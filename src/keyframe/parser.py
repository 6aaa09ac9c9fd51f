## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘
#
# Static well-formedness check of a token sequence, before it gets executed.  The grammar mirrors the
# statement shapes the interpreter expects, but the parse tree is only used to accept or reject input.
#

import lark

from .types import Token
from .errors import KeyframeParseError, KeyframeIncompleteParse


GRAMMAR = r"""?start: (_statement | _NL)*
_statement: declaration | print_stmt | if_stmt | for_stmt | function_def | return_stmt | call

declaration: DEC NAME EQUAL expr
print_stmt: PRINT LPAR expr RPAR
if_stmt: IF LPAR expr RPAR _NL* block
for_stmt: FOR NAME LPAR expr COMMA expr RPAR _NL* block
function_def: FUNCTION NAME LPAR RPAR _NL* block
return_stmt: RETURN LPAR expr? RPAR
call: NAME LPAR RPAR
block: LBRACE (_statement | _NL)* RBRACE

expr: _operand (_operator _operand)*
_operand: STRING | NUMBER | BOOLEAN | NAME | call | LPAR expr RPAR
_operator: PLUS | AND | OR | EQUAL EQUAL | BANG EQUAL

%declare DEC PRINT IF FOR FUNCTION RETURN AND OR
%declare COLON COMMA LPAR RPAR LBRACE RBRACE LSQB RSQB EQUAL PLUS BANG
%declare STRING NUMBER BOOLEAN NAME _NL
"""


_SYMBOL_TERMINALS = {
    ':': 'COLON', ',': 'COMMA', '(': 'LPAR', ')': 'RPAR', '{': 'LBRACE', '}': 'RBRACE',
    '[': 'LSQB', ']': 'RSQB', '=': 'EQUAL', '+': 'PLUS', '!': 'BANG',
}
_KIND_TERMINALS = {
    Token.STRING: 'STRING', Token.NUMBER: 'NUMBER', Token.BOOLEAN: 'BOOLEAN',
    Token.IDENTIFIER: 'NAME', Token.NEWLINE: '_NL',
}


def terminal_name(tok: Token) -> str:
    if tok.kind == Token.KEYWORD: return tok.lexeme.upper()
    if tok.kind == Token.SYMBOL: return _SYMBOL_TERMINALS[tok.lexeme]
    if (name := _KIND_TERMINALS.get(tok.kind)) is not None: return name
    raise ValueError(f"Token kind `{tok.kind}` cannot appear in source code.")


class TokenLexer(lark.lexer.Lexer):
    """Feeds tokens from `keyframe.lexer.tokenize` to lark; line breaks inside parentheses are dropped."""

    def __init__(self, lexer_conf):
        pass

    def lex(self, data):
        depth = 0
        for tok in data:
            if tok.kind == Token.NEWLINE and depth > 0: continue
            if tok.is_symbol('('): depth += 1
            elif tok.is_symbol(')'): depth = max(0, depth - 1)
            yield lark.Token(terminal_name(tok), tok.lexeme, line=tok.line, column=tok.column,
                             end_line=tok.line, end_column=tok.column + len(tok.lexeme))


_PARSER: lark.Lark | None = None

def _get_parser() -> lark.Lark:
    global _PARSER
    if _PARSER is None:
        _PARSER = lark.Lark(GRAMMAR, parser="lalr", lexer=TokenLexer)
    return _PARSER


def check(tokens: list[Token], filename=None) -> None:
    """Raise `KeyframeParseError` if the tokens do not form a well-formed program."""
    try:
        _get_parser().parse(tokens)
    except lark.exceptions.UnexpectedToken as exc:
        token = exc.token
        if token.type == '$END':
            raise KeyframeIncompleteParse("Unexpected end of input, a block or expression is not finished.",
                                          filename=filename, line=exc.line, column=exc.column, token='') from None
        expected = ', '.join(sorted(e for e in exc.expected if not e.startswith('_')))
        raise KeyframeParseError(f"Unexpected `{token.value.strip()}`, expected one of: {expected}.",
                                 filename=filename, line=token.line, column=token.column, token=token.value) from None


def format_parse_error_context(filename, line, column, token_value, source=None):
    if source is None:
        with open(filename, 'r') as f:
            source = f.read()
    lines = source.splitlines(keepends=True)
    line = max(1, min(line or 1, len(lines)))
    start_line, end_line = max(0, line - 3), min(len(lines), line + 2)
    result = [f"\033[97m  File \"{filename}\", line {line}\033[0m"]

    for i in range(start_line, end_line):
        line_content = lines[i].rstrip('\n')
        line_color = '\033[90m'
        if i+1 == line:
            line_color = '\033[97m'
            if column and 0 < column <= len(line_content) and token_value:
                line_content = (
                    line_content[:column-1] +
                    f"\033[48;5;30m\033[1;97m{line_content[column-1:column+len(token_value)-1]}\033[0m" +
                    line_content[column+len(token_value)-1:]
                )
        result.append(f"{line_color}{i+1:>5} |\033[0m {line_content}")
    return '\n' + '\n'.join(result) + '\n'
