## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import re
import sys

from .types import Token, Variable, Frame, Diagnostic


def write_without_ansi(write_fn):
    """Wrapper function that strips ANSI codes before calling the original writer."""
    ansi_re = re.compile(r'\033\[[0-9;]*m')
    return lambda text: write_fn(ansi_re.sub('', text))


def format_token(tok: Token) -> str:
    lexeme = '\\n' if tok.kind == Token.NEWLINE else tok.lexeme
    return f"Token({tok.kind}, {lexeme})"

def format_value(tok: Token | None) -> str:
    if tok is None or tok.kind == Token.NONE: return '∅'
    if tok.kind == Token.ERROR: return f'≪error:{tok.error_kind}≫'
    return tok.lexeme

def format_variable(var: Variable) -> str:
    return f"[{var.type}, {var.name} = {var.value}]"

def format_tokens(tokens: list[Token], width=None) -> str:
    text = ' '.join('⏎' if t.kind == Token.NEWLINE else t.lexeme for t in tokens)
    if width is not None and len(text) > width:
        text = text[:width-2] + ' …'
    return text

def format_diagnostic(diag: Diagnostic, filename: str | None = None) -> str:
    where = f"\"{filename}\", line {diag.line}" if filename else f"line {diag.line}"
    return f"{where}: {diag.message} \033[90m({diag.kind})\033[0m"


def show_tokens(tokens: list[Token], file=None):
    for tok in tokens:
        print(format_token(tok), file=file)

def show_memory(library, file=None):
    print("\n\033[97mFull Memory Log:\033[0m", file=file)
    for var in library.variables.values():
        print(format_variable(var), file=file)
    for fn in library.functions:
        print(f"[function, {fn.name} = {{ {format_tokens(fn.body, width=48)} }}]", file=file)

def show_frame(step: int, frame: Frame, depth: int, width=72, file=None):
    statement = frame.tokens[frame.cursor:]
    until = next((i for i, t in enumerate(statement) if t.kind == Token.NEWLINE), len(statement))
    indent = '  ' * (depth - 1)
    label = frame.kind if frame.name is None else f"{frame.kind}:{frame.name}"
    print(f"\033[90m{step:>3} :\033[0m {indent}\033[36m{label:<12}\033[0m {format_tokens(statement[:until], width)}",
          file=file or sys.stdout)

def show_value(span: list[Token], value: Token, depth: int, width=72, file=None):
    indent = '  ' * depth
    print(f"\033[90m    :\033[0m {indent}{format_tokens(span, width)} \033[36m =>\033[0m {format_value(value)}",
          file=file or sys.stdout)
