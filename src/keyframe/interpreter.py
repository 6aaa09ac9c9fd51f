## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Callable

from .types import Token, Frame, Diagnostic, OutputLine, ExecutionResult
from .errors import KeyframeError, KeyframeSyntaxError, KeyframeTypeError, KeyframeRuntimeError, error_kind, error_class
from .blocks import Capture, capture, skip_newlines, split_arguments
from .lexer import number_kind, INTEGER
from .library import Library
from .expressions import evaluate, expression_extent
from .formatting import show_frame, show_value


def _at(tokens: list[Token], index: int) -> Token | None:
    return tokens[index] if 0 <= index < len(tokens) else None

def _is_symbol(tokens: list[Token], index: int, char: str) -> bool:
    return (tok := _at(tokens, index)) is not None and tok.is_symbol(char)

def _is_identifier(tokens: list[Token], index: int) -> bool:
    return (tok := _at(tokens, index)) is not None and tok.kind == Token.IDENTIFIER

def _malformed(keyword: str, shape: str, tok: Token) -> KeyframeSyntaxError:
    return KeyframeSyntaxError(f"Malformed `{keyword}` statement, expected `{shape}`.", kf_token=keyword, kf_line=tok.line)


class Interpreter:
    """Executes a token sequence statement by statement, without building a syntax tree.

    Nested blocks and function bodies are executed by re-entering the same loop on the captured span,
    each in its own `Frame` on an explicit stack.  Errors never abort the run: they are collected as
    `Diagnostic` records and execution carries on with the next statement.
    """

    def __init__(self, library: Library | None = None, *, verbosity: int = 0, max_depth: int = 64,
                 writer: Callable[[str], None] | None = None, reporter: Callable[[Diagnostic], None] | None = None):
        self.library = Library() if library is None else library
        self.verbosity = verbosity
        self.max_depth = max_depth
        self.writer = writer
        self.reporter = reporter

        self.frames: list[Frame] = []
        self.output: list[OutputLine] = []
        self.diagnostics: list[Diagnostic] = []
        self.steps = 0

        self._statements = {
            'dec': self._declaration,
            'print': self._print,
            'if': self._conditional,
            'for': self._loop,
            'function': self._function,
            'return': self._return,
        }

    @property
    def frame(self) -> Frame:
        return self.frames[-1]

    @property
    def line(self) -> int:
        """Source line of the statement currently executing, used to tag diagnostics."""
        for frame in reversed(self.frames):
            if (tok := _at(frame.tokens, min(frame.cursor, len(frame.tokens) - 1))) is not None:
                return tok.line
        return 0

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def execute(self, tokens: list[Token]) -> ExecutionResult:
        first = len(self.diagnostics)
        frame = self._run(Frame(list(tokens), Frame.PROGRAM))

        if frame.returned:
            return ExecutionResult.returned(frame.value)
        if errors := self.diagnostics[first:]:
            return ExecutionResult.error(errors[0].message, errors[0].line, errors)
        return ExecutionResult.success()

    def call_function(self, name: str, *, line: int = 0) -> Token:
        """Run the body of a function in a new frame, returning its value or a `none` token."""
        function = self.library.get_function(name, line=line)
        inner = self._enter(function.body, Frame.FUNCTION, name)
        return inner.value if inner.value is not None else Token(Token.NONE, '', line)

    def _run(self, frame: Frame) -> Frame:
        if len(self.frames) >= self.max_depth:
            raise KeyframeRuntimeError(f"Maximum nesting depth of {self.max_depth} frames exceeded.", kf_line=self.line)

        self.frames.append(frame)
        try:
            while frame.current is not None and not frame.returned:
                self._step(frame)
        except RecursionError:
            raise KeyframeRuntimeError(f"Nesting exhausted the interpreter stack at depth {len(self.frames)}.", kf_line=self.line) from None
        finally:
            self.frames.pop()
        return frame

    def _enter(self, tokens: list[Token], kind: str, name: str | None = None) -> Frame:
        inner = self._run(Frame(tokens, kind, name))
        # A return inside an `if` or `for` body also terminates the enclosing frames, up to a function.
        if inner.returned and kind != Frame.FUNCTION:
            outer = self.frame
            outer.returned, outer.value = True, inner.value
        return inner

    def _step(self, frame: Frame) -> None:
        tok = frame.current
        if tok.kind == Token.NEWLINE:
            frame.cursor += 1
            return

        self.steps += 1
        if self.verbosity > 0:
            show_frame(self.steps, frame, len(self.frames))

        start = frame.cursor
        try:
            if tok.kind == Token.KEYWORD and tok.lexeme in self._statements:
                self._statements[tok.lexeme](frame)
            elif tok.kind == Token.IDENTIFIER:
                self._call(frame)
            else:
                raise KeyframeSyntaxError(f"Unexpected `{tok.lexeme}` at start of statement.", kf_token=tok.lexeme, kf_line=tok.line)
        except KeyframeError as exc:
            self.report(exc, tok.line)
            # Malformed statements are skipped one token at a time.
            if frame.cursor == start: frame.cursor += 1

    # Diagnostics & output ────────────────────────────────────────────────────────────────────
    def report(self, exc: KeyframeError, line: int = 0) -> Diagnostic:
        diag = Diagnostic(error_kind(exc), str(exc), exc.kf_line or line)
        self.diagnostics.append(diag)
        if self.reporter is not None:
            self.reporter(diag)
        return diag

    def emit(self, text: str, line: int = 0) -> None:
        self.output.append(OutputLine(text, line))
        if self.writer is not None:
            self.writer(text)

    def _evaluate(self, span: list[Token]) -> Token:
        value = evaluate(span, self)
        if self.verbosity > 1:
            show_value(span, value, len(self.frames))
        if value.kind == Token.ERROR:
            raise error_class(value.error_kind)(value.lexeme, kf_line=value.line)
        return value

    def _block(self, keyword: str, cap: Capture, tok: Token) -> list[Token]:
        if not cap.closed:
            self.report(KeyframeSyntaxError(f"Unterminated block in `{keyword}`, it runs to the end of the code.", kf_line=tok.line))
        return cap.span

    # Statements ──────────────────────────────────────────────────────────────────────────────
    def _declaration(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        if not _is_identifier(tokens, i+1) or not _is_symbol(tokens, i+2, '='):
            raise _malformed('dec', 'dec name = value', tok)
        end = expression_extent(tokens, i+3)
        frame.cursor = end

        name = tokens[i+1].lexeme
        value = self._evaluate(tokens[i+3:end])
        if value.kind == Token.NONE:
            raise KeyframeTypeError(f"Value assigned to `{name}` is empty.", kf_token=name, kf_line=tok.line)
        self.library.declare(name, value)

    def _print(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        if not _is_symbol(tokens, i+1, '('):
            raise _malformed('print', 'print ( value )', tok)
        cap = capture(tokens, i+1)
        frame.cursor = cap.end

        value = self._evaluate(self._block('print', cap, tok))
        if value.kind == Token.NONE:
            raise KeyframeTypeError("Nothing to print, the value is empty.", kf_line=tok.line)
        self.emit(value.text, tok.line)

    def _conditional(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        if not _is_symbol(tokens, i+1, '('):
            raise _malformed('if', 'if ( condition ) { body }', tok)
        cond = capture(tokens, i+1)
        if not _is_symbol(tokens, (j := skip_newlines(tokens, cond.end)), '{'):
            raise _malformed('if', 'if ( condition ) { body }', tok)
        body = capture(tokens, j)
        frame.cursor = body.end

        span = self._block('if', body, tok)
        value = self._evaluate(cond.span)
        if value.kind != Token.BOOLEAN:
            raise KeyframeTypeError(f"Condition of `if` must be a boolean, got `{value.kind}`.", kf_line=tok.line)
        if value.lexeme == 'true':
            self._enter(span, Frame.BLOCK, 'if')

    def _bound(self, span: list[Token], which: str, tok: Token) -> int:
        value = self._evaluate(span)
        if value.kind != Token.NUMBER or number_kind(value.lexeme) != INTEGER:
            raise KeyframeTypeError(f"The {which} of a `for` range must be an integer, got `{value.lexeme}`.", kf_line=tok.line)
        return int(value.lexeme)

    def _loop(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        shape = 'for name ( start, end ) { body }'
        if not _is_identifier(tokens, i+1) or not _is_symbol(tokens, i+2, '('):
            raise _malformed('for', shape, tok)
        bounds = capture(tokens, i+2)
        if not _is_symbol(tokens, (j := skip_newlines(tokens, bounds.end)), '{'):
            raise _malformed('for', shape, tok)
        if len(args := split_arguments(bounds.span)) != 2:
            raise _malformed('for', shape, tok)
        body = capture(tokens, j)
        frame.cursor = body.end

        name, span = tokens[i+1].lexeme, self._block('for', body, tok)
        start, end = self._bound(args[0], 'start', tok), self._bound(args[1], 'end', tok)
        for n in range(start, end + 1):
            self.library.declare(name, Token(Token.NUMBER, str(n), tok.line))
            if self._enter(span, Frame.LOOP, name).returned:
                break

    def _function(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        shape = 'function name ( ) { body }'
        if not _is_identifier(tokens, i+1) or not _is_symbol(tokens, i+2, '(') or not _is_symbol(tokens, i+3, ')'):
            raise _malformed('function', shape, tok)
        if not _is_symbol(tokens, (j := skip_newlines(tokens, i+4)), '{'):
            raise _malformed('function', shape, tok)
        body = capture(tokens, j)
        frame.cursor = body.end

        self.library.add_function(tokens[i+1].lexeme, self._block('function', body, tok))

    def _return(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        if not _is_symbol(tokens, i+1, '('):
            raise _malformed('return', 'return ( value )', tok)
        cap = capture(tokens, i+1)
        frame.cursor = cap.end

        value = None
        try:
            span = [t for t in self._block('return', cap, tok) if t.kind != Token.NEWLINE]
            if span and (value := self._evaluate(span)).kind == Token.NONE:
                value = None
        finally:
            frame.returned, frame.value = True, value

    def _call(self, frame: Frame) -> None:
        tokens, i, tok = frame.tokens, frame.cursor, frame.current
        if not _is_symbol(tokens, i+1, '(') or not _is_symbol(tokens, i+2, ')'):
            raise KeyframeSyntaxError(f"Unexpected `{tok.lexeme}`, expected a statement or a call `{tok.lexeme}()`.",
                                      kf_token=tok.lexeme, kf_line=tok.line)
        frame.cursor = i + 3
        self.call_function(tok.lexeme, line=tok.line)
