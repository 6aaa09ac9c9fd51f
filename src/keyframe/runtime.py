## keyframe — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from typing import Callable

from .types import Token, Variable, Diagnostic, OutputLine, ExecutionResult
from .lexer import tokenize
from .parser import check
from .library import Library
from .interpreter import Interpreter


class Runtime:
    """Minimal runtime facade focused on embedding; memory persists across runs."""

    def __init__(self, library: Library | None = None, *, verbosity: int = 0, max_depth: int = 64,
                 writer: Callable[[str], None] | None = None, reporter: Callable[[Diagnostic], None] | None = None):
        self.library = Library() if library is None else library
        self.interpreter = Interpreter(self.library, verbosity=verbosity, max_depth=max_depth,
                                       writer=writer, reporter=reporter)

    # Front end ───────────────────────────────────────────────────────────────────────────────
    def tokenize(self, source: str) -> list[Token]:
        return tokenize(source)

    def check(self, source: str, filename: str | None = None) -> list[Token]:
        tokens = tokenize(source)
        check(tokens, filename=filename)
        return tokens

    # Execution ───────────────────────────────────────────────────────────────────────────────
    def run(self, source: str, filename: str | None = None, validate: bool = False) -> ExecutionResult:
        tokens = self.check(source, filename) if validate else tokenize(source)
        return self.interpreter.execute(tokens)

    def execute(self, tokens: list[Token]) -> ExecutionResult:
        return self.interpreter.execute(tokens)

    @property
    def output(self) -> list[OutputLine]:
        return self.interpreter.output

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return self.interpreter.diagnostics

    @property
    def steps(self) -> int:
        return self.interpreter.steps

    def lines(self) -> list[str]:
        return [out.text for out in self.interpreter.output]

    # Introspection ───────────────────────────────────────────────────────────────────────────
    def get_variable(self, name: str) -> Variable:
        return self.library.get_variable(name)

    def list_variables(self) -> dict[str, Variable]:
        return dict(self.library.variables)

    def list_functions(self) -> list[str]:
        return [fn.name for fn in self.library.functions]

    def reset(self) -> None:
        self.library.clear()
        self.interpreter.output.clear()
        self.interpreter.diagnostics.clear()
        self.interpreter.steps = 0
