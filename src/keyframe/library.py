## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from dataclasses import dataclass, field

from .types import Token, Variable, FunctionDef
from .errors import KeyframeNameError


@dataclass
class Library:
    """Memory of a program: one flat variable table and the functions in declaration order."""
    variables: dict[str, Variable] = field(default_factory=dict)
    functions: list[FunctionDef] = field(default_factory=list)

    # Variables
    def declare(self, name: str, value: Token) -> Variable:
        assert value.is_literal, f"Cannot store a `{value.kind}` token in memory."
        variable = Variable(type=value.kind, name=name, value=value.text)
        # Overwrite in place, so a re-declared variable keeps its original slot in the log.
        self.variables[name] = variable
        return variable

    def find_variable(self, name: str) -> Variable | None:
        return self.variables.get(name)

    def get_variable(self, name: str, *, line: int | None = None) -> Variable:
        if (variable := self.variables.get(name)) is not None:
            return variable
        raise KeyframeNameError(f"Variable `{name}` not found.", kf_token=name, kf_line=line)

    # Functions
    def add_function(self, name: str, body: list[Token]) -> FunctionDef:
        function = FunctionDef(name=name, body=list(body))
        self.functions.append(function)
        return function

    def find_function(self, name: str) -> FunctionDef | None:
        return next((fn for fn in self.functions if fn.name == name), None)

    def get_function(self, name: str, *, line: int | None = None) -> FunctionDef:
        if (function := self.find_function(name)) is not None:
            return function
        raise KeyframeNameError(f"Function `{name}` not found.", kf_token=name, kf_line=line)

    def clear(self) -> None:
        self.variables.clear()
        self.functions.clear()
