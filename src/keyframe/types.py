## keyframe — Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

from dataclasses import dataclass, field


class Token:
    KEYWORD = 'keyword'
    SYMBOL = 'symbol'
    IDENTIFIER = 'identifier'
    STRING = 'string'
    NUMBER = 'number'
    BOOLEAN = 'boolean'
    NEWLINE = 'newline'
    ERROR = 'error'
    END = 'end'
    NONE = 'none'

    LITERALS = (STRING, NUMBER, BOOLEAN)

    __slots__ = ('kind', 'lexeme', 'line', 'column', 'error_kind')

    def __init__(self, kind, lexeme, line=0, column=0, error_kind=None):
        self.kind = kind
        self.lexeme = lexeme
        self.line = line
        self.column = column
        self.error_kind = error_kind

    def __repr__(self):
        return f"Token({self.kind}, {self.lexeme!r})"

    def __eq__(self, other):
        if not isinstance(other, Token): return NotImplemented
        return (self.kind, self.lexeme) == (other.kind, other.lexeme)

    def __hash__(self):
        return hash((self.kind, self.lexeme))

    def is_symbol(self, char: str) -> bool:
        return self.kind == Token.SYMBOL and self.lexeme == char

    def is_keyword(self, word: str) -> bool:
        return self.kind == Token.KEYWORD and self.lexeme == word

    @property
    def is_literal(self) -> bool:
        return self.kind in Token.LITERALS

    @property
    def text(self) -> str:
        """Value of the token as stored in memory, i.e. strings without their quotes."""
        if self.kind == Token.STRING and len(self.lexeme) >= 2:
            return self.lexeme[1:-1]
        return self.lexeme

    @classmethod
    def literal(cls, kind: str, text: str, line=0, column=0) -> "Token":
        """Build a literal token from a stored value, re-quoting strings."""
        lexeme = f'"{text}"' if kind == Token.STRING else text
        return cls(kind, lexeme, line, column)

    @classmethod
    def error(cls, message: str, kind: str, line=0) -> "Token":
        return cls(Token.ERROR, message, line, 0, error_kind=kind)


@dataclass
class Variable:
    type: str
    name: str
    value: str

    def as_token(self, line=0) -> Token:
        return Token.literal(self.type, self.value, line)


@dataclass
class FunctionDef:
    name: str
    body: list[Token]


@dataclass
class Frame:
    PROGRAM = 'program'
    BLOCK = 'block'
    LOOP = 'loop'
    FUNCTION = 'function'

    tokens: list[Token]
    kind: str = PROGRAM
    name: str | None = None
    cursor: int = 0
    returned: bool = False
    value: Token | None = None

    @property
    def current(self) -> Token | None:
        return self.tokens[self.cursor] if self.cursor < len(self.tokens) else None


@dataclass(frozen=True)
class Diagnostic:
    SYNTAX = 'syntax'
    TYPE = 'type'
    NAME = 'name'
    RUNTIME = 'runtime'

    kind: str
    message: str
    line: int = 0

    def __str__(self):
        return f"line {self.line}: {self.message}"


@dataclass(frozen=True)
class OutputLine:
    text: str
    line: int = 0


@dataclass(frozen=True)
class ExecutionResult:
    SUCCESS = 'success'
    RETURN = 'return'
    ERROR = 'error'

    status: str
    value: Token | None = None
    message: str = ""
    line: int = 0
    diagnostics: tuple[Diagnostic, ...] = field(default=(), compare=False)

    @classmethod
    def success(cls) -> "ExecutionResult":
        return cls(cls.SUCCESS)

    @classmethod
    def returned(cls, value: Token | None) -> "ExecutionResult":
        return cls(cls.RETURN, value=value)

    @classmethod
    def error(cls, message: str, line: int = 0, diagnostics=()) -> "ExecutionResult":
        return cls(cls.ERROR, message=message, line=line, diagnostics=tuple(diagnostics))

    @property
    def ok(self) -> bool:
        return self.status != ExecutionResult.ERROR

    def raise_for_error(self) -> "ExecutionResult":
        from .errors import KeyframeRuntimeError
        if self.status == ExecutionResult.ERROR:
            raise KeyframeRuntimeError(self.message, kf_line=self.line)
        return self
