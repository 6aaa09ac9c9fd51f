## Copyright © 2025, Alex J. Champandard.  Licensed under AGPLv3; see LICENSE! ⚘

import lark


class KeyframeError(Exception):
    def __init__(self, message: str = "", *, kf_token=None, kf_line=None):
        """Base class for all Keyframe-raised errors."""
        super().__init__(message)
        self.kf_token: str = kf_token
        self.kf_line: int = kf_line

class KeyframeParseError(KeyframeError):
    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message, kf_token=token, kf_line=line)
        self.filename = filename
        self.line = line
        self.column = column
        self.token = token

class KeyframeIncompleteParse(KeyframeParseError, lark.exceptions.ParseError):
    def __init__(self, message, *, filename=None, line=None, column=None, token=None):
        super().__init__(message, filename=filename, line=line, column=column, token=token)


class KeyframeSyntaxError(KeyframeError, SyntaxError):
    """Statement found at runtime that does not match the shape of its keyword."""
    pass

class KeyframeNameError(KeyframeError, NameError):
    pass

class KeyframeTypeError(KeyframeError, TypeError):
    pass

class KeyframeRuntimeError(KeyframeError, RuntimeError):
    pass


# Error tokens and diagnostics carry the kind of failure as a plain string.
_ERROR_KINDS = {
    'syntax': KeyframeSyntaxError,
    'type': KeyframeTypeError,
    'name': KeyframeNameError,
    'runtime': KeyframeRuntimeError,
}

def error_kind(exc: KeyframeError) -> str:
    return next((k for k, cls in _ERROR_KINDS.items() if isinstance(exc, cls)), 'runtime')

def error_class(kind: str) -> type[KeyframeError]:
    return _ERROR_KINDS.get(kind, KeyframeRuntimeError)
