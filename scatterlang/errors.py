"""Errors raised while tokenizing and parsing, with human-readable details."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .lang import SourceLocation, SourceRange, Symbol


@dataclass(frozen=True)
class ErrorDetails:
    """A message, the source span it refers to, and optional extra help."""

    message: str
    location: SourceRange
    info: Optional[str] = None


def _span(start: SourceLocation, end: Optional[SourceLocation] = None) -> SourceRange:
    return SourceRange(start, start if end is None else end)


class WrappedExpression(enum.Enum):
    CONDITION = "condition"
    BRANCH = "branch"
    FUNCTION = "function"
    LOOP = "loop"
    IMPORT_NAME_LIST = "import name list"


class ParseSection(enum.Enum):
    CONDITION = "condition"
    BRANCH = "branch"
    LOOP = "loop"


class ReasonExpectingMore(enum.Enum):
    ADDRESS = "address"
    BRANCH = "branch"
    IMPORT_NAME = "import name"
    IMPORT_PATH = "import path"


class UnexpectedContext(enum.Enum):
    FIRST_IN_BRANCH = "first in branch"
    ADDRESS = "address"
    AFTER_POST_CONDITION = "after post condition"
    IMPORT_NAME_LIST = "import name list"
    IMPORT_NAMING = "import naming"
    IMPORT_PATH = "import path"


class EscapeSequenceError(enum.Enum):
    INVALID_CHARACTER = "invalid character"
    INVALID_HEX = "invalid hex"
    INVALID_UNICODE = "invalid unicode"
    EMPTY_UNICODE = "empty unicode"
    TOO_MANY_UNICODE_DIGITS = "too many unicode digits"
    OUT_OF_UNICODE_RANGE = "out of unicode range"


class ParseError(Exception):
    """Base of every error produced while reading source text."""

    _FIELDS: Tuple[str, ...] = ()
    _EARLY_EOF = False

    def __init__(self, details: ErrorDetails) -> None:
        super().__init__(details.message)
        self._details = details

    def is_early_eof(self) -> bool:
        """True when more input could make the source valid."""
        return self._EARLY_EOF

    def details(self) -> ErrorDetails:
        """The message, span and help text describing this error."""
        return self._details

    def _key(self) -> Tuple[Any, ...]:
        return tuple(getattr(self, name) for name in self._FIELDS)

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return NotImplemented
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self), self._key()))

    def __repr__(self) -> str:
        fields = ", ".join(f"{name}={getattr(self, name)!r}" for name in self._FIELDS)
        return f"{type(self).__name__}({fields})"


class TokenizeError(ParseError):
    """An error found while splitting source text into tokens."""


class UnboundedStringError(TokenizeError):
    _FIELDS = ("loc",)
    _EARLY_EOF = True

    def __init__(self, loc: SourceLocation) -> None:
        self.loc = loc
        super().__init__(
            ErrorDetails(
                "Unclosed string literal",
                _span(loc),
                "String literals can span multiple lines, so an earlier string may be unclosed",
            )
        )


_ESCAPE_DETAILS = {
    EscapeSequenceError.INVALID_CHARACTER: (
        "Invalid string escape character",
        r"Supported escapes are: '\n', '\r', '\t', '\0', '\xff', '\u{1f4a9}', and '\u0915'",
    ),
    EscapeSequenceError.INVALID_HEX: (
        "Invalid hex escape pattern",
        r"Correct hex escapes look like: '\xff'",
    ),
    EscapeSequenceError.INVALID_UNICODE: (
        "Unexpected character in unicode escape pattern",
        r"Unicode escape sequences contain a sequence of hex digits, such as '\u{1f4a9}' and '\u0915'",
    ),
    EscapeSequenceError.EMPTY_UNICODE: (
        "Expected at least one digit in unicode escape pattern",
        None,
    ),
    EscapeSequenceError.TOO_MANY_UNICODE_DIGITS: (
        "Exceeded maximum unicode sequence length",
        "Unicode codepoints do not exceed U+10FFFF which is only 6 digits",
    ),
    EscapeSequenceError.OUT_OF_UNICODE_RANGE: (
        "Unicode escape pattern is outside the allowable range",
        "Unicode codepoints range from U+0000 to U+10FFFF, with some invalid ranges in between",
    ),
}


class InvalidEscapeError(TokenizeError):
    _FIELDS = ("kind", "loc")

    def __init__(self, kind: EscapeSequenceError, loc: SourceLocation) -> None:
        self.kind = kind
        self.loc = loc
        message, info = _ESCAPE_DETAILS[kind]
        super().__init__(ErrorDetails(message, _span(loc), info))


class UnboundedCommentError(TokenizeError):
    _FIELDS = ("loc",)

    def __init__(self, loc: SourceLocation) -> None:
        self.loc = loc
        super().__init__(
            ErrorDetails(
                "End of input reached before ending comment",
                _span(loc),
                "Multiline comments are closed with: */",
            )
        )


class EndOfFileError(ParseError):
    """The input ended where more was required."""

    _EARLY_EOF = True


_UNCLOSED_INFO = {
    WrappedExpression.CONDITION: "Conditions are closed using: )",
    WrappedExpression.BRANCH: "Branch statements are closed using: }",
    WrappedExpression.FUNCTION: "Function bodies are closed using: }",
    WrappedExpression.LOOP: "Loops are closed using ]",
    WrappedExpression.IMPORT_NAME_LIST: (
        'Import name lists are closed using }, like: # {f1 f2} "./file.sl"'
    ),
}


class UnclosedExpressionError(EndOfFileError):
    _FIELDS = ("expression", "loc")

    def __init__(self, expression: WrappedExpression, loc: SourceLocation) -> None:
        self.expression = expression
        self.loc = loc
        super().__init__(
            ErrorDetails(
                f"End of file reached before close of {expression.value}",
                _span(loc),
                _UNCLOSED_INFO[expression],
            )
        )


_EXPECTED_MORE = {
    ReasonExpectingMore.ADDRESS: (
        "Incomplete function pointer expression",
        "A function pointer (@) must be followed directly by a function name",
    ),
    ReasonExpectingMore.BRANCH: (
        "Incomplete branch expression",
        "End a branch expression with: }",
    ),
    ReasonExpectingMore.IMPORT_NAME: (
        "Incomplete import statement",
        "An import (#) must specify a name, wildcard, or set of functions to import",
    ),
    ReasonExpectingMore.IMPORT_PATH: (
        "Incomplete import statement",
        'An import (#) must specify a relative path: # * "./file.sl"',
    ),
}


class ExpectedMoreError(EndOfFileError):
    _FIELDS = ("reason", "loc")

    def __init__(self, reason: ReasonExpectingMore, loc: SourceLocation) -> None:
        self.reason = reason
        self.loc = loc
        message, info = _EXPECTED_MORE[reason]
        super().__init__(ErrorDetails(message, _span(loc), info))


class UnexpectedError(ParseError):
    """Something appeared where it is not allowed."""


_CONTEXT_DETAILS = {
    UnexpectedContext.FIRST_IN_BRANCH: (
        "Branch must start with a condition",
        "Create a condition inside this branch statement with: {(condition) ... }",
    ),
    UnexpectedContext.ADDRESS: (
        "Invalid function pointer",
        "A function pointer (@) must be followed directly by a function name",
    ),
    UnexpectedContext.AFTER_POST_CONDITION: (
        "Unexpected expression after loop's post condition",
        "If a loop contains a post condition, it must be the last statement before the closing ]",
    ),
    UnexpectedContext.IMPORT_NAME_LIST: (
        "Unexpected expression in import name list",
        'Name lists should include only names separated by spaces, such as: # {name list} "./file1.sl"',
    ),
    UnexpectedContext.IMPORT_NAMING: (
        "Unexpected expression in import",
        "The first expression after # must follow the format: *, name, or {name list}",
    ),
    UnexpectedContext.IMPORT_PATH: (
        "Invalid import path",
        'The second expression after # must be a relative path like: # file1 "./file1.sl"',
    ),
}


class UnexpectedInContextError(UnexpectedError):
    _FIELDS = ("context", "context_start", "loc")

    def __init__(
        self,
        context: UnexpectedContext,
        context_start: SourceLocation,
        loc: SourceLocation,
    ) -> None:
        self.context = context
        self.context_start = context_start
        self.loc = loc
        message, info = _CONTEXT_DETAILS[context]
        if context is UnexpectedContext.ADDRESS:
            span = _span(context_start)
        else:
            span = _span(context_start, loc)
        super().__init__(ErrorDetails(message, span, info))


class UnexpectedSymbolInSectionError(UnexpectedError):
    _FIELDS = ("section", "section_start", "symbol", "symbol_location")

    def __init__(
        self,
        section: ParseSection,
        section_start: SourceLocation,
        symbol: Symbol,
        symbol_location: SourceLocation,
    ) -> None:
        self.section = section
        self.section_start = section_start
        self.symbol = symbol
        self.symbol_location = symbol_location
        super().__init__(
            ErrorDetails(
                f"Unexpected {symbol.value} in {section.value}",
                _span(section_start, symbol_location),
            )
        )


_SYMBOL_INFO = {
    Symbol.COLON: ": is only used at the top level to label functions",
    Symbol.CURLY_CLOSE: "The } symbol is only used to close branch or function blocks",
    Symbol.PAREN_CLOSE: "The ) symbol is only used to close condition blocks",
    Symbol.SQUARE_CLOSE: "The ] symbol is only used to close loops",
    Symbol.HASH: "The # symbol can only be used at the top level for imports",
}


class UnexpectedSymbolError(UnexpectedError):
    _FIELDS = ("symbol", "loc")

    def __init__(self, symbol: Symbol, loc: SourceLocation) -> None:
        self.symbol = symbol
        self.loc = loc
        super().__init__(
            ErrorDetails(
                f"Unexpected symbol: {symbol.value}",
                _span(loc),
                _SYMBOL_INFO.get(symbol),
            )
        )