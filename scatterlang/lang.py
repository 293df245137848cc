"""Core data types shared by the tokenizer, parser and program model."""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Optional, Tuple, Union


@dataclass(frozen=True, order=True)
class SourceLocation:
    """A position in source text: zero-based line, character offset and column."""

    line: int
    character: int
    column: int

    @classmethod
    def start(cls) -> "SourceLocation":
        """The location of the first character of a source."""
        return cls(line=0, character=0, column=0)


@dataclass(frozen=True)
class SourceRange:
    """An inclusive span between two source locations."""

    start: SourceLocation
    end: SourceLocation


class Symbol(enum.Enum):
    """Punctuation recognised by the tokenizer."""

    COLON = "Colon"
    AT = "At"
    CURLY_OPEN = "CurlyOpen"
    CURLY_CLOSE = "CurlyClose"
    PAREN_OPEN = "ParenOpen"
    PAREN_CLOSE = "ParenClose"
    SQUARE_OPEN = "SquareOpen"
    SQUARE_CLOSE = "SquareClose"
    HASH = "Hash"
    LINE_END = "LineEnd"

    def __str__(self) -> str:
        return self.value


class TokenKind(enum.Enum):
    """The category of a token."""

    STRING = "string"
    NUMBER = "number"
    BOOL = "bool"
    NAME = "name"
    SYMBOL = "symbol"


@dataclass(frozen=True)
class Token:
    """A lexical token: its kind and the value it carries."""

    kind: TokenKind
    value: Union[str, float, bool, Symbol]


@dataclass(frozen=True)
class ParsedToken:
    """A token together with the span of source it came from."""

    value: Token
    loc: SourceRange


@dataclass(frozen=True)
class Name:
    """A reference to a function or intrinsic by name."""

    name: str
    loc: SourceRange


@dataclass(frozen=True)
class Address:
    """A function pointer (written with @) to a named function."""

    name: str


@dataclass
class Block:
    """A sequence of terms executed in order."""

    terms: list = field(default_factory=list)


@dataclass
class Branch:
    """A conditional with one or more (condition, body) arms."""

    arms: list = field(default_factory=list)


@dataclass
class Loop:
    """A loop with an optional pre-condition and optional post-condition."""

    pre_condition: Optional[Block] = None
    body: Block = field(default_factory=Block)
    post_condition: Optional[Block] = None


Term = Union[str, float, bool, Name, Address, Branch, Loop]


@dataclass
class Function:
    """A named function and its body."""

    name: str
    body: Block = field(default_factory=Block)


@dataclass(frozen=True)
class ImportNaming:
    """How an import exposes names.

    With neither ``names`` nor ``prefix`` it is a wildcard import; with
    ``names`` only the listed functions are visible; with ``prefix`` the
    functions are reached as ``prefix.name``.
    """

    names: Optional[Tuple[str, ...]] = None
    prefix: Optional[str] = None

    def __post_init__(self) -> None:
        if self.names is not None and self.prefix is not None:
            raise ValueError("an import is either named or scoped, not both")
        if self.names is not None and not isinstance(self.names, tuple):
            object.__setattr__(self, "names", tuple(self.names))

    @property
    def is_wildcard(self) -> bool:
        return self.names is None and self.prefix is None

    @property
    def is_named(self) -> bool:
        return self.names is not None

    @property
    def is_scoped(self) -> bool:
        return self.prefix is not None


@dataclass(frozen=True)
class Import:
    """An import of another file by relative path."""

    naming: ImportNaming
    path: str


@dataclass
class Module:
    """A parsed source file: imports, function definitions and top-level body."""

    imports: list = field(default_factory=list)
    functions: list = field(default_factory=list)
    body: Block = field(default_factory=Block)