"""Splitting source text into located tokens."""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

from .errors import (
    EscapeSequenceError,
    InvalidEscapeError,
    UnboundedCommentError,
    UnboundedStringError,
)
from .lang import ParsedToken, SourceLocation, SourceRange, Symbol, Token, TokenKind

__all__ = ["tokenize"]

_SYMBOLS = {
    ":": Symbol.COLON,
    "@": Symbol.AT,
    "{": Symbol.CURLY_OPEN,
    "}": Symbol.CURLY_CLOSE,
    "(": Symbol.PAREN_OPEN,
    ")": Symbol.PAREN_CLOSE,
    "[": Symbol.SQUARE_OPEN,
    "]": Symbol.SQUARE_CLOSE,
    "#": Symbol.HASH,
    "\n": Symbol.LINE_END,
}

_SIMPLE_ESCAPES = {
    "\\": "\\",
    '"': '"',
    "'": "'",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "0": "\0",
}

_NUMBER = re.compile(
    r"[+-]?(?:inf|infinity|nan|(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:e[+-]?[0-9]+)?)",
    re.IGNORECASE,
)

_HEX_DIGITS = "0123456789abcdef"


def _hex_value(char: str) -> Optional[int]:
    lowered = char.lower() if char.isascii() else char
    if len(lowered) == 1 and lowered in _HEX_DIGITS:
        return _HEX_DIGITS.index(lowered)
    return None


class _EscapeFailure(Exception):
    def __init__(self, kind: EscapeSequenceError) -> None:
        super().__init__(kind.value)
        self.kind = kind


_EscapeStep = Tuple[Optional["_Escape"], Optional[str]]


@dataclass
class _UnicodeEscape:
    waiting_for_bracket: bool = False
    value: int = 0
    digit_count: int = 0

    def _character(self) -> str:
        if self.digit_count == 0:
            raise _EscapeFailure(EscapeSequenceError.EMPTY_UNICODE)
        if self.value > 0x10FFFF or 0xD800 <= self.value <= 0xDFFF:
            raise _EscapeFailure(EscapeSequenceError.OUT_OF_UNICODE_RANGE)
        return chr(self.value)

    def feed(self, char: str) -> _EscapeStep:
        if char == "}":
            if not self.waiting_for_bracket:
                raise _EscapeFailure(EscapeSequenceError.INVALID_UNICODE)
            return None, self._character()

        if self.digit_count == 0 and char == "{":
            self.waiting_for_bracket = True
        else:
            digit = _hex_value(char)
            if digit is None:
                raise _EscapeFailure(EscapeSequenceError.INVALID_UNICODE)
            if self.digit_count >= 6:
                raise _EscapeFailure(EscapeSequenceError.TOO_MANY_UNICODE_DIGITS)
            self.digit_count += 1
            self.value = self.value * 16 + digit

        if self.digit_count == 4 and not self.waiting_for_bracket:
            return None, self._character()
        return self, None


@dataclass
class _HexEscape:
    first: Optional[str] = None

    def feed(self, char: str) -> _EscapeStep:
        if self.first is None:
            return _HexEscape(char), None
        high, low = _hex_value(self.first), _hex_value(char)
        if high is None or low is None:
            raise _EscapeFailure(EscapeSequenceError.INVALID_HEX)
        return None, chr(high * 16 + low)


class _EscapeStart:
    def feed(self, char: str) -> _EscapeStep:
        if char in _SIMPLE_ESCAPES:
            return None, _SIMPLE_ESCAPES[char]
        if char == "\n":
            return None, None
        if char == "x":
            return _HexEscape(), None
        if char == "u":
            return _UnicodeEscape(), None
        raise _EscapeFailure(EscapeSequenceError.INVALID_CHARACTER)


_Escape = Union[_EscapeStart, _HexEscape, _UnicodeEscape]


@dataclass(frozen=True)
class _Positions:
    prev: Optional[SourceLocation]
    current: SourceLocation
    next: Optional[SourceLocation]


def _walk(source: str) -> Iterator[Tuple[str, Optional[str], _Positions]]:
    """Yield each character with the following one and the surrounding locations."""
    prev: Optional[SourceLocation] = None
    current = SourceLocation.start()
    for index, char in enumerate(source):
        has_next = index + 1 < len(source)
        following: Optional[SourceLocation] = None
        if has_next:
            if char == "\n":
                following = SourceLocation(current.line + 1, index + 1, 0)
            else:
                following = SourceLocation(current.line, index + 1, current.column + 1)
        yield char, source[index + 1] if has_next else None, _Positions(prev, current, following)
        prev = current
        if following is not None:
            current = following


class _Mode(enum.Enum):
    NORMAL = enum.auto()
    STRING = enum.auto()
    LINE_COMMENT = enum.auto()
    RANGE_COMMENT = enum.auto()


class _CommentStage(enum.Enum):
    START = enum.auto()
    INNER = enum.auto()
    NEXT_SLASH_ENDS = enum.auto()


def _word_token(word: str) -> Token:
    if _NUMBER.fullmatch(word):
        return Token(TokenKind.NUMBER, float(word))
    if word == "true":
        return Token(TokenKind.BOOL, True)
    if word == "false":
        return Token(TokenKind.BOOL, False)
    return Token(TokenKind.NAME, word)


class _Lexer:
    def __init__(self, starts_with_shebang: bool) -> None:
        self.tokens: List[ParsedToken] = []
        self._mode = _Mode.LINE_COMMENT if starts_with_shebang else _Mode.NORMAL
        self._start = SourceLocation.start()
        self._word: List[str] = []
        self._delimiter = '"'
        self._escape: Optional[_Escape] = None
        self._stage = _CommentStage.START

    def feed(self, char: str, next_char: Optional[str], pos: _Positions) -> bool:
        """Consume one character; False means tokenizing stops here."""
        if self._mode is _Mode.NORMAL:
            self._feed_normal(char, next_char, pos)
            return True
        if self._mode is _Mode.STRING:
            return self._feed_string(char, pos)
        if self._mode is _Mode.RANGE_COMMENT:
            return self._feed_range_comment(char, pos)
        if char == "\n":
            return self._resume(pos)
        return True

    def finish(self, last: SourceLocation) -> None:
        if self._mode is _Mode.STRING:
            raise UnboundedStringError(self._start)
        if self._mode is _Mode.RANGE_COMMENT:
            raise UnboundedCommentError(self._start)
        if self._mode is _Mode.NORMAL:
            self._finish_word(last)

    def _resume(self, pos: _Positions) -> bool:
        if pos.next is None:
            return False
        self._mode = _Mode.NORMAL
        self._start = pos.next
        self._word = []
        return True

    def _finish_word(self, end: Optional[SourceLocation]) -> None:
        if not self._word:
            return
        if end is None:
            raise AssertionError("a non-empty word must have a previous location")
        token = _word_token("".join(self._word))
        self._word = []
        self.tokens.append(ParsedToken(token, SourceRange(self._start, end)))

    def _advance(self, pos: _Positions) -> None:
        self._finish_word(pos.prev)
        if pos.next is not None:
            self._start = pos.next

    def _feed_normal(self, char: str, next_char: Optional[str], pos: _Positions) -> None:
        symbol = _SYMBOLS.get(char)
        if symbol is not None:
            self._advance(pos)
            here = SourceRange(pos.current, pos.current)
            self.tokens.append(ParsedToken(Token(TokenKind.SYMBOL, symbol), here))
        elif char in "\"'":
            self._advance(pos)
            self._mode = _Mode.STRING
            self._start = pos.current
            self._delimiter = char
            self._word = []
            self._escape = None
        elif char == "/" and next_char == "/":
            self._advance(pos)
            self._mode = _Mode.LINE_COMMENT
        elif char == "/" and next_char == "*":
            self._advance(pos)
            self._mode = _Mode.RANGE_COMMENT
            self._start = pos.current
            self._stage = _CommentStage.START
        elif char == " ":
            self._advance(pos)
        else:
            self._word.append(char)

    def _feed_string(self, char: str, pos: _Positions) -> bool:
        if self._escape is not None:
            try:
                self._escape, produced = self._escape.feed(char)
            except _EscapeFailure as failure:
                raise InvalidEscapeError(failure.kind, pos.current) from None
            if produced is not None:
                self._word.append(produced)
        elif char == self._delimiter:
            token = Token(TokenKind.STRING, "".join(self._word))
            self.tokens.append(ParsedToken(token, SourceRange(self._start, pos.current)))
            return self._resume(pos)
        elif char == "\\":
            self._escape = _EscapeStart()
        else:
            self._word.append(char)
        return True

    def _feed_range_comment(self, char: str, pos: _Positions) -> bool:
        stage = self._stage
        if stage is _CommentStage.START:
            if char != "*":
                raise AssertionError("first character of range comment should always be *")
            self._stage = _CommentStage.INNER
        elif stage is _CommentStage.INNER:
            if char == "*":
                self._stage = _CommentStage.NEXT_SLASH_ENDS
        elif char == "/":
            return self._resume(pos)
        elif char != "*":
            self._stage = _CommentStage.INNER
        return True


def tokenize(source: str) -> List[ParsedToken]:
    """Split source text into tokens, each with the span it came from.

    Raises a TokenizeError subclass for unclosed strings or comments and for
    invalid escape sequences.
    """
    if not source:
        return []
    lexer = _Lexer(source.startswith("#!"))
    last = SourceLocation.start()
    for char, next_char, pos in _walk(source):
        last = pos.current
        if not lexer.feed(char, next_char, pos):
            return lexer.tokens
    lexer.finish(last)
    return lexer.tokens