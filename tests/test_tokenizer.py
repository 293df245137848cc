import math

import pytest

from scatterlang.errors import (
    EscapeSequenceError,
    InvalidEscapeError,
    UnboundedCommentError,
    UnboundedStringError,
)
from scatterlang.lang import SourceLocation, SourceRange, Symbol, Token, TokenKind
from scatterlang.tokenizer import tokenize


def values(source):
    return [t.value for t in tokenize(source)]


def name(text):
    return Token(TokenKind.NAME, text)


def string(text):
    return Token(TokenKind.STRING, text)


def number(value):
    return Token(TokenKind.NUMBER, value)


def symbol(sym):
    return Token(TokenKind.SYMBOL, sym)


def loc(line, character, column):
    return SourceLocation(line=line, character=character, column=column)


def test_string_1():
    assert values('"\\t\\r\\n"') == [string("\t\r\n")]


def test_string_2():
    with pytest.raises(InvalidEscapeError) as info:
        tokenize('"\\1"')
    assert info.value == InvalidEscapeError(EscapeSequenceError.INVALID_CHARACTER, loc(0, 2, 2))


def test_string_3():
    with pytest.raises(InvalidEscapeError) as info:
        tokenize('"\\xf-"')
    assert info.value == InvalidEscapeError(EscapeSequenceError.INVALID_HEX, loc(0, 4, 4))


def test_string_4():
    assert values("'a'") == [string("a")]


def test_string_5():
    assert values("'a' test") == [string("a"), name("test")]


def test_normal_1():
    assert values("a") == [name("a")]


def test_unbounded_1():
    with pytest.raises(UnboundedStringError) as info:
        tokenize("'a")
    assert info.value == UnboundedStringError(loc(0, 0, 0))
    assert info.value.is_early_eof()


def test_unbounded_2():
    with pytest.raises(UnboundedCommentError) as info:
        tokenize("/* a")
    assert info.value == UnboundedCommentError(loc(0, 0, 0))
    assert not info.value.is_early_eof()


@pytest.mark.parametrize("source", ["", "// test", "// test\n"])
def test_empty(source):
    assert tokenize(source) == []


def test_symbols_in_order():
    assert values(":@{}()[]#") == [
        symbol(Symbol.COLON),
        symbol(Symbol.AT),
        symbol(Symbol.CURLY_OPEN),
        symbol(Symbol.CURLY_CLOSE),
        symbol(Symbol.PAREN_OPEN),
        symbol(Symbol.PAREN_CLOSE),
        symbol(Symbol.SQUARE_OPEN),
        symbol(Symbol.SQUARE_CLOSE),
        symbol(Symbol.HASH),
    ]


def test_locations_across_lines():
    tokens = tokenize("a\nbc")
    assert [t.loc for t in tokens] == [
        SourceRange(loc(0, 0, 0), loc(0, 0, 0)),
        SourceRange(loc(0, 1, 1), loc(0, 1, 1)),
        SourceRange(loc(1, 2, 0), loc(1, 3, 1)),
    ]
    assert [t.value for t in tokens] == [name("a"), symbol(Symbol.LINE_END), name("bc")]


def test_string_range_includes_quotes():
    tokens = tokenize("x 'ab'")
    assert tokens[1].loc == SourceRange(loc(0, 2, 2), loc(0, 5, 5))


def test_word_adjacent_to_symbol():
    tokens = tokenize("fn:{1}")
    assert [t.value for t in tokens] == [
        name("fn"),
        symbol(Symbol.COLON),
        symbol(Symbol.CURLY_OPEN),
        number(1.0),
        symbol(Symbol.CURLY_CLOSE),
    ]
    assert tokens[0].loc == SourceRange(loc(0, 0, 0), loc(0, 1, 1))


def test_numbers_bools_and_names():
    assert values("1.5 -2 .5 1e3 true false x - + . 1_000") == [
        number(1.5),
        number(-2.0),
        number(0.5),
        number(1000.0),
        Token(TokenKind.BOOL, True),
        Token(TokenKind.BOOL, False),
        name("x"),
        name("-"),
        name("+"),
        name("."),
        name("1_000"),
    ]


def test_special_floats():
    inf, nan = tokenize("inf NaN")
    assert inf.value == number(math.inf)
    assert nan.value.kind is TokenKind.NUMBER
    assert math.isnan(nan.value.value)


def test_tab_is_part_of_word():
    assert values("a\tb") == [name("a\tb")]


def test_line_comment_swallows_line_end():
    assert values("a//c\nb") == [name("a"), name("b")]


def test_range_comment():
    assert values("1 /* c ** / */ 2") == [number(1.0), number(2.0)]


def test_range_comment_at_end():
    assert values("1 /* c */") == [number(1.0)]


def test_shebang_is_skipped():
    assert values("#!/usr/bin/env run\n1") == [number(1.0)]


def test_word_after_string():
    assert values("'a'b") == [string("a"), name("b")]


def test_string_spans_lines():
    assert values("'a\nb'") == [string("a\nb")]


def test_line_continuation_escape():
    assert values('"a\\\nb"') == [string("ab")]


def test_quote_escapes():
    assert values("'\\'\\\"\\\\\\0'") == [string("'\"\\\0")]


def test_hex_escape():
    assert values('"\\x41\\xff"') == [string("A\u00ff")]


def test_unicode_escapes():
    assert values('"\\u{1f4a9}\\u0915"') == [string("\U0001f4a9\u0915")]


@pytest.mark.parametrize(
    "source, kind, location",
    [
        ('"\\u{}"', EscapeSequenceError.EMPTY_UNICODE, loc(0, 4, 4)),
        ('"\\u}"', EscapeSequenceError.INVALID_UNICODE, loc(0, 3, 3)),
        ('"\\u12g4"', EscapeSequenceError.INVALID_UNICODE, loc(0, 5, 5)),
        ('"\\u{1234567}"', EscapeSequenceError.TOO_MANY_UNICODE_DIGITS, loc(0, 10, 10)),
        ('"\\u{110000}"', EscapeSequenceError.OUT_OF_UNICODE_RANGE, loc(0, 10, 10)),
        ('"\\ud800"', EscapeSequenceError.OUT_OF_UNICODE_RANGE, loc(0, 6, 6)),
    ],
)
def test_unicode_escape_errors(source, kind, location):
    with pytest.raises(InvalidEscapeError) as info:
        tokenize(source)
    assert info.value == InvalidEscapeError(kind, location)


def test_unclosed_string_after_newline_reports_start():
    with pytest.raises(UnboundedStringError) as info:
        tokenize("a\n 'x")
    assert info.value.loc == loc(1, 3, 1)