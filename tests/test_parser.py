import pytest

from scatterlang.errors import (
    ExpectedMoreError,
    ParseSection,
    ReasonExpectingMore,
    UnboundedStringError,
    UnclosedExpressionError,
    UnexpectedContext,
    UnexpectedInContextError,
    UnexpectedSymbolError,
    UnexpectedSymbolInSectionError,
    WrappedExpression,
)
from scatterlang.lang import Address, Block, Branch, Loop, Module, Name, SourceLocation, Symbol
from scatterlang.parser import parse


def names(block):
    return [t.name if isinstance(t, Name) else t for t in block.terms]


def test_empty_source():
    assert parse("") == Module()


def test_literals_in_body():
    module = parse('1 true "s" name')
    terms = module.body.terms
    assert terms[0] == 1.0 and type(terms[0]) is float
    assert terms[1] is True
    assert terms[2] == "s"
    assert isinstance(terms[3], Name) and terms[3].name == "name"


def test_name_location_spans_word():
    (term,) = parse("name").body.terms
    assert term.loc.start == SourceLocation.start()
    assert term.loc.end.character - term.loc.start.character == len("name") - 1


def test_single_line_function():
    module = parse("fn: 1 2")
    assert [f.name for f in module.functions] == ["fn"]
    assert module.functions[0].body.terms == [1.0, 2.0]
    assert module.body.terms == []


def test_single_line_function_stops_at_line_end():
    module = parse("fn: 1\n2")
    assert module.functions[0].body.terms == [1.0]
    assert module.body.terms == [2.0]


def test_multiline_function():
    module = parse("fn: {\n1\n2\n}\nfn")
    assert module.functions[0].body.terms == [1.0, 2.0]
    assert names(module.body) == ["fn"]


@pytest.mark.parametrize("source", ["fn:", "fn:\n", "fn:\n3"])
def test_empty_function(source):
    module = parse(source)
    assert module.functions[0].body == Block()


def test_branch_arms():
    (branch,) = parse("{(0) a (1) b}").body.terms
    assert isinstance(branch, Branch)
    assert [(c.terms, names(b)) for c, b in branch.arms] == [([0.0], ["a"]), ([1.0], ["b"])]


def test_loop_with_conditions():
    (loop,) = parse("[(a) b (c)]").body.terms
    assert isinstance(loop, Loop)
    assert names(loop.pre_condition) == ["a"]
    assert names(loop.body) == ["b"]
    assert names(loop.post_condition) == ["c"]


def test_loop_without_pre_condition():
    (loop,) = parse("[1 ()]").body.terms
    assert loop.pre_condition is None
    assert loop.body.terms == [1.0]
    assert loop.post_condition == Block()


def test_nested_structures():
    module = parse("fn: {[(1) {(2) 3}]}")
    (loop,) = module.functions[0].body.terms
    (branch,) = loop.body.terms
    assert branch.arms[0][1].terms == [3.0]


def test_address():
    assert parse("@fn").body.terms == [Address("fn")]


def test_address_in_function():
    assert parse("f: @g").functions[0].body.terms == [Address("g")]


def test_wildcard_import():
    (imp,) = parse('# * "./a.sl"').imports
    assert imp.naming.is_wildcard
    assert imp.path == "./a.sl"


def test_scoped_import():
    (imp,) = parse('# h "./h.sl"').imports
    assert imp.naming.prefix == "h"


def test_named_import():
    (imp,) = parse('# {a b} "./x.sl"').imports
    assert imp.naming.names == ("a", "b")


def test_address_needs_more():
    with pytest.raises(ExpectedMoreError) as info:
        parse("@")
    assert info.value.reason is ReasonExpectingMore.ADDRESS
    assert info.value.loc == SourceLocation.start()
    assert info.value.is_early_eof()


def test_address_of_non_name():
    with pytest.raises(UnexpectedInContextError) as info:
        parse("@ 1")
    assert info.value.context is UnexpectedContext.ADDRESS
    assert not info.value.is_early_eof()


def test_unexpected_close_paren():
    with pytest.raises(UnexpectedSymbolError) as info:
        parse(")")
    assert info.value.symbol is Symbol.PAREN_CLOSE
    assert info.value.loc == SourceLocation.start()


def test_unclosed_function():
    with pytest.raises(UnclosedExpressionError) as info:
        parse("fn: {")
    assert info.value.expression is WrappedExpression.FUNCTION


def test_branch_needs_condition_first():
    with pytest.raises(UnexpectedInContextError) as info:
        parse("{1}")
    assert info.value.context is UnexpectedContext.FIRST_IN_BRANCH
    assert info.value.context_start == SourceLocation.start()


def test_branch_needs_more():
    with pytest.raises(ExpectedMoreError) as info:
        parse("{")
    assert info.value.reason is ReasonExpectingMore.BRANCH


def test_unclosed_condition():
    with pytest.raises(UnclosedExpressionError) as info:
        parse("{(1")
    assert info.value.expression is WrappedExpression.CONDITION


def test_unclosed_branch():
    with pytest.raises(UnclosedExpressionError) as info:
        parse("{(1) 2")
    assert info.value.expression is WrappedExpression.BRANCH


def test_square_close_in_condition():
    with pytest.raises(UnexpectedSymbolInSectionError) as info:
        parse("{(1 ]}")
    assert info.value.section is ParseSection.CONDITION
    assert info.value.symbol is Symbol.SQUARE_CLOSE


def test_expression_after_post_condition():
    with pytest.raises(UnexpectedInContextError) as info:
        parse("[(1) 2 (3) 4]")
    assert info.value.context is UnexpectedContext.AFTER_POST_CONDITION


def test_unclosed_loop_after_post_condition():
    with pytest.raises(UnclosedExpressionError) as info:
        parse("[1 (2)")
    assert info.value.expression is WrappedExpression.LOOP


def test_curly_close_in_loop():
    with pytest.raises(UnexpectedSymbolInSectionError) as info:
        parse("[1 }")
    assert info.value.section is ParseSection.LOOP
    assert info.value.symbol is Symbol.CURLY_CLOSE


def test_hash_in_function_body():
    with pytest.raises(UnexpectedSymbolError) as info:
        parse("fn: {#}")
    assert info.value.symbol is Symbol.HASH


def test_colon_in_single_line_function():
    with pytest.raises(UnexpectedSymbolError) as info:
        parse("fn: 1 :")
    assert info.value.symbol is Symbol.COLON


def test_import_needs_name():
    with pytest.raises(ExpectedMoreError) as info:
        parse("#")
    assert info.value.reason is ReasonExpectingMore.IMPORT_NAME


def test_import_needs_path():
    with pytest.raises(ExpectedMoreError) as info:
        parse("# *")
    assert info.value.reason is ReasonExpectingMore.IMPORT_PATH


def test_import_bad_naming():
    with pytest.raises(UnexpectedInContextError) as info:
        parse('# 1 "./a.sl"')
    assert info.value.context is UnexpectedContext.IMPORT_NAMING


def test_import_bad_path():
    with pytest.raises(UnexpectedInContextError) as info:
        parse("# * 1")
    assert info.value.context is UnexpectedContext.IMPORT_PATH


def test_import_bad_name_list():
    with pytest.raises(UnexpectedInContextError) as info:
        parse('# {a 1} "./a.sl"')
    assert info.value.context is UnexpectedContext.IMPORT_NAME_LIST


def test_import_unclosed_name_list():
    with pytest.raises(UnclosedExpressionError) as info:
        parse("# {a")
    assert info.value.expression is WrappedExpression.IMPORT_NAME_LIST


def test_tokenize_error_propagates():
    with pytest.raises(UnboundedStringError) as info:
        parse('"abc')
    assert info.value.is_early_eof()