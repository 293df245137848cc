"""Building a module syntax tree from source text."""

from __future__ import annotations

from typing import Iterator, List, Optional, Tuple

from .errors import (
    ExpectedMoreError,
    ParseSection,
    ReasonExpectingMore,
    UnclosedExpressionError,
    UnexpectedContext,
    UnexpectedInContextError,
    UnexpectedSymbolError,
    UnexpectedSymbolInSectionError,
    WrappedExpression,
)
from .lang import (
    Address,
    Block,
    Branch,
    Function,
    Import,
    ImportNaming,
    Loop,
    Module,
    Name,
    ParsedToken,
    SourceLocation,
    SourceRange,
    Symbol,
    TokenKind,
)
from .tokenizer import tokenize

__all__ = ["parse"]

_BLOCK_ENDS = frozenset(
    {Symbol.CURLY_CLOSE, Symbol.PAREN_OPEN, Symbol.PAREN_CLOSE, Symbol.SQUARE_CLOSE}
)

_BlockEnd = Optional[Tuple[Symbol, SourceRange]]


class _Tokens:
    """A token iterator with one token of lookahead."""

    def __init__(self, tokens: List[ParsedToken]) -> None:
        self._iter: Iterator[ParsedToken] = iter(tokens)
        self._peeked: Optional[ParsedToken] = None
        self._has_peeked = False

    def peek(self) -> Optional[ParsedToken]:
        if not self._has_peeked:
            self._peeked = next(self._iter, None)
            self._has_peeked = True
        return self._peeked

    def next(self) -> Optional[ParsedToken]:
        token = self.peek()
        self._has_peeked = False
        self._peeked = None
        return token

    def is_next_symbol(self, symbol: Symbol) -> bool:
        token = self.peek()
        return token is not None and _symbol_of(token) is symbol

    def skip_line_ends(self) -> None:
        while self.is_next_symbol(Symbol.LINE_END):
            self.next()

    def take_symbol(self, symbol: Symbol) -> Optional[ParsedToken]:
        """Skip line ends, then consume the next token if it is ``symbol``."""
        self.skip_line_ends()
        if self.is_next_symbol(symbol):
            return self.next()
        return None


def _symbol_of(token: ParsedToken) -> Optional[Symbol]:
    if token.value.kind is TokenKind.SYMBOL:
        return token.value.value  # type: ignore[return-value]
    return None


def _literal(token: ParsedToken):
    """The term for a non-symbol token."""
    kind = token.value.kind
    if kind is TokenKind.NAME:
        return Name(token.value.value, token.loc)  # type: ignore[arg-type]
    return token.value.value


def _parse_address(tokens: _Tokens, at: SourceRange) -> Address:
    following = tokens.peek()
    if following is None:
        raise ExpectedMoreError(ReasonExpectingMore.ADDRESS, at.start)
    if following.value.kind is not TokenKind.NAME:
        raise UnexpectedInContextError(
            UnexpectedContext.ADDRESS, at.start, following.loc.start
        )
    tokens.next()
    return Address(following.value.value)  # type: ignore[arg-type]


def _consume_block_terms(target: list, tokens: _Tokens) -> _BlockEnd:
    while (token := tokens.next()) is not None:
        symbol = _symbol_of(token)
        if symbol is None:
            target.append(_literal(token))
        elif symbol is Symbol.LINE_END:
            continue
        elif symbol in (Symbol.HASH, Symbol.COLON):
            raise UnexpectedSymbolError(symbol, token.loc.start)
        elif symbol is Symbol.AT:
            target.append(_parse_address(tokens, token.loc))
        elif symbol in _BLOCK_ENDS:
            return symbol, token.loc
        elif symbol is Symbol.CURLY_OPEN:
            target.append(_parse_branch(tokens, token.loc.start))
        elif symbol is Symbol.SQUARE_OPEN:
            target.append(_parse_loop(tokens, token.loc.start))
    return None


def _parse_condition(tokens: _Tokens, start: SourceLocation) -> Block:
    condition = Block()
    end = _consume_block_terms(condition.terms, tokens)
    if end is None:
        raise UnclosedExpressionError(WrappedExpression.CONDITION, start)
    symbol, loc = end
    if symbol is not Symbol.PAREN_CLOSE:
        raise UnexpectedSymbolInSectionError(
            ParseSection.CONDITION, start, symbol, loc.start
        )
    return condition


def _parse_branch_arm(
    tokens: _Tokens, start: SourceLocation
) -> Tuple[Block, Block, Optional[SourceLocation]]:
    """Parse one arm; the last item is where the next arm starts, if any."""
    condition = _parse_condition(tokens, start)
    body = Block()
    end = _consume_block_terms(body.terms, tokens)
    if end is None:
        raise UnclosedExpressionError(WrappedExpression.BRANCH, start)
    symbol, loc = end
    if symbol is Symbol.CURLY_CLOSE:
        return condition, body, None
    if symbol is Symbol.PAREN_OPEN:
        return condition, body, loc.start
    raise UnexpectedSymbolInSectionError(ParseSection.BRANCH, start, symbol, loc.start)


def _parse_branch(tokens: _Tokens, start: SourceLocation) -> Branch:
    tokens.skip_line_ends()
    first = tokens.next()
    if first is None:
        raise ExpectedMoreError(ReasonExpectingMore.BRANCH, start)
    if _symbol_of(first) is not Symbol.PAREN_OPEN:
        raise UnexpectedInContextError(
            UnexpectedContext.FIRST_IN_BRANCH, start, first.loc.start
        )

    branch = Branch()
    arm_start: Optional[SourceLocation] = start
    while arm_start is not None:
        condition, body, arm_start = _parse_branch_arm(tokens, arm_start)
        branch.arms.append((condition, body))
    return branch


def _parse_loop(tokens: _Tokens, start: SourceLocation) -> Loop:
    loop = Loop()

    opening = tokens.take_symbol(Symbol.PAREN_OPEN)
    if opening is not None:
        loop.pre_condition = _parse_condition(tokens, opening.loc.start)

    end = _consume_block_terms(loop.body.terms, tokens)
    if end is None:
        raise UnclosedExpressionError(WrappedExpression.LOOP, start)
    symbol, loc = end
    if symbol is Symbol.SQUARE_CLOSE:
        return loop
    if symbol is Symbol.PAREN_OPEN:
        loop.post_condition = _parse_condition(tokens, loc.start)
        tokens.skip_line_ends()
        closing = tokens.next()
        if closing is None:
            raise UnclosedExpressionError(WrappedExpression.LOOP, start)
        if _symbol_of(closing) is not Symbol.SQUARE_CLOSE:
            raise UnexpectedInContextError(
                UnexpectedContext.AFTER_POST_CONDITION, start, closing.loc.start
            )
        return loop
    raise UnexpectedSymbolInSectionError(ParseSection.LOOP, start, symbol, loc.start)


def _parse_function_body(tokens: _Tokens, start: SourceLocation) -> Block:
    body = Block()
    end = _consume_block_terms(body.terms, tokens)
    if end is None:
        raise UnclosedExpressionError(WrappedExpression.FUNCTION, start)
    symbol, loc = end
    if symbol is not Symbol.CURLY_CLOSE:
        raise UnexpectedSymbolError(symbol, loc.start)
    return body


_SINGLE_LINE_FORBIDDEN = frozenset(
    {
        Symbol.COLON,
        Symbol.CURLY_CLOSE,
        Symbol.PAREN_OPEN,
        Symbol.PAREN_CLOSE,
        Symbol.SQUARE_CLOSE,
        Symbol.HASH,
    }
)


def _parse_single_line(tokens: _Tokens) -> Block:
    block = Block()
    while (token := tokens.next()) is not None:
        symbol = _symbol_of(token)
        if symbol is None:
            block.terms.append(_literal(token))
        elif symbol is Symbol.LINE_END:
            break
        elif symbol is Symbol.CURLY_OPEN:
            block.terms.append(_parse_branch(tokens, token.loc.start))
        elif symbol is Symbol.SQUARE_OPEN:
            block.terms.append(_parse_loop(tokens, token.loc.start))
        elif symbol in _SINGLE_LINE_FORBIDDEN:
            raise UnexpectedSymbolError(symbol, token.loc.start)
        elif symbol is Symbol.AT:
            block.terms.append(_parse_address(tokens, token.loc))
    return block


def _parse_function(name: str, tokens: _Tokens) -> Function:
    following = tokens.peek()
    if following is None or _symbol_of(following) is Symbol.LINE_END:
        return Function(name)
    if _symbol_of(following) is Symbol.CURLY_OPEN:
        tokens.next()
        return Function(name, _parse_function_body(tokens, following.loc.start))
    return Function(name, _parse_single_line(tokens))


def _parse_import_names(
    tokens: _Tokens, start: SourceLocation, list_start: SourceLocation
) -> List[str]:
    names: List[str] = []
    while True:
        token = tokens.next()
        if token is None:
            raise UnclosedExpressionError(WrappedExpression.IMPORT_NAME_LIST, list_start)
        if _symbol_of(token) is Symbol.CURLY_CLOSE:
            return names
        if token.value.kind is not TokenKind.NAME:
            raise UnexpectedInContextError(
                UnexpectedContext.IMPORT_NAME_LIST, start, token.loc.start
            )
        names.append(token.value.value)  # type: ignore[arg-type]


def _parse_import(tokens: _Tokens, start: SourceLocation) -> Import:
    tokens.skip_line_ends()
    first = tokens.next()
    if first is None:
        raise ExpectedMoreError(ReasonExpectingMore.IMPORT_NAME, start)

    if first.value.kind is TokenKind.NAME:
        if first.value.value == "*":
            naming = ImportNaming()
        else:
            naming = ImportNaming(prefix=first.value.value)  # type: ignore[arg-type]
    elif _symbol_of(first) is Symbol.CURLY_OPEN:
        names = _parse_import_names(tokens, start, first.loc.start)
        naming = ImportNaming(names=tuple(names))
    else:
        raise UnexpectedInContextError(
            UnexpectedContext.IMPORT_NAMING, start, first.loc.start
        )

    location = tokens.next()
    if location is None:
        raise ExpectedMoreError(ReasonExpectingMore.IMPORT_PATH, start)
    if location.value.kind is not TokenKind.STRING:
        raise UnexpectedInContextError(
            UnexpectedContext.IMPORT_PATH, start, location.loc.start
        )
    return Import(naming, location.value.value)  # type: ignore[arg-type]


_MODULE_FORBIDDEN = frozenset(
    {
        Symbol.COLON,
        Symbol.PAREN_CLOSE,
        Symbol.PAREN_OPEN,
        Symbol.SQUARE_CLOSE,
        Symbol.CURLY_CLOSE,
    }
)


def _parse_module(tokens: _Tokens) -> Module:
    module = Module()
    terms = module.body.terms

    while (token := tokens.next()) is not None:
        symbol = _symbol_of(token)
        if symbol is None:
            if token.value.kind is TokenKind.NAME:
                if tokens.take_symbol(Symbol.COLON) is not None:
                    module.functions.append(
                        _parse_function(token.value.value, tokens)  # type: ignore[arg-type]
                    )
                    continue
            terms.append(_literal(token))
        elif symbol is Symbol.LINE_END:
            continue
        elif symbol is Symbol.AT:
            terms.append(_parse_address(tokens, token.loc))
        elif symbol is Symbol.HASH:
            module.imports.append(_parse_import(tokens, token.loc.start))
        elif symbol in _MODULE_FORBIDDEN:
            raise UnexpectedSymbolError(symbol, token.loc.start)
        elif symbol is Symbol.CURLY_OPEN:
            terms.append(_parse_branch(tokens, token.loc.start))
        elif symbol is Symbol.SQUARE_OPEN:
            terms.append(_parse_loop(tokens, token.loc.start))

    return module


def parse(source: str) -> Module:
    """Parse source text into a module.

    Raises a ParseError subclass describing the first problem found.
    """
    return _parse_module(_Tokens(tokenize(source)))