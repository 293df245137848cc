# scatterlang

The front end of the Scatter stack language: a tokenizer, a parser that builds
a module tree, and a program model that resolves function names across
imported namespaces.

## Installation

```
pip install scatterlang
```

To run the test suite:

```
pip install "scatterlang[test]"
pytest
```

## The language in brief

```
# {helper other} "./helpers.sl"    // import named functions
# * "./all.sl"                     // import everything
# util "./util.sl"                 // scoped import: util.name

double: dup +                      // single-line function
fib: {                             // multi-line function
  {(dup 1 >) 1 - dup fib swap 1 - fib +}
}

5 fib @double                      // top-level body and a function pointer
[(dup) 1 -]                        // loop with a pre-condition
```

Strings are single- or double-quoted and can span lines. They support the
escapes `\n`, `\r`, `\t`, `\0`, `\\`, `\"`, `\'`, `\xff`, `\u0915` and
`\u{1f4a9}`; a backslash before a line break joins the lines. Comments are
written `// ...` or `/* ... */`. A file that starts with `#!` has its first
line ignored. Words that read as numbers become numbers, `true` and `false`
become booleans, and every other word is a name.

## Tokenizing

```python
from scatterlang.tokenizer import tokenize

for parsed in tokenize("1 2 + 'hi'"):
    print(parsed.value, parsed.loc)
```

`tokenize` returns a list of `ParsedToken` objects. Each one holds a `Token`
(a `TokenKind` and its value) and the `SourceRange` it came from. Locations
are `SourceLocation` values with zero-based `line`, `character` and `column`.
On bad input it raises a subclass of `TokenizeError`:
`UnboundedStringError`, `InvalidEscapeError` (whose `kind` is an
`EscapeSequenceError`) or `UnboundedCommentError`.

## Parsing

```python
from scatterlang.parser import parse

module = parse("""
square: dup *
3 square
""")
print([f.name for f in module.functions])   # ['square']
print(module.body.terms)
```

`parse` returns a `Module` with `imports`, `functions` and a top-level `body`
block. A block's terms are literals (`str`, `float`, `bool`), `Name`,
`Address`, `Branch` and `Loop`. Each `Import` has an `ImportNaming` and a
relative `path`.

Every syntax problem raises a `ParseError` subclass from `scatterlang.errors`:
the tokenizer errors above, `UnclosedExpressionError`, `ExpectedMoreError`,
`UnexpectedInContextError`, `UnexpectedSymbolInSectionError` and
`UnexpectedSymbolError`. Use `details()` to get an `ErrorDetails` value that
holds a `message`, a `location` range and an optional `info` hint. Use
`is_early_eof()` to find out whether the input only stopped too soon; an
interactive front end can use that to keep reading more lines.

```python
from scatterlang.errors import ParseError
from scatterlang.parser import parse

try:
    parse("{(1) 2")
except ParseError as error:
    info = error.details()
    print(info.message, info.location, info.info)
    print(error.is_early_eof())   # True
```

## Programs and namespaces

```python
from scatterlang.lang import ImportNaming
from scatterlang.parser import parse
from scatterlang.program import (
    FunctionOverwriteStrategy,
    NamespaceImport,
    Program,
)

program = Program()
main = program.allocate_namespace()
helpers = program.allocate_namespace()
program.add_functions(
    helpers,
    parse("helper: 1").functions,
    FunctionOverwriteStrategy.FAIL_ON_DUPLICATE,
)
program.add_imports(main, [NamespaceImport(helpers, ImportNaming(prefix="h"))])

print(program.resolve_function(main, "h.helper"))   # (1, 'helper')
```

`ImportNaming()` is a wildcard import, `ImportNaming(names=(...))` imports
only the listed functions and `ImportNaming(prefix=...)` makes them reachable
as `prefix.name`.

`resolve_function` looks in the current namespace first, then checks the
imports in order. It returns the namespace id and function name, or `None`
if nothing matches.

`add_functions` raises `DuplicateFunctionError` when a name is defined twice
under `FAIL_ON_DUPLICATE`; with `REPLACE` the later definition wins.
`Program.from_module` builds a one-namespace program from a parsed module.
`canonical_path` resolves an absolute path to its canonical form, raising
`ValueError` for a relative path and `OSError` when the path does not exist.

## What this package does not do

It reads and organises Scatter source but does not run it. There is no
interpreter, no arity analysis, no code generation, no loading of imported
files from disk, and no command-line tool or interactive prompt.