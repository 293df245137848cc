"""Namespaces of functions and the rules for resolving names across imports."""

from __future__ import annotations

import copy
import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple, Union

from .lang import Function, ImportNaming, Module

__all__ = [
    "DuplicateFunctionError",
    "FunctionOverwriteStrategy",
    "Namespace",
    "NamespaceImport",
    "Program",
    "canonical_path",
]


def canonical_path(path: Union[str, Path]) -> Path:
    """Resolve an absolute path to its canonical form.

    Raises ValueError for a relative path and OSError (such as
    FileNotFoundError) when the path does not exist.
    """
    path = Path(path)
    if not path.is_absolute():
        raise ValueError("path must be absolute")
    return path.resolve(strict=True)


class DuplicateFunctionError(Exception):
    """A function was defined twice in the same namespace."""

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.name = name


class FunctionOverwriteStrategy(enum.Enum):
    """What to do when a function name is already defined in a namespace."""

    FAIL_ON_DUPLICATE = "fail_on_duplicate"
    REPLACE = "replace"


@dataclass
class NamespaceImport:
    """An import of another namespace, by id, with its naming rule."""

    id: int
    naming: ImportNaming


@dataclass
class Namespace:
    """The functions of one file, the imports it makes and where it came from."""

    path: Optional[Path] = None
    imports: List[NamespaceImport] = field(default_factory=list)
    functions: Dict[str, Function] = field(default_factory=dict)


class Program:
    """A collection of namespaces addressed by integer id."""

    def __init__(self) -> None:
        self.namespaces: List[Namespace] = []

    @classmethod
    def from_module(cls, module: Module) -> "Program":
        """A program with a single namespace holding the module's functions."""
        program = cls()
        namespace = program.allocate_namespace()
        program.add_functions(
            namespace, module.functions, FunctionOverwriteStrategy.FAIL_ON_DUPLICATE
        )
        return program

    def allocate_namespace(self) -> int:
        """Add an empty namespace and return its id."""
        self.namespaces.append(Namespace())
        return len(self.namespaces) - 1

    def add_functions(
        self,
        namespace: int,
        functions: Iterable[Function],
        overwrite_strategy: FunctionOverwriteStrategy,
    ) -> None:
        """Define functions in a namespace.

        With FAIL_ON_DUPLICATE, a name that is already defined raises
        DuplicateFunctionError once that definition has been stored.
        """
        target = self.namespaces[namespace].functions
        for function in functions:
            existed = function.name in target
            target[function.name] = copy.deepcopy(function)
            if existed and overwrite_strategy is FunctionOverwriteStrategy.FAIL_ON_DUPLICATE:
                raise DuplicateFunctionError(function.name)

    def add_imports(self, namespace: int, imports: Iterable[NamespaceImport]) -> None:
        """Append imports to a namespace."""
        self.namespaces[namespace].imports.extend(imports)

    def _resolve_in(self, namespace: int, name: str) -> Optional[Tuple[int, str]]:
        function = self.namespaces[namespace].functions.get(name)
        if function is None:
            return None
        return namespace, function.name

    def resolve_function(self, current_id: int, name: str) -> Optional[Tuple[int, str]]:
        """Find which namespace defines ``name`` as seen from ``current_id``.

        Local definitions win; then imports are searched in order. Returns the
        namespace id and the function's name within it, or None.
        """
        found = self._resolve_in(current_id, name)
        if found is not None:
            return found

        for imported in self.namespaces[current_id].imports:
            naming = imported.naming
            if naming.is_wildcard:
                found = self._resolve_in(imported.id, name)
            elif naming.is_named:
                found = self._resolve_in(imported.id, name) if name in naming.names else None
            else:
                prefix = naming.prefix
                if name.startswith(prefix) and name[len(prefix):].startswith("."):
                    found = self._resolve_in(imported.id, name[len(prefix) + 1:])
                else:
                    found = None
            if found is not None:
                return found
        return None