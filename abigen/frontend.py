#!/usr/bin/env python3
"""
Abstract view of a C front end.

The traversal engine only talks to these protocols, so it can run against
libclang (see clang_frontend.py) or against an in-memory fake in tests.
"""

from collections.abc import Iterable
from enum import Enum
from pathlib import Path
from typing import Protocol


class DeclKind(str, Enum):
    FUNCTION = "function"
    STRUCT = "struct"
    VARIABLE = "variable"
    PARAMETER = "parameter"
    FIELD = "field"
    DLLEXPORT = "dllexport"  # attribute node attached to an exported declaration
    OTHER = "other"


class Visibility(str, Enum):
    HIDDEN = "hidden"
    PROTECTED = "protected"
    DEFAULT = "default"


class TypeHandle(Protocol):
    """Opaque semantic type owned by the front end."""

    @property
    def spelling(self) -> str: ...

    def result_type(self) -> "TypeHandle | None":
        """Result type of a function type, None for anything else."""
        ...


class Declaration(Protocol):
    @property
    def kind(self) -> DeclKind: ...

    @property
    def name(self) -> str | None: ...

    @property
    def ctype(self) -> TypeHandle | None: ...

    @property
    def visibility(self) -> Visibility | None: ...

    def children(self) -> Iterable["Declaration"]: ...


class FrontEnd(Protocol):
    def parse(self, path: Path, arguments: list[str]) -> list[Declaration]:
        """Parse one file and return its top-level declarations in source order.

        Raises ParseError when no translation unit could be produced.
        """
        ...
