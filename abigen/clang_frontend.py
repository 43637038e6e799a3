#!/usr/bin/env python3
"""
libclang implementation of the front end protocols.

Wraps clang.cindex cursors and types so the traversal engine never touches
libclang directly.
"""

import ctypes
import functools
import logging
from collections.abc import Iterator
from pathlib import Path

import clang.cindex as clang

from abigen.errors import FrontEndInitError, ParseError
from abigen.frontend import DeclKind, Visibility

logger = logging.getLogger(__name__)

# CXTranslationUnit_KeepGoing; clang.cindex has no constant for it.
PARSE_KEEP_GOING = 0x200

PARSE_OPTIONS = clang.TranslationUnit.PARSE_SKIP_FUNCTION_BODIES | PARSE_KEEP_GOING

_DECL_KINDS = {
    clang.CursorKind.FUNCTION_DECL: DeclKind.FUNCTION,  # type: ignore
    clang.CursorKind.STRUCT_DECL: DeclKind.STRUCT,  # type: ignore
    clang.CursorKind.VAR_DECL: DeclKind.VARIABLE,  # type: ignore
    clang.CursorKind.PARM_DECL: DeclKind.PARAMETER,  # type: ignore
    clang.CursorKind.FIELD_DECL: DeclKind.FIELD,  # type: ignore
    clang.CursorKind.DLLEXPORT_ATTR: DeclKind.DLLEXPORT,  # type: ignore
}

# CXVisibilityKind values; CXVisibility_Invalid (0) maps to None
_VISIBILITIES = {
    1: Visibility.HIDDEN,
    2: Visibility.PROTECTED,
    3: Visibility.DEFAULT,
}


@functools.cache
def _visibility_function():
    """Bind clang_getCursorVisibility, which clang.cindex does not expose."""
    function = clang.conf.lib.clang_getCursorVisibility
    function.argtypes = [clang.Cursor]
    function.restype = ctypes.c_int
    return function


class ClangType:
    """A clang.cindex.Type behind the TypeHandle protocol."""

    def __init__(self, clang_type: clang.Type):
        self._type = clang_type

    @property
    def raw(self) -> clang.Type:
        """The underlying libclang type, for generators that need more than the spelling."""
        return self._type

    @property
    def spelling(self) -> str:
        return self._type.spelling

    def result_type(self) -> "ClangType | None":
        result = self._type.get_result()
        if result.kind == clang.TypeKind.INVALID:  # type: ignore
            return None
        return ClangType(result)

    def __repr__(self):
        return f"ClangType({self.spelling!r})"


class ClangDeclaration:
    """A clang.cindex.Cursor behind the Declaration protocol."""

    def __init__(self, cursor: clang.Cursor):
        self._cursor = cursor

    @property
    def cursor(self) -> clang.Cursor:
        return self._cursor

    @property
    def kind(self) -> DeclKind:
        return _DECL_KINDS.get(self._cursor.kind, DeclKind.OTHER)

    @property
    def name(self) -> str | None:
        if self._cursor.kind == clang.CursorKind.STRUCT_DECL and self._cursor.is_anonymous():  # type: ignore
            return None
        spelling = self._cursor.spelling
        # newer libclang spells unnamed records as "struct (unnamed at ...)"
        if not spelling or "(" in spelling:
            return None
        return spelling

    @property
    def ctype(self) -> ClangType | None:
        cursor_type = self._cursor.type
        if cursor_type is None or cursor_type.kind == clang.TypeKind.INVALID:  # type: ignore
            return None
        return ClangType(cursor_type)

    @property
    def visibility(self) -> Visibility | None:
        return _VISIBILITIES.get(_visibility_function()(self._cursor))

    def children(self) -> Iterator["ClangDeclaration"]:
        for child in self._cursor.get_children():
            yield ClangDeclaration(child)

    def __repr__(self):
        location = self._cursor.location
        file_name = location.file.name if location.file else "<unknown>"
        return f"ClangDeclaration({self.kind.value} {self._cursor.spelling!r} at {file_name}:{location.line})"


class ClangFrontEnd:
    """Parses C files with libclang, skipping function bodies and tolerating local errors."""

    def __init__(self, library_path: str | None = None):
        if library_path:
            if clang.Config.loaded:
                logger.warning(
                    f"libclang is already loaded, ignoring library path {library_path}"
                )
            else:
                clang.Config.set_library_file(library_path)

        try:
            self.index = clang.Index.create()
        except clang.LibclangError as e:
            raise FrontEndInitError(f"Unable to initialize libclang: {e}") from e

    def parse(self, path: Path, arguments: list[str]) -> list[ClangDeclaration]:
        try:
            tu = self.index.parse(str(path), args=arguments, options=PARSE_OPTIONS)
        except clang.TranslationUnitLoadError as e:
            raise ParseError(path, str(e)) from e

        for diagnostic in tu.diagnostics:
            if diagnostic.severity >= clang.Diagnostic.Error:
                location = diagnostic.location
                logger.warning(
                    f"{path}:{location.line}:{location.column}: {diagnostic.spelling}"
                )

        return [ClangDeclaration(cursor) for cursor in tu.cursor.get_children()]
