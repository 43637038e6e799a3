#!/usr/bin/env python3
"""
Export policies deciding which functions and variables belong to the public ABI.

Exactly one platform policy applies per target; default_export_policy()
picks it once at startup.
"""

import sys
from typing import Protocol

from abigen.frontend import Declaration, DeclKind, Visibility


class ExportPolicy(Protocol):
    def is_exported(self, declaration: Declaration) -> bool: ...


class VisibilityExportPolicy:
    """ELF/Mach-O: exported when the binding visibility is the public default."""

    def is_exported(self, declaration: Declaration) -> bool:
        return declaration.visibility == Visibility.DEFAULT

    def __repr__(self):
        return "VisibilityExportPolicy()"


class DllExportPolicy:
    """PE/COFF: exported when the declaration carries __declspec(dllexport)."""

    def is_exported(self, declaration: Declaration) -> bool:
        return any(child.kind == DeclKind.DLLEXPORT for child in declaration.children())

    def __repr__(self):
        return "DllExportPolicy()"


class ExportAll:
    """Treats every declaration as exported."""

    def is_exported(self, declaration: Declaration) -> bool:
        return True

    def __repr__(self):
        return "ExportAll()"


def default_export_policy(platform: str | None = None) -> ExportPolicy:
    platform = platform or sys.platform
    if platform.startswith(("win32", "cygwin")):
        return DllExportPolicy()
    return VisibilityExportPolicy()
