#!/usr/bin/env python3

"""Exceptions raised while scanning a source tree."""

from pathlib import Path


class AbigenError(Exception):
    """Base class for all fatal scanning errors."""

    pass


class WalkError(AbigenError):
    """Raised when the source tree cannot be enumerated."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class FrontEndInitError(AbigenError):
    """Raised when the C front end cannot be initialized."""

    pass


class ParseError(AbigenError):
    """Raised when the front end produced no translation unit for a file."""

    def __init__(self, path: Path, message: str):
        self.path = path
        super().__init__(f"Failed to parse {path}: {message}")


class FrontEndContractError(AbigenError):
    """Raised when the front end omits a query result that is always expected."""

    pass
