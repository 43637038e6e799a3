#!/usr/bin/env python3
"""
In-memory front end for exercising the traversal engine without libclang.

Declarations are registered per file base name; parse() replays them and
records the arguments it was called with.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from abigen.errors import ParseError
from abigen.frontend import DeclKind, Visibility


@dataclass(frozen=True)
class FakeType:
    spelling: str
    result: "FakeType | None" = None

    def result_type(self) -> "FakeType | None":
        return self.result


@dataclass
class FakeDeclaration:
    kind: DeclKind
    name: str | None
    ctype: FakeType | None = None
    visibility: Visibility | None = Visibility.DEFAULT
    members: list["FakeDeclaration"] = field(default_factory=list)

    def children(self) -> Iterable["FakeDeclaration"]:
        return iter(self.members)


def function(
    name: str,
    result: str = "void",
    parameters: Iterable[tuple[str | None, str]] = (),
    visibility: Visibility | None = Visibility.DEFAULT,
    dllexport: bool = False,
) -> FakeDeclaration:
    """Build a function declaration from (name, type spelling) parameter pairs."""
    members = [
        FakeDeclaration(DeclKind.PARAMETER, param_name, FakeType(spelling))
        for param_name, spelling in parameters
    ]
    if dllexport:
        members.append(FakeDeclaration(DeclKind.DLLEXPORT, None))
    signature = f"{result} ({', '.join(m.ctype.spelling for m in members if m.ctype)})"
    return FakeDeclaration(
        DeclKind.FUNCTION,
        name,
        FakeType(signature, FakeType(result)),
        visibility,
        members,
    )


def struct(name: str | None, fields: Iterable[tuple[str, str]] = ()) -> FakeDeclaration:
    members = [
        FakeDeclaration(DeclKind.FIELD, field_name, FakeType(spelling))
        for field_name, spelling in fields
    ]
    return FakeDeclaration(
        DeclKind.STRUCT, name, FakeType(f"struct {name}"), None, members
    )


def variable(
    name: str,
    spelling: str,
    visibility: Visibility | None = Visibility.DEFAULT,
    dllexport: bool = False,
) -> FakeDeclaration:
    members = [FakeDeclaration(DeclKind.DLLEXPORT, None)] if dllexport else []
    return FakeDeclaration(
        DeclKind.VARIABLE, name, FakeType(spelling), visibility, members
    )


class FakeFrontEnd:
    def __init__(self, files: dict[str, list[FakeDeclaration]] | None = None):
        self.files: dict[str, list[FakeDeclaration]] = dict(files or {})
        self.calls: list[tuple[Path, list[str]]] = []

    def add_file(self, file_name: str, *declarations: FakeDeclaration) -> "FakeFrontEnd":
        self.files[file_name] = list(declarations)
        return self

    def parse(self, path: Path, arguments: list[str]) -> list[FakeDeclaration]:
        self.calls.append((path, list(arguments)))
        if path.name not in self.files:
            raise ParseError(path, "no declarations registered")
        return list(self.files[path.name])

    @property
    def parsed_files(self) -> list[str]:
        return [path.name for path, _ in self.calls]
