#!/usr/bin/env python3
"""
Intermediate representation handed to user generators.

Records are frozen; type handles are opaque objects owned by the front end.
"""

from pathlib import Path
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field

from abigen.errors import FrontEndContractError


class Variable(BaseModel):
    """A global variable, a function parameter or a struct field."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str  # empty for unnamed parameters
    ctype: Any


Parameter = Variable
StructField = Variable


class FnSignature(BaseModel):
    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    ctype: Any
    parameters: list[Parameter] = Field(default_factory=list)

    def result_type(self) -> Any:
        """Return type of the function, derived from its function type."""
        result = self.ctype.result_type()
        if result is None:
            raise FrontEndContractError(
                f"Function type of '{self.name}' has no result type"
            )
        return result


class Struct(BaseModel):
    """A struct occurrence. No fields means a forward declaration or an empty aggregate."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str
    ctype: Any
    fields: list[StructField] = Field(default_factory=list)

    @property
    def has_fields(self) -> bool:
        return bool(self.fields)


Symbol = Union[FnSignature, Struct, Variable]


class TranslationUnit(BaseModel):
    """Generated output for one source file."""

    model_config = ConfigDict(frozen=True)

    name: str
    fragments: list[str] = Field(default_factory=list)

    @classmethod
    def for_file(cls, file_path: Path, fragments: list[str]) -> "TranslationUnit":
        return cls(name=file_path.name, fragments=fragments)

    @property
    def generated(self) -> str:
        return "\n".join(self.fragments)

    @property
    def is_empty(self) -> bool:
        return not self.fragments
