#!/usr/bin/env python3

from pydantic import BaseModel, Field


class DedupLedger(BaseModel):
    """Names already surfaced during one traversal.

    Functions and variables share one name set. Structs map to whether they
    have ever been surfaced with a non-empty field list; only a True entry
    suppresses later occurrences.
    """

    symbols: set[str] = Field(default_factory=set)
    structs: dict[str, bool] = Field(default_factory=dict)

    def has_symbol(self, name: str) -> bool:
        return name in self.symbols

    def record_symbol(self, name: str) -> None:
        self.symbols.add(name)

    def has_struct_definition(self, name: str) -> bool:
        return self.structs.get(name, False)

    def record_struct(self, name: str, has_fields: bool) -> None:
        self.structs[name] = has_fields
