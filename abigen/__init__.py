"""abigen - surface the exported ABI of a C source tree to code generators."""

from abigen.errors import (
    AbigenError,
    FrontEndContractError,
    FrontEndInitError,
    ParseError,
    WalkError,
)
from abigen.export import (
    DllExportPolicy,
    ExportAll,
    ExportPolicy,
    VisibilityExportPolicy,
    default_export_policy,
)
from abigen.generator import Generator
from abigen.ir import (
    FnSignature,
    Parameter,
    Struct,
    StructField,
    Symbol,
    TranslationUnit,
    Variable,
)

__all__ = [
    "AbigenError",
    "DllExportPolicy",
    "ExportAll",
    "ExportPolicy",
    "FnSignature",
    "FrontEndContractError",
    "FrontEndInitError",
    "Generator",
    "Parameter",
    "ParseError",
    "Struct",
    "StructField",
    "Symbol",
    "TranslationUnit",
    "Variable",
    "VisibilityExportPolicy",
    "WalkError",
    "default_export_policy",
]
