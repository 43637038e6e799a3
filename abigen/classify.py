#!/usr/bin/env python3
"""
Turns top-level declarations into IR symbols.

Deduplication bookkeeping happens here, before the user generator runs, so
it does not depend on whether the generator produced a fragment.
"""

import logging

from abigen.errors import FrontEndContractError
from abigen.export import ExportPolicy
from abigen.frontend import Declaration, DeclKind
from abigen.ir import FnSignature, Parameter, Struct, StructField, Symbol, Variable
from abigen.ledger import DedupLedger

logger = logging.getLogger(__name__)


def _require_name(declaration: Declaration) -> str:
    if declaration.name is None:
        raise FrontEndContractError(f"{declaration.kind.value} declaration has no name")
    return declaration.name


def _require_type(declaration: Declaration, name: str):
    if declaration.ctype is None:
        raise FrontEndContractError(
            f"{declaration.kind.value} declaration '{name}' has no type"
        )
    return declaration.ctype


def _collect(declaration: Declaration, kind: DeclKind) -> list[Variable]:
    """Collect child parameters or fields in declaration order."""
    members = []
    for child in declaration.children():
        if child.kind != kind:
            continue
        name = child.name or ""
        members.append(Variable(name=name, ctype=_require_type(child, name)))
    return members


def classify_function(
    declaration: Declaration, ledger: DedupLedger, policy: ExportPolicy
) -> FnSignature | None:
    name = _require_name(declaration)
    if ledger.has_symbol(name):
        logger.debug(f"Skipping function {name}: already surfaced")
        return None

    fn_type = _require_type(declaration, name)
    parameters: list[Parameter] = _collect(declaration, DeclKind.PARAMETER)

    if not policy.is_exported(declaration):
        logger.debug(f"Skipping function {name}: not exported")
        return None

    ledger.record_symbol(name)
    return FnSignature(name=name, ctype=fn_type, parameters=parameters)


def classify_struct(declaration: Declaration, ledger: DedupLedger) -> Struct | None:
    name = declaration.name
    if name is None:
        logger.debug("Skipping anonymous struct")
        return None

    if ledger.has_struct_definition(name):
        logger.debug(f"Skipping struct {name}: definition already surfaced")
        return None

    struct_type = _require_type(declaration, name)
    fields: list[StructField] = _collect(declaration, DeclKind.FIELD)
    ledger.record_struct(name, bool(fields))
    return Struct(name=name, ctype=struct_type, fields=fields)


def classify_variable(
    declaration: Declaration, ledger: DedupLedger, policy: ExportPolicy
) -> Variable | None:
    name = _require_name(declaration)
    if ledger.has_symbol(name):
        logger.debug(f"Skipping variable {name}: already surfaced")
        return None

    if not policy.is_exported(declaration):
        logger.debug(f"Skipping variable {name}: not exported")
        return None

    ledger.record_symbol(name)
    return Variable(name=name, ctype=_require_type(declaration, name))


def classify(
    declaration: Declaration, ledger: DedupLedger, policy: ExportPolicy
) -> Symbol | None:
    """Build the symbol for one top-level declaration, or None if it is not surfaced."""
    if declaration.kind == DeclKind.FUNCTION:
        return classify_function(declaration, ledger, policy)
    elif declaration.kind == DeclKind.STRUCT:
        return classify_struct(declaration, ledger)
    elif declaration.kind == DeclKind.VARIABLE:
        return classify_variable(declaration, ledger, policy)
    return None
