#!/usr/bin/env python3
"""Command line inspection of the symbols a source tree exports."""

import logging
from pathlib import Path

import click
from rich.console import Console

from abigen.config import CONFIG_FILE_NAME, GeneratorConfig
from abigen.errors import AbigenError
from abigen.generator import Generator
from abigen.ir import FnSignature, Struct, Symbol, Variable


def _parameter_list(signature: FnSignature) -> str:
    parts = []
    for parameter in signature.parameters:
        spelling = parameter.ctype.spelling
        parts.append(f"{spelling} {parameter.name}" if parameter.name else spelling)
    return ", ".join(parts)


def describe_symbol(symbol: Symbol) -> str:
    """One-line human readable description of a symbol."""
    if isinstance(symbol, FnSignature):
        return (
            f"function {symbol.name}({_parameter_list(symbol)}) "
            f"-> {symbol.result_type().spelling}"
        )
    elif isinstance(symbol, Struct):
        if not symbol.has_fields:
            return f"struct {symbol.name};"
        fields = "; ".join(f"{f.ctype.spelling} {f.name}" for f in symbol.fields)
        return f"struct {symbol.name} {{ {fields}; }}"
    elif isinstance(symbol, Variable):
        return f"variable {symbol.name}: {symbol.ctype.spelling}"
    raise TypeError(f"Unknown symbol type: {type(symbol).__name__}")


def _split_define(define: str) -> tuple[str, str | None]:
    name, sep, value = define.partition("=")
    return name, value if sep else None


@click.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.option("-I", "--include", "include_dirs", multiple=True, help="Include directory")
@click.option("--isystem", "system_include_dirs", multiple=True, help="System include directory")
@click.option("-D", "--define", "defines", multiple=True, help="Macro definition, NAME or NAME=VALUE")
@click.option("--flag", "flags", multiple=True, help="Raw compiler flag passed through verbatim")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help=f"JSON configuration (defaults to the nearest {CONFIG_FILE_NAME})",
)
@click.option("--ext", "extensions", multiple=True, help="Source file extension (default: .c)")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def main(
    root: Path,
    include_dirs: tuple[str, ...],
    system_include_dirs: tuple[str, ...],
    defines: tuple[str, ...],
    flags: tuple[str, ...],
    config_path: Path | None,
    extensions: tuple[str, ...],
    verbose: bool,
):
    """List the exported symbols of every C source file under ROOT."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    console = Console()

    if config_path:
        config = GeneratorConfig.load_from_file(config_path)
    else:
        config = GeneratorConfig.find_config(root) or GeneratorConfig()

    config.flags.extend(flags)
    config.include_dirs.extend(include_dirs)
    config.system_include_dirs.extend(system_include_dirs)
    for define in defines:
        name, value = _split_define(define)
        config.defines[name] = value
    if extensions:
        config.source_extensions = list(extensions)

    generator = Generator.from_config(config)
    try:
        units = generator.generate(root, describe_symbol)
    except AbigenError as e:
        raise click.ClickException(str(e)) from e

    for unit in units:
        console.print(f"[bold]{unit.name}[/bold]")
        if unit.is_empty:
            console.print("  [dim](no exported symbols)[/dim]")
        for fragment in unit.fragments:
            console.print(f"  {fragment}", markup=False, highlight=False)

    console.print(f"[green]{len(units)} translation units scanned[/green]")


if __name__ == "__main__":
    main()
