#!/usr/bin/env python3
"""
Directory walker and translation-unit builder.

Walks a source tree depth first, parses every C source file, surfaces the
exported symbols and collects the fragments returned by the user generator
into one TranslationUnit per file.
"""

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING

from abigen.classify import classify
from abigen.errors import WalkError
from abigen.export import ExportPolicy, default_export_policy
from abigen.frontend import FrontEnd
from abigen.ir import Symbol, TranslationUnit
from abigen.ledger import DedupLedger

if TYPE_CHECKING:
    from abigen.config import GeneratorConfig

logger = logging.getLogger(__name__)

UserGenerator = Callable[[Symbol], str | None]

DEFAULT_SOURCE_EXTENSIONS = (".c",)


class Generator:
    """Drives the front end over a source tree and feeds symbols to a user generator.

    Compiler flags accumulate across calls until clear_flags(). A generator
    instance must not be shared between threads.
    """

    def __init__(
        self,
        frontend: FrontEnd | None = None,
        export_policy: ExportPolicy | None = None,
        source_extensions: tuple[str, ...] = DEFAULT_SOURCE_EXTENSIONS,
        libclang_path: str | None = None,
    ):
        self._frontend = frontend
        self._libclang_path = libclang_path
        self.export_policy = export_policy or default_export_policy()
        self.source_extensions = tuple(source_extensions)
        self.arguments: list[str] = []

    @classmethod
    def from_config(
        cls,
        config: "GeneratorConfig",
        frontend: FrontEnd | None = None,
        export_policy: ExportPolicy | None = None,
    ) -> "Generator":
        generator = cls(
            frontend=frontend,
            export_policy=export_policy,
            source_extensions=tuple(config.source_extensions),
            libclang_path=config.libclang_path,
        )
        for flag in config.flags:
            generator.c_flag(flag)
        for include_dir in config.include_dirs:
            generator.include_directory(include_dir)
        for include_dir in config.system_include_dirs:
            generator.system_include_directory(include_dir)
        for c_macro, value in config.defines.items():
            if value is None:
                generator.define(c_macro)
            else:
                generator.define_value(c_macro, value)
        return generator

    @property
    def frontend(self) -> FrontEnd:
        # libclang is only loaded once something is actually parsed
        if self._frontend is None:
            from abigen.clang_frontend import ClangFrontEnd

            self._frontend = ClangFrontEnd(self._libclang_path)
        return self._frontend

    def c_flag(self, flag: str) -> "Generator":
        self.arguments.append(flag)
        return self

    def include_directory(self, directory: str | Path) -> "Generator":
        return self.c_flag(f"-I{os.fspath(directory)}")

    def system_include_directory(self, directory: str | Path) -> "Generator":
        self.c_flag("-isystem")
        return self.c_flag(os.fspath(directory))

    def define(self, c_macro: str) -> "Generator":
        return self.c_flag(f"-D{c_macro}")

    def define_value(self, c_macro: str, macro_value: str) -> "Generator":
        return self.c_flag(f"-D{c_macro}={macro_value}")

    def clear_flags(self) -> "Generator":
        self.arguments.clear()
        return self

    def generate(self, directory: str | Path, user_gen: UserGenerator) -> list[TranslationUnit]:
        """Scan a directory tree and return one translation unit per source file.

        Any filesystem or parse failure aborts the whole scan.
        """
        root = Path(directory)
        try:
            is_dir = root.is_dir()
        except OSError as e:
            raise WalkError(root, str(e)) from e
        if not is_dir:
            raise WalkError(root, "not a directory")

        logger.info(f"Scanning {root} with arguments {self.arguments}")
        ledger = DedupLedger()
        units: list[TranslationUnit] = []
        self._generate_helper(root, user_gen, ledger, units, active=set())
        logger.info(
            f"Scanned {len(units)} files, surfaced {len(ledger.symbols)} symbols "
            f"and {len(ledger.structs)} structs"
        )
        return units

    def _generate_helper(
        self,
        directory: Path,
        user_gen: UserGenerator,
        ledger: DedupLedger,
        units: list[TranslationUnit],
        active: set[Path],
    ) -> None:
        try:
            resolved = directory.resolve(strict=True)
            if resolved in active:
                raise WalkError(directory, "symbolic link cycle")
            entries = list(directory.iterdir())
        except OSError as e:
            raise WalkError(directory, str(e)) from e

        active.add(resolved)
        for path in entries:
            try:
                is_dir = path.is_dir()
            except OSError as e:
                raise WalkError(path, str(e)) from e

            if is_dir:
                self._generate_helper(path, user_gen, ledger, units, active)
            elif path.suffix in self.source_extensions:
                units.append(self._generate_for_file(path, user_gen, ledger))
        active.discard(resolved)

    def _generate_for_file(
        self, path: Path, user_gen: UserGenerator, ledger: DedupLedger
    ) -> TranslationUnit:
        logger.debug(f"Parsing {path}")
        fragments: list[str] = []

        for declaration in self.frontend.parse(path, list(self.arguments)):
            symbol = classify(declaration, ledger, self.export_policy)
            if symbol is None:
                continue

            fragment = user_gen(symbol)
            if fragment:
                fragments.append(fragment)

        logger.debug(f"{path.name}: {len(fragments)} fragments")
        return TranslationUnit.for_file(path, fragments)
