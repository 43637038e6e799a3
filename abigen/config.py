#!/usr/bin/env python3

import json
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field

CONFIG_FILE_NAME = "abigen_config.json"


class GeneratorConfig(BaseModel):
    """Compiler flags and scan settings for a source tree."""

    # Passed to the front end verbatim, before the generated flags
    flags: list[str] = Field(default_factory=list)
    include_dirs: list[str] = Field(default_factory=list)
    system_include_dirs: list[str] = Field(default_factory=list)
    # NAME -> value; None produces a bare -DNAME
    defines: dict[str, str | None] = Field(default_factory=dict)

    source_extensions: list[str] = Field(default_factory=lambda: [".c"])
    libclang_path: str | None = None

    @classmethod
    def load_from_file(cls, config_path: Path) -> "GeneratorConfig":
        """Load configuration from a JSON file.

        Relative include directories are resolved against the file's directory.
        """
        args = json.loads(config_path.read_text())
        config = cls.model_validate(args)
        base = config_path.parent
        config.include_dirs = [str(base / d) for d in config.include_dirs]
        config.system_include_dirs = [str(base / d) for d in config.system_include_dirs]
        return config

    def save_to_file(self, config_path: Path) -> None:
        data = self.model_dump()
        config_path.write_text(json.dumps(data, indent=2))

    @classmethod
    def find_config(cls, start_path: Path) -> Optional["GeneratorConfig"]:
        """Find configuration by searching up the directory tree."""
        start = start_path.resolve()
        for directory in [start, *start.parents]:
            config_file = directory / CONFIG_FILE_NAME
            if config_file.exists():
                return cls.load_from_file(config_file)
        return None
