"""Compiler settings, optionally read from a ``cmpler.toml`` file."""

from __future__ import annotations

import tomllib
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any

from .errors import ConfigError

CONFIG_FILE_NAME = "cmpler.toml"


class OptLevel(Enum):
    """Optimisation level for code generation."""

    NONE = "none"
    LESS = "less"
    DEFAULT = "default"
    AGGRESSIVE = "aggressive"

    def __str__(self) -> str:
        return self.value


@dataclass
class Config:
    """Main settings; all but ``opt_level`` may be set in ``cmpler.toml``."""

    opt_level: OptLevel = OptLevel.DEFAULT
    emit_ir: bool = False
    emit_obj: bool = False
    target: str | None = None
    output: Path | None = None
    verbose: bool = False

    @classmethod
    def load(cls) -> Config:
        """Read the nearest ``cmpler.toml`` upwards from the working directory.

        Returns the defaults when no such file exists.
        """
        path = find_config_file(CONFIG_FILE_NAME)
        if path is None:
            return cls()
        return cls.from_file(path)

    @classmethod
    def from_file(cls, path: str | Path) -> Config:
        """Read settings from the TOML file at ``path``."""
        try:
            text = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigError.read_failed(exc) from exc
        try:
            data = tomllib.loads(text)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError.parse_failed(exc) from exc
        return cls._from_mapping(data)

    @classmethod
    def _from_mapping(cls, data: dict[str, Any]) -> Config:
        def flag(key: str) -> bool:
            value = data.get(key, False)
            if not isinstance(value, bool):
                raise ConfigError.parse_failed(
                    f"invalid type for `{key}`: expected a boolean"
                )
            return value

        def text(key: str) -> str | None:
            value = data.get(key)
            if value is not None and not isinstance(value, str):
                raise ConfigError.parse_failed(
                    f"invalid type for `{key}`: expected a string"
                )
            return value

        output = text("output")
        return cls(
            emit_ir=flag("emit_ir"),
            emit_obj=flag("emit_obj"),
            target=text("target"),
            output=Path(output) if output is not None else None,
            verbose=flag("verbose"),
        )


def find_config_file(name: str, start: str | Path | None = None) -> Path | None:
    """Return the first file called ``name`` in ``start`` or one of its parents.

    ``start`` defaults to the current working directory.
    """
    try:
        directory = Path(start).absolute() if start is not None else Path.cwd()
    except OSError:
        return None
    for candidate_dir in (directory, *directory.parents):
        candidate = candidate_dir / name
        if candidate.is_file():
            return candidate
    return None