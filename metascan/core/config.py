from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Mapping, Optional

STRUCTURED_LOGGING_ENV = "METASCAN_STRUCTURED_LOGGING"
NO_COLOR_ENV = "NO_COLOR"
VERSION_FILE_ENV = "METASCAN_VERSION_FILE"

DEFAULT_VERSION_FILE = "VERSION"

REQUIRED_KEYS: Dict[str, List[str]] = {
    "tenets": ["id", "last_modified", "version"],
    "bindings": ["id", "last_modified", "derived_from", "enforced_by", "version"],
}


class MetascanError(Exception):
    """Base class for failures that are not validation findings."""


class ConfigurationError(MetascanError):
    pass


class CheckFailedError(MetascanError):
    """A check plugin raised instead of reporting findings."""


def structured_logging_enabled(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get(STRUCTURED_LOGGING_ENV, "").strip().lower() == "true"


def color_disabled_by_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    # NO_COLOR="" does not count; only a non-empty value disables color
    env = os.environ if environ is None else environ
    return bool(env.get(NO_COLOR_ENV))


@dataclass
class Settings:
    structured_logging: bool = False
    no_color: bool = False
    version_file: Optional[Path] = None
    required_keys: Dict[str, List[str]] = field(default_factory=lambda: {k: list(v) for k, v in REQUIRED_KEYS.items()})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, root: Optional[Path] = None) -> "Settings":
        env = os.environ if environ is None else environ
        raw = env.get(VERSION_FILE_ENV)
        if raw:
            version_file = Path(raw)
        else:
            version_file = (root or Path(".")) / DEFAULT_VERSION_FILE
        return cls(
            structured_logging=structured_logging_enabled(env),
            no_color=color_disabled_by_env(env),
            version_file=version_file,
        )

    def expected_version(self) -> str:
        if self.version_file is None or not self.version_file.is_file():
            raise ConfigurationError(f"VERSION file not found: {self.version_file}")
        return self.version_file.read_text(encoding="utf-8").strip()
