"""
Read the parts of a medusa project configuration (`medusa.json`) forgery uses.

Only two settings matter: the compilation target, which is the fuzzing entry
point the reproducers inherit from and are written next to, and the shrink
limit, which is reported so users know how minimized the sequences are.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from forgery.errors import ConfigError

DEFAULT_CONFIG_FILE = Path("medusa.json")


@dataclass(frozen=True)
class MedusaConfig:
    """The medusa settings relevant to reproducer generation."""

    config_path: Path
    target: str
    shrink_limit: int | None = None

    def entry_point(self, check_exists: bool = True) -> Path:
        """Return the entry point path, relative to the config file's directory."""
        path = self.config_path.parent / self.target
        if check_exists and not path.is_file():
            raise ConfigError(f"Contract file not found: {path}")
        return path


def _get_section(data: dict[str, Any], key: str, path: Path) -> dict[str, Any]:
    section = data.get(key)
    if not isinstance(section, dict):
        raise ConfigError(f"'{key}' section missing from {path}")
    return section


def load_medusa_config(path: Path = DEFAULT_CONFIG_FILE) -> MedusaConfig:
    """Load and validate `medusa.json`."""
    if not path.is_file():
        raise ConfigError(f"No medusa config file found at {path}")

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"Could not parse {path}: {e}") from e
    except OSError as e:
        raise ConfigError(f"Could not read {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path} does not contain a JSON object")

    compilation = _get_section(data, "compilation", path)
    platform_config = _get_section(compilation, "platformConfig", path)
    target = platform_config.get("target")
    if not isinstance(target, str) or not target:
        raise ConfigError(f"'compilation.platformConfig.target' missing from {path}")

    fuzzing = data.get("fuzzing", {})
    if not isinstance(fuzzing, dict):
        raise ConfigError(f"'fuzzing' section of {path} is not an object")
    shrink_limit = fuzzing.get("shrinkLimit")
    if shrink_limit is not None and not isinstance(shrink_limit, int):
        raise ConfigError(f"'fuzzing.shrinkLimit' must be an integer in {path}")

    return MedusaConfig(config_path=path, target=target, shrink_limit=shrink_limit)
