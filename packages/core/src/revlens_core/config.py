import json
import logging
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

import yaml

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_URL = "http://localhost:11434"
DEFAULT_MODEL = "codellama"

# Merged in this order; keys in later files win.
CONFIG_CANDIDATES = ("config", "config.json", "config.yaml", "config.yml", "config.toml")


@dataclass(frozen=True)
class Settings:
    ollama_url: str = DEFAULT_OLLAMA_URL
    model: str = DEFAULT_MODEL


class ConfigError(ValueError):
    """Raised when a config file cannot be parsed or holds a value of the wrong type."""


def _read_config_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            data = json.loads(text)
        elif suffix in (".yaml", ".yml"):
            data = yaml.safe_load(text) or {}
        else:
            data = tomllib.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError, tomllib.TOMLDecodeError) as e:
        raise ConfigError(f"{path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data


def _to_settings(values: dict) -> Settings:
    known = {f.name for f in fields(Settings)}
    kwargs = {}
    for key, value in values.items():
        if key not in known:
            continue
        if not isinstance(value, str):
            raise ConfigError(f"{key} must be a string, got {type(value).__name__}")
        kwargs[key] = value
    return Settings(**kwargs)


def find_config_files(directory: str = ".") -> list[Path]:
    """Return the config files present in ``directory``, in merge order."""
    base = Path(directory)
    return [base / name for name in CONFIG_CANDIDATES if (base / name).is_file()]


def load_config(config_path: Optional[str] = None, cli_overrides: Optional[dict] = None) -> Settings:
    """
    Load settings by merging (in order of precedence):
      1. Built-in defaults
      2. Config files in the current directory (or ``config_path`` alone)
      3. CLI argument overrides

    A config file that fails to parse, or holds a non-string value for a
    known key, discards every file value and falls back to the built-in
    defaults. CLI overrides are still applied on top.
    """
    if config_path is not None:
        paths = [Path(config_path)] if Path(config_path).is_file() else []
    else:
        paths = find_config_files()

    merged: dict = {}
    try:
        for path in paths:
            merged.update(_read_config_file(path))
        settings = _to_settings(merged)
    except (ConfigError, OSError, UnicodeDecodeError) as e:
        logger.warning("Ignoring configuration, using defaults: %s", e)
        settings = Settings()

    if cli_overrides:
        overrides = {k: v for k, v in cli_overrides.items() if v is not None}
        settings = _to_settings({**vars(settings), **overrides})

    return settings
