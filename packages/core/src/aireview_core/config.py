import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml

from aireview_core.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4.1-mini"
DEFAULT_MAX_FILES = 80
DEFAULT_INSTRUCTIONS = "You are a rigorous code reviewer."

CONFIG_FILE_NAME = "ai-review.yml"
INSTRUCTIONS_FILE = Path("prompts") / "AGENT_INSTRUCTION.md"


@dataclass(frozen=True)
class ReviewConfig:
    model: str = DEFAULT_MODEL
    max_files: int = DEFAULT_MAX_FILES
    reject_large_binaries: bool = True
    inline_comments: bool = True


def _valid_model(value) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _valid_max_files(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def _valid_flag(value) -> bool:
    return isinstance(value, bool)


_VALIDATORS = {
    "model": _valid_model,
    "max_files": _valid_max_files,
    "reject_large_binaries": _valid_flag,
    "inline_comments": _valid_flag,
}


def _apply(config: ReviewConfig, values: dict, source: str) -> ReviewConfig:
    """Return config updated with every valid, recognised entry of values.

    Invalid values are logged and leave the default in place; unknown keys
    are ignored.
    """
    updates = {}
    for key, value in values.items():
        if value is None or key not in _VALIDATORS:
            continue
        if not _VALIDATORS[key](value):
            logger.warning("Ignoring invalid %s value in %s: %r", key, source, value)
            continue
        updates[key] = value
    return replace(config, **updates)


def resolve_action_root() -> Path:
    """Directory holding the action's config and prompt files."""
    return Path(os.environ.get("GITHUB_ACTION_PATH") or os.getcwd())


def resolve_repo_root() -> Path:
    """Checkout of the repository under review."""
    return Path(os.environ.get("GITHUB_WORKSPACE") or os.getcwd())


def load_config(config_path: str = CONFIG_FILE_NAME, overrides: Optional[dict] = None) -> ReviewConfig:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. The YAML file at config_path, if it exists
      3. Non-None overrides (CLI options)

    Never fails: a broken file or a bad value falls back to the defaults.
    """
    config = ReviewConfig()

    path = Path(config_path)
    if path.is_file():
        try:
            with open(path) as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Failed to parse config %s, using defaults: %s", path, e)
            file_config = {}
        if not isinstance(file_config, dict):
            logger.warning("Config %s is not a mapping, using defaults", path)
            file_config = {}
        config = _apply(config, file_config, str(path))

    if overrides:
        config = _apply(config, overrides, "command line")

    return config


def load_instructions(path) -> str:
    """
    Load the system instruction sent with every review.

    A missing file falls back to a one-line generic instruction; any other
    read error is fatal.
    """
    p = Path(path)
    try:
        return p.read_text(encoding="utf-8")
    except FileNotFoundError:
        logger.debug("No instruction file at %s, using built-in instruction", p)
        return DEFAULT_INSTRUCTIONS
    except OSError as e:
        raise ConfigError(f"Could not read instruction file {p}: {e}") from e
