"""YAML config loading with env var expansion."""

import logging
import os
import re
from pathlib import Path

import yaml
from pydantic import ValidationError as PydanticValidationError

from thinktank.errors.base import ConfigError, FileSystemError

from .models import AppConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = "thinktank.yaml"


def user_config_path() -> Path:
    """``$XDG_CONFIG_HOME/thinktank/config.yaml`` (default ``~/.config``)."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / "thinktank" / "config.yaml"


def find_config_path(cli_path: str | None = None) -> Path | None:
    """Return the config file that ``load_config`` would read, if any."""
    if cli_path:
        path = Path(cli_path)
        if not path.exists():
            raise ConfigError(
                f"Configuration file not found at specified path: {cli_path}",
                suggestions=[
                    "Check the path passed to --config",
                    "Create one with `thinktank config init`",
                ],
            )
        return path
    for path in (Path(PROJECT_CONFIG_NAME), user_config_path()):
        if path.exists():
            return path
    return None


def load_config(cli_path: str | None = None) -> AppConfig:
    """Load config with resolution order: CLI > project-local > user-global > defaults."""
    path = find_config_path(cli_path)
    if path is None:
        logger.debug("No config file found; using defaults")
        return AppConfig()

    raw = read_raw_config(path)
    if not raw:
        logger.debug("Config file %s is empty; using defaults", path)
        return AppConfig()

    config = build_config(raw, path)
    logger.debug("Loaded configuration from %s", path)
    return config


def build_config(raw: dict, path: Path) -> AppConfig:
    """Expand env vars in a raw mapping and validate it into an AppConfig."""
    try:
        return AppConfig(**_expand_env_vars(raw))
    except PydanticValidationError as e:
        raise ConfigError(
            f"Invalid config in {path}: {e}",
            cause=e,
            suggestions=[
                "Each model needs `provider` and `model_id`",
                "Start from the template written by `thinktank config init`",
            ],
        ) from e


def read_raw_config(path: Path) -> dict:
    """Parse *path* as a YAML mapping without expanding env vars.

    An empty file reads as an empty mapping.
    """
    try:
        with open(path) as f:
            raw = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in {path}: {e}",
            cause=e,
            suggestions=["Check the file for indentation or quoting mistakes"],
        ) from e
    except OSError as e:
        raise FileSystemError(
            f"Could not read configuration file {path}: {e}",
            file_path=str(path),
            cause=e,
            suggestions=["Check that the file is readable"],
        ) from e

    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise ConfigError(
            f"Invalid config in {path}: top level must be a mapping",
            suggestions=["Start from the template written by `thinktank config init`"],
        )
    return raw


def _expand_env_vars(obj: object) -> object:
    """Recursively expand ${VAR} references in strings."""
    if isinstance(obj, str):
        return re.sub(r"\$\{(\w+)\}", lambda m: os.environ.get(m.group(1), ""), obj)
    elif isinstance(obj, dict):
        return {k: _expand_env_vars(v) for k, v in obj.items()}
    elif isinstance(obj, list):
        return [_expand_env_vars(v) for v in obj]
    return obj


# Default YAML template for `thinktank config init`
DEFAULT_CONFIG_TEMPLATE = """\
# thinktank.yaml

# Models available to `thinktank run`. API keys come from the environment:
# OPENAI_API_KEY, ANTHROPIC_API_KEY, GEMINI_API_KEY, OPENROUTER_API_KEY
models:
  - provider: "openai"
    model_id: "gpt-4o"
    options:
      temperature: 0.7
  - provider: "anthropic"
    model_id: "claude-3-7-sonnet-20250219"
    options:
      max_tokens: 4000
  - provider: "google"
    model_id: "gemini-2.5-pro"
  - provider: "openrouter"
    model_id: "deepseek/deepseek-r1"
    enabled: false
    # api_key_env_var: "MY_OPENROUTER_KEY"

# Groups share a system prompt and options. Call-site options win over
# group options, which win over model options. Options on a model listed
# inside a group layer over that model's top-level entry.
groups:
  default:
    system_prompt:
      text: "You are a helpful, accurate, and intelligent assistant."
    models:
      - provider: "openai"
        model_id: "gpt-4o"
      - provider: "google"
        model_id: "gemini-2.5-pro"
  # A model listed in several groups must be run with --group.
  reasoning:
    description: "Models with extended reasoning"
    system_prompt:
      text: "Think step by step before answering."
    options:
      temperature: 1
    models:
      - provider: "anthropic"
        model_id: "claude-3-7-sonnet-20250219"
        options:
          thinking:
            type: "enabled"
            budget_tokens: 16000
          max_tokens: 20000

# Logging
log_level: "info"              # debug | info | warn | error
"""
