"""Edit model entries in a thinktank YAML file.

Edits work on the raw mapping, so ``${VAR}`` references survive a round trip.
Comments do not: the file is rewritten with ``yaml.safe_dump``.
"""

import logging
from pathlib import Path

import yaml

from thinktank.errors.base import ConfigError, FileSystemError
from thinktank.errors.factories import create_model_not_found_error

from .loader import PROJECT_CONFIG_NAME, build_config, find_config_path, read_raw_config
from .lookup import parse_model_reference
from .models import ModelConfig

logger = logging.getLogger(__name__)


def edit_target(cli_path: str | None = None) -> Path:
    """The file edits go to: the active config file, else ``./thinktank.yaml``."""
    return find_config_path(cli_path) or Path(PROJECT_CONFIG_NAME)


def _load(path: Path) -> dict:
    return read_raw_config(path) if path.exists() else {}


def _save(path: Path, raw: dict) -> None:
    # Never write a file that load_config would reject.
    build_config(raw, path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            yaml.safe_dump(raw, default_flow_style=False, sort_keys=False),
            encoding="utf-8",
        )
    except OSError as e:
        raise FileSystemError(
            f"Could not write configuration file {path}: {e}",
            file_path=str(path),
            cause=e,
            suggestions=["Check that the directory exists and is writable"],
        ) from e
    logger.info("wrote %s", path)


def _model_entries(raw: dict, path: Path) -> list:
    models = raw.setdefault("models", [])
    if not isinstance(models, list):
        raise ConfigError(
            f"Invalid config in {path}: `models` must be a list",
            suggestions=["Start from the template written by `thinktank config init`"],
        )
    return models


def _matches(entry: object, provider: str, model_id: str) -> bool:
    return (
        isinstance(entry, dict)
        and entry.get("provider") == provider
        and entry.get("model_id") == model_id
    )


def _find_entry(raw: dict, path: Path, reference: str) -> dict:
    provider, model_id = parse_model_reference(reference)
    models = _model_entries(raw, path)
    for entry in models:
        if _matches(entry, provider, model_id):
            return entry
    raise create_model_not_found_error(
        reference,
        [f"{m.get('provider')}:{m.get('model_id')}" for m in models if isinstance(m, dict)],
    )


def add_model(
    path: Path,
    reference: str,
    *,
    enabled: bool = True,
    options: dict | None = None,
) -> ModelConfig:
    """Append ``provider:modelId`` to the top-level ``models`` list."""
    provider, model_id = parse_model_reference(reference)
    raw = _load(path)
    models = _model_entries(raw, path)
    if any(_matches(m, provider, model_id) for m in models):
        raise ConfigError(
            f'Model "{reference}" already exists in {path}.',
            suggestions=[
                f"Use `thinktank config enable {reference}` to turn it back on",
                f"Or remove it first with `thinktank config remove-model {reference}`",
            ],
        )

    entry: dict = {"provider": provider, "model_id": model_id}
    if not enabled:
        entry["enabled"] = False
    if options:
        entry["options"] = dict(options)
    models.append(entry)
    _save(path, raw)
    return ModelConfig(**entry)


def remove_model(path: Path, reference: str) -> list[str]:
    """Delete a model and its group memberships.

    Returns the names of the groups it was removed from.
    """
    raw = _load(path)
    entry = _find_entry(raw, path, reference)
    raw["models"].remove(entry)

    provider, model_id = entry["provider"], entry["model_id"]
    removed_from = []
    groups = raw.get("groups")
    if isinstance(groups, dict):
        for name, group in groups.items():
            members = group.get("models") if isinstance(group, dict) else None
            if not isinstance(members, list):
                continue
            kept = [m for m in members if not _matches(m, provider, model_id)]
            if len(kept) != len(members):
                group["models"] = kept
                removed_from.append(name)

    _save(path, raw)
    return removed_from


def set_model_enabled(path: Path, reference: str, enabled: bool) -> None:
    raw = _load(path)
    entry = _find_entry(raw, path, reference)
    if enabled:
        entry.pop("enabled", None)
    else:
        entry["enabled"] = False
    _save(path, raw)
