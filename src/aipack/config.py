"""Layered ``config.toml`` loading.

Files come from ``PathSet.config_files()``: the base
``~/.aipack-base/config.toml`` first, then the workspace
``.aipack/config.toml``. Later files override earlier ones, nested tables
are merged key by key::

    [default_options]
    model = "gpt-4.1-mini"
    input_concurrency = 2

    [default_options.model_aliases]
    fast = "gpt-4.1-nano"
"""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from jsonschema import ValidationError, validate

from aipack.errors import ConfigInvalid
from aipack.path_set import PathSet

log = logging.getLogger(__name__)

CONFIG_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "default_options": {
            "type": "object",
            "properties": {
                "model": {"type": "string", "minLength": 1},
                "temperature": {"type": "number"},
                "input_concurrency": {"type": "integer", "minimum": 1},
                "model_aliases": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
            },
        },
    },
}


def _read_toml_file(path: Path) -> dict[str, Any] | None:
    """Read one TOML file; None when missing, ConfigInvalid when unparseable."""
    try:
        with path.open("rb") as handle:
            return tomllib.load(handle)
    except FileNotFoundError:
        return None
    except tomllib.TOMLDecodeError as exc:
        raise ConfigInvalid(path, f"TOML parse error: {exc}") from exc
    except OSError as exc:
        raise ConfigInvalid(path, f"Cannot read file: {exc}") from exc


def merge_config(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge *override* onto *base* (tables merged, other values replaced)."""
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = merge_config(current, value)
        else:
            merged[key] = value
    return merged


def validate_config(document: dict[str, Any], path: Path) -> None:
    try:
        validate(instance=document, schema=CONFIG_SCHEMA)
    except ValidationError as exc:
        location = ".".join(str(p) for p in exc.absolute_path) or "<root>"
        raise ConfigInvalid(path, f"{location}: {exc.message}") from exc


def load_config(path_set: PathSet) -> dict[str, Any]:
    """Load, validate and merge all config files of *path_set*."""
    merged: dict[str, Any] = {}
    for path in path_set.config_files():
        document = _read_toml_file(path)
        if document is None:
            log.debug("Config file %s not found, skipping", path)
            continue
        validate_config(document, path)
        log.debug("Merging config %s", path)
        merged = merge_config(merged, document)
    return merged
