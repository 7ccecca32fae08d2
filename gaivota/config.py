"""Application settings read from a JSON file."""

from __future__ import annotations

import json
from dataclasses import dataclass
from os import PathLike
from typing import Any


class ConfigError(Exception):
    """The configuration file could not be decoded."""


@dataclass
class Settings:
    """Settings loaded from the configuration file."""

    port: int = 0
    database_conn_string: str = ""


_FIELDS = {"port": ("port", int), "databaseconnstring": ("database_conn_string", str)}


def _check(key: str, value: Any, kind: type) -> Any:
    if kind is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, str)
    if not valid:
        raise ConfigError(
            f"cannot load gaivota configuration: field {key} must be of type {kind.__name__}"
        )
    return value


def read_file(path: str | PathLike[str]) -> Settings:
    """Load settings from ``path``; unknown keys are ignored, key case is not significant."""
    with open(path, encoding="utf-8") as handle:
        text = handle.read()
    try:
        document, _ = json.JSONDecoder().raw_decode(text.lstrip())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"cannot load gaivota configuration: {exc}") from exc

    settings = Settings()
    if document is None:
        return settings
    if not isinstance(document, dict):
        raise ConfigError("cannot load gaivota configuration: expected a JSON object")

    for key, value in document.items():
        spec = _FIELDS.get(key.lower())
        if spec is None or value is None:
            continue
        attr, kind = spec
        setattr(settings, attr, _check(key, value, kind))
    return settings