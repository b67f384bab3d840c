"""Loading of user configuration files for optimization runs."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Sequence, Tuple

import jsonschema

try:  # Python 3.11+
    import tomllib  # type: ignore[attr-defined]
except ModuleNotFoundError:  # pragma: no cover - fallback for older Python
    import tomli as tomllib  # type: ignore[import-untyped]

from workers import DESCRIPTORS, OptionType, WorkerDescriptor

_GLOBAL_CONFIG_FILENAME = "image_optim.toml"
_LOCAL_CONFIG_FILENAME = ".image_optim.toml"

_JSON_TYPES = {
    OptionType.BOOLEAN: {"type": "boolean"},
    # TOML has no null, so tri-state options can only be set to a boolean here
    OptionType.TRI_STATE: {"type": "boolean"},
    OptionType.INTEGER: {"type": "integer"},
    OptionType.LIST: {"type": "array", "items": {"type": ["string", "integer", "boolean"]}},
}


class ConfigurationError(Exception):
    """Raised when resolved settings are inconsistent or invalid."""


def global_config_path(env: Optional[Mapping[str, str]] = None) -> Path:
    env = os.environ if env is None else env
    base = env.get("XDG_CONFIG_HOME") or str(Path("~/.config").expanduser())
    return Path(base) / _GLOBAL_CONFIG_FILENAME


def default_config_paths() -> Tuple[Path, ...]:
    """Return the global and local config file locations, lowest precedence first."""

    return (global_config_path(), Path.cwd() / _LOCAL_CONFIG_FILENAME)


def build_schema(descriptors: Sequence[WorkerDescriptor] = DESCRIPTORS) -> Dict[str, Any]:
    """JSON schema accepted for a configuration file."""

    properties: Dict[str, Any] = {
        "threads": {"oneOf": [{"type": "integer", "minimum": 1}, {"const": False}]},
        "nice": {"oneOf": [{"type": "integer"}, {"const": False}]},
        "verbose": {"type": "boolean"},
    }
    for descriptor in descriptors:
        options = {
            definition.name: _JSON_TYPES.get(definition.type, {})
            for definition in descriptor.option_definitions
        }
        properties[descriptor.binary] = {
            "oneOf": [
                {"type": "boolean"},
                {
                    "type": "object",
                    "properties": options,
                    "additionalProperties": False,
                    "minProperties": 1,
                },
            ]
        }
    return {
        "$schema": "https://json-schema.org/draft/2020-12/schema",
        "type": "object",
        "properties": properties,
        "additionalProperties": False,
    }


def _load_file(path: Path) -> Dict[str, Any]:
    try:
        with path.open("rb") as fh:
            return tomllib.load(fh)
    except FileNotFoundError:
        return {}
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{path}: {exc}") from exc


def merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    """Overlay ``override`` on ``base``; nested worker mappings are merged."""

    merged: Dict[str, Any] = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = {**current, **value}
        else:
            merged[key] = value
    return merged


def validate(data: Mapping[str, Any], source: str = "configuration") -> None:
    schema = build_schema()
    validator = jsonschema.validators.validator_for(schema)(schema)
    error = jsonschema.exceptions.best_match(validator.iter_errors(data))
    if error is not None:
        location = ".".join(str(part) for part in error.absolute_path) or "<root>"
        raise ConfigurationError(f"{source}: {location}: {error.message}")


@lru_cache(maxsize=8)
def _load_paths(paths: Tuple[Path, ...]) -> Dict[str, Any]:
    config: Dict[str, Any] = {}
    for path in paths:
        data = _load_file(path)
        if data:
            validate(data, source=str(path))
        config = merge(config, data)
    return config


def get_config(paths: Optional[Iterable[Path]] = None) -> Dict[str, Any]:
    """Load, validate and merge config files into one dictionary.

    Later files take precedence.  Missing files are ignored.  The result is
    a copy, callers may mutate it.
    """

    resolved = tuple(Path(path) for path in (default_config_paths() if paths is None else paths))
    return {
        key: dict(value) if isinstance(value, dict) else value
        for key, value in _load_paths(resolved).items()
    }


def reload() -> None:
    """Clear cached configuration files."""

    _load_paths.cache_clear()


__all__ = [
    "ConfigurationError",
    "build_schema",
    "default_config_paths",
    "get_config",
    "global_config_path",
    "merge",
    "reload",
    "validate",
]
