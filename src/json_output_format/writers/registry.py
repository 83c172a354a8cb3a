"""Converter registry.

Config-driven jobs (CLI, runner) pick their key/value converters by name
with `jof.converters`. Register new converter sets here without changing
pipeline code.
"""

from __future__ import annotations
import json
from typing import Any, Dict

from .json_writer import JsonConverters


def _identity_key(key: Any) -> str:
    return key if isinstance(key, str) else str(key)


def _identity_value(value: Any) -> Any:
    return value


def _parse_json_value(value: Any) -> Any:
    # values that arrive as JSON text (e.g. from a text-based reduce step)
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        return json.loads(value)
    return value


_CONVERTERS: Dict[str, JsonConverters] = {
    "identity": JsonConverters(convert_key=_identity_key, convert_value=_identity_value),
    "string": JsonConverters(convert_key=_identity_key, convert_value=str),
    "json": JsonConverters(convert_key=_identity_key, convert_value=_parse_json_value),
}


def register_converters(name: str, converters: JsonConverters) -> None:
    """Register a new converter set dynamically.

    Allows adding converters at runtime without modifying this file.
    """
    if name in _CONVERTERS:
        raise ValueError(f"Converters '{name}' already registered")
    _CONVERTERS[name] = converters


def list_converters() -> list[str]:
    """List all registered converter sets."""
    return list(_CONVERTERS.keys())


def get_converters(name: str) -> JsonConverters:
    """Get converter set by name."""
    if name not in _CONVERTERS:
        raise KeyError(
            f"Unknown converters: {name}. "
            f"Available: {list(_CONVERTERS)}. "
            f"Register with register_converters()"
        )
    return _CONVERTERS[name]
