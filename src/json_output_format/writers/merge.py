"""Merge policies for repeated field names.

A merge policy is called as `merge(existing, new)` only when a field is
already present in the accumulated document, and its return value replaces
the existing entry. Select one by name with `jof.merge`.

`existing` is the value the writer stores, not a copy. `append` and `deep`
grow it in place so that folding N records into one field stays linear.
Neither can fail once it has started modifying `existing`.
"""

from __future__ import annotations
from typing import Any, Callable, Dict, List

from ..errors import ConfigurationError

JsonValue = Any
MergeFn = Callable[[JsonValue, JsonValue], JsonValue]


def last_write_wins(existing: JsonValue, new: JsonValue) -> JsonValue:
    return new


def first_write_wins(existing: JsonValue, new: JsonValue) -> JsonValue:
    return existing


def append(existing: JsonValue, new: JsonValue) -> JsonValue:
    """Accumulate values into an array. A list `new` extends the array."""
    acc = existing if isinstance(existing, list) else [existing]
    if isinstance(new, list):
        acc.extend(new)
    else:
        acc.append(new)
    return acc


def _is_number(v: Any) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def add(existing: JsonValue, new: JsonValue) -> JsonValue:
    if not (_is_number(existing) and _is_number(new)):
        raise TypeError(
            f"sum merge needs numbers, got {type(existing).__name__} and {type(new).__name__}"
        )
    return existing + new


def deep_merge(existing: JsonValue, new: JsonValue) -> JsonValue:
    """Merge objects key by key; anything that is not object/object takes `new`."""
    if not (isinstance(existing, dict) and isinstance(new, dict)):
        return new
    for k, v in new.items():
        existing[k] = deep_merge(existing[k], v) if k in existing else v
    return existing


_POLICIES: Dict[str, MergeFn] = {
    "last": last_write_wins,
    "first": first_write_wins,
    "append": append,
    "sum": add,
    "deep": deep_merge,
}


def list_merge_policies() -> List[str]:
    return list(_POLICIES.keys())


def get_merge_policy(name: str) -> MergeFn:
    if name not in _POLICIES:
        raise ConfigurationError(
            f"Unknown merge policy: {name}. Available: {list(_POLICIES)}"
        )
    return _POLICIES[name]
