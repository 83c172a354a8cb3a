"""Input records for local and Ray runs.

Supported inputs:
- JSONL: one object per line, key/value taken from configurable fields
  (default `key` / `value`)
- Parquet: one row per record, same field names, read with pyarrow
- A directory or glob pattern of either kind

Records are routed to partitions by a stable SHA-256 hash of the converted
field name, so every record for one field lands in the same partition and
the merge policy sees all of them.
"""

from __future__ import annotations
import glob
import json
import os
from typing import Any, Callable, Iterable, Iterator, List, Tuple, Union

import pyarrow.parquet as pq

from ..errors import CallbackError, ConfigurationError
from ..utils.hashing import sha256_bytes

Record = Tuple[Any, Any]

SUPPORTED_EXTENSIONS = (".jsonl", ".parquet")


def resolve_input_files(path: Union[str, List[str]]) -> List[str]:
    if isinstance(path, list):
        files: List[str] = []
        for p in path:
            files.extend(resolve_input_files(p))
        return files

    if any(ch in path for ch in "*?["):
        matched = glob.glob(path, recursive=True)
        return sorted(f for f in matched if os.path.isfile(f) and f.endswith(SUPPORTED_EXTENSIONS))

    if os.path.isdir(path):
        return sorted(
            os.path.join(path, entry)
            for entry in os.listdir(path)
            if entry.endswith(SUPPORTED_EXTENSIONS)
        )

    if not os.path.exists(path):
        raise FileNotFoundError(f"input not found: {path}")
    return [path]


def _read_jsonl(path: str, key_field: str, value_field: str) -> Iterator[Record]:
    with open(path, "r", encoding="utf-8") as f:
        for line_no, line in enumerate(f, start=1):
            line = line.strip()
            if not line:
                continue
            row = json.loads(line)
            if not isinstance(row, dict) or key_field not in row:
                raise ValueError(f"{path}:{line_no}: expected an object with a {key_field!r} field")
            yield row[key_field], row.get(value_field)


def _read_parquet(path: str, key_field: str, value_field: str) -> Iterator[Record]:
    table = pq.read_table(path)
    if key_field not in table.column_names:
        raise ValueError(f"{path}: no {key_field!r} column (columns: {table.column_names})")
    for row in table.to_pylist():
        yield row[key_field], row.get(value_field)


def read_records(
    path: Union[str, List[str]],
    key_field: str = "key",
    value_field: str = "value",
) -> Iterator[Record]:
    for f in resolve_input_files(path):
        if f.endswith(".parquet"):
            yield from _read_parquet(f, key_field, value_field)
        elif f.endswith(".jsonl"):
            yield from _read_jsonl(f, key_field, value_field)
        else:
            raise ConfigurationError(f"unsupported input format: {f} (expected {SUPPORTED_EXTENSIONS})")


def partition_for(field: str, num_partitions: int) -> int:
    """Stable hash partitioner: same field, same partition, on every machine."""
    if num_partitions < 1:
        raise ConfigurationError(f"num_partitions must be >= 1, got {num_partitions}")
    return int.from_bytes(sha256_bytes(field)[:8], "big") % num_partitions


def partition_records(
    records: Iterable[Record],
    num_partitions: int,
    convert_key: Callable[[Any], str],
) -> List[List[Record]]:
    """Split records into per-partition lists, keeping input order within each."""
    if num_partitions < 1:
        raise ConfigurationError(f"num_partitions must be >= 1, got {num_partitions}")
    buckets: List[List[Record]] = [[] for _ in range(num_partitions)]
    for key, value in records:
        try:
            field = convert_key(key)
        except Exception as exc:
            raise CallbackError(f"convert_key failed for key {key!r}: {exc}") from exc
        buckets[partition_for(str(field), num_partitions)].append((key, value))
    return buckets
