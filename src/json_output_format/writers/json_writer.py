"""Aggregated JSON output.

Instead of one line per record, every partition produces exactly one JSON
object. Records are folded into an in-memory dict keyed by a field name
derived from the record key; the dict is serialized and written in a single
call when the partition's writer is closed:

  write("a", 1), write("b", 2), write("a", 3)  ->  {"a":3,"b":2}

Field order is the order of first occurrence. A repeated field name goes
through the merge callback (last write wins unless configured otherwise).

Nothing reaches the output stream before close(), so a failed attempt never
leaves a half-written document behind in the committed output.
"""

from __future__ import annotations
import copy
import json
import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, BinaryIO, Callable, Dict, Mapping, Optional

from ..committer import FileOutputCommitter
from ..config import get_conf, resolve_merge_name, resolve_output_dir, resolve_output_names
from ..context import TaskAttemptContext
from ..errors import CallbackError, WriterClosedError
from ..storage.base import StorageBackend, get_storage_backend
from .base import OutputFormat, RecordWriter
from .merge import MergeFn, get_merge_policy, last_write_wins

log = logging.getLogger("json_output_format.writers.json")

JsonValue = Any


@dataclass(frozen=True)
class JsonConverters:
    """The callbacks that turn framework records into JSON.

    convert_key must return a str and be deterministic for a given key.
    merge is only called when a field name repeats; None means last write wins.

    merge receives the stored value itself, not a copy. It may grow that
    value in place and return it, but must not raise after it has started
    modifying it. Merges that cannot promise this set copy_on_merge, which
    hands them a deep copy at the cost of copying the value on every repeat.
    """
    convert_key: Callable[[Any], str]
    convert_value: Callable[[Any], JsonValue]
    merge: Optional[MergeFn] = None
    copy_on_merge: bool = False


def encode_document(document: Mapping[str, JsonValue]) -> bytes:
    """Compact UTF-8 JSON, keys in insertion order, no trailing newline."""
    try:
        text = json.dumps(document, ensure_ascii=False, separators=(",", ":"), allow_nan=False)
    except (TypeError, ValueError) as exc:
        raise CallbackError(f"accumulated document is not serializable as JSON: {exc}") from exc
    return text.encode("utf-8")


class JsonAccumulatingWriter(RecordWriter[Any, Any]):
    """Buffers one partition's records as a JSON object until close()."""

    def __init__(self, out: BinaryIO, converters: JsonConverters, path: Optional[str] = None):
        self._out = out
        self._converters = converters
        self._merge = converters.merge or last_write_wins
        self._json: Dict[str, JsonValue] = {}
        self._closed = False
        self.path = path
        log.debug(f"json writer opened path={path}")

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def document(self) -> Mapping[str, JsonValue]:
        """Read-only view of what has been accumulated so far."""
        return MappingProxyType(self._json)

    def __len__(self) -> int:
        return len(self._json)

    def __contains__(self, field: object) -> bool:
        return field in self._json

    def write(self, key: Any, value: Any) -> None:
        if self._closed:
            raise WriterClosedError(f"write() on closed writer path={self.path}")

        try:
            field = self._converters.convert_key(key)
        except Exception as exc:
            raise CallbackError(f"convert_key failed for key {key!r}: {exc}") from exc
        if not isinstance(field, str):
            raise CallbackError(
                f"convert_key must return str, got {type(field).__name__} for key {key!r}"
            )

        try:
            new = self._converters.convert_value(value)
        except Exception as exc:
            raise CallbackError(f"convert_value failed for field {field!r}: {exc}", field=field) from exc

        if field in self._json:
            existing = self._json[field]
            if self._converters.copy_on_merge:
                existing = copy.deepcopy(existing)
            try:
                new = self._merge(existing, new)
            except Exception as exc:
                raise CallbackError(f"merge failed for field {field!r}: {exc}", field=field) from exc

        self._json[field] = new

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            data = encode_document(self._json)
            self._out.write(data)
        finally:
            self._out.close()
        log.info(f"json writer closed path={self.path} fields={len(self._json)} bytes={len(data)}")
        self._json = {}


class JsonOutputFormat(OutputFormat[Any, Any]):
    """Output format producing one JSON object file per partition.

    Converters can be passed in as a `JsonConverters` bundle, or a subclass
    can override `convert_key` / `convert_value` / `merge`.
    """
    name = "json"
    copy_on_merge = False

    def __init__(self, converters: Optional[JsonConverters] = None, backend: Optional[StorageBackend] = None):
        self.converters = converters
        self.backend = backend

    def convert_key(self, key: Any) -> str:
        raise NotImplementedError("pass JsonConverters or override convert_key")

    def convert_value(self, value: Any) -> JsonValue:
        raise NotImplementedError("pass JsonConverters or override convert_value")

    def merge(self, existing: JsonValue, new: JsonValue) -> JsonValue:
        return new

    def _backend_for(self, context: TaskAttemptContext) -> StorageBackend:
        if self.backend is not None:
            return self.backend
        return get_storage_backend(get_conf(context.conf, "output.storage"))

    def converters_for(self, context: TaskAttemptContext) -> JsonConverters:
        conf_merge = get_merge_policy(resolve_merge_name(context.conf))
        if self.converters is not None:
            return JsonConverters(
                convert_key=self.converters.convert_key,
                convert_value=self.converters.convert_value,
                merge=self.converters.merge or conf_merge,
                copy_on_merge=self.converters.copy_on_merge,
            )
        overridden = type(self).merge is not JsonOutputFormat.merge
        return JsonConverters(
            convert_key=self.convert_key,
            convert_value=self.convert_value,
            merge=self.merge if overridden else conf_merge,
            copy_on_merge=self.copy_on_merge and overridden,
        )

    def get_output_committer(self, context: TaskAttemptContext) -> FileOutputCommitter:
        return FileOutputCommitter(resolve_output_dir(context.conf), context, self._backend_for(context))

    def get_record_writer(self, context: TaskAttemptContext) -> JsonAccumulatingWriter:
        name, ext = resolve_output_names(context.conf)
        converters = self.converters_for(context)
        committer = self.get_output_committer(context)
        path = committer.get_work_file(name, ext)
        out = committer.backend.create(path, overwrite=False)
        return JsonAccumulatingWriter(out, converters, path=path)
