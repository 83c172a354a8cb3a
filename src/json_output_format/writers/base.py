"""Output writer interfaces.

We separate outputs into:
- OutputFormat: per-job factory, asked once per partition attempt for a writer
- RecordWriter: receives that partition's (key, value) records, then close()

Both are deliberately small so new output formats do not need to know about
the runner or the committer beyond what the context hands them.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Any, Generic, TypeVar

from ..committer import FileOutputCommitter
from ..context import TaskAttemptContext

K = TypeVar("K")
V = TypeVar("V")


class RecordWriter(ABC, Generic[K, V]):
    """Writes the records of one partition attempt."""

    @abstractmethod
    def write(self, key: K, value: V) -> None:
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        """Flush everything and release the underlying stream."""
        raise NotImplementedError

    def __enter__(self) -> "RecordWriter[K, V]":
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()


class OutputFormat(ABC, Generic[K, V]):
    name: str

    @abstractmethod
    def get_output_committer(self, context: TaskAttemptContext) -> FileOutputCommitter:
        raise NotImplementedError

    @abstractmethod
    def get_record_writer(self, context: TaskAttemptContext) -> RecordWriter[K, V]:
        raise NotImplementedError
