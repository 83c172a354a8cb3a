"""Error taxonomy.

I/O failures are not wrapped: they surface as the `OSError` raised by the
storage backend so the runner can abort the attempt.
"""

from __future__ import annotations
from typing import Optional


class JsonOutputError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(JsonOutputError, ValueError):
    """Malformed or missing job configuration."""


class CallbackError(JsonOutputError):
    """A key/value conversion or merge callback failed for one record.

    The original exception is kept as ``__cause__``.
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class WriterClosedError(JsonOutputError, RuntimeError):
    """write() on a closed record writer."""
