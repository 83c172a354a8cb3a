"""Record writers and output formats."""

from .base import OutputFormat, RecordWriter
from .json_writer import JsonAccumulatingWriter, JsonConverters, JsonOutputFormat

__all__ = [
    "OutputFormat",
    "RecordWriter",
    "JsonAccumulatingWriter",
    "JsonConverters",
    "JsonOutputFormat",
]
