"""Logging utilities.

We use Python's standard `logging` module with a plain structured format
that is easy to grep and to ship to a log collector.

- Logs go to: `<log_dir>/<job_id>.log`
- Also prints the same lines to the console.
"""

from __future__ import annotations
import logging
import os
from typing import Optional, Union

FORMAT = "%(asctime)s %(levelname)s %(name)s | %(message)s"
DATEFMT = "%Y-%m-%dT%H:%M:%S"


def setup_logging(job_id: str, log_dir: Optional[str] = None, level: Union[int, str] = logging.INFO) -> None:
    """
    Setup logging configuration.

    Args:
        job_id: Job identifier, used as the log file name
        log_dir: Directory for the log file (if None, only the console handler is installed)
        level: Root logger level, as a number or a name such as "DEBUG"
    """
    root = logging.getLogger()
    root.setLevel(level.upper() if isinstance(level, str) else level)

    fmt = logging.Formatter(fmt=FORMAT, datefmt=DATEFMT)

    # File
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        fh = logging.FileHandler(os.path.join(log_dir, f"{job_id}.log"), encoding="utf-8")
        fh.setFormatter(fmt)
        root.addHandler(fh)

    # Console
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    root.addHandler(ch)
