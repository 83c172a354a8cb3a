"""Task attempt context.

One context describes one attempt at producing one output partition. It is
what the output format and the committer see of the surrounding job:
- conf: the job configuration mapping (see config.py)
- job_id / task_type / partition / attempt: identity used for staging paths
  and unique file names
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict

TASK_TYPES = ("m", "r")


@dataclass(frozen=True)
class TaskAttemptContext:
    job_id: str
    partition: int
    task_type: str = "r"
    attempt: int = 0
    conf: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.task_type not in TASK_TYPES:
            raise ValueError(f"task_type must be one of {TASK_TYPES}, got {self.task_type!r}")
        if self.partition < 0:
            raise ValueError(f"partition must be >= 0, got {self.partition}")

    @property
    def task_id(self) -> str:
        return f"task_{self.job_id}_{self.task_type}_{self.partition:06d}"

    @property
    def task_attempt_id(self) -> str:
        return f"attempt_{self.job_id}_{self.task_type}_{self.partition:06d}_{self.attempt}"

    def next_attempt(self) -> "TaskAttemptContext":
        """Context for a retry of the same partition."""
        return TaskAttemptContext(
            job_id=self.job_id,
            partition=self.partition,
            task_type=self.task_type,
            attempt=self.attempt + 1,
            conf=self.conf,
        )
