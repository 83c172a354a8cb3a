"""Rename-based file output committer.

Output layout while a job runs:
  <out>/
   └── _temporary/
        ├── attempt_<job>_r_000003_0/        # work path of one task attempt
        │    └── json_output-r-00003.json
        └── _committed/                      # tasks that finished, promoted by commit_task
             └── json_output-r-00000.json

After commit_job:
  <out>/
   ├── json_output-r-00000.json
   ├── json_output-r-00003.json
   └── _SUCCESS

A record writer only ever writes below its attempt's work path, and the
output directory proper is only populated by commit_job. A failed or
aborted attempt (or job) is therefore never visible to readers.
"""

from __future__ import annotations
import logging
import os
from typing import List, Optional

from .context import TaskAttemptContext
from .storage.base import LocalStorageBackend, StorageBackend

log = logging.getLogger("json_output_format.committer")

TEMP_DIR_NAME = "_temporary"
COMMITTED_DIR_NAME = "_committed"
SUCCEEDED_FILE_NAME = "_SUCCESS"


class FileOutputCommitter:
    def __init__(self, output_dir: str, context: TaskAttemptContext, backend: Optional[StorageBackend] = None):
        self.output_dir = output_dir
        self.context = context
        self.backend = backend or LocalStorageBackend()

    @property
    def temp_dir(self) -> str:
        return self.backend.join(self.output_dir, TEMP_DIR_NAME)

    @property
    def committed_dir(self) -> str:
        return self.backend.join(self.temp_dir, COMMITTED_DIR_NAME)

    @property
    def work_path(self) -> str:
        """Staging directory for this task attempt."""
        return self.backend.join(self.temp_dir, self.context.task_attempt_id)

    @property
    def success_marker(self) -> str:
        return self.backend.join(self.output_dir, SUCCEEDED_FILE_NAME)

    def get_unique_file(self, name: str, extension: str) -> str:
        """File name that is unique per partition: `<name>-r-00003<ext>`."""
        return f"{name}-{self.context.task_type}-{self.context.partition:05d}{extension}"

    def get_work_file(self, name: str, extension: str) -> str:
        return self.backend.join(self.work_path, self.get_unique_file(name, extension))

    def _move_all(self, src_dir: str, dst_dir: str) -> List[str]:
        moved = []
        for src in self.backend.list_files(src_dir):
            dst = self.backend.join(dst_dir, os.path.basename(src))
            self.backend.rename(src, dst)
            moved.append(dst)
        return moved

    # job lifecycle (driver side)

    def setup_job(self) -> None:
        self.backend.makedirs(self.committed_dir, exist_ok=True)

    def commit_job(self) -> List[str]:
        """Publish every committed task's output, then write the _SUCCESS marker."""
        published = self._move_all(self.committed_dir, self.output_dir)
        self.backend.delete(self.temp_dir, recursive=True)
        self.backend.write_file(self.success_marker, b"")
        log.info(f"job committed job_id={self.context.job_id} output_dir={self.output_dir} files={len(published)}")
        return published

    def abort_job(self) -> None:
        self.backend.delete(self.temp_dir, recursive=True)
        log.warning(f"job aborted job_id={self.context.job_id} output_dir={self.output_dir}")

    # task lifecycle (one partition attempt)

    def setup_task(self) -> None:
        self.backend.makedirs(self.work_path, exist_ok=True)

    def needs_task_commit(self) -> bool:
        return bool(self.backend.list_files(self.work_path))

    def commit_task(self) -> List[str]:
        """Promote this attempt's staged files to the job's committed area."""
        promoted = self._move_all(self.work_path, self.committed_dir)
        self.backend.delete(self.work_path, recursive=True)
        log.info(f"task committed attempt={self.context.task_attempt_id} files={len(promoted)}")
        return promoted

    def abort_task(self) -> None:
        self.backend.delete(self.work_path, recursive=True)
        log.warning(f"task aborted attempt={self.context.task_attempt_id}")
