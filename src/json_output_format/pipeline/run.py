"""Job runners.

Pipeline:
read_records(input.path) ->
  partition by hash of converted field name (output.partitions) ->
  per partition: setup_task -> get_record_writer -> write* -> close -> commit_task ->
commit_job (writes _SUCCESS)

Execution modes (config: execution.mode):
- local: partitions run one after another in this process
- ray: one Ray task per partition; job setup and commit stay on the driver

A failing partition aborts its own attempt and then the whole job; nothing
is retried here.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, List, Optional

from ..committer import FileOutputCommitter
from ..config import get_conf, resolve_converters_name
from ..context import TaskAttemptContext
from ..errors import ConfigurationError
from ..job_id import resolve_job_id
from ..writers.json_writer import JsonOutputFormat
from ..writers.registry import get_converters
from .records import Record, partition_records, read_records

log = logging.getLogger("json_output_format.pipeline")


def make_output_format(cfg: Dict[str, Any]) -> JsonOutputFormat:
    name = resolve_converters_name(cfg)
    try:
        converters = get_converters(name)
    except KeyError as exc:
        raise ConfigurationError(str(exc)) from exc
    return JsonOutputFormat(converters)


def _num_partitions(cfg: Dict[str, Any]) -> int:
    raw = get_conf(cfg, "output.partitions", 1)
    try:
        n = int(raw)
    except (TypeError, ValueError) as exc:
        raise ConfigurationError(f"output.partitions must be an integer, got {raw!r}") from exc
    if n < 1:
        raise ConfigurationError(f"output.partitions must be >= 1, got {n}")
    return n


def _load_partitions(cfg: Dict[str, Any], fmt: JsonOutputFormat, ctx: TaskAttemptContext) -> List[List[Record]]:
    inp = cfg.get("input") or {}
    if not inp.get("path"):
        raise ConfigurationError("input.path is required")
    records = read_records(
        inp["path"],
        key_field=inp.get("key_field", "key"),
        value_field=inp.get("value_field", "value"),
    )
    return partition_records(records, _num_partitions(cfg), fmt.converters_for(ctx).convert_key)


def run_partition(
    cfg: Dict[str, Any],
    job_id: str,
    partition: int,
    records: List[Record],
    output_format: JsonOutputFormat,
    attempt: int = 0,
) -> Dict[str, Any]:
    """Run one partition attempt: write all records, then commit or abort."""
    ctx = TaskAttemptContext(job_id=job_id, partition=partition, attempt=attempt, conf=cfg)
    committer = output_format.get_output_committer(ctx)
    committer.setup_task()
    try:
        with output_format.get_record_writer(ctx) as writer:
            for key, value in records:
                writer.write(key, value)
            fields = len(writer)
        staged = committer.commit_task() if committer.needs_task_commit() else []
    except Exception:
        log.error(f"partition={partition} attempt={ctx.task_attempt_id} failed")
        committer.abort_task()
        raise
    log.info(f"partition={partition} records={len(records)} fields={fields} staged={len(staged)}")
    return {"partition": partition, "records": len(records), "fields": fields}


def _summary(job_id: str, committer: FileOutputCommitter, files: List[str], results: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "job_id": job_id,
        "output_dir": committer.output_dir,
        "files": files,
        "success_marker": committer.success_marker,
        "partitions": results,
    }


def run_local(cfg: Dict[str, Any], output_format: Optional[JsonOutputFormat] = None) -> Dict[str, Any]:
    job_id = resolve_job_id(cfg)
    fmt = output_format or make_output_format(cfg)
    driver_ctx = TaskAttemptContext(job_id=job_id, partition=0, conf=cfg)
    job_committer = fmt.get_output_committer(driver_ctx)

    log.info(f"[local] job_id={job_id} output_dir={job_committer.output_dir}")
    job_committer.setup_job()
    try:
        buckets = _load_partitions(cfg, fmt, driver_ctx)
        results = [
            run_partition(cfg, job_id, p, records, fmt)
            for p, records in enumerate(buckets)
        ]
    except Exception:
        job_committer.abort_job()
        raise
    files = job_committer.commit_job()
    return _summary(job_id, job_committer, files, results)


def run_ray(
    cfg: Dict[str, Any],
    ray_cfg: Optional[Dict[str, Any]] = None,
    output_format: Optional[JsonOutputFormat] = None,
) -> Dict[str, Any]:
    import ray

    # address None starts a local instance; "auto" joins a running cluster
    ray_opts = (ray_cfg or {}).get("ray") or {}
    init_kwargs: Dict[str, Any] = {"address": ray_opts.get("address", "auto"), "ignore_reinit_error": True}
    if ray_opts.get("num_cpus") is not None:
        init_kwargs["num_cpus"] = int(ray_opts["num_cpus"])
    if ray_opts.get("runtime_env"):
        init_kwargs["runtime_env"] = ray_opts["runtime_env"]
    ray.init(**init_kwargs)

    job_id = resolve_job_id(cfg)
    fmt = output_format or make_output_format(cfg)
    driver_ctx = TaskAttemptContext(job_id=job_id, partition=0, conf=cfg)
    job_committer = fmt.get_output_committer(driver_ctx)

    log.info(f"[ray] job_id={job_id} output_dir={job_committer.output_dir}")
    job_committer.setup_job()
    try:
        buckets = _load_partitions(cfg, fmt, driver_ctx)
        remote_partition = ray.remote(run_partition)
        refs = [
            remote_partition.remote(cfg, job_id, p, records, fmt)
            for p, records in enumerate(buckets)
        ]
        results = ray.get(refs)
    except Exception:
        job_committer.abort_job()
        raise
    files = job_committer.commit_job()
    return _summary(job_id, job_committer, files, results)
