"""Job ID resolution: explicit or auto-generated from config.

Auto-generation uses:
- the input file name (without extension), when `run.job_id_auto.include_input_name`
- a compact UTC timestamp, YYYYMMDDHHMMSS

Job IDs end up in attempt ids and staging directory names, so they are
restricted to word characters and dashes.
"""

from __future__ import annotations
import os
import re
from datetime import datetime, timezone
from typing import Any, Dict


def _safe(name: str) -> str:
    return re.sub(r"[^\w\-]", "_", name.strip())


def _input_name(cfg: Dict[str, Any]) -> str:
    path = (cfg.get("input") or {}).get("path")
    if isinstance(path, list):
        path = path[0] if path else None
    if not path:
        return "job"
    base = os.path.basename(os.path.normpath(str(path)))
    name = os.path.splitext(base)[0]
    return _safe(name) or "job"


def generate_job_id(cfg: Dict[str, Any], auto_cfg: Dict[str, Any]) -> str:
    separator = str(auto_cfg.get("separator", "_"))
    parts = []
    if auto_cfg.get("include_input_name", True):
        parts.append(_input_name(cfg))
    parts.append(datetime.now(timezone.utc).strftime("%Y%m%d%H%M%S"))
    return separator.join(parts)


def resolve_job_id(cfg: Dict[str, Any]) -> str:
    """Return job_id: explicit run.job_id, else auto-generated from run.job_id_auto."""
    run = cfg.get("run") or {}
    explicit = run.get("job_id")
    if explicit is not None and str(explicit).strip():
        return _safe(str(explicit))
    auto_cfg = run.get("job_id_auto")
    return generate_job_id(cfg, auto_cfg if isinstance(auto_cfg, dict) else {})
