"""CLI entrypoint.

Commands:
- `json-output-format run --config configs/job.yaml [--ray-config configs/ray.yaml]`
- `json-output-format show <file.json>`

Execution modes (config: execution.mode):
- local: partitions run sequentially in-process
- ray: one Ray task per partition
"""

from __future__ import annotations
import argparse
import json
from typing import List, Optional

from .config import load_yaml
from .job_id import resolve_job_id
from .logging_ import setup_logging
from .pipeline.run import run_local, run_ray


def main(argv: Optional[List[str]] = None) -> None:
    p = argparse.ArgumentParser(prog="json-output-format")
    sub = p.add_subparsers(dest="cmd", required=True)

    pr = sub.add_parser("run")
    pr.add_argument("--config", required=True)
    pr.add_argument("--ray-config", default="configs/ray.yaml")

    ps = sub.add_parser("show", help="Pretty-print one partition output file")
    ps.add_argument("path")

    args = p.parse_args(argv)

    if args.cmd == "show":
        with open(args.path, "r", encoding="utf-8") as f:
            print(json.dumps(json.load(f), indent=2, ensure_ascii=False))
        return

    cfg = load_yaml(args.config)
    run = cfg.get("run") or {}
    cfg["run"] = run
    # pin the job id so logging and the runner agree on it
    run["job_id"] = resolve_job_id(cfg)
    setup_logging(run["job_id"], log_dir=run.get("log_dir"), level=run.get("log_level", "INFO"))

    mode = (cfg.get("execution") or {}).get("mode", "local").lower()
    if mode == "ray":
        summary = run_ray(cfg, load_yaml(args.ray_config))
    else:
        summary = run_local(cfg)
    print(json.dumps(summary, indent=2))


if __name__ == "__main__":
    main()
