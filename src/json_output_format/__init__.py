"""json_output_format

Aggregated JSON output for batch jobs: every output partition becomes a
single JSON object instead of one line per record.

Public API surface:
- json_output_format.writers.json_writer : JsonConverters, JsonAccumulatingWriter, JsonOutputFormat
- json_output_format.committer : FileOutputCommitter
- json_output_format.storage : local / S3 storage backends
- json_output_format.pipeline.run : run_local / run_ray
- json_output_format.cli.main : CLI entrypoint
"""
__all__ = ["__version__"]
__version__ = "0.1.0"
