import pytest

from json_output_format.context import TaskAttemptContext
from json_output_format.job_id import resolve_job_id


def test_attempt_ids():
    ctx = TaskAttemptContext(job_id="wc", partition=3, attempt=1)
    assert ctx.task_id == "task_wc_r_000003"
    assert ctx.task_attempt_id == "attempt_wc_r_000003_1"
    assert ctx.next_attempt().task_attempt_id == "attempt_wc_r_000003_2"


def test_invalid_context():
    with pytest.raises(ValueError):
        TaskAttemptContext(job_id="wc", partition=0, task_type="x")
    with pytest.raises(ValueError):
        TaskAttemptContext(job_id="wc", partition=-1)


def test_job_id_explicit_and_generated():
    assert resolve_job_id({"run": {"job_id": "my job/1"}}) == "my_job_1"
    generated = resolve_job_id({"input": {"path": "data/word counts.jsonl"}})
    assert generated.startswith("word_counts_")
    assert generated[len("word_counts_"):].isdigit()
    assert resolve_job_id({"run": {"job_id_auto": {"include_input_name": False}}}).isdigit()
