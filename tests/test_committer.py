import os

from json_output_format.committer import FileOutputCommitter
from json_output_format.context import TaskAttemptContext


def _committer(tmp_path, partition=0, attempt=0):
    ctx = TaskAttemptContext(job_id="job7", partition=partition, attempt=attempt)
    return FileOutputCommitter(str(tmp_path / "out"), ctx)


def _stage(committer, name="json_output", ext=".json", data=b"{}"):
    committer.setup_task()
    path = committer.get_work_file(name, ext)
    with committer.backend.create(path) as f:
        f.write(data)
    return path


def test_unique_file_and_work_path(tmp_path):
    c = _committer(tmp_path, partition=12, attempt=2)
    assert c.get_unique_file("json_output", ".json") == "json_output-r-00012.json"
    assert c.work_path == os.path.join(str(tmp_path / "out"), "_temporary", "attempt_job7_r_000012_2")


def test_task_then_job_commit_publishes_files(tmp_path):
    job = _committer(tmp_path)
    job.setup_job()

    t0 = _committer(tmp_path, partition=0)
    _stage(t0, data=b'{"a":1}')
    assert t0.needs_task_commit()
    t0.commit_task()

    t1 = _committer(tmp_path, partition=1)
    _stage(t1, data=b'{"b":2}')
    t1.commit_task()

    out = tmp_path / "out"
    # nothing visible before the job commits
    assert not (out / "json_output-r-00000.json").exists()

    published = job.commit_job()
    assert sorted(os.path.basename(p) for p in published) == ["json_output-r-00000.json", "json_output-r-00001.json"]
    assert (out / "json_output-r-00000.json").read_bytes() == b'{"a":1}'
    assert (out / "_SUCCESS").exists()
    assert not (out / "_temporary").exists()


def test_aborted_task_leaves_nothing(tmp_path):
    job = _committer(tmp_path)
    job.setup_job()
    t = _committer(tmp_path, partition=0)
    _stage(t)
    t.abort_task()
    assert not os.path.exists(t.work_path)

    assert job.commit_job() == []
    assert sorted(os.listdir(tmp_path / "out")) == ["_SUCCESS"]


def test_aborted_job_discards_committed_tasks(tmp_path):
    job = _committer(tmp_path)
    job.setup_job()
    t = _committer(tmp_path, partition=0)
    _stage(t)
    t.commit_task()

    job.abort_job()
    assert os.listdir(tmp_path / "out") == []


def test_retry_attempt_gets_its_own_work_path(tmp_path):
    first = _committer(tmp_path, partition=4, attempt=0)
    retry = FileOutputCommitter(first.output_dir, first.context.next_attempt())
    assert retry.work_path != first.work_path
    assert retry.get_unique_file("x", ".json") == first.get_unique_file("x", ".json")
