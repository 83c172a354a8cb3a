import pytest

from json_output_format.config import (
    get_conf,
    load_yaml,
    resolve_merge_name,
    resolve_output_dir,
    resolve_output_names,
)
from json_output_format.errors import ConfigurationError


def test_defaults():
    assert resolve_output_names({}) == ("json_output", ".json")
    assert resolve_merge_name({}) == "last"


def test_nested_and_flat_lookups_agree():
    nested = {"jof": {"file": "counts", "ext": ".js"}}
    flat = {"jof.file": "counts", "jof.ext": ".js"}
    assert resolve_output_names(nested) == resolve_output_names(flat) == ("counts", ".js")
    assert get_conf(nested, "jof.missing", "d") == "d"
    assert get_conf({"jof": "scalar"}, "jof.file", "d") == "d"


def test_empty_extension_is_allowed_but_empty_name_is_not():
    assert resolve_output_names({"jof": {"ext": ""}}) == ("json_output", "")
    with pytest.raises(ConfigurationError):
        resolve_output_names({"jof": {"file": ""}})
    with pytest.raises(ConfigurationError):
        resolve_output_names({"jof": {"file": 3}})


def test_output_dir():
    assert resolve_output_dir({"output": {"dir": "out"}}) == "out"
    assert resolve_output_dir({"jof.output.dir": "flat"}) == "flat"
    with pytest.raises(ConfigurationError):
        resolve_output_dir({})


def test_load_yaml(tmp_path):
    p = tmp_path / "job.yaml"
    p.write_text("jof:\n  file: wc\n", encoding="utf-8")
    assert load_yaml(str(p)) == {"jof": {"file": "wc"}}

    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_yaml(str(empty)) == {}

    bad = tmp_path / "list.yaml"
    bad.write_text("- 1\n- 2\n", encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_yaml(str(bad))
