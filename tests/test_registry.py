import pytest

from json_output_format.writers.json_writer import JsonConverters
from json_output_format.writers.registry import get_converters, list_converters, register_converters


def test_builtin_converters():
    assert {"identity", "string", "json"} <= set(list_converters())
    ident = get_converters("identity")
    assert ident.convert_key(12) == "12"
    assert ident.convert_value({"a": 1}) == {"a": 1}

    parsed = get_converters("json")
    assert parsed.convert_value('{"a": [1, 2]}') == {"a": [1, 2]}
    assert parsed.convert_value(b"3") == 3
    assert parsed.convert_value(4) == 4

    assert get_converters("string").convert_value(1.5) == "1.5"


def test_register_and_lookup():
    conv = JsonConverters(convert_key=str.upper, convert_value=len)
    register_converters("test_upper_len", conv)
    assert get_converters("test_upper_len") is conv
    with pytest.raises(ValueError):
        register_converters("test_upper_len", conv)
    with pytest.raises(KeyError):
        get_converters("missing")
