"""Job configuration.

Jobs are described in YAML so the same file can drive a local run, a Ray
run, or a test. Writer settings live under the `jof` prefix and may be
given either flat (`jof.ext: .json`) or nested (`jof: {ext: .json}`);
lookups accept both.
"""

from __future__ import annotations
from typing import Any, Dict, Mapping, Tuple
import yaml

from .errors import ConfigurationError

FILE_KEY = "jof.file"
EXT_KEY = "jof.ext"
MERGE_KEY = "jof.merge"
CONVERTERS_KEY = "jof.converters"
OUTPUT_DIR_KEY = "jof.output.dir"

DEFAULT_FILE = "json_output"
DEFAULT_EXT = ".json"
DEFAULT_MERGE = "last"
DEFAULT_CONVERTERS = "identity"

_MISSING = object()


def load_yaml(path: str) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ConfigurationError(f"{path}: top level must be a mapping, got {type(cfg).__name__}")
    return cfg


def get_conf(conf: Mapping[str, Any], key: str, default: Any = None) -> Any:
    """Look up a dotted key, flat first, then by walking nested mappings."""
    if key in conf:
        return conf[key]
    node: Any = conf
    for part in key.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return default
        node = node[part]
    return node


def _non_empty_str(conf: Mapping[str, Any], key: str, default: str, allow_empty: bool = False) -> str:
    val = get_conf(conf, key, _MISSING)
    if val is _MISSING or val is None:
        return default
    if not isinstance(val, str):
        raise ConfigurationError(f"{key} must be a string, got {type(val).__name__}")
    if not val and not allow_empty:
        raise ConfigurationError(f"{key} must not be empty")
    return val


def resolve_output_names(conf: Mapping[str, Any]) -> Tuple[str, str]:
    """Return (file name stem, extension) for the output file."""
    name = _non_empty_str(conf, FILE_KEY, DEFAULT_FILE)
    # an empty extension is legitimate (extension-less output files)
    ext = _non_empty_str(conf, EXT_KEY, DEFAULT_EXT, allow_empty=True)
    return name, ext


def resolve_merge_name(conf: Mapping[str, Any]) -> str:
    return _non_empty_str(conf, MERGE_KEY, DEFAULT_MERGE)


def resolve_converters_name(conf: Mapping[str, Any]) -> str:
    return _non_empty_str(conf, CONVERTERS_KEY, DEFAULT_CONVERTERS)


def resolve_output_dir(conf: Mapping[str, Any]) -> str:
    out_dir = get_conf(conf, OUTPUT_DIR_KEY)
    if not out_dir:
        out_dir = get_conf(conf, "output.dir")
    if not out_dir or not isinstance(out_dir, str):
        raise ConfigurationError(f"an output directory is required ({OUTPUT_DIR_KEY} or output.dir)")
    return out_dir
