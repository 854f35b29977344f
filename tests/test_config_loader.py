from __future__ import annotations

import json
from pathlib import Path

import pytest

from taskhub.config.loader import load_hub
from taskhub.config.types import (
    BuiltinStrategy,
    ConfigError,
    ImportedStrategy,
    UnsupportedConfigFormatError,
)


# -------------------------
# Helpers
# -------------------------


def write_text(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def write_json(path: Path, obj: object) -> Path:
    path.write_text(json.dumps(obj), encoding="utf-8")
    return path


# -------------------------
# Basic file/path errors
# -------------------------


def test_missing_file_raises_config_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_hub(tmp_path / "missing.yaml")


def test_path_is_dir_raises_config_error(tmp_path: Path) -> None:
    d = tmp_path / "dir"
    d.mkdir()
    with pytest.raises(ConfigError):
        load_hub(d)


def test_unsupported_extension_raises_unsupported_format(tmp_path: Path) -> None:
    p = write_text(tmp_path / "taskhub.txt", "groups: {}")
    with pytest.raises(UnsupportedConfigFormatError):
        load_hub(p)


# -------------------------
# Parse errors are wrapped
# -------------------------


def test_invalid_yaml_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "taskhub.yaml", "groups: [\n")
    with pytest.raises(ConfigError):
        load_hub(p)


def test_invalid_toml_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "taskhub.toml", "groups = {")
    with pytest.raises(ConfigError):
        load_hub(p)


def test_invalid_json_is_wrapped_as_config_error(tmp_path: Path) -> None:
    p = write_text(tmp_path / "taskhub.json", '{"groups": ')
    with pytest.raises(ConfigError):
        load_hub(p)


def test_top_level_list_is_rejected(tmp_path: Path) -> None:
    p = write_text(tmp_path / "taskhub.yml", "- a\n- b\n")
    with pytest.raises(ConfigError):
        load_hub(p)


# -------------------------
# Valid configs
# -------------------------


def test_minimal_yaml_uses_defaults(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "taskhub.yml",
        "groups:\n  all:\n    src: 'projects/*/Gruntfile.js'\n",
    )
    hub = load_hub(p)

    assert hub.root == tmp_path.resolve()
    assert hub.group_names() == ["all"]
    assert hub.runner == ["grunt"]
    assert hub.descriptor_flag == "--gruntfile"
    assert hub.descriptor is None
    assert hub.descriptor_patterns == ["{G,g}runtfile.{js,coffee}"]
    assert hub.default_task == "default"
    assert hub.allow_self is False
    assert hub.dependency_fn is None

    group = hub.get_group("all")
    assert group.src == ["projects/*/Gruntfile.js"]
    assert group.tasks is None
    assert group.env == {}


def test_full_toml_config(tmp_path: Path) -> None:
    p = write_text(
        tmp_path / "taskhub.toml",
        """
runner = "make -s"
descriptor_flag = "--file"
descriptor = "Makefile"
descriptor_patterns = ["Makefile", "GNUmakefile"]
default_task = "all"
allow_self = true
dependency_fn = "npm"

[groups.libs]
src = ["libs/*/Makefile"]
tasks = ["build", "test"]
dependency_fn = "bower"
env = { CI = "1" }

[groups.apps]
src = "apps/*/Makefile"
""",
    )
    hub = load_hub(p)

    assert hub.runner == ["make", "-s"]
    assert hub.descriptor_flag == "--file"
    assert hub.descriptor == "Makefile"
    assert hub.descriptor_patterns == ["Makefile", "GNUmakefile"]
    assert hub.default_task == "all"
    assert hub.allow_self is True
    assert hub.dependency_fn == BuiltinStrategy("npm")
    assert hub.group_names() == ["libs", "apps"]

    libs = hub.get_group("libs")
    assert libs.tasks == ["build", "test"]
    assert libs.dependency_fn == BuiltinStrategy("bower")
    assert libs.env == {"CI": "1"}
    assert hub.get_group("apps").src == ["apps/*/Makefile"]


def test_runner_list_is_kept_as_is(tmp_path: Path) -> None:
    p = write_json(
        tmp_path / "taskhub.json",
        {"runner": ["npx", "grunt"], "groups": {"all": {"src": "*/Gruntfile.js"}}},
    )
    assert load_hub(p).runner == ["npx", "grunt"]


def test_group_names_are_stripped(tmp_path: Path) -> None:
    p = write_json(tmp_path / "taskhub.json", {"groups": {"  all  ": {"src": "x"}}})
    hub = load_hub(p)
    assert hub.has_group("all")
    with pytest.raises(KeyError):
        hub.get_group("  all  ")


# -------------------------
# Validation errors
# -------------------------


@pytest.mark.parametrize(
    "raw",
    [
        {},
        {"groups": []},
        {"groups": {}},
        {"groups": {"all": "x"}},
        {"groups": {"all": {}}},
        {"groups": {"all": {"src": []}}},
        {"groups": {"all": {"src": "  "}}},
        {"groups": {"all": {"src": "x", "bogus": 1}}},
        {"groups": {"all": {"src": "x", "tasks": "build"}}},
        {"groups": {"all": {"src": "x", "tasks": [1]}}},
        {"groups": {"all": {"src": "x", "env": ["A=1"]}}},
        {"groups": {"all": {"src": "x", "env": {"A": 1}}}},
        {"groups": {"all": {"src": "x", "env": {" ": "1"}}}},
        {"groups": {"all": {"src": "x"}}, "runner": ""},
        {"groups": {"all": {"src": "x"}}, "runner": []},
        {"groups": {"all": {"src": "x"}}, "runner": 3},
        {"groups": {"all": {"src": "x"}}, "descriptor_flag": "gruntfile"},
        {"groups": {"all": {"src": "x"}}, "allow_self": "yes"},
        {"groups": {"all": {"src": "x"}}, "unknown": True},
        {"groups": {"all": {"src": "x"}}, "dependency_fn": "mod:"},
        {"groups": {"all": {"src": "x", "dependency_fn": ":fn"}}},
    ],
)
def test_invalid_configs_raise_config_error(tmp_path: Path, raw: dict) -> None:
    p = write_json(tmp_path / "taskhub.json", raw)
    with pytest.raises(ConfigError):
        load_hub(p)


def test_duplicate_group_after_normalization(tmp_path: Path) -> None:
    p = write_json(
        tmp_path / "taskhub.json",
        {"groups": {"all": {"src": "x"}, " all": {"src": "y"}}},
    )
    with pytest.raises(ConfigError, match="Duplicate group"):
        load_hub(p)


def test_imported_dependency_fn_is_tagged(tmp_path: Path) -> None:
    p = write_json(
        tmp_path / "taskhub.json",
        {"groups": {"all": {"src": "x", "dependency_fn": "hub_deps:find"}}},
    )
    assert load_hub(p).get_group("all").dependency_fn == ImportedStrategy(
        "hub_deps", "find"
    )
