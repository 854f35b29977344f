import json
import shlex
import tomllib
from pathlib import Path
from typing import Any, Mapping

import yaml

from .types import (
    BuiltinStrategy,
    ConfigError,
    GroupConfig,
    HubConfig,
    ImportedStrategy,
    StrategyRef,
    UnsupportedConfigFormatError,
)

_TOP_LEVEL_KEYS = {
    "runner",
    "descriptor_flag",
    "descriptor",
    "descriptor_patterns",
    "default_task",
    "allow_self",
    "dependency_fn",
    "groups",
}
_GROUP_KEYS = {"src", "tasks", "dependency_fn", "env"}


def load_hub(path: str | Path) -> HubConfig:
    pure_path = Path(path).expanduser().resolve()

    if not pure_path.exists():
        raise ConfigError(f"Config file not found: {pure_path}")

    if not pure_path.is_file():
        raise ConfigError(f"Config path is not a file: {pure_path}")

    fmt = _detect_format(pure_path)
    raw_file = _parse_file(pure_path, fmt)
    return _build_hub_config(raw_file, pure_path.parent)


def _detect_format(path: Path) -> str:
    fmt = path.suffix
    match fmt:
        case ".yaml" | ".yml":
            return "yaml"
        case ".toml":
            return "toml"
        case ".json":
            return "json"
        case _:
            raise UnsupportedConfigFormatError(
                f"Non supported file extension: {fmt}\n Expected format: .yml/.yaml, .toml, .json"
            )


def _parse_file(path: Path, fmt: str) -> Mapping[str, Any]:
    text = path.read_text(encoding="utf-8")
    match fmt:
        case "yaml":
            try:
                raw_file = yaml.safe_load(text)
            except yaml.YAMLError as exc:
                raise ConfigError(f"{path}: invalid YAML") from exc
        case "toml":
            try:
                raw_file = tomllib.loads(text)
            except tomllib.TOMLDecodeError as exc:
                raise ConfigError(f"{path}: invalid TOML") from exc
        case "json":
            try:
                raw_file = json.loads(text)
            except json.JSONDecodeError as exc:
                raise ConfigError(f"{path}: invalid JSON") from exc
        case _:
            raise AssertionError("Unreachable")

    if not isinstance(raw_file, Mapping):
        raise ConfigError(
            f"{path}: {fmt.upper()} parsed succesfully but top-level value is not an object: {type(raw_file)}"
        )

    return raw_file


def _build_hub_config(raw: Mapping[str, Any], root: Path) -> HubConfig:
    for key in raw.keys():
        if key not in _TOP_LEVEL_KEYS:
            raise ConfigError(f"Can't process top-level key: {key}")

    if "groups" not in raw:
        raise ConfigError("Missing 'groups' field")

    if not isinstance(raw["groups"], Mapping):
        raise ConfigError(f"'groups' must be a mapping, got {type(raw['groups'])}")

    if len(raw["groups"]) < 1:
        raise ConfigError("There must be at least one group in the config file")

    groups: dict[str, GroupConfig] = {}
    for name, fields in raw["groups"].items():
        if not isinstance(name, str) or len(name.strip()) < 1:
            raise ConfigError(f"Group name must be a non-empty string, got {name!r}")

        name_norm = name.strip()

        if name_norm in groups:
            raise ConfigError(f"Duplicate group name after normalization: {name_norm}")

        if not isinstance(fields, Mapping):
            raise ConfigError(f"{name_norm} must be a mapping")

        groups[name_norm] = _build_group_config(name_norm, fields)

    hub = HubConfig(groups=groups, root=root)

    if "runner" in raw:
        hub.runner = _runner(raw["runner"])

    if "descriptor_flag" in raw:
        hub.descriptor_flag = _string("descriptor_flag", raw["descriptor_flag"])
        if not hub.descriptor_flag.startswith("-"):
            raise ConfigError("'descriptor_flag' must start with '-'")

    if "descriptor" in raw and raw["descriptor"] is not None:
        hub.descriptor = _string("descriptor", raw["descriptor"])

    if "descriptor_patterns" in raw:
        hub.descriptor_patterns = _patterns("descriptor_patterns", raw["descriptor_patterns"])

    if "default_task" in raw:
        hub.default_task = _string("default_task", raw["default_task"])

    if "allow_self" in raw:
        if not isinstance(raw["allow_self"], bool):
            raise ConfigError("'allow_self' should be a boolean")
        hub.allow_self = raw["allow_self"]

    if "dependency_fn" in raw and raw["dependency_fn"] is not None:
        hub.dependency_fn = parse_strategy(_string("dependency_fn", raw["dependency_fn"]))

    return hub


def _build_group_config(name: str, fields: Mapping[str, Any]) -> GroupConfig:
    for field in fields.keys():
        if field not in _GROUP_KEYS:
            raise ConfigError(f"{name}: Can't process: {field}")

    if "src" not in fields:
        raise ConfigError(f"{name}: missing 'src'")

    group = GroupConfig(name=name, src=_patterns(f"{name}.src", fields["src"]))

    if "tasks" in fields and fields["tasks"] is not None:
        if not isinstance(fields["tasks"], list):
            raise ConfigError(f"{name}: Tasks should be in a list.")

        group.tasks = [_string(f"{name}.tasks", item) for item in fields["tasks"]]

    if "dependency_fn" in fields and fields["dependency_fn"] is not None:
        group.dependency_fn = parse_strategy(
            _string(f"{name}.dependency_fn", fields["dependency_fn"])
        )

    if "env" in fields:
        if not isinstance(fields["env"], Mapping):
            raise ConfigError(f"{name}: Env should be a mapping")

        for key, item in fields["env"].items():
            if not isinstance(key, str):
                raise ConfigError(f"{name}: {key} should be a string")

            if len(key.strip()) < 1:
                raise ConfigError(f"{name}: A key can't be empty")

            if not isinstance(item, str):
                raise ConfigError(f"{name}: {item} should be a string")

            group.env[key.strip()] = item

    return group


def _string(where: str, value: Any) -> str:
    if not isinstance(value, str):
        raise ConfigError(f"{where}: expected a string, got {type(value)}")

    if len(value.strip()) < 1:
        raise ConfigError(f"{where}: value can't be empty")

    return value.strip()


def _patterns(where: str, value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]

    if not isinstance(value, list) or len(value) < 1:
        raise ConfigError(f"{where}: expected a pattern or a non-empty list of patterns")

    return [_string(where, item) for item in value]


def _runner(value: Any) -> list[str]:
    if isinstance(value, str):
        argv = shlex.split(value)
    elif isinstance(value, list):
        argv = [_string("runner", item) for item in value]
    else:
        raise ConfigError(f"runner: expected a string or a list, got {type(value)}")

    if not argv:
        raise ConfigError("runner: value can't be empty")

    return argv


def parse_strategy(text: str) -> StrategyRef:
    """`"bower"` names a built-in; `"package.module:function"` names an import."""
    module, sep, attr = text.strip().partition(":")
    if not sep:
        return BuiltinStrategy(module)

    if not module or not attr:
        raise ConfigError(f"dependency_fn '{text}' must look like 'module:function'")

    return ImportedStrategy(module, attr)
