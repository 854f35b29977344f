from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable, Sequence

DependencyFn = Callable[[str, Sequence[str]], Iterable[str]]


@dataclass(frozen=True)
class BuiltinStrategy:
    name: str


@dataclass(frozen=True)
class ImportedStrategy:
    module: str
    attr: str

    def __str__(self) -> str:
        return f"{self.module}:{self.attr}"


@dataclass(frozen=True)
class CustomStrategy:
    fn: DependencyFn


StrategyRef = BuiltinStrategy | ImportedStrategy | CustomStrategy


@dataclass
class GroupConfig:
    name: str
    src: list[str]
    tasks: list[str] | None = None
    dependency_fn: StrategyRef | None = None
    env: dict[str, str] = field(default_factory=dict)


@dataclass
class HubConfig:
    groups: dict[str, GroupConfig]
    root: Path
    runner: list[str] = field(default_factory=lambda: ["grunt"])
    descriptor_flag: str = "--gruntfile"
    descriptor: str | None = None
    descriptor_patterns: list[str] = field(
        default_factory=lambda: ["{G,g}runtfile.{js,coffee}"]
    )
    default_task: str = "default"
    allow_self: bool = False
    dependency_fn: StrategyRef | None = None

    def has_group(self, name: str) -> bool:
        return name in self.groups

    def get_group(self, name: str) -> GroupConfig:
        if not self.has_group(name):
            raise KeyError(name)

        return self.groups[name]

    def group_names(self) -> list[str]:
        return list(self.groups)


class ConfigError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class UnsupportedConfigFormatError(ConfigError):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)
