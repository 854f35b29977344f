"""Dependency strategies: which other discovered tasks a task waits for."""

from __future__ import annotations

import importlib
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from taskhub.config import (
    BuiltinStrategy,
    ConfigError,
    CustomStrategy,
    DependencyFn,
    ImportedStrategy,
    StrategyRef,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ManifestStrategy:
    """Depend on tasks whose directory a local manifest points at."""

    manifest: str
    strip_prefixes: tuple[str, ...] = ()

    def read(self, project_dir: Path) -> dict[str, str]:
        raw = json.loads((project_dir / self.manifest).read_text(encoding="utf-8"))
        if not isinstance(raw, dict):
            raise ValueError(f"{self.manifest} is not a JSON object")

        merged: dict[str, str] = {}
        for section in ("dependencies", "devDependencies"):
            deps = raw.get(section) or {}
            if not isinstance(deps, dict):
                raise ValueError(f"{self.manifest}: '{section}' is not an object")
            merged.update(deps)
        return merged

    def __call__(self, descriptor: str, all_descriptors: Sequence[str]) -> list[str]:
        project_dir = Path(descriptor).parent
        by_dir: dict[Path, list[str]] = {}
        for other in all_descriptors:
            by_dir.setdefault(Path(other).parent, []).append(other)

        found: list[str] = []
        for spec in self.read(project_dir).values():
            if not isinstance(spec, str):
                continue
            for prefix in self.strip_prefixes:
                if spec.startswith(prefix):
                    spec = spec[len(prefix) :]
                    break
            target = (project_dir / spec).resolve()
            for other in by_dir.get(target, ()):
                if other != descriptor and other not in found:
                    found.append(other)
        return found


BUILTIN_STRATEGIES: dict[str, DependencyFn] = {
    "bower": ManifestStrategy("bower.json"),
    "npm": ManifestStrategy("package.json", strip_prefixes=("file:", "link:")),
}


def get_strategy(ref: StrategyRef | None) -> DependencyFn | None:
    """
    Turn a strategy reference into a callable.

    `None` means no strategy: every task may start at once.
    """
    match ref:
        case None:
            return None
        case CustomStrategy(fn):
            return fn
        case BuiltinStrategy(name):
            if name not in BUILTIN_STRATEGIES:
                known = ", ".join(sorted(BUILTIN_STRATEGIES))
                raise ConfigError(
                    f"Unknown dependency_fn '{name}'. Expected one of: {known}, or 'module:function'"
                )
            return BUILTIN_STRATEGIES[name]
        case ImportedStrategy(module_name, attr):
            try:
                fn = getattr(importlib.import_module(module_name), attr)
            except (ImportError, AttributeError) as exc:
                raise ConfigError(f"Cannot load dependency_fn '{ref}': {exc}") from exc

            if not callable(fn):
                raise ConfigError(f"dependency_fn '{ref}' is not callable")
            return fn
        case _:
            raise AssertionError("Unreachable")


def resolve_dependencies(
    descriptor: str, all_descriptors: Sequence[str], strategy: DependencyFn | None
) -> set[str]:
    if strategy is None:
        return set()

    try:
        return set(strategy(descriptor, all_descriptors))
    except Exception as exc:
        logger.warning(
            "Could not get dependencies for %s (%s). Assuming no dependencies.",
            descriptor,
            exc,
        )
        return set()
