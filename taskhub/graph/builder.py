from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence

from taskhub.config import ConfigError, HubConfig, StrategyRef
from taskhub.discovery import expand

from .dag import TaskGraph
from .resolver import get_strategy, resolve_dependencies
from .types import Task

logger = logging.getLogger(__name__)


def build_graph(
    hub: HubConfig,
    *,
    own_descriptor: str | None,
    operations: Sequence[str] = (),
    forwarded_args: Sequence[str] = (),
    groups: Sequence[str] | None = None,
    allow_self: bool | None = None,
    dependency_fn: StrategyRef | None = None,
) -> TaskGraph:
    """
    Discover every group's descriptors and turn them into a TaskGraph.

    `operations` are the names requested on the command line and win over a
    group's `tasks`, which win over `hub.default_task`. `dependency_fn`, when
    given, replaces the configured strategy for every group.
    """
    if allow_self is None:
        allow_self = hub.allow_self

    selected = list(groups) if groups else hub.group_names()
    for name in selected:
        if not hub.has_group(name):
            raise ConfigError(f"Unknown group: {name}")

    tasks: list[Task] = []
    deps: dict[str, set[str]] = {}
    owner: dict[str, str] = {}

    for name in selected:
        group = hub.get_group(name)
        descriptors = expand(group.src, hub.root)
        if not allow_self and own_descriptor is not None:
            descriptors = [d for d in descriptors if d != own_descriptor]

        if not descriptors:
            logger.warning(
                "No descriptors matched the file patterns: \"%s\"", ", ".join(group.src)
            )
            continue

        strategy = get_strategy(dependency_fn or group.dependency_fn or hub.dependency_fn)
        to_run = tuple(operations) or tuple(group.tasks or ()) or (hub.default_task,)

        for descriptor in descriptors:
            if descriptor in owner:
                logger.warning(
                    "%s is already scheduled by group '%s'; ignoring it in group '%s'",
                    descriptor,
                    owner[descriptor],
                    name,
                )
                continue

            owner[descriptor] = name
            deps[descriptor] = resolve_dependencies(descriptor, descriptors, strategy)
            tasks.append(
                Task(
                    id=descriptor,
                    working_dir=str(Path(descriptor).parent),
                    operations=to_run,
                    args=(
                        *to_run,
                        *forwarded_args,
                        f"{hub.descriptor_flag}={descriptor}",
                    ),
                    env=dict(group.env),
                    group=name,
                )
            )

    return TaskGraph.from_tasks(tasks, deps)
