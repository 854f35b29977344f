from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from taskhub.config import ConfigError, HubConfig, load_hub, parse_strategy
from taskhub.discovery import find_own_descriptor
from taskhub.executor import Executor
from taskhub.graph import GraphError, TaskGraph, build_graph

from .args import build_parser
from .forward import forward_args, take_descriptor_flag


def run_cli(argv: list[str] | None = None) -> int:
    argv = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    try:
        args, _ = parser.parse_known_args(argv)
        hub = load_hub(args.config)

        # The descriptor flag and its value never reach argparse, so the
        # value can't be mistaken for an operation name.
        override, argv = take_descriptor_flag(argv, hub.descriptor_flag)
        args, extras = parser.parse_known_args(argv)
        if extras and args.command != "run":
            parser.error(f"unrecognized arguments: {' '.join(extras)}")

        own = _own_descriptor(hub, override)

        match args.command:
            case "run":
                return cmd_run(args, hub, own, extras)
            case "list":
                return cmd_list(args, hub, own)
            case "graph":
                return cmd_graph(args, hub, own)
            case _:
                return 2

    except (ConfigError, GraphError) as exc:
        print(str(exc), file=sys.stderr)
        return 2

    except KeyboardInterrupt:
        return 130


def main() -> None:
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s: %(message)s")
    sys.exit(run_cli())


def cmd_run(
    args: argparse.Namespace, hub: HubConfig, own: str | None, extras: list[str]
) -> int:
    graph = build_graph(
        hub,
        own_descriptor=own,
        operations=args.operations,
        forwarded_args=forward_args(extras, args.operations, hub.descriptor_flag),
        groups=args.groups,
        allow_self=args.allow_self,
        dependency_fn=parse_strategy(args.dependency_fn) if args.dependency_fn else None,
    )
    summary = Executor(graph, hub.runner, origin=own).run()
    return 0 if summary.ok else 1


def cmd_list(args: argparse.Namespace, hub: HubConfig, own: str | None) -> int:
    graph = _graph_for(args, hub, own)
    for tid in graph.topo_order():
        print(tid)
    return 0


def cmd_graph(args: argparse.Namespace, hub: HubConfig, own: str | None) -> int:
    graph = _graph_for(args, hub, own)
    for tid in graph.task_ids():
        deps = " ".join(graph.deps_of(tid))
        print(f"{tid}: {deps}".rstrip())
    return 0


def _graph_for(args: argparse.Namespace, hub: HubConfig, own: str | None) -> TaskGraph:
    graph = build_graph(hub, own_descriptor=own, groups=args.groups)
    graph.validate()
    return graph


def _own_descriptor(hub: HubConfig, override: str | None) -> str | None:
    # A command-line override is relative to where taskhub was started.
    if override:
        return str(Path(override).expanduser().resolve())
    return find_own_descriptor(hub.descriptor, hub.descriptor_patterns, hub.root)
