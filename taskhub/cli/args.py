from __future__ import annotations

import argparse


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskhub",
        description="Run many sub-projects, respecting their dependencies.",
    )

    parser.add_argument(
        "--config",
        default="taskhub.yml",
        help="Path to config file",
    )

    subparsers = parser.add_subparsers(
        dest="command",
        required=True,
    )

    # run
    run = subparsers.add_parser(
        "run",
        help="Run every project; unknown options are forwarded to each child",
    )
    run.add_argument(
        "operations",
        nargs="*",
        help="Operations to run in each project (overrides the group's tasks)",
    )
    _add_group_option(run)
    run.add_argument(
        "--allow-self",
        action="store_true",
        default=None,
        help="Also run the hub's own descriptor if a pattern matches it",
    )
    run.add_argument(
        "--dependency-fn",
        default=None,
        help="Dependency strategy for every group (bower, npm or module:function)",
    )

    # list
    _add_group_option(subparsers.add_parser("list", help="List projects in run order"))

    # graph
    _add_group_option(subparsers.add_parser("graph", help="Show dependency graph"))

    return parser


def _add_group_option(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--group",
        dest="groups",
        action="append",
        default=None,
        help="Only use this group (repeatable)",
    )
