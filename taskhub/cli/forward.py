from __future__ import annotations

from typing import Iterable, Sequence


def forward_args(
    argv: Sequence[str], requested: Iterable[str], descriptor_flag: str
) -> list[str]:
    """
    Filter the hub's own arguments down to what every child should receive.

    Drops the requested operation names (children get those explicitly),
    `<flag>`/`<flag>=value` and the value following a bare `<flag>`.
    """
    requested = set(requested)
    out: list[str] = []

    for idx, arg in enumerate(argv):
        if arg in requested:
            continue
        if arg == descriptor_flag or arg.startswith(descriptor_flag + "="):
            continue
        if idx > 0 and argv[idx - 1] == descriptor_flag:
            continue
        out.append(arg)

    return out


def take_descriptor_flag(
    argv: Sequence[str], descriptor_flag: str
) -> tuple[str | None, list[str]]:
    """
    Split `<flag> value` / `<flag>=value` out of `argv`.

    Returns the last value given (the hub's own descriptor override) and the
    remaining arguments. A bare trailing `<flag>` is dropped.
    """
    value: str | None = None
    rest: list[str] = []
    args = iter(argv)

    for arg in args:
        if arg == descriptor_flag:
            value = next(args, value)
        elif arg.startswith(descriptor_flag + "="):
            value = arg[len(descriptor_flag) + 1 :]
        else:
            rest.append(arg)

    return value, rest
