from __future__ import annotations

import glob
from pathlib import Path
from typing import Iterable


def expand_braces(pattern: str) -> list[str]:
    """
    Expand `{a,b}` alternations the way shell/minimatch globs do.

    `{G,g}runtfile.{js,coffee}` -> four patterns. Groups may nest; a group
    without a comma and an unbalanced `{` are kept literally.
    """
    start = pattern.find("{")
    if start < 0:
        return [pattern]

    depth = 0
    end = -1
    for idx in range(start, len(pattern)):
        if pattern[idx] == "{":
            depth += 1
        elif pattern[idx] == "}":
            depth -= 1
            if depth == 0:
                end = idx
                break

    if end < 0:
        return [pattern]

    prefix = pattern[:start]
    body = pattern[start + 1 : end]
    rest = pattern[end + 1 :]

    parts: list[str] = []
    depth = 0
    last = 0
    for idx, ch in enumerate(body):
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
        elif ch == "," and depth == 0:
            parts.append(body[last:idx])
            last = idx + 1
    parts.append(body[last:])

    if len(parts) == 1:
        literal = pattern[: end + 1]
        return [literal + tail for tail in expand_braces(rest)]

    out: list[str] = []
    for part in parts:
        for tail in expand_braces(part + rest):
            out.append(prefix + tail)
    return out


def expand(patterns: Iterable[str], root: str | Path) -> list[str]:
    """
    Return the files matched by `patterns`, relative to `root`.

    Paths are absolute and resolved, in first-match order, without
    duplicates. A pattern starting with `!` removes what earlier patterns
    matched.
    """
    root_path = Path(root)
    matches: dict[str, None] = {}

    for pattern in patterns:
        exclude = pattern.startswith("!")
        if exclude:
            pattern = pattern[1:]

        found: list[str] = []
        for variant in expand_braces(pattern):
            for hit in sorted(glob.glob(variant, root_dir=root_path, recursive=True)):
                path = (root_path / hit).resolve()
                if path.is_file():
                    found.append(str(path))

        for path in found:
            if exclude:
                matches.pop(path, None)
            else:
                matches.setdefault(path, None)

    return list(matches)


def find_own_descriptor(
    override: str | Path | None, patterns: Iterable[str], root: str | Path
) -> str | None:
    if override:
        return str((Path(root) / Path(override).expanduser()).resolve())

    found = expand(patterns, root)
    return found[0] if found else None
