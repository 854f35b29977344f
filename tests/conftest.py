from __future__ import annotations

import sys
import textwrap
from pathlib import Path

import pytest

FAKE_RUNNER = """\
import runpy
import sys

flag = "--taskfile="
args = sys.argv[1:]
descriptor = next(a[len(flag):] for a in args if a.startswith(flag))
sys.argv = [descriptor] + [a for a in args if not a.startswith(flag)]
runpy.run_path(descriptor, run_name="__main__")
"""


@pytest.fixture
def runner(tmp_path: Path) -> list[str]:
    """
    Argv prefix standing in for a real build tool.

    It runs the descriptor passed as `--taskfile=<path>` as a Python script,
    with the remaining arguments in sys.argv[1:].
    """
    script = tmp_path / "fake_runner.py"
    script.write_text(FAKE_RUNNER, encoding="utf-8")
    return [sys.executable, str(script)]


def write_project(root: Path, name: str, body: str = "", **manifests: str) -> Path:
    """Create root/name/Taskfile.py (plus any manifest files) and return its path."""
    project = root / name
    project.mkdir(parents=True, exist_ok=True)
    for filename, content in manifests.items():
        (project / filename.replace("_", ".")).write_text(content, encoding="utf-8")
    descriptor = project / "Taskfile.py"
    descriptor.write_text(textwrap.dedent(body), encoding="utf-8")
    return descriptor.resolve()


@pytest.fixture(autouse=True)
def _plain_output(monkeypatch: pytest.MonkeyPatch) -> None:
    # Keep `>>` markers free of ANSI codes unless a test asks for colour.
    monkeypatch.delenv("FORCE_COLOR", raising=False)
