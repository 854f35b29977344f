from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Iterator, Mapping

from .types import CycleError, MissingDependencyError, Task


class _Visit(Enum):
    UNVISITED = auto()
    VISITING = auto()
    VISITED = auto()


@dataclass(frozen=True)
class TaskGraph:
    tasks: dict[str, Task]
    _deps: dict[str, tuple[str, ...]]

    @classmethod
    def from_tasks(
        cls, tasks: Iterable[Task], deps: Mapping[str, Iterable[str]]
    ) -> TaskGraph:
        by_id: dict[str, Task] = {}
        for task in tasks:
            if task.id in by_id:
                raise ValueError(f"Duplicate task id: {task.id}")
            by_id[task.id] = task

        deps_by_id = {tid: tuple(sorted(set(deps.get(tid, ())))) for tid in by_id}
        return cls(by_id, deps_by_id)

    def __iter__(self) -> Iterator[Task]:
        for tid in self.task_ids():
            yield self.tasks[tid]

    def __len__(self) -> int:
        return len(self.tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self.tasks

    def task_ids(self) -> list[str]:
        return sorted(self.tasks)

    def get_task(self, task_id: str) -> Task:
        return self.tasks[task_id]

    def deps_of(self, task_id: str) -> tuple[str, ...]:
        return self._deps[task_id]

    def dependents(self) -> dict[str, list[str]]:
        out: dict[str, list[str]] = {tid: [] for tid in self._deps}
        for tid in sorted(self._deps):
            for dep in self._deps[tid]:
                if dep in out:
                    out[dep].append(tid)
        return out

    def validate(self) -> None:
        for tid in sorted(self._deps):
            missing = [dep for dep in self._deps[tid] if dep not in self._deps]
            if missing:
                raise MissingDependencyError(tid, missing)

        self.topo_order()

    def topo_order(self) -> list[str]:
        state = {tid: _Visit.UNVISITED for tid in self._deps}
        out: list[str] = []
        stack: list[str] = []
        pos: dict[str, int] = {}

        def visit(tid: str) -> None:
            if state[tid] == _Visit.VISITING:
                start = pos[tid]
                raise CycleError(stack[start:] + [tid])
            if state[tid] == _Visit.VISITED:
                return

            state[tid] = _Visit.VISITING
            pos[tid] = len(stack)
            stack.append(tid)

            for dep in self._deps[tid]:
                if dep in state:
                    visit(dep)

            stack.pop()
            pos.pop(tid)
            state[tid] = _Visit.VISITED
            out.append(tid)

        for tid in sorted(state):
            visit(tid)

        return out
