from dataclasses import dataclass, field


@dataclass(frozen=True)
class Task:
    id: str
    working_dir: str
    operations: tuple[str, ...]
    args: tuple[str, ...]
    env: dict[str, str] = field(default_factory=dict, hash=False, compare=False)
    group: str | None = None


class GraphError(Exception):
    def __init__(self, *args: object) -> None:
        super().__init__(*args)


class CycleError(GraphError):
    def __init__(self, cycle: list[str]):
        super().__init__("Cycle detected: " + " -> ".join(cycle))
        self.cycle = cycle


class MissingDependencyError(GraphError):
    def __init__(self, task_id: str, missing: list[str]):
        super().__init__(
            f"Task '{task_id}' depends on unknown task(s): " + ", ".join(missing)
        )
        self.task_id = task_id
        self.missing = missing
