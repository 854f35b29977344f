from dataclasses import dataclass, field
from enum import Enum


class Stream(Enum):
    STDOUT = "stdout"
    STDERR = "stderr"


@dataclass(frozen=True)
class OutputChunk:
    stream: Stream
    data: bytes


@dataclass(frozen=True)
class ExecutionResult:
    task_id: str
    returncode: int | None
    error: str | None
    output: list[OutputChunk]
    duration_s: float

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class RunSummary:
    origin: str | None
    results: dict[str, ExecutionResult] = field(default_factory=dict)
    failed: list[str] = field(default_factory=list)

    @property
    def failure_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return self.failure_count == 0

    def record(self, result: ExecutionResult) -> None:
        self.results[result.task_id] = result
        if result.failed:
            self.failed.append(result.task_id)
