from .executor import Executor
from .types import ExecutionResult, OutputChunk, RunSummary, Stream

__all__ = ["Executor", "ExecutionResult", "OutputChunk", "RunSummary", "Stream"]
