from .builder import build_graph
from .dag import TaskGraph
from .resolver import BUILTIN_STRATEGIES, DependencyFn, get_strategy, resolve_dependencies
from .types import CycleError, GraphError, MissingDependencyError, Task

__all__ = [
    "build_graph",
    "TaskGraph",
    "Task",
    "BUILTIN_STRATEGIES",
    "DependencyFn",
    "get_strategy",
    "resolve_dependencies",
    "GraphError",
    "CycleError",
    "MissingDependencyError",
]
