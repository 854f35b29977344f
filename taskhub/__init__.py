"""Run many sub-projects as separate processes, honoring their dependencies."""

__version__ = "0.1.0"
