from .finder import expand, expand_braces, find_own_descriptor

__all__ = ["expand", "expand_braces", "find_own_descriptor"]
