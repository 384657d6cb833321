"""Transformation functions: built-ins and the per-engine registry."""

from .builtins import BUILTIN_FUNCTIONS
from .registry import (
    Dispatchable,
    FunctionOrigin,
    FunctionRegistry,
    ResolvedFunction,
    TransformFunction,
    consumes_node_set,
    find_method,
    invoke,
    node_set_function,
    resolve_function,
)
from .selections import BUILTIN_SELECTIONS


def default_registry() -> FunctionRegistry:
    """Return a fresh registry seeded with every built-in function."""

    return FunctionRegistry({**BUILTIN_FUNCTIONS, **BUILTIN_SELECTIONS})


__all__ = [
    "BUILTIN_FUNCTIONS",
    "BUILTIN_SELECTIONS",
    "Dispatchable",
    "FunctionOrigin",
    "FunctionRegistry",
    "ResolvedFunction",
    "TransformFunction",
    "consumes_node_set",
    "default_registry",
    "find_method",
    "invoke",
    "node_set_function",
    "resolve_function",
]
