"""Declarative extraction of dataclass records from HTML node trees.

    @dataclass
    class Page:
        title: str = bind("title")
        links: list[str] = bind("a->eachAttr(href)", default_factory=list)

    page = Engine().parse(Page(), html)
"""

from .coercion import ScalarKind, coerce, coerce_sequence
from .config import EngineConfig
from .engine import Engine
from .errors import (
    CastError,
    ConfigurationError,
    ExpressionSyntaxError,
    FieldMappingError,
    FunctionCallError,
    FunctionNotFoundError,
    InvalidFunctionSignatureError,
    PagebindError,
    SelectorError,
    TargetTypeError,
)
from .expression import ExpressionDescriptor, parse_expression, tokenize
from .fields import FieldKind, FieldSpec, UInt, bind, describe_fields
from .functions import Dispatchable, FunctionRegistry, TransformFunction, node_set_function
from .selection import NodeSet, Selection

__all__ = [
    "CastError",
    "ConfigurationError",
    "Dispatchable",
    "Engine",
    "EngineConfig",
    "ExpressionDescriptor",
    "ExpressionSyntaxError",
    "FieldKind",
    "FieldMappingError",
    "FieldSpec",
    "FunctionCallError",
    "FunctionNotFoundError",
    "FunctionRegistry",
    "InvalidFunctionSignatureError",
    "NodeSet",
    "PagebindError",
    "ScalarKind",
    "SelectorError",
    "Selection",
    "TargetTypeError",
    "TransformFunction",
    "UInt",
    "bind",
    "coerce",
    "coerce_sequence",
    "describe_fields",
    "node_set_function",
    "parse_expression",
    "tokenize",
]
