"""Field expression language: argument lexer and expression parser."""

from .parser import ExpressionCache, ExpressionDescriptor, parse_expression
from .tokenizer import tokenize

__all__ = ["ExpressionCache", "ExpressionDescriptor", "parse_expression", "tokenize"]
