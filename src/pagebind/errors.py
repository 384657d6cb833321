"""Error taxonomy raised by the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass


class PagebindError(Exception):
    """Base class for every error raised by pagebind."""


class ConfigurationError(PagebindError, ValueError):
    """Invalid engine construction parameters."""


class TargetTypeError(PagebindError, TypeError):
    """The mapping target is not a populatable record instance."""


class SelectorError(PagebindError, ValueError):
    """A CSS selector was rejected by the selection engine."""


@dataclass(slots=True)
class ExpressionSyntaxError(PagebindError):
    """Malformed argument list inside a function call expression."""

    text: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (args=`{self.text}`)"


@dataclass(slots=True)
class FunctionNotFoundError(PagebindError):
    """A function name resolved to nothing on the record chain or registry."""

    name: str

    def __str__(self) -> str:
        return f"function `{self.name}` not found on record, its ancestors or the registry"


@dataclass(slots=True)
class InvalidFunctionSignatureError(PagebindError):
    """A resolved function cannot be called or returned no value."""

    name: str
    message: str

    def __str__(self) -> str:
        return f"function `{self.name}` has an invalid signature: {self.message}"


@dataclass(slots=True)
class FunctionCallError(PagebindError):
    """A transformation function raised or reported an error."""

    name: str
    cause: BaseException

    def __str__(self) -> str:
        return f"call of function `{self.name}` failed: {self.cause}"


@dataclass(slots=True)
class CastError(PagebindError):
    """Strict-mode coercion failure."""

    value: object
    source_type: str
    target: str

    def __str__(self) -> str:
        return f"unable to cast {self.value!r} of type {self.source_type} to {self.target}"


@dataclass(slots=True)
class FieldMappingError(PagebindError):
    """Failure while populating one field; wraps the underlying cause."""

    raw_expression: str
    field_name: str
    cause: BaseException

    def __str__(self) -> str:
        return f"tag=`{self.raw_expression}` field={self.field_name}: {self.cause}"

    @property
    def root_cause(self) -> BaseException:
        """Innermost error below every field and function-call wrapper."""

        current: BaseException = self
        while isinstance(current, (FieldMappingError, FunctionCallError)):
            current = current.cause
        return current
