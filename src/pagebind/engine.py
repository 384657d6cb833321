"""Structural mapper populating dataclass records from node sets."""

from __future__ import annotations

from dataclasses import is_dataclass
import logging
from pathlib import Path
from typing import Sequence, TypeVar

from bs4 import Tag

from pagebind.coercion import coerce, coerce_sequence
from pagebind.config import EngineConfig
from pagebind.errors import CastError, FieldMappingError, PagebindError, TargetTypeError
from pagebind.expression import ExpressionCache, ExpressionDescriptor
from pagebind.fields import FieldKind, FieldSpec, describe_fields, new_record
from pagebind.functions import (
    ResolvedFunction,
    TransformFunction,
    consumes_node_set,
    default_registry,
    invoke,
    resolve_function,
)
from pagebind.selection import DEFAULT_PARSER, Selection

logger = logging.getLogger(__name__)

R = TypeVar("R")

_SCALAR_RESULTS = (str, bytes, bool, int, float)


class Engine:
    """Evaluate per-field expressions against a node tree and fill records in place.

    One engine owns its expression cache and function registry; separate
    engines share nothing. Mapping calls may run concurrently from several
    threads against the same engine.
    """

    def __init__(self, config: EngineConfig | None = None) -> None:
        self._config = config or EngineConfig()
        self._expressions = ExpressionCache(self._config.function_separator, debug=self._config.debug)
        self._functions = default_registry()

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def expressions(self) -> ExpressionCache:
        return self._expressions

    def register_function(self, name: str, function: TransformFunction) -> None:
        """Make `function` callable as `name` from any expression of this engine."""

        self._functions.register(name, function)

    def unregister_function(self, name: str) -> bool:
        return self._functions.unregister(name)

    def function_names(self) -> list[str]:
        return self._functions.names()

    def expression(self, raw: str) -> ExpressionDescriptor:
        """Return the cached descriptor for a raw expression, parsing it on first use."""

        return self._expressions.get(raw)

    def parse(self, record: R, markup: str | bytes, parser: str = DEFAULT_PARSER) -> R:
        return self.map_into(record, Selection.from_html(markup, parser))

    def parse_file(self, record: R, path: str | Path, parser: str = DEFAULT_PARSER) -> R:
        return self.map_into(record, Selection.from_file(path, parser))

    def map_into(self, record: R, root: Selection | Tag) -> R:
        """Populate every bound field of `record` from `root`.

        Any failure aborts the whole call with a FieldMappingError chain naming
        the raw expression at each nesting level; the record must then be
        discarded.
        """

        self._check_target(record)
        node = root if isinstance(root, Selection) else Selection([root])
        self._map_record(record, (), node)
        return record

    def _check_target(self, record: object) -> None:
        if record is None:
            raise TargetTypeError("mapping target is None")
        if isinstance(record, type):
            raise TargetTypeError(f"{record.__qualname__} is a class, pass an instance to populate")
        if not is_dataclass(record):
            raise TargetTypeError(f"{type(record).__qualname__} is not a dataclass record")
        if type(record).__dataclass_params__.frozen:  # type: ignore[attr-defined]
            raise TargetTypeError(f"{type(record).__qualname__} is frozen and cannot be populated")

    def _map_record(self, record: object, ancestors: tuple[object, ...], node: Selection) -> None:
        for spec in describe_fields(type(record), self._config.tag_key):
            raw = spec.raw_expression
            if raw is None:
                logger.debug(
                    "Field %s.%s has no `%s` expression, skipping",
                    type(record).__qualname__,
                    spec.name,
                    self._config.tag_key,
                )
                continue
            if raw == self._config.ignore_symbol:
                continue
            try:
                descriptor = self._expressions.get(raw)
                setattr(record, spec.name, self._field_value(spec, descriptor, record, ancestors, node))
            except PagebindError as exc:
                raise FieldMappingError(raw, spec.name, exc) from exc

    def _field_value(
        self,
        spec: FieldSpec,
        descriptor: ExpressionDescriptor,
        record: object,
        ancestors: tuple[object, ...],
        node: Selection,
    ) -> object:
        target = node.find(descriptor.selector) if descriptor.selector else node

        if descriptor.has_function:
            resolved = resolve_function(descriptor.function_name, record, ancestors, self._functions)
            if (
                spec.kind is FieldKind.SEQUENCE
                and spec.item_kind is FieldKind.SCALAR
                and not consumes_node_set(resolved.function)
            ):
                return self._each_scalar(spec, resolved, descriptor.arguments, target)
            result = invoke(resolved, target, descriptor.arguments)
            if not isinstance(result, Selection):
                return self._convert(spec, result)
            target = result

        return self._build(spec, record, ancestors, target)

    def _each_scalar(
        self,
        spec: FieldSpec,
        resolved: ResolvedFunction,
        arguments: Sequence[str],
        target: Selection,
    ) -> list[object]:
        """Call a per-node function once for every node and coerce each result."""

        strict = self._config.strict
        values: list[object] = []
        for item in target.each():
            result = invoke(resolved, item, arguments)
            if isinstance(result, Selection):
                values.extend(coerce(part.text().strip(), spec.scalar_kind, strict) for part in result.each())
            elif isinstance(result, (list, tuple)):
                values.extend(coerce_sequence(result, spec.scalar_kind, strict))
            else:
                values.append(coerce(result, spec.scalar_kind, strict))
        return values

    def _convert(self, spec: FieldSpec, result: object) -> object:
        """Turn a function's leaf result into the field's declared type."""

        strict = self._config.strict

        if spec.kind is FieldKind.SCALAR:
            return coerce(result, spec.scalar_kind, strict)

        if spec.kind is FieldKind.SEQUENCE and spec.item_kind is FieldKind.SCALAR:
            if isinstance(result, _SCALAR_RESULTS):
                return [coerce(result, spec.scalar_kind, strict)]
            return coerce_sequence(result, spec.scalar_kind, strict)

        if spec.kind is FieldKind.SEQUENCE:
            if isinstance(result, (list, tuple)):
                return list(result)
            if result is None or not strict:
                return []
            raise CastError(result, type(result).__name__, f"list of {spec.item_kind.value if spec.item_kind else 'items'}")

        if spec.kind in (FieldKind.RECORD, FieldKind.OPTIONAL_RECORD):
            record_type = _record_type(spec)
            if isinstance(result, record_type) or (result is None and spec.kind is FieldKind.OPTIONAL_RECORD):
                return result
            if strict:
                raise CastError(result, type(result).__name__, record_type.__qualname__)
            if spec.kind is FieldKind.OPTIONAL_RECORD:
                return None
            return new_record(record_type, self._config.tag_key)

        return result

    def _nested(self, record_type: type, parent: object, ancestors: tuple[object, ...], node: Selection) -> object:
        child = new_record(record_type, self._config.tag_key)
        self._check_target(child)
        self._map_record(child, ancestors + (parent,), node)
        return child

    def _build(self, spec: FieldSpec, record: object, ancestors: tuple[object, ...], target: Selection) -> object:
        """Structural dispatch on the declared field type."""

        strict = self._config.strict

        if spec.kind in (FieldKind.RECORD, FieldKind.OPTIONAL_RECORD):
            return self._nested(_record_type(spec), record, ancestors, target)

        if spec.kind is FieldKind.NODE:
            return target

        if spec.kind is FieldKind.SEQUENCE:
            items = target.each()
            if spec.item_kind in (FieldKind.RECORD, FieldKind.OPTIONAL_RECORD):
                record_type = _record_type(spec)
                return [self._nested(record_type, record, ancestors, item) for item in items]
            if spec.item_kind is FieldKind.NODE:
                return items
            return [coerce(item.text().strip(), spec.scalar_kind, strict) for item in items]

        return coerce(target.text().strip(), spec.scalar_kind, strict)


def _record_type(spec: FieldSpec) -> type:
    if spec.record_type is None:
        raise TargetTypeError(f"field {spec.name} declares no record type")
    return spec.record_type
