"""Discovery of bound fields on dataclass record types."""

from __future__ import annotations

import collections.abc
from dataclasses import MISSING, dataclass, field, fields, is_dataclass
from enum import Enum
import threading
import types
from typing import Annotated, Any, Union, get_args, get_origin, get_type_hints
import weakref

from pagebind.coercion import ScalarKind, zero_value
from pagebind.config import DEFAULT_TAG_KEY
from pagebind.errors import TargetTypeError
from pagebind.selection import NodeSet, Selection

UInt = Annotated[int, ScalarKind.UINT]

_SCALAR_TYPES: dict[object, ScalarKind] = {
    bool: ScalarKind.BOOL,
    int: ScalarKind.INT,
    float: ScalarKind.FLOAT,
    str: ScalarKind.STR,
}
_SEQUENCE_ORIGINS = {list, collections.abc.Sequence, collections.abc.MutableSequence}


class FieldKind(Enum):
    SCALAR = "scalar"
    RECORD = "record"
    OPTIONAL_RECORD = "optional_record"
    SEQUENCE = "sequence"
    NODE = "node"


@dataclass(frozen=True, slots=True)
class FieldSpec:
    """One record field together with its raw expression and structural kind.

    For sequences `item_kind` tells whether items are scalars or records;
    `scalar_kind` and `record_type` then describe the item.
    """

    name: str
    raw_expression: str | None
    kind: FieldKind
    scalar_kind: ScalarKind = ScalarKind.OPAQUE
    record_type: type | None = None
    item_kind: FieldKind | None = None

    @property
    def is_bound(self) -> bool:
        return self.raw_expression is not None


def bind(expression: str, *, key: str = DEFAULT_TAG_KEY, **field_kwargs: Any) -> Any:
    """Declare a dataclass field populated from `expression`.

    Extra keyword arguments (`default`, `default_factory`, ...) are passed to
    `dataclasses.field`.
    """

    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[key] = expression
    return field(metadata=metadata, **field_kwargs)


def is_record_type(candidate: object) -> bool:
    return isinstance(candidate, type) and is_dataclass(candidate)


def _unwrap_annotated(annotation: object) -> tuple[object, ScalarKind | None]:
    if get_origin(annotation) is Annotated:
        base, *extras = get_args(annotation)
        marker = next((extra for extra in extras if isinstance(extra, ScalarKind)), None)
        return base, marker
    return annotation, None


def _optional_inner(annotation: object) -> object | None:
    if get_origin(annotation) not in (Union, types.UnionType):
        return None
    members = [member for member in get_args(annotation) if member is not type(None)]
    if len(members) != 1 or len(members) == len(get_args(annotation)):
        return None
    return members[0]


def _classify_item(annotation: object) -> tuple[FieldKind, ScalarKind, type | None]:
    base, marker = _unwrap_annotated(annotation)
    if marker is not None:
        return FieldKind.SCALAR, marker, None

    inner = _optional_inner(base)
    if inner is not None:
        inner_kind, inner_scalar, inner_record = _classify_item(inner)
        if inner_kind is FieldKind.RECORD:
            return FieldKind.OPTIONAL_RECORD, ScalarKind.OPAQUE, inner_record
        return inner_kind, inner_scalar, inner_record

    if is_record_type(base):
        return FieldKind.RECORD, ScalarKind.OPAQUE, base  # type: ignore[return-value]
    if base is Selection or base is NodeSet:
        return FieldKind.NODE, ScalarKind.OPAQUE, None
    return FieldKind.SCALAR, _SCALAR_TYPES.get(base, ScalarKind.OPAQUE), None


def classify(name: str, annotation: object, raw_expression: str | None) -> FieldSpec:
    """Build the FieldSpec for one annotated field."""

    base, _ = _unwrap_annotated(annotation)
    if base is list or get_origin(base) in _SEQUENCE_ORIGINS:
        args = get_args(base)
        item_annotation = args[0] if args else str
        item_kind, scalar_kind, record_type = _classify_item(item_annotation)
        return FieldSpec(
            name=name,
            raw_expression=raw_expression,
            kind=FieldKind.SEQUENCE,
            scalar_kind=scalar_kind,
            record_type=record_type,
            item_kind=item_kind,
        )

    kind, scalar_kind, record_type = _classify_item(annotation)
    return FieldSpec(name=name, raw_expression=raw_expression, kind=kind, scalar_kind=scalar_kind, record_type=record_type)


_field_specs: "weakref.WeakKeyDictionary[type, dict[str, tuple[FieldSpec, ...]]]" = weakref.WeakKeyDictionary()
_field_specs_lock = threading.Lock()


def describe_fields(record_type: type, tag_key: str = DEFAULT_TAG_KEY) -> tuple[FieldSpec, ...]:
    """Return the FieldSpecs of a dataclass record type in declaration order.

    Results are cached per type for as long as the type itself is alive.
    """

    if not is_record_type(record_type):
        raise TargetTypeError(f"{record_type!r} is not a dataclass record type")
    cached = _field_specs.get(record_type, {}).get(tag_key)
    if cached is not None:
        return cached

    specs = _describe(record_type, tag_key)
    with _field_specs_lock:
        return _field_specs.setdefault(record_type, {}).setdefault(tag_key, specs)


def _describe(record_type: type, tag_key: str) -> tuple[FieldSpec, ...]:
    try:
        hints = get_type_hints(record_type, include_extras=True)
    except NameError as exc:
        raise TargetTypeError(f"cannot resolve annotations of {record_type.__qualname__}: {exc}") from exc

    specs: list[FieldSpec] = []
    for item in fields(record_type):
        raw = item.metadata.get(tag_key)
        specs.append(classify(item.name, hints.get(item.name, Any), None if raw is None else str(raw)))
    return tuple(specs)


def _zero_for(spec: FieldSpec, tag_key: str) -> object:
    if spec.kind is FieldKind.SEQUENCE:
        return []
    if spec.kind is FieldKind.NODE:
        return Selection()
    if spec.kind is FieldKind.OPTIONAL_RECORD:
        return None
    if spec.kind is FieldKind.RECORD and spec.record_type is not None:
        return new_record(spec.record_type, tag_key)
    return zero_value(spec.scalar_kind)


def new_record(record_type: type, tag_key: str = DEFAULT_TAG_KEY) -> Any:
    """Instantiate a record, filling fields without defaults with zero values."""

    specs = {spec.name: spec for spec in describe_fields(record_type, tag_key)}
    kwargs: dict[str, object] = {}
    for item in fields(record_type):
        if not item.init or item.default is not MISSING or item.default_factory is not MISSING:
            continue
        kwargs[item.name] = _zero_for(specs[item.name], tag_key)
    try:
        return record_type(**kwargs)
    except TypeError as exc:
        raise TargetTypeError(f"cannot instantiate record {record_type.__qualname__}: {exc}") from exc
