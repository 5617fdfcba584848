"""Schema node builders.

Usage:
    from invertible import schema as s

    User = s.object_({
        "name": s.string().min(1),
        "age": s.number().int().nonnegative().optional(),
        "tags": s.array(s.string()),
    })
    User.parse({"name": "Ada", "tags": []})

Builders whose natural name shadows a builtin or keyword carry a
trailing underscore: object_, tuple_, set_, map_, any_.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable, Mapping, Sequence
from typing import Any

from invertible.contracts.enums import UnknownKeys
from invertible.schema.base import ParseResult, Schema, resolve, run_sync
from invertible.schema.composites import (
    ArraySchema,
    DiscriminatedUnionSchema,
    FunctionSchema,
    IntersectionSchema,
    LazySchema,
    MapSchema,
    ObjectSchema,
    RecordSchema,
    SetSchema,
    TupleSchema,
    UnionSchema,
)
from invertible.schema.effects import Effect, EffectsSchema, preprocess
from invertible.schema.primitives import (
    AnySchema,
    BooleanSchema,
    EnumSchema,
    LiteralSchema,
    NeverSchema,
    NoneSchema,
    NumberSchema,
    StringSchema,
    UnknownSchema,
)
from invertible.schema.sentinels import INVALID, MISSING
from invertible.schema.wrappers import (
    BrandedSchema,
    CatchSchema,
    DefaultSchema,
    FrozenList,
    NullableSchema,
    OptionalSchema,
    PipelineSchema,
    PromiseSchema,
    ReadonlySchema,
    freeze,
)


def string() -> StringSchema:
    return StringSchema()


def number() -> NumberSchema:
    return NumberSchema()


def boolean() -> BooleanSchema:
    return BooleanSchema()


def none() -> NoneSchema:
    return NoneSchema()


def literal(value: Any) -> LiteralSchema:
    return LiteralSchema(value)


def enum(*values: Hashable) -> EnumSchema:
    return EnumSchema(values)


def any_() -> AnySchema:
    return AnySchema()


def unknown() -> UnknownSchema:
    return UnknownSchema()


def never() -> NeverSchema:
    return NeverSchema()


def array(element: Schema) -> ArraySchema:
    return ArraySchema(element)


def object_(
    shape: Mapping[str, Schema],
    *,
    catchall: Schema | None = None,
    unknown_keys: UnknownKeys = UnknownKeys.STRIP,
) -> ObjectSchema:
    return ObjectSchema(shape, catchall=catchall, unknown_keys=unknown_keys)


def union(options: Sequence[Schema]) -> UnionSchema:
    return UnionSchema(tuple(options))


def discriminated_union(discriminator: str, options: Sequence[ObjectSchema]) -> DiscriminatedUnionSchema:
    return DiscriminatedUnionSchema(discriminator, tuple(options))


def intersection(left: Schema, right: Schema) -> IntersectionSchema:
    return IntersectionSchema(left, right)


def tuple_(items: Sequence[Schema], rest: Schema | None = None) -> TupleSchema:
    return TupleSchema(tuple(items), rest)


def record(key_or_value: Schema, value: Schema | None = None) -> RecordSchema:
    """``record(value)`` has string keys; ``record(key, value)`` validates keys too."""
    if value is None:
        return RecordSchema(StringSchema(), key_or_value)
    return RecordSchema(key_or_value, value)


def map_(key: Schema, value: Schema) -> MapSchema:
    return MapSchema(key, value)


def set_(element: Schema) -> SetSchema:
    return SetSchema(element)


def function(args: Sequence[Schema] | TupleSchema | None = None, returns: Schema | None = None) -> FunctionSchema:
    """Without ``args``, any positional arguments are accepted unchanged."""
    if args is None:
        args = TupleSchema((), rest=UnknownSchema())
    elif not isinstance(args, TupleSchema):
        args = TupleSchema(tuple(args))
    return FunctionSchema(args, returns if returns is not None else UnknownSchema())


def lazy(getter: Callable[[], Schema]) -> LazySchema:
    return LazySchema(getter)


def promise(inner: Schema) -> PromiseSchema:
    return PromiseSchema(inner)


__all__ = [
    "INVALID",
    "MISSING",
    "AnySchema",
    "ArraySchema",
    "BooleanSchema",
    "BrandedSchema",
    "CatchSchema",
    "DefaultSchema",
    "DiscriminatedUnionSchema",
    "Effect",
    "EffectsSchema",
    "EnumSchema",
    "FrozenList",
    "FunctionSchema",
    "IntersectionSchema",
    "LazySchema",
    "LiteralSchema",
    "MapSchema",
    "NeverSchema",
    "NoneSchema",
    "NullableSchema",
    "NumberSchema",
    "ObjectSchema",
    "OptionalSchema",
    "ParseResult",
    "PipelineSchema",
    "PromiseSchema",
    "ReadonlySchema",
    "RecordSchema",
    "Schema",
    "SetSchema",
    "StringSchema",
    "TupleSchema",
    "UnionSchema",
    "UnknownSchema",
    "any_",
    "array",
    "boolean",
    "discriminated_union",
    "enum",
    "freeze",
    "function",
    "intersection",
    "lazy",
    "literal",
    "map_",
    "never",
    "none",
    "number",
    "object_",
    "preprocess",
    "promise",
    "record",
    "resolve",
    "run_sync",
    "string",
    "tuple_",
    "union",
    "unknown",
]
