"""Composite schema nodes: containers, unions, intersections, functions, lazy.

Each node validates its children with child contexts so issue paths
point at the failing element. Children keep validating after a sibling
fails; the node returns INVALID only when it cannot build an output.
"""

from __future__ import annotations

import functools
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from functools import cached_property
from types import MappingProxyType
from typing import Any

from invertible.contracts.enums import IssueCode, SchemaKind, UnknownKeys
from invertible.contracts.errors import SchemaValidationError
from invertible.contracts.issues import ParseContext
from invertible.schema.base import Schema, run_sync
from invertible.schema.sentinels import INVALID, MISSING, type_name


def _reject_type(ctx: ParseContext, expected: str, value: Any) -> Any:
    message = "Required" if value is MISSING else f"Expected {expected}, received {type_name(value)}"
    ctx.add_issue(IssueCode.INVALID_TYPE, message, expected=expected, received=type_name(value))
    return INVALID


@dataclass(frozen=True, eq=False)
class ArraySchema(Schema):
    """A list whose elements all match ``element``."""

    kind = SchemaKind.ARRAY

    element: Schema
    min_length: int | None = None
    max_length: int | None = None

    def min(self, length: int) -> ArraySchema:
        return replace(self, min_length=length)

    def max(self, length: int) -> ArraySchema:
        return replace(self, max_length=length)

    def nonempty(self) -> ArraySchema:
        return replace(self, min_length=1)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, list):
            return _reject_type(ctx, "array", value)
        if self.min_length is not None and len(value) < self.min_length:
            ctx.add_issue(
                IssueCode.TOO_SMALL,
                f"Array must contain at least {self.min_length} element(s)",
                minimum=self.min_length,
            )
        if self.max_length is not None and len(value) > self.max_length:
            ctx.add_issue(
                IssueCode.TOO_BIG,
                f"Array must contain at most {self.max_length} element(s)",
                maximum=self.max_length,
            )
        results = [await self.element._parse(item, ctx.child(i)) for i, item in enumerate(value)]
        if any(r is INVALID for r in results):
            return INVALID
        return results


@dataclass(frozen=True, eq=False)
class ObjectSchema(Schema):
    """A mapping with a fixed set of declared keys.

    Keys outside ``shape`` are validated by ``catchall`` when one is set,
    otherwise handled according to ``unknown_keys``.
    """

    kind = SchemaKind.OBJECT

    shape: Mapping[str, Schema]
    catchall: Schema | None = None
    unknown_keys: UnknownKeys = UnknownKeys.STRIP

    def __post_init__(self) -> None:
        object.__setattr__(self, "shape", MappingProxyType(dict(self.shape)))

    def strict(self) -> ObjectSchema:
        return replace(self, unknown_keys=UnknownKeys.STRICT)

    def passthrough(self) -> ObjectSchema:
        return replace(self, unknown_keys=UnknownKeys.PASSTHROUGH)

    def strip(self) -> ObjectSchema:
        return replace(self, unknown_keys=UnknownKeys.STRIP)

    def with_catchall(self, schema: Schema) -> ObjectSchema:
        return replace(self, catchall=schema)

    def extend(self, shape: Mapping[str, Schema]) -> ObjectSchema:
        return replace(self, shape={**self.shape, **shape})

    def partial(self) -> ObjectSchema:
        return replace(self, shape={k: v.optional() for k, v in self.shape.items()})

    def keys(self) -> tuple[str, ...]:
        return tuple(self.shape)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, Mapping):
            return _reject_type(ctx, "object", value)

        output: dict[Any, Any] = {}
        failed = False
        for key, schema in self.shape.items():
            result = await schema._parse(value.get(key, MISSING), ctx.child(key))
            if result is INVALID:
                failed = True
            elif result is not MISSING:
                output[key] = result

        extra = [k for k in value if k not in self.shape]
        if self.catchall is not None:
            for key in extra:
                result = await self.catchall._parse(value[key], ctx.child(key))
                if result is INVALID:
                    failed = True
                else:
                    output[key] = result
        elif extra and self.unknown_keys == UnknownKeys.STRICT:
            ctx.add_issue(
                IssueCode.UNRECOGNIZED_KEYS,
                f"Unrecognized key(s) in object: {', '.join(repr(k) for k in extra)}",
                keys=extra,
            )
        elif self.unknown_keys == UnknownKeys.PASSTHROUGH:
            for key in extra:
                output[key] = value[key]

        return INVALID if failed else output


@dataclass(frozen=True, eq=False)
class UnionSchema(Schema):
    """The first option that parses cleanly wins.

    Options are tried in order, each with a private issue list. If none
    is clean, the first dirty result (value produced, issues reported)
    is used; failing that, a single INVALID_UNION issue carries every
    branch's issues.
    """

    kind = SchemaKind.UNION

    options: tuple[Schema, ...]

    def __post_init__(self) -> None:
        if len(self.options) < 2:
            raise ValueError("union() requires at least two options")
        object.__setattr__(self, "options", tuple(self.options))

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        dirty: tuple[Any, ParseContext] | None = None
        branch_issues = []
        for option in self.options:
            branch = ctx.fork()
            result = await option._parse(value, branch)
            if result is not INVALID and not branch.issues:
                return result
            if result is not INVALID and dirty is None:
                dirty = (result, branch)
            branch_issues.append(list(branch.issues))

        if dirty is not None:
            result, branch = dirty
            ctx.issues.extend(branch.issues)
            return result

        ctx.add_issue(IssueCode.INVALID_UNION, "Invalid input", union_issues=branch_issues)
        return INVALID


def _discriminator_values(schema: Schema) -> tuple[Any, ...]:
    """Values a discriminator field schema can accept, for branch lookup."""
    from invertible.schema.effects import EffectsSchema
    from invertible.schema.primitives import EnumSchema, LiteralSchema, NoneSchema
    from invertible.schema.wrappers import (
        BrandedSchema,
        CatchSchema,
        DefaultSchema,
        NullableSchema,
        OptionalSchema,
        PipelineSchema,
        ReadonlySchema,
    )

    match schema:
        case LiteralSchema():
            return (schema.value,)
        case EnumSchema():
            return schema.values
        case NoneSchema():
            return (None,)
        case LazySchema():
            return _discriminator_values(schema.schema)
        case EffectsSchema():
            return _discriminator_values(schema.schema)
        case BrandedSchema() | ReadonlySchema() | DefaultSchema() | CatchSchema():
            return _discriminator_values(schema.inner)
        case NullableSchema():
            return (*_discriminator_values(schema.inner), None)
        case OptionalSchema():
            return (*_discriminator_values(schema.inner), MISSING)
        case PipelineSchema():
            return _discriminator_values(schema.in_) or _discriminator_values(schema.out)
        case _:
            return ()


@dataclass(frozen=True, eq=False)
class DiscriminatedUnionSchema(Schema):
    """Object branches selected by the value of a shared tag key.

    The tag → branch table is built at construction. Tag values must be
    unique across branches.
    """

    kind = SchemaKind.DISCRIMINATED_UNION

    discriminator: str
    options: tuple[ObjectSchema, ...]
    _by_value: dict[Any, ObjectSchema] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        options = tuple(self.options)
        by_value: dict[Any, ObjectSchema] = {}
        for option in options:
            if not isinstance(option, ObjectSchema):
                raise TypeError(f"discriminated_union() options must be object schemas, got {type(option).__name__}")
            if self.discriminator not in option.shape:
                raise ValueError(f"Option is missing discriminator key {self.discriminator!r}")
            values = _discriminator_values(option.shape[self.discriminator])
            if not values:
                raise ValueError(
                    f"A discriminator value for key {self.discriminator!r} could not be extracted from all options"
                )
            for tag in values:
                if tag in by_value:
                    raise ValueError(f"Discriminator property {self.discriminator!r} has duplicate value {tag!r}")
                by_value[tag] = option
        object.__setattr__(self, "options", options)
        object.__setattr__(self, "_by_value", by_value)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, Mapping):
            return _reject_type(ctx, "object", value)
        tag = value.get(self.discriminator, MISSING)
        try:
            option = self._by_value.get(tag)
        except TypeError:  # unhashable tag
            option = None
        if option is None:
            expected = " | ".join(repr(v) for v in self._by_value if v is not MISSING)
            ctx.child(self.discriminator).add_issue(
                IssueCode.INVALID_UNION_DISCRIMINATOR,
                f"Invalid discriminator value. Expected {expected}",
                options=list(self._by_value),
            )
            return INVALID
        return await option._parse(value, ctx)


_NO_MERGE = object()


def _merge_values(a: Any, b: Any) -> Any:
    """Merge the outputs of both intersection sides, or return _NO_MERGE."""
    if a is b:
        return a
    if isinstance(a, Mapping) and isinstance(b, Mapping):
        merged = {**a, **b}
        for key in a.keys() & b.keys():
            sub = _merge_values(a[key], b[key])
            if sub is _NO_MERGE:
                return _NO_MERGE
            merged[key] = sub
        return merged
    if isinstance(a, list) and isinstance(b, list):
        if len(a) != len(b):
            return _NO_MERGE
        items = [_merge_values(x, y) for x, y in zip(a, b, strict=True)]
        return _NO_MERGE if any(i is _NO_MERGE for i in items) else items
    if type(a) is type(b) and a == b:
        return a
    return _NO_MERGE


@dataclass(frozen=True, eq=False)
class IntersectionSchema(Schema):
    """Both sides must accept the value; their outputs are deep-merged."""

    kind = SchemaKind.INTERSECTION

    left: Schema
    right: Schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        left = await self.left._parse(value, ctx)
        right = await self.right._parse(value, ctx)
        if left is INVALID or right is INVALID:
            return INVALID
        merged = _merge_values(left, right)
        if merged is _NO_MERGE:
            ctx.add_issue(IssueCode.INVALID_INTERSECTION_TYPES, "Intersection results could not be merged")
            return INVALID
        return merged


@dataclass(frozen=True, eq=False)
class TupleSchema(Schema):
    """Fixed positional items, optionally followed by any number of ``rest``.

    Accepts a list or a tuple and returns the same container type.
    """

    kind = SchemaKind.TUPLE

    items: tuple[Schema, ...]
    rest: Schema | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", tuple(self.items))

    def with_rest(self, schema: Schema) -> TupleSchema:
        return replace(self, rest=schema)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, list | tuple):
            return _reject_type(ctx, "tuple", value)
        count = len(self.items)
        if len(value) < count:
            ctx.add_issue(
                IssueCode.TOO_SMALL, f"Tuple must contain at least {count} element(s)", minimum=count
            )
            return INVALID
        if self.rest is None and len(value) > count:
            ctx.add_issue(IssueCode.TOO_BIG, f"Tuple must contain at most {count} element(s)", maximum=count)
            return INVALID

        results = []
        for i, item in enumerate(value):
            schema = self.items[i] if i < count else self.rest
            assert schema is not None  # length checked above
            results.append(await schema._parse(item, ctx.child(i)))
        if any(r is INVALID for r in results):
            return INVALID
        return tuple(results) if isinstance(value, tuple) else results


@dataclass(frozen=True, eq=False)
class RecordSchema(Schema):
    """A dict with homogeneous keys and values."""

    kind = SchemaKind.RECORD

    key_schema: Schema
    value_schema: Schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, Mapping):
            return _reject_type(ctx, "record", value)
        output: dict[Any, Any] = {}
        failed = False
        for key, item in value.items():
            item_ctx = ctx.child(key)
            parsed_key = await self.key_schema._parse(key, item_ctx)
            parsed_value = await self.value_schema._parse(item, item_ctx)
            if parsed_key is INVALID or parsed_value is INVALID:
                failed = True
            else:
                output[parsed_key] = parsed_value
        return INVALID if failed else output


@dataclass(frozen=True, eq=False)
class MapSchema(Schema):
    """Any mapping with arbitrary (hashable) keys; returns a dict.

    Unlike RecordSchema, key issues are reported under a ``(index, "key")``
    path since keys need not be strings.
    """

    kind = SchemaKind.MAP

    key_schema: Schema
    value_schema: Schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, Mapping):
            return _reject_type(ctx, "map", value)
        output: dict[Any, Any] = {}
        failed = False
        for i, (key, item) in enumerate(value.items()):
            entry = ctx.child(i)
            parsed_key = await self.key_schema._parse(key, entry.child("key"))
            parsed_value = await self.value_schema._parse(item, entry.child("value"))
            if parsed_key is INVALID or parsed_value is INVALID:
                failed = True
            else:
                output[parsed_key] = parsed_value
        return INVALID if failed else output


@dataclass(frozen=True, eq=False)
class SetSchema(Schema):
    """A set or frozenset; the container type is preserved."""

    kind = SchemaKind.SET

    element: Schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, set | frozenset):
            return _reject_type(ctx, "set", value)
        results = [await self.element._parse(item, ctx.child(i)) for i, item in enumerate(value)]
        if any(r is INVALID for r in results):
            return INVALID
        return frozenset(results) if isinstance(value, frozenset) else set(results)


@dataclass(frozen=True, eq=False)
class FunctionSchema(Schema):
    """A callable whose arguments and return value are validated per call.

    Parsing returns a wrapper. Calling the wrapper parses the positional
    arguments with ``args``, calls the original, and parses its result
    with ``returns``. Failures raise SchemaValidationError carrying a
    single INVALID_ARGUMENTS / INVALID_RETURN_TYPE issue.
    """

    kind = SchemaKind.FUNCTION

    args: TupleSchema
    returns: Schema

    def with_args(self, *schemas: Schema) -> FunctionSchema:
        return replace(self, args=TupleSchema(schemas))

    def with_returns(self, schema: Schema) -> FunctionSchema:
        return replace(self, returns=schema)

    def implement(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        return self.parse(fn)  # type: ignore[no-any-return]

    def _wrap(self, fn: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(fn)
        def validated(*call_args: Any) -> Any:
            parsed_args = self._check(self.args, list(call_args), IssueCode.INVALID_ARGUMENTS, "arguments")
            result = fn(*parsed_args)
            return self._check(self.returns, result, IssueCode.INVALID_RETURN_TYPE, "return type")

        return validated

    @staticmethod
    def _check(schema: Schema, value: Any, code: IssueCode, what: str) -> Any:
        inner = ParseContext()
        result = run_sync(schema._parse(value, inner))
        if inner.issues or result is INVALID:
            outer = ParseContext()
            outer.add_issue(code, f"Invalid function {what}", issues=list(inner.issues))
            raise SchemaValidationError(outer.issues)
        return result

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not callable(value):
            return _reject_type(ctx, "function", value)
        return self._wrap(value)


@dataclass(frozen=True, eq=False)
class LazySchema(Schema):
    """Defers building its schema until first use.

    Required for self-referential schemas: the getter may refer to a
    name that is only bound after this node is constructed. The result
    is memoised per node.
    """

    kind = SchemaKind.LAZY

    getter: Callable[[], Schema]

    @cached_property
    def schema(self) -> Schema:
        return self.getter()

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        return await self.schema._parse(value, ctx)

