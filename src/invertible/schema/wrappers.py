"""Single-child wrapper nodes and the pipeline node.

Every wrapper exposes its child as ``inner``; the pipeline exposes
``in_`` and ``out``.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any

from invertible.contracts.enums import IssueCode, SchemaKind
from invertible.contracts.errors import SchemaValidationError
from invertible.contracts.issues import ParseContext
from invertible.schema.base import Schema
from invertible.schema.sentinels import INVALID, MISSING, type_name


@dataclass(frozen=True, eq=False)
class OptionalSchema(Schema):
    """Accepts a missing key (returned as MISSING) or None, else defers to ``inner``."""

    kind = SchemaKind.OPTIONAL

    inner: Schema

    def unwrap(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if value is MISSING or value is None:
            return value
        return await self.inner._parse(value, ctx)


@dataclass(frozen=True, eq=False)
class NullableSchema(Schema):
    """Accepts None, else defers to ``inner``."""

    kind = SchemaKind.NULLABLE

    inner: Schema

    def unwrap(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if value is None:
            return None
        return await self.inner._parse(value, ctx)


@dataclass(frozen=True, eq=False)
class DefaultSchema(Schema):
    """Substitutes a default for a missing key, then parses it with ``inner``.

    Exactly one of ``value`` and ``factory`` is set. The factory is called
    once per substitution so mutable defaults are never shared.
    """

    kind = SchemaKind.DEFAULT

    inner: Schema
    value: Any = MISSING
    factory: Callable[[], Any] | None = None

    def __post_init__(self) -> None:
        if (self.value is MISSING) == (self.factory is None):
            raise ValueError("default() takes exactly one of a value or a factory")

    def remove_default(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if value is MISSING:
            value = self.factory() if self.factory is not None else self.value
        return await self.inner._parse(value, ctx)


@dataclass(frozen=True, eq=False)
class CatchSchema(Schema):
    """Returns a fallback instead of failing.

    ``factory`` receives the SchemaValidationError the inner schema would
    have raised.
    """

    kind = SchemaKind.CATCH

    inner: Schema
    value: Any = MISSING
    factory: Callable[[SchemaValidationError], Any] | None = None

    def __post_init__(self) -> None:
        if (self.value is MISSING) == (self.factory is None):
            raise ValueError("catch() takes exactly one of a value or a factory")

    def remove_catch(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        branch = ctx.fork()
        result = await self.inner._parse(value, branch)
        if result is not INVALID and not branch.issues:
            return result
        if self.factory is None:
            return self.value
        return self.factory(SchemaValidationError(branch.issues))


@dataclass(frozen=True, eq=False)
class PromiseSchema(Schema):
    """Accepts an awaitable; returns a coroutine of the parsed awaited value.

    The awaitable is not awaited during parse. Awaiting the returned
    coroutine awaits the input and parses its result with ``inner``,
    raising SchemaValidationError on failure.
    """

    kind = SchemaKind.PROMISE

    inner: Schema

    def unwrap(self) -> Schema:
        return self.inner

    async def _settle(self, value: Awaitable[Any]) -> Any:
        return await self.inner.parse_async(await value)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not isinstance(value, Awaitable):
            ctx.add_issue(
                IssueCode.INVALID_TYPE,
                f"Expected awaitable, received {type_name(value)}",
                expected="awaitable",
                received=type_name(value),
            )
            return INVALID
        return self._settle(value)


@dataclass(frozen=True, eq=False)
class BrandedSchema(Schema):
    """Tags a schema with a nominal brand. Runtime behaviour is ``inner``'s."""

    kind = SchemaKind.BRANDED

    inner: Schema
    brand_name: str

    def unwrap(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        return await self.inner._parse(value, ctx)


@dataclass(frozen=True, eq=False)
class PipelineSchema(Schema):
    """Parses with ``in_``, then parses that output with ``out``.

    ``out`` is skipped when ``in_`` produced a dirty value.
    """

    kind = SchemaKind.PIPELINE

    in_: Schema
    out: Schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        before = ctx.issue_count
        result = await self.in_._parse(value, ctx)
        if result is INVALID or ctx.issue_count > before:
            return result
        return await self.out._parse(result, ctx)


class FrozenList(list[Any]):
    """A list that rejects in-place changes.

    Still a ``list``, so array schemas accept it and it compares equal to
    the plain list it was built from.
    """

    def _readonly(self, *args: Any, **kwargs: Any) -> Any:
        raise TypeError("FrozenList is read-only")

    __setitem__ = __delitem__ = __iadd__ = __imul__ = _readonly
    append = extend = insert = pop = remove = clear = sort = reverse = _readonly

    def __reduce__(self) -> tuple[Any, ...]:
        return (FrozenList, (list(self),))


def freeze(value: Any) -> Any:
    """Shallow read-only view: dict → mappingproxy, list → FrozenList, set → frozenset."""
    if isinstance(value, dict):
        return MappingProxyType(value)
    if isinstance(value, list):
        return FrozenList(value)
    if isinstance(value, set):
        return frozenset(value)
    return value


@dataclass(frozen=True, eq=False)
class ReadonlySchema(Schema):
    """Freezes the container returned by ``inner`` (see freeze())."""

    kind = SchemaKind.READONLY

    inner: Schema

    def unwrap(self) -> Schema:
        return self.inner

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        result = await self.inner._parse(value, ctx)
        if result is INVALID:
            return INVALID
        return freeze(result)
