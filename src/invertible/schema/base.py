"""Schema base class and the execution engine.

Every node implements a single coroutine, ``_parse(value, ctx)``. The
same coroutine serves both entry points:

- parse_async() awaits it on the caller's event loop.
- parse() drives it by hand with ``send(None)``. Coroutines that never
  suspend (plain sync callables, or ``async def`` bodies that finish
  without waiting) complete without an event loop. The first real
  suspension raises AsyncParseRequiredError.

Nodes are frozen dataclasses. The fluent methods below never modify
``self``; each returns a new wrapper node.
"""

from __future__ import annotations

import inspect
from abc import ABC, abstractmethod
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

from invertible.contracts.enums import EffectType, IssueCode, SchemaKind
from invertible.contracts.errors import AsyncParseRequiredError, SchemaValidationError
from invertible.contracts.issues import Issue, ParseContext, RefinementContext
from invertible.schema.sentinels import INVALID, MISSING

if TYPE_CHECKING:
    from invertible.schema.composites import ArraySchema, IntersectionSchema, UnionSchema
    from invertible.schema.effects import EffectsSchema
    from invertible.schema.wrappers import (
        BrandedSchema,
        CatchSchema,
        DefaultSchema,
        NullableSchema,
        OptionalSchema,
        PipelineSchema,
        PromiseSchema,
        ReadonlySchema,
    )

T = TypeVar("T")

ContextFn = Callable[[Any, RefinementContext], Any]


@dataclass(frozen=True, slots=True)
class ParseResult:
    """Outcome of safe_parse()/safe_parse_async().

    Attributes:
        success: True if no issue was reported
        data: Parsed output (None on failure)
        error: The validation error (None on success)
    """

    success: bool
    data: Any = None
    error: SchemaValidationError | None = None


def run_sync(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine to completion without an event loop.

    A bare ``yield`` (what ``asyncio.sleep(0)`` does) is resumed
    immediately. Yielding anything else means the coroutine is waiting on
    a future, which only an event loop can resolve.

    Raises:
        AsyncParseRequiredError: If the coroutine suspends on a future
    """
    try:
        while True:
            if coro.send(None) is not None:
                raise AsyncParseRequiredError()
    except StopIteration as stop:
        result: T = stop.value
        return result
    finally:
        coro.close()


async def resolve(result: Any) -> Any:
    """Await ``result`` if it is awaitable, otherwise return it unchanged."""
    if inspect.isawaitable(result):
        return await result
    return result


def _finish(result: Any, ctx: ParseContext) -> Any:
    if ctx.issues:
        raise SchemaValidationError(ctx.issues)
    if result is INVALID:
        # Every INVALID return path reports an issue first; reaching this is a node bug
        raise SchemaValidationError([Issue(code=IssueCode.CUSTOM, message="Invalid input")])
    return result


class Schema(ABC):
    """Base class of every schema node.

    Subclasses declare ``kind`` and implement ``_parse``. Child schemas
    are exposed as public attributes so the inverter can rebuild them.
    """

    kind: ClassVar[SchemaKind]

    @abstractmethod
    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        """Validate ``value``, reporting failures on ``ctx``.

        Returns the output value, or INVALID if none could be produced.
        A value returned while new issues were reported is "dirty": the
        run will fail, but enclosing refinements still see it.
        """

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    def parse(self, value: Any) -> Any:
        """Validate and transform ``value`` synchronously.

        Raises:
            SchemaValidationError: If any issue was reported
            AsyncParseRequiredError: If an embedded function suspends
        """
        ctx = ParseContext()
        return _finish(run_sync(self._parse(value, ctx)), ctx)

    async def parse_async(self, value: Any) -> Any:
        """Validate and transform ``value``, awaiting async functions.

        Raises:
            SchemaValidationError: If any issue was reported
        """
        ctx = ParseContext()
        return _finish(await self._parse(value, ctx), ctx)

    def safe_parse(self, value: Any) -> ParseResult:
        try:
            return ParseResult(success=True, data=self.parse(value))
        except SchemaValidationError as e:
            return ParseResult(success=False, error=e)

    async def safe_parse_async(self, value: Any) -> ParseResult:
        try:
            return ParseResult(success=True, data=await self.parse_async(value))
        except SchemaValidationError as e:
            return ParseResult(success=False, error=e)

    # ------------------------------------------------------------------
    # Fluent construction
    # ------------------------------------------------------------------

    def optional(self) -> OptionalSchema:
        from invertible.schema.wrappers import OptionalSchema

        return OptionalSchema(self)

    def nullable(self) -> NullableSchema:
        from invertible.schema.wrappers import NullableSchema

        return NullableSchema(self)

    def default(self, value: Any = MISSING, *, factory: Callable[[], Any] | None = None) -> DefaultSchema:
        """Substitute ``value`` (or ``factory()``) when the input is MISSING."""
        from invertible.schema.wrappers import DefaultSchema

        return DefaultSchema(self, value=value, factory=factory)

    def catch(
        self,
        value: Any = MISSING,
        *,
        factory: Callable[[SchemaValidationError], Any] | None = None,
    ) -> CatchSchema:
        """Substitute ``value`` (or ``factory(error)``) when this schema fails."""
        from invertible.schema.wrappers import CatchSchema

        return CatchSchema(self, value=value, factory=factory)

    def refine(
        self,
        check: Callable[[Any], Any],
        message: str = "Invalid input",
        *,
        path: tuple[str | int, ...] = (),
    ) -> EffectsSchema:
        """Add a predicate; a falsy result reports a CUSTOM issue."""

        async def refinement(value: Any, ctx: RefinementContext) -> None:
            if not await resolve(check(value)):
                ctx.add_issue(message, path=path)

        return self.super_refine(refinement)

    def super_refine(self, fn: ContextFn) -> EffectsSchema:
        """Add a refinement that reports its own issues through the context."""
        from invertible.schema.effects import Effect, EffectsSchema

        return EffectsSchema(self, Effect(EffectType.REFINEMENT, fn))

    def transform(self, fn: ContextFn, *, elidable: bool = False) -> EffectsSchema:
        """Map the parsed value through ``fn(value, ctx)``.

        Transforms are one-way. Inversion fails on them unless they are
        elidable (see ignore_effect()).
        """
        from invertible.schema.effects import Effect, EffectsSchema

        return EffectsSchema(self, Effect(EffectType.TRANSFORM, fn), elidable=elidable)

    def pipe(self, out: Schema) -> PipelineSchema:
        from invertible.schema.wrappers import PipelineSchema

        return PipelineSchema(self, out)

    def brand(self, name: str) -> BrandedSchema:
        from invertible.schema.wrappers import BrandedSchema

        return BrandedSchema(self, name)

    def readonly(self) -> ReadonlySchema:
        from invertible.schema.wrappers import ReadonlySchema

        return ReadonlySchema(self)

    def promise(self) -> PromiseSchema:
        from invertible.schema.wrappers import PromiseSchema

        return PromiseSchema(self)

    def array(self) -> ArraySchema:
        from invertible.schema.composites import ArraySchema

        return ArraySchema(self)

    def or_(self, other: Schema) -> UnionSchema:
        from invertible.schema.composites import UnionSchema

        return UnionSchema((self, other))

    def and_(self, other: Schema) -> IntersectionSchema:
        from invertible.schema.composites import IntersectionSchema

        return IntersectionSchema(self, other)
