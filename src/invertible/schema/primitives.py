"""Leaf schema nodes.

Type checks go through pydantic strict-mode TypeAdapters, so nothing is
coerced: "42" is not a number and 1 is not a bool. Range and length
constraints are checked here after the type check passes.

Leaves have no children and are returned unchanged by the inverter.
"""

from __future__ import annotations

import re
from collections.abc import Hashable
from dataclasses import dataclass, replace
from typing import Annotated, Any

from pydantic import Field, StrictBool, StrictInt, StrictStr, TypeAdapter, ValidationError

from invertible.contracts.enums import IssueCode, SchemaKind
from invertible.contracts.issues import ParseContext
from invertible.schema.base import Schema
from invertible.schema.sentinels import INVALID, MISSING, type_name

# Finite float type that rejects NaN and Infinity.
# bool is excluded by strict mode (it is an int subclass, not a number here)
FiniteFloat = Annotated[float, Field(strict=True, allow_inf_nan=False)]

_STRING = TypeAdapter(StrictStr)
_NUMBER = TypeAdapter(StrictInt | FiniteFloat)
_BOOLEAN = TypeAdapter(StrictBool)
_NONE = TypeAdapter(None)


def _check_type(adapter: TypeAdapter[Any], expected: str, value: Any, ctx: ParseContext) -> bool:
    """Run a strict adapter; report INVALID_TYPE and return False on failure."""
    if value is MISSING:
        ctx.add_issue(IssueCode.INVALID_TYPE, "Required", expected=expected, received="missing")
        return False
    try:
        adapter.validate_python(value)
    except ValidationError as e:
        message = e.errors()[0]["msg"]
        ctx.add_issue(IssueCode.INVALID_TYPE, message, expected=expected, received=type_name(value))
        return False
    return True


@dataclass(frozen=True, eq=False)
class StringSchema(Schema):
    """A str, optionally bounded in length and matched against a regex."""

    kind = SchemaKind.STRING

    min_length: int | None = None
    max_length: int | None = None
    pattern: str | None = None

    def min(self, length: int) -> StringSchema:
        return replace(self, min_length=length)

    def max(self, length: int) -> StringSchema:
        return replace(self, max_length=length)

    def regex(self, pattern: str) -> StringSchema:
        re.compile(pattern)  # fail at construction, not at parse time
        return replace(self, pattern=pattern)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not _check_type(_STRING, "string", value, ctx):
            return INVALID
        if self.min_length is not None and len(value) < self.min_length:
            ctx.add_issue(
                IssueCode.TOO_SMALL,
                f"String must contain at least {self.min_length} character(s)",
                minimum=self.min_length,
            )
        if self.max_length is not None and len(value) > self.max_length:
            ctx.add_issue(
                IssueCode.TOO_BIG,
                f"String must contain at most {self.max_length} character(s)",
                maximum=self.max_length,
            )
        if self.pattern is not None and re.search(self.pattern, value) is None:
            ctx.add_issue(IssueCode.INVALID_STRING, f"String does not match pattern {self.pattern!r}")
        return value


@dataclass(frozen=True, eq=False)
class NumberSchema(Schema):
    """An int or finite float, with optional bounds.

    Bounds are exclusive (gt/lt) or inclusive (ge/le).
    """

    kind = SchemaKind.NUMBER

    gt: float | None = None
    ge: float | None = None
    lt: float | None = None
    le: float | None = None
    integer: bool = False

    def min(self, bound: float) -> NumberSchema:
        return replace(self, ge=bound)

    def max(self, bound: float) -> NumberSchema:
        return replace(self, le=bound)

    def positive(self) -> NumberSchema:
        return replace(self, gt=0)

    def negative(self) -> NumberSchema:
        return replace(self, lt=0)

    def nonnegative(self) -> NumberSchema:
        return replace(self, ge=0)

    def int(self) -> NumberSchema:
        return replace(self, integer=True)

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not _check_type(_NUMBER, "number", value, ctx):
            return INVALID
        if self.integer and isinstance(value, float) and not value.is_integer():
            ctx.add_issue(IssueCode.NOT_INTEGER, "Expected integer, received float")
        if self.gt is not None and not value > self.gt:
            ctx.add_issue(IssueCode.TOO_SMALL, f"Number must be greater than {self.gt}", minimum=self.gt)
        if self.ge is not None and not value >= self.ge:
            ctx.add_issue(
                IssueCode.TOO_SMALL, f"Number must be greater than or equal to {self.ge}", minimum=self.ge
            )
        if self.lt is not None and not value < self.lt:
            ctx.add_issue(IssueCode.TOO_BIG, f"Number must be less than {self.lt}", maximum=self.lt)
        if self.le is not None and not value <= self.le:
            ctx.add_issue(IssueCode.TOO_BIG, f"Number must be less than or equal to {self.le}", maximum=self.le)
        return value


@dataclass(frozen=True, eq=False)
class BooleanSchema(Schema):
    kind = SchemaKind.BOOLEAN

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not _check_type(_BOOLEAN, "boolean", value, ctx):
            return INVALID
        return value


@dataclass(frozen=True, eq=False)
class NoneSchema(Schema):
    kind = SchemaKind.NONE

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if not _check_type(_NONE, "none", value, ctx):
            return INVALID
        return value


@dataclass(frozen=True, eq=False)
class LiteralSchema(Schema):
    """Exactly one value, compared by type and equality (True is not 1)."""

    kind = SchemaKind.LITERAL

    value: Any

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if type(value) is not type(self.value) or value != self.value:
            ctx.add_issue(
                IssueCode.INVALID_LITERAL,
                f"Invalid literal value, expected {self.value!r}",
                expected=self.value,
                received=value if value is not MISSING else "missing",
            )
            return INVALID
        return value


@dataclass(frozen=True, eq=False)
class EnumSchema(Schema):
    """One of a fixed tuple of hashable values."""

    kind = SchemaKind.ENUM

    values: tuple[Hashable, ...]

    def __post_init__(self) -> None:
        if not self.values:
            raise ValueError("enum() requires at least one value")
        object.__setattr__(self, "values", tuple(self.values))

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        if value is MISSING or not any(type(value) is type(v) and value == v for v in self.values):
            expected = " | ".join(repr(v) for v in self.values)
            ctx.add_issue(
                IssueCode.INVALID_ENUM_VALUE,
                f"Invalid enum value. Expected {expected}",
                options=list(self.values),
            )
            return INVALID
        return value


@dataclass(frozen=True, eq=False)
class AnySchema(Schema):
    """Accepts anything, including a missing key."""

    kind = SchemaKind.ANY

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        return value


@dataclass(frozen=True, eq=False)
class UnknownSchema(Schema):
    """Like AnySchema; kept distinct so callers can tell intent apart."""

    kind = SchemaKind.UNKNOWN

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        return value


@dataclass(frozen=True, eq=False)
class NeverSchema(Schema):
    """Rejects every value."""

    kind = SchemaKind.NEVER

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        ctx.add_issue(IssueCode.INVALID_TYPE, "Expected never", expected="never", received=type_name(value))
        return INVALID
