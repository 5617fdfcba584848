"""Test helpers for schemas built with invertible.

Usage:
    from invertible.testing import round_trip, parse_float_node

    assert round_trip(s.array(parse_float_node()), ["5", "10.3"]) == ["5", "10.3"]
"""

from __future__ import annotations

import math
from typing import Any

from invertible.contracts.issues import RefinementContext
from invertible.core.config import InversionSettings
from invertible.inversion import invert
from invertible.invertible import InvertibleSchema, invertible
from invertible.schema import number, string
from invertible.schema.base import Schema


def round_trip(schema: Schema, value: Any, *, settings: InversionSettings | None = None) -> Any:
    """Parse ``value`` forward with ``schema``, then back with its inverse.

    For a well-formed invertible schema the result equals ``value``.
    """
    return invert(schema, settings=settings).parse(schema.parse(value))


async def round_trip_async(schema: Schema, value: Any, *, settings: InversionSettings | None = None) -> Any:
    """Async variant of round_trip(); use when parse/format functions suspend."""
    forward = await schema.parse_async(value)
    return await invert(schema, settings=settings).parse_async(forward)


def parse_float(value: str, ctx: RefinementContext) -> float:
    try:
        return float(value)
    except ValueError:
        ctx.add_issue("invalid float")
        return math.nan


def format_float(value: float, ctx: RefinementContext) -> str:
    """Shortest text for ``value``; integral values lose the trailing ``.0``."""
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def parse_float_node() -> InvertibleSchema:
    """A string <-> number node, the canonical example of an invertible schema."""
    return invertible(string(), parse_float, number(), format_float)
