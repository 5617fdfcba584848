"""Invertible pipeline node: a schema that knows how to run backwards.

An invertible node bundles four parts:

    input_schema --parse_fn--> output_schema
    input_schema <--format_fn-- output_schema

Parsing it behaves exactly like
``input_schema.transform(parse_fn).pipe(output_schema)``, and it IS a
PipelineSchema, so it nests anywhere a pipeline does. The four parts are
kept for the inverter, which builds the mirror node by swapping them.

Contract (not checked): for any value ``x`` that parses cleanly,
``format_fn(parse_fn(x))`` is equivalent to ``x``.

Example:
    def parse_float(value: str, ctx: RefinementContext) -> float:
        try:
            return float(value)
        except ValueError:
            ctx.add_issue("invalid float")
            return math.nan

    FloatString = invertible(s.string(), parse_float, s.number(), lambda n, ctx: repr(n))
    FloatString.parse("5.3")            # 5.3
    invert(FloatString).parse(5.3)      # "5.3"
"""

from __future__ import annotations

from dataclasses import dataclass

from invertible.contracts.enums import EffectType
from invertible.schema.base import ContextFn, Schema
from invertible.schema.effects import Effect, EffectsSchema
from invertible.schema.wrappers import PipelineSchema


@dataclass(frozen=True, eq=False, init=False)
class InvertibleSchema(PipelineSchema):
    """Pipeline node carrying its own inverse.

    ``in_`` and ``out`` are derived from the four parts; do not build
    instances with dataclasses.replace().

    Attributes:
        input_schema: Accepts the pre-transform (e.g. wire) domain
        parse_fn: ``(input value, ctx) -> output value``, may be async
        output_schema: Accepts the post-transform (e.g. domain) domain
        format_fn: ``(output value, ctx) -> input value``, may be async
    """

    input_schema: Schema
    parse_fn: ContextFn
    output_schema: Schema
    format_fn: ContextFn

    def __init__(
        self,
        input_schema: Schema,
        parse_fn: ContextFn,
        output_schema: Schema,
        format_fn: ContextFn,
    ) -> None:
        if not isinstance(input_schema, Schema) or not isinstance(output_schema, Schema):
            raise TypeError("invertible() requires Schema instances for input and output")
        if not callable(parse_fn) or not callable(format_fn):
            raise TypeError("invertible() requires callable parse and format functions")

        object.__setattr__(self, "in_", EffectsSchema(input_schema, Effect(EffectType.TRANSFORM, parse_fn)))
        object.__setattr__(self, "out", output_schema)
        object.__setattr__(self, "input_schema", input_schema)
        object.__setattr__(self, "parse_fn", parse_fn)
        object.__setattr__(self, "output_schema", output_schema)
        object.__setattr__(self, "format_fn", format_fn)

    def inverse(self) -> InvertibleSchema:
        """Same as invert(self)."""
        from invertible.inversion import invert

        return invert(self)  # type: ignore[return-value]


def invertible(
    input_schema: Schema,
    parse_fn: ContextFn,
    output_schema: Schema,
    format_fn: ContextFn,
) -> InvertibleSchema:
    """Build an invertible node from its four parts."""
    return InvertibleSchema(input_schema, parse_fn, output_schema, format_fn)
