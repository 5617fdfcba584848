"""One-way effects: refinements, transforms, and preprocess steps.

An effects node wraps an inner schema with a single user callable. The
callable receives ``(value, ctx)`` where ``ctx`` is a RefinementContext,
and may return an awaitable.

Effects are not invertible. The inverter keeps refinements (the
predicate still applies on the inverse path) and drops transforms or
preprocess steps only when ``elidable`` is set; otherwise inversion
fails with UnsupportedEffectError.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from invertible.contracts.enums import EffectType, SchemaKind
from invertible.contracts.issues import ParseContext
from invertible.schema.base import ContextFn, Schema, resolve
from invertible.schema.sentinels import INVALID


@dataclass(frozen=True, slots=True)
class Effect:
    """The callable attached to an effects node, tagged with its kind."""

    type: EffectType
    fn: ContextFn


@dataclass(frozen=True, eq=False)
class EffectsSchema(Schema):
    """Inner schema plus one effect.

    Attributes:
        schema: The wrapped schema
        effect: What to run and when (see EffectType)
        elidable: The effect may be dropped when the tree is inverted
    """

    kind = SchemaKind.EFFECTS

    schema: Schema
    effect: Effect
    elidable: bool = False

    @property
    def inner(self) -> Schema:
        return self.schema

    async def _parse(self, value: Any, ctx: ParseContext) -> Any:
        match self.effect.type:
            case EffectType.PREPROCESS:
                before = ctx.issue_count
                processed = await resolve(self.effect.fn(value, ctx.refinement()))
                if ctx.issue_count > before:
                    return INVALID
                return await self.schema._parse(processed, ctx)

            case EffectType.REFINEMENT:
                result = await self.schema._parse(value, ctx)
                if result is INVALID:
                    return INVALID
                # Refinements run on dirty values too, so every failure is reported
                await resolve(self.effect.fn(result, ctx.refinement()))
                return result

            case EffectType.TRANSFORM:
                before = ctx.issue_count
                result = await self.schema._parse(value, ctx)
                if result is INVALID or ctx.issue_count > before:
                    return result
                return await resolve(self.effect.fn(result, ctx.refinement()))


def preprocess(fn: ContextFn, schema: Schema, *, elidable: bool = False) -> EffectsSchema:
    """Run ``fn(value, ctx)`` on the raw input before ``schema`` sees it."""
    return EffectsSchema(schema, Effect(EffectType.PREPROCESS, fn), elidable=elidable)
