"""Schema tree inversion.

invert(schema) builds a new tree whose input domain is the original's
output domain and whose output domain is the original's input domain.
Parsing a value forward with the original and then parsing the result
with the inverse gives back an equivalent value.

Rules, by node kind:
- invertible nodes: swap input/output schemas (each inverted) and
  swap parse/format functions
- plain pipelines: invert both halves and reverse their order
- containers, unions, intersections, functions: same kind, children inverted
- lazy: a new lazy node that inverts on first use (never eagerly, so
  self-referential schemas terminate)
- refinements: the predicate runs first, on the new input, ahead of the
  inverted inner schema
- elidable transforms/preprocess steps: dropped, inner schema inverted
- other transforms/preprocess steps: UnsupportedEffectError
- optional/nullable/readonly/promise: re-wrapped around the inverted child
- default/catch/branded: unwrapped (no forward default, fallback or brand
  survives on the inverse path)
- leaves: returned unchanged

The inverter never mutates a node. Subtrees shared between parents are
inverted once per parent reference, each time into fresh nodes.
"""

from __future__ import annotations

from dataclasses import replace

import structlog

from invertible.contracts.enums import EffectType, SchemaKind
from invertible.contracts.errors import UnsupportedEffectError, UnsupportedSchemaKindError
from invertible.core.config import InversionSettings
from invertible.invertible import InvertibleSchema
from invertible.schema.base import Schema
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
from invertible.schema.effects import EffectsSchema
from invertible.schema.primitives import AnySchema
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

logger = structlog.get_logger(__name__)


def ignore_effect(schema: EffectsSchema) -> EffectsSchema:
    """Return a copy of an effects node that inversion may drop.

    Use for one-way steps whose work is not needed on the way back
    (normalisation, logging, caching). The argument is left unchanged.

    Raises:
        TypeError: If ``schema`` is not an effects node
    """
    if not isinstance(schema, EffectsSchema):
        raise TypeError(f"ignore_effect() expects an effects schema, got {type(schema).__name__}")
    return replace(schema, elidable=True)


class SchemaInverter:
    """Recursive inverter bound to one set of InversionSettings.

    Lazy nodes capture the inverter, so deferred inversions use the same
    settings as the call that created them.
    """

    def __init__(self, settings: InversionSettings | None = None) -> None:
        self._settings = settings if settings is not None else InversionSettings()

    def invert(self, schema: Schema) -> Schema:
        match schema:
            # Must precede PipelineSchema: an invertible node is a pipeline
            case InvertibleSchema():
                return InvertibleSchema(
                    self.invert(schema.output_schema),
                    schema.format_fn,
                    self.invert(schema.input_schema),
                    schema.parse_fn,
                )
            case PipelineSchema():
                return self.invert(schema.out).pipe(self.invert(schema.in_))

            case ArraySchema():
                return replace(schema, element=self.invert(schema.element))
            case ObjectSchema():
                return replace(
                    schema,
                    shape={key: self.invert(value) for key, value in schema.shape.items()},
                    catchall=None if schema.catchall is None else self.invert(schema.catchall),
                )
            case UnionSchema():
                return UnionSchema(tuple(self.invert(option) for option in schema.options))
            case DiscriminatedUnionSchema():
                # Tags are literals, so branches stay mutually exclusive
                return DiscriminatedUnionSchema(
                    schema.discriminator,
                    tuple(self._invert_object(option) for option in schema.options),
                )
            case IntersectionSchema():
                return IntersectionSchema(self.invert(schema.left), self.invert(schema.right))
            case TupleSchema():
                return self._invert_tuple(schema)
            case RecordSchema():
                return RecordSchema(self.invert(schema.key_schema), self.invert(schema.value_schema))
            case MapSchema():
                return MapSchema(self.invert(schema.key_schema), self.invert(schema.value_schema))
            case SetSchema():
                return SetSchema(self.invert(schema.element))
            case FunctionSchema():
                return replace(schema, args=self._invert_tuple(schema.args), returns=self.invert(schema.returns))
            case LazySchema():
                return LazySchema(lambda: self.invert(schema.schema))

            case EffectsSchema():
                return self._invert_effect(schema)

            case OptionalSchema():
                return self.invert(schema.inner).optional()
            case NullableSchema():
                return self.invert(schema.inner).nullable()
            case DefaultSchema() | CatchSchema() | BrandedSchema():
                return self.invert(schema.inner)
            case PromiseSchema():
                return self.invert(schema.inner).promise()
            case ReadonlySchema():
                return self.invert(schema.inner).readonly()

            case _:
                return self._passthrough(schema)

    def _invert_object(self, schema: ObjectSchema) -> ObjectSchema:
        inverted = self.invert(schema)
        assert isinstance(inverted, ObjectSchema)
        return inverted

    def _invert_tuple(self, schema: TupleSchema) -> TupleSchema:
        return replace(
            schema,
            items=tuple(self.invert(item) for item in schema.items),
            rest=None if schema.rest is None else self.invert(schema.rest),
        )

    def _invert_effect(self, schema: EffectsSchema) -> Schema:
        effect_type = schema.effect.type
        match effect_type:
            case EffectType.REFINEMENT:
                # The predicate is checked at run time against whatever
                # arrives; the static domain it was declared on is not kept
                return AnySchema().super_refine(schema.effect.fn).pipe(self.invert(schema.schema))
            case EffectType.TRANSFORM | EffectType.PREPROCESS:
                if not schema.elidable:
                    raise UnsupportedEffectError(str(effect_type))
                if self._settings.log_elisions:
                    logger.debug("effect_elided", effect_type=str(effect_type))
                return self.invert(schema.schema)

    def _passthrough(self, schema: Schema) -> Schema:
        kind = getattr(schema, "kind", None)
        if isinstance(kind, SchemaKind) and kind.is_leaf:
            return schema
        kind_name = str(kind) if kind is not None else type(schema).__name__
        if self._settings.unknown_kind == "error":
            raise UnsupportedSchemaKindError(kind_name)
        logger.debug("schema_kind_passthrough", kind=kind_name, schema_class=type(schema).__name__)
        return schema


def invert(schema: Schema, *, settings: InversionSettings | None = None) -> Schema:
    """Build the mirror image of ``schema``.

    Args:
        schema: Root of the tree to invert
        settings: Inverter behaviour (defaults to InversionSettings())

    Returns:
        A new tree; ``schema`` and its children are untouched

    Raises:
        UnsupportedEffectError: If the tree contains a transform or
            preprocess effect that is not elidable, at any depth
        UnsupportedSchemaKindError: If the tree contains a node of an
            unknown kind and settings.unknown_kind is "error"
    """
    return SchemaInverter(settings).invert(schema)
