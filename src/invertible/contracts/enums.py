"""All kinds, codes, and modes used across subsystem boundaries.

SchemaKind is a CLOSED set. The inverter dispatches on it; a node whose
kind is not listed here is treated as an unknown extension (see
InversionSettings.unknown_kind).
"""

from enum import StrEnum


class SchemaKind(StrEnum):
    """Structural kind of a schema node.

    Leaf kinds are self-inverse. Every other kind has an inversion rule.
    """

    # Leaves
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    NONE = "none"
    LITERAL = "literal"
    ENUM = "enum"
    ANY = "any"
    UNKNOWN = "unknown"
    NEVER = "never"

    # Composites
    ARRAY = "array"
    OBJECT = "object"
    UNION = "union"
    DISCRIMINATED_UNION = "discriminated_union"
    INTERSECTION = "intersection"
    TUPLE = "tuple"
    RECORD = "record"
    MAP = "map"
    SET = "set"
    FUNCTION = "function"
    LAZY = "lazy"

    # Wrappers
    EFFECTS = "effects"
    OPTIONAL = "optional"
    NULLABLE = "nullable"
    DEFAULT = "default"
    CATCH = "catch"
    PROMISE = "promise"
    BRANDED = "branded"
    PIPELINE = "pipeline"
    READONLY = "readonly"

    @property
    def is_leaf(self) -> bool:
        """Whether nodes of this kind have no child schemas."""
        return self in _LEAF_KINDS


_LEAF_KINDS = frozenset(
    {
        SchemaKind.STRING,
        SchemaKind.NUMBER,
        SchemaKind.BOOLEAN,
        SchemaKind.NONE,
        SchemaKind.LITERAL,
        SchemaKind.ENUM,
        SchemaKind.ANY,
        SchemaKind.UNKNOWN,
        SchemaKind.NEVER,
    }
)


class EffectType(StrEnum):
    """Kind of one-way effect attached to an effects node.

    Values:
        REFINEMENT: Checks the inner result, never changes it
        TRANSFORM: Maps the inner result to a new value
        PREPROCESS: Maps the raw input before the inner schema sees it
    """

    REFINEMENT = "refinement"
    TRANSFORM = "transform"
    PREPROCESS = "preprocess"


class IssueCode(StrEnum):
    """Code carried by every validation issue."""

    INVALID_TYPE = "invalid_type"
    INVALID_LITERAL = "invalid_literal"
    INVALID_ENUM_VALUE = "invalid_enum_value"
    INVALID_STRING = "invalid_string"
    UNRECOGNIZED_KEYS = "unrecognized_keys"
    INVALID_UNION = "invalid_union"
    INVALID_UNION_DISCRIMINATOR = "invalid_union_discriminator"
    INVALID_INTERSECTION_TYPES = "invalid_intersection_types"
    INVALID_ARGUMENTS = "invalid_arguments"
    INVALID_RETURN_TYPE = "invalid_return_type"
    TOO_SMALL = "too_small"
    TOO_BIG = "too_big"
    NOT_INTEGER = "not_integer"
    CUSTOM = "custom"


class UnknownKeys(StrEnum):
    """How an object node treats keys absent from its shape.

    Ignored when the object declares a catchall schema.
    """

    STRIP = "strip"
    STRICT = "strict"
    PASSTHROUGH = "passthrough"
