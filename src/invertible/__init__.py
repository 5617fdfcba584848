"""
invertible: bidirectional schemas.

Describe a data shape once, parse values forward with it, and derive the
mirror-image schema with invert() to turn the output back into the
original input. Only mappings registered together with their inverse
(invertible()) are reversed; one-way transforms must be marked elidable
with ignore_effect() or inversion fails.

Usage:
    from invertible import invert, invertible
    from invertible import schema as s

    Wire = s.object_({"price": invertible(s.string(), to_float, s.number(), to_string)})
    domain = Wire.parse({"price": "5.3"})       # {"price": 5.3}
    wire = invert(Wire).parse(domain)           # {"price": "5.3"}
"""

from invertible import schema
from invertible.contracts import (
    AsyncParseRequiredError,
    EffectType,
    InvertibleError,
    Issue,
    IssueCode,
    RefinementContext,
    SchemaKind,
    SchemaValidationError,
    UnsupportedEffectError,
    UnsupportedSchemaKindError,
)
from invertible.core.config import InversionSettings, InvertibleSettings, LoggingSettings, load_settings
from invertible.inversion import SchemaInverter, ignore_effect, invert
from invertible.invertible import InvertibleSchema, invertible
from invertible.schema import ParseResult, Schema

__version__ = "0.1.0"

__all__ = [
    "AsyncParseRequiredError",
    "EffectType",
    "InversionSettings",
    "InvertibleError",
    "InvertibleSchema",
    "InvertibleSettings",
    "Issue",
    "IssueCode",
    "LoggingSettings",
    "ParseResult",
    "RefinementContext",
    "Schema",
    "SchemaInverter",
    "SchemaKind",
    "SchemaValidationError",
    "UnsupportedEffectError",
    "UnsupportedSchemaKindError",
    "ignore_effect",
    "invert",
    "invertible",
    "load_settings",
    "schema",
]
