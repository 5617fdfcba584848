"""Shared contracts: kinds, issues, and errors.

These types cross every subsystem boundary. They import nothing from the
rest of the package.
"""

from invertible.contracts.enums import EffectType, IssueCode, SchemaKind, UnknownKeys
from invertible.contracts.errors import (
    AsyncParseRequiredError,
    InvertibleError,
    SchemaValidationError,
    UnsupportedEffectError,
    UnsupportedSchemaKindError,
)
from invertible.contracts.issues import Issue, ParseContext, PathSegment, RefinementContext

__all__ = [
    "AsyncParseRequiredError",
    "EffectType",
    "InvertibleError",
    "Issue",
    "IssueCode",
    "ParseContext",
    "PathSegment",
    "RefinementContext",
    "SchemaKind",
    "SchemaValidationError",
    "UnknownKeys",
    "UnsupportedEffectError",
    "UnsupportedSchemaKindError",
]
