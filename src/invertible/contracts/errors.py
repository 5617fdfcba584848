"""Exceptions raised by schema execution and tree inversion.

Two families:
- Inversion-time: UnsupportedEffectError (and UnsupportedSchemaKindError
  when unknown kinds are configured to fail). Raised synchronously from
  invert(); no partial tree is ever returned.
- Run-time: SchemaValidationError, raised by parse()/parse_async() after
  all issues of a run have been accumulated.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from invertible.contracts.issues import Issue


class InvertibleError(Exception):
    """Base class for all errors raised by this package."""


class UnsupportedEffectError(InvertibleError):
    """Raised when inversion reaches a one-way effect that is not elidable.

    Transforms and preprocess steps have no registered inverse. Mark them
    with ignore_effect() (or construct them with elidable=True) if the
    inverse path can do without them; otherwise wrap the mapping in an
    invertible() node.

    Attributes:
        effect_type: The effect kind that stopped inversion ("transform" or "preprocess")
    """

    def __init__(self, effect_type: str) -> None:
        self.effect_type = effect_type
        super().__init__(f"effect not supported: {effect_type}")


class UnsupportedSchemaKindError(InvertibleError):
    """Raised for nodes of an unrecognised kind when passthrough is disabled.

    Attributes:
        kind: The node's declared kind (or class name if it declares none)
    """

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"schema kind not supported by the inverter: {kind}")


class SchemaValidationError(InvertibleError):
    """Raised when a value fails validation.

    Carries every issue accumulated during the run, in the order they
    were reported.

    Attributes:
        issues: Tuple of Issue records (never empty)
    """

    def __init__(self, issues: Iterable[Issue]) -> None:
        self.issues = tuple(issues)
        super().__init__(self._render())

    def _render(self) -> str:
        count = len(self.issues)
        noun = "issue" if count == 1 else "issues"
        lines = [f"{count} validation {noun}"]
        for issue in self.issues:
            location = issue.dotted_path or "<root>"
            lines.append(f"  {location}: {issue.message} [{issue.code}]")
        return "\n".join(lines)

    def flatten(self) -> dict[str, list[str]]:
        """Group issue messages by dotted path ("" for the root)."""
        grouped: dict[str, list[str]] = {}
        for issue in self.issues:
            grouped.setdefault(issue.dotted_path, []).append(issue.message)
        return grouped


class AsyncParseRequiredError(InvertibleError):
    """Raised when synchronous parse meets a function that suspends.

    Coroutines that complete without suspending are fine in parse(); one
    that actually waits on something needs parse_async().
    """

    def __init__(self) -> None:
        super().__init__("Asynchronous function encountered during synchronous parse, use parse_async()")
