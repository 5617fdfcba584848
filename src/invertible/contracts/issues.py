"""Validation issues and the contexts that accumulate them.

Issues are collected, never raised, while a schema tree runs. Sibling
fields and elements keep validating after one of them fails; the
top-level parse turns the accumulated list into a SchemaValidationError.

User callables (refinements, transforms, and the parse/format functions
of invertible nodes) receive a RefinementContext, not the raw
ParseContext, so they can report failures but cannot see or drop issues
raised elsewhere in the tree.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any

from invertible.contracts.enums import IssueCode

PathSegment = str | int


@dataclass(frozen=True, slots=True)
class Issue:
    """A single validation failure.

    Attributes:
        code: Machine-readable failure code
        message: Human-readable description
        path: Location of the failing value, outermost segment first
        details: Code-specific extras (expected/received types, union branch issues, ...)
    """

    code: IssueCode
    message: str
    path: tuple[PathSegment, ...] = ()
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def dotted_path(self) -> str:
        """Path rendered as ``a.b[0].c`` (empty string for the root)."""
        rendered = ""
        for segment in self.path:
            if isinstance(segment, int):
                rendered += f"[{segment}]"
            elif rendered:
                rendered += f".{segment}"
            else:
                rendered = segment
        return rendered

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "code": str(self.code),
            "message": self.message,
            "path": list(self.path),
            **self.details,
        }


@dataclass(slots=True)
class ParseContext:
    """Issue accumulator for one parse run.

    Children share the parent's issue list and extend its path. A forked
    context gets a private issue list, used where a failure must not leak
    (union branches, catch).
    """

    path: tuple[PathSegment, ...] = ()
    issues: list[Issue] = field(default_factory=list)

    def child(self, segment: PathSegment) -> ParseContext:
        return ParseContext(path=(*self.path, segment), issues=self.issues)

    def fork(self) -> ParseContext:
        return ParseContext(path=self.path, issues=[])

    @property
    def issue_count(self) -> int:
        return len(self.issues)

    def add_issue(self, code: IssueCode, message: str, **details: Any) -> None:
        self.issues.append(Issue(code=code, message=message, path=self.path, details=details))

    def refinement(self) -> RefinementContext:
        """Build the context handed to user callables."""
        return RefinementContext(self)


class RefinementContext:
    """Issue-reporting handle passed to user functions.

    Example:
        def parse_float(value: str, ctx: RefinementContext) -> float:
            try:
                return float(value)
            except ValueError:
                ctx.add_issue("invalid float")
                return math.nan
    """

    __slots__ = ("_ctx",)

    def __init__(self, ctx: ParseContext) -> None:
        self._ctx = ctx

    @property
    def path(self) -> tuple[PathSegment, ...]:
        """Location of the value being processed."""
        return self._ctx.path

    def add_issue(
        self,
        message: str,
        *,
        code: IssueCode = IssueCode.CUSTOM,
        path: Sequence[PathSegment] = (),
        **details: Any,
    ) -> None:
        """Register a validation failure without aborting the call.

        Args:
            message: Human-readable description
            code: Issue code (CUSTOM unless the caller mimics a built-in check)
            path: Extra segments appended to the current path
            **details: Stored on Issue.details
        """
        self._ctx.issues.append(
            Issue(code=code, message=message, path=(*self._ctx.path, *path), details=details)
        )
