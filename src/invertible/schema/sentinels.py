"""Sentinel values used while a schema tree runs.

MISSING distinguishes "key absent from the input mapping" from "key
present with value None". Object nodes pass MISSING to a field schema
when the key is absent, and omit the key from their output when the
field schema hands MISSING back (optional, default, any and unknown
accept it).

INVALID is what a node returns when it could not produce an output at
all. A node returning INVALID has always reported at least one issue.

Comparison should always use `is` identity, never equality.
"""

from typing import Final


class MissingSentinel:
    """Singleton marking an absent mapping key. Use the MISSING instance."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<MISSING>"

    def __bool__(self) -> bool:
        return False


class InvalidSentinel:
    """Singleton marking a failed node result. Use the INVALID instance."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "<INVALID>"


MISSING: Final[MissingSentinel] = MissingSentinel()
INVALID: Final[InvalidSentinel] = InvalidSentinel()


def type_name(value: object) -> str:
    """Name used for the "received" side of type issues."""
    if value is MISSING:
        return "missing"
    if value is None:
        return "none"
    return type(value).__name__
