"""Error taxonomy shared by the compiler and the generated artifacts.

Build-time failures derive from SchemaError and abort the build of the
offending contract. Runtime failures of generated types derive from StdError,
the base runtime error kind every declared Error type must be convertible from.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from msgkit.core.schema.models import Category, Location


class MsgkitError(Exception):
    """Root of all errors raised by msgkit."""

    pass


class SchemaError(MsgkitError):
    """Raised when declarations cannot be turned into a valid build.

    Attributes:
        message: Human readable description of the problem.
        location: Declaration the problem points at, if known.
        hint: Optional note, e.g. where a conflicting declaration lives.
        hint_location: Location the hint refers to.
    """

    def __init__(
        self,
        message: str,
        location: Location | None = None,
        *,
        hint: str | None = None,
        hint_location: Location | None = None,
    ) -> None:
        self.message = message
        self.location = location
        self.hint = hint
        self.hint_location = hint_location
        super().__init__(self._render())

    def _render(self) -> str:
        text = f"{self.location}: {self.message}" if self.location else self.message
        if self.hint:
            note = f"{self.hint_location}: {self.hint}" if self.hint_location else self.hint
            text += f"\n  note: {note}"
        return text


class CollisionError(SchemaError):
    """Raised when two owners contribute the same wire name to one entrypoint."""

    def __init__(
        self,
        wire_name: str,
        first: str,
        second: str,
        category: Category | None = None,
        location: Location | None = None,
    ) -> None:
        self.wire_name = wire_name
        self.owners = (first, second)
        self.category = category
        kind = f" {category.value}" if category is not None else ""
        super().__init__(
            f"Message `{wire_name}` overlaps between `{first}` and `{second}`{kind} messages",
            location,
        )


class StdError(MsgkitError):
    """Base runtime error kind raised by generated message types."""

    pass


class SerializationError(StdError):
    """Raised when a query result cannot be encoded to the wire format."""

    pass


class DecodeError(StdError, ValueError):
    """Raised when a raw payload does not decode into a message type.

    Attributes:
        attempts: For entrypoint decoding, one (variant, reason) pair per
            composed message type in the order they were attempted.
    """

    def __init__(self, message: str, attempts: Sequence[tuple[str, str]] = ()) -> None:
        self.attempts = tuple(attempts)
        super().__init__(message)


class DispatchError(StdError):
    """Raised when a receiver does not implement the operation being dispatched."""

    pass
