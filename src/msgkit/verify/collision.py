"""Wire-name collision verifier.

Every owner (composed interface or the contract itself) contributes a
sequence of wire names to one entrypoint category. No name may appear in two
sequences. Instead of comparing every pair of owners, the verifier walks all
sequences at once in lexicographic order, like a k-way merge:

    1. among the still active cursors pick the smallest current name
       (ties go to the earlier owner),
    2. compare it with the current name of every other active cursor,
    3. advance the winning cursor by one and repeat.

Two equal names are always current at the same time before either cursor
moves past them, so a single pass finds any collision.

The check needs the wire names only and runs before any message type is
combined, so a colliding schema never produces an entrypoint.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from msgkit.core.schema.models import COMPOSABLE_CATEGORIES, Category, Location, Schema
from msgkit.errors import CollisionError, SchemaError

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Cursor:
    """Position in one owner's sorted wire names."""

    names: list[str]
    pos: int = field(default=0)

    @property
    def finished(self) -> bool:
        return self.pos >= len(self.names)

    @property
    def current(self) -> str:
        return self.names[self.pos]


def find_collision(sequences: Sequence[Sequence[str]]) -> tuple[str, int, int] | None:
    """Find a wire name shared by two sequences.

    Args:
        sequences: Wire names per owner, in any order.

    Returns:
        (wire_name, first_index, second_index) with first_index < second_index,
        or None when all sequences are disjoint.
    """
    cursors = [_Cursor(sorted(names)) for names in sequences]
    while True:
        active = [i for i, cursor in enumerate(cursors) if not cursor.finished]
        if not active:
            return None

        pivot = min(active, key=lambda i: (cursors[i].current, i))
        name = cursors[pivot].current
        for other in active:
            if other != pivot and cursors[other].current == name:
                return name, min(pivot, other), max(pivot, other)
        cursors[pivot].pos += 1


def verify_no_collisions(
    sequences: Sequence[tuple[str, Sequence[str]]],
    category: Category | None = None,
    location: Location | None = None,
) -> None:
    """Fail when two owners contribute the same wire name.

    Args:
        sequences: (owner name, wire names) pairs in declaration order.
        category: Category being verified, used in the diagnostic.
        location: Declaration the diagnostic points at.

    Raises:
        CollisionError: Naming the colliding wire name and both owners, the
            earlier declared owner first.
    """
    found = find_collision([names for _, names in sequences])
    if found is None:
        return
    wire_name, first, second = found
    raise CollisionError(
        wire_name,
        sequences[first][0],
        sequences[second][0],
        category=category,
        location=location,
    )


def verify_schema(schema: Schema) -> None:
    """Statically verify every contract of a schema.

    Only wire names are compared; no type is resolved and no message type is
    generated.

    Raises:
        CollisionError: On the first colliding wire name.
        SchemaError: If a contract composes an undeclared interface.
    """
    for contract in schema.contracts:
        for category in COMPOSABLE_CATEGORIES:
            sequences: list[tuple[str, Sequence[str]]] = []
            for use in contract.uses:
                try:
                    iface = schema.interface(use.interface)
                except KeyError:
                    raise SchemaError(
                        f"Interface `{use.interface}` is not declared", use.location
                    ) from None
                sequences.append((iface.name, iface.messages(category)))
            sequences.append((contract.name, contract.messages(category)))
            verify_no_collisions(sequences, category, contract.location)
        logger.debug("No wire name collisions in contract %s", contract.name)
