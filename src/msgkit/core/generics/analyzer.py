"""Generic usage analysis for one category of operations.

Two passes over the selected operations: the first collects every declared
placeholder referenced by a parameter, return or response type; the second
keeps a where-predicate only when each placeholder it mentions was collected.

Usage:
    usage = analyze_generics(iface.generics, iface.where, iface.operations_for(Category.EXEC))
    usage.used      # generics referenced by exec operations, declaration order
    usage.where     # predicates over used generics only
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from msgkit.core.schema.models import GenericParameter, Operation, WherePredicate
from msgkit.core.types import TypeRef


@dataclass(frozen=True, slots=True)
class GenericUsage:
    """Partition of declared generics for one generated type.

    Attributes:
        used: Generics referenced by the selected operations, with their bounds.
        unused: Declared generics no selected operation references.
        where: Predicates whose placeholders are all used.
    """

    used: tuple[GenericParameter, ...] = ()
    unused: tuple[GenericParameter, ...] = ()
    where: tuple[WherePredicate, ...] = ()

    def used_names(self) -> tuple[str, ...]:
        return tuple(g.name for g in self.used)


def referenced_types(operations: Iterable[Operation]) -> Iterable[TypeRef]:
    """Every type descriptor an operation contributes: parameters, return, response."""
    for op in operations:
        for param in op.params:
            yield param.type
        if op.returns is not None:
            yield op.returns
        if op.response is not None:
            yield op.response


def collect_placeholders(refs: Iterable[TypeRef], declared: Iterable[str]) -> set[str]:
    """Declared placeholders referenced anywhere in the given descriptors."""
    names = frozenset(declared)
    found: set[str] = set()
    for ref in refs:
        found |= ref.placeholders(names)
    return found


def analyze_generics(
    generics: Sequence[GenericParameter],
    where: Sequence[WherePredicate],
    operations: Sequence[Operation],
) -> GenericUsage:
    """Partition generics into used and unused for the given operations.

    Args:
        generics: Generics declared on the interface or contract.
        where: Where-clause predicates declared alongside them.
        operations: Operations of the category being generated.

    Returns:
        GenericUsage with declaration order preserved in every tuple.
    """
    declared = [g.name for g in generics]
    referenced = collect_placeholders(referenced_types(operations), declared)

    used = tuple(g for g in generics if g.name in referenced)
    unused = tuple(g for g in generics if g.name not in referenced)
    kept = tuple(pred for pred in where if pred.mentions(declared) <= referenced)
    return GenericUsage(used=used, unused=unused, where=kept)
