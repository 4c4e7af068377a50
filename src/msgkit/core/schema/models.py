"""Schema model: interfaces, contracts and their operations.

Instances are built once by the parser (or the decorator front-end) and
never mutated afterwards. All code generation is a pure function of them.
"""

from __future__ import annotations

import re
from collections.abc import Collection
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from msgkit.core.naming import to_camel_case, to_snake_case
from msgkit.core.types import TypeRef

_IDENT = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class Category(Enum):
    """Fixed message categories an operation can belong to."""

    INIT = "init"
    EXEC = "exec"
    QUERY = "query"
    PRIVILEGED = "privileged"
    MIGRATE = "migrate"
    REPLY = "reply"

    @property
    def single(self) -> bool:
        """Single-operation categories generate a record instead of a union."""
        return self in (Category.INIT, Category.MIGRATE)

    @property
    def type_suffix(self) -> str:
        return f"{self.value.capitalize()}Msg"

    @property
    def composable(self) -> bool:
        """Whether interfaces may contribute operations of this category."""
        return self in COMPOSABLE_CATEGORIES

    @classmethod
    def from_tag(cls, tag: str) -> Category:
        """Look up a category by its declaration tag or one of its aliases.

        Raises:
            ValueError: If the tag is not recognized.
        """
        try:
            return _CATEGORY_TAGS[tag.strip().lower()]
        except KeyError:
            known = ", ".join(sorted(_CATEGORY_TAGS))
            raise ValueError(
                f"unknown message category `{tag}`, expected one of: {known}"
            ) from None


_CATEGORY_TAGS: dict[str, Category] = {
    "init": Category.INIT,
    "instantiate": Category.INIT,
    "exec": Category.EXEC,
    "execute": Category.EXEC,
    "query": Category.QUERY,
    "privileged": Category.PRIVILEGED,
    "sudo": Category.PRIVILEGED,
    "migrate": Category.MIGRATE,
    "reply": Category.REPLY,
}

COMPOSABLE_CATEGORIES = (Category.EXEC, Category.QUERY, Category.PRIVILEGED)
"""Categories merged across interfaces into one entrypoint type."""


@dataclass(frozen=True, slots=True)
class Location:
    """Where a declaration came from.

    Attributes:
        source: File name, or a pseudo-name such as "<document>".
        path: Position inside a declaration document, e.g. "interfaces[0].operations[2]".
        line: Line number when the source is a Python file.
    """

    source: str
    path: str = ""
    line: int | None = None

    def __str__(self) -> str:
        if self.line is not None:
            return f"{self.source}:{self.line}"
        if self.path:
            return f"{self.source}:{self.path}"
        return self.source

    def child(self, segment: str) -> Location:
        """Location of a nested document node."""
        if segment.startswith("[") or not self.path:
            path = f"{self.path}{segment}"
        else:
            path = f"{self.path}.{segment}"
        return Location(self.source, path, self.line)


@dataclass(frozen=True, slots=True)
class GenericParameter:
    """Symbolic type placeholder with verbatim capability bounds."""

    name: str
    bounds: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.name}: {' + '.join(self.bounds)}" if self.bounds else self.name


@dataclass(frozen=True, slots=True)
class WherePredicate:
    """Where-clause predicate such as `T: Clone + 'static`."""

    subject: str
    bounds: tuple[str, ...] = ()

    def __str__(self) -> str:
        return f"{self.subject}: {' + '.join(self.bounds)}" if self.bounds else self.subject

    @classmethod
    def parse(cls, text: str) -> WherePredicate:
        """Parse `Subject: Bound + Bound`.

        Raises:
            ValueError: If the subject is empty.
        """
        subject, _, bounds = text.partition(":")
        subject = subject.strip()
        if not subject:
            raise ValueError(f"where predicate `{text}` has no subject")
        parts = tuple(part.strip() for part in bounds.split("+") if part.strip())
        return cls(subject=subject, bounds=parts)

    def mentions(self, declared: Collection[str]) -> set[str]:
        """Declared placeholders mentioned by the subject or any bound."""
        return {name for name in _IDENT.findall(str(self)) if name in declared}


@dataclass(frozen=True, slots=True)
class Parameter:
    """Named operation parameter; declaration order is wire order."""

    name: str
    type: TypeRef

    @property
    def wire_name(self) -> str:
        return to_snake_case(self.name)


@dataclass(frozen=True, slots=True)
class Operation:
    """Single declared operation.

    Attributes:
        name: Source identifier; also the implementation method name.
        category: Category the operation belongs to.
        params: Parameters in declaration order.
        returns: Declared return type, if any.
        response: Explicit query response type overriding `returns`.
        doc: Documentation carried over to the generated case.
        location: Where the operation was declared.
    """

    name: str
    category: Category
    params: tuple[Parameter, ...] = ()
    returns: TypeRef | None = None
    response: TypeRef | None = None
    doc: str | None = None
    location: Location | None = field(default=None, compare=False)

    @property
    def wire_name(self) -> str:
        return to_snake_case(self.name)

    @property
    def case_name(self) -> str:
        return to_camel_case(self.name)

    @property
    def method_name(self) -> str:
        return self.name

    @property
    def response_type(self) -> TypeRef | None:
        """Type a query response decodes into: the override, else the return type."""
        return self.response if self.response is not None else self.returns


class _OperationOwner:
    """Shared accessors for interfaces and contracts."""

    name: str
    generics: tuple[GenericParameter, ...]
    operations: tuple[Operation, ...]

    def operations_for(self, category: Category) -> tuple[Operation, ...]:
        """Operations of one category in declaration order."""
        return tuple(op for op in self.operations if op.category == category)

    def messages(self, category: Category) -> tuple[str, ...]:
        """Wire names of one category in declaration order."""
        return tuple(op.wire_name for op in self.operations_for(category))

    def generic_names(self) -> frozenset[str]:
        return frozenset(g.name for g in self.generics)

    def type_name(self, category: Category) -> str:
        """Name of the message type generated for a category."""
        return f"{self.name}{category.type_suffix}"


@dataclass(frozen=True)
class Interface(_OperationOwner):
    """Named, possibly generic, set of operations with one declared Error type."""

    name: str
    error: str
    generics: tuple[GenericParameter, ...] = ()
    where: tuple[WherePredicate, ...] = ()
    operations: tuple[Operation, ...] = ()
    doc: str | None = None
    location: Location | None = field(default=None, compare=False)


@dataclass(frozen=True)
class InterfaceUse:
    """An interface composed by a contract under a variant tag.

    Attributes:
        interface: Name of the composed interface.
        variant: Tag of the interface's case in the entrypoint type.
        generic_args: Interface placeholder -> type descriptor, in declaration order.
    """

    interface: str
    variant: str
    generic_args: tuple[tuple[str, TypeRef], ...] = ()
    location: Location | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Contract(_OperationOwner):
    """Concrete implementation composing interfaces plus its own operations."""

    name: str
    error: str
    generics: tuple[GenericParameter, ...] = ()
    where: tuple[WherePredicate, ...] = ()
    operations: tuple[Operation, ...] = ()
    uses: tuple[InterfaceUse, ...] = ()
    doc: str | None = None
    location: Location | None = field(default=None, compare=False)

    @property
    def init(self) -> Operation:
        """The contract's single Init operation."""
        return self.operations_for(Category.INIT)[0]

    @property
    def migrate(self) -> Operation | None:
        ops = self.operations_for(Category.MIGRATE)
        return ops[0] if ops else None


@dataclass(frozen=True)
class Schema:
    """Every interface and contract available to one build.

    Attributes:
        interfaces: Interfaces in declaration order.
        contracts: Contracts in declaration order.
        types: Python types discovered by the decorator front-end, by name.
    """

    interfaces: tuple[Interface, ...] = ()
    contracts: tuple[Contract, ...] = ()
    types: dict[str, Any] = field(default_factory=dict, compare=False)

    def interface(self, name: str) -> Interface:
        """Look up an interface by name.

        Raises:
            KeyError: If no interface has this name.
        """
        for iface in self.interfaces:
            if iface.name == name:
                return iface
        raise KeyError(name)

    def contract(self, name: str) -> Contract:
        """Look up a contract by name.

        Raises:
            KeyError: If no contract has this name.
        """
        for item in self.contracts:
            if item.name == name:
                return item
        raise KeyError(name)
