"""Compiler facade: schema in, message and entrypoint types out.

Usage:
    compiled = compile_schema(load_schema("registry.toml"), types={"Member": Member})

    registry = compiled.contracts["Registry"]
    message = registry.decode(Category.EXEC, b'{"transfer_owner": {"new_owner": "alice"}}')
    registry.dispatch(Category.EXEC, contract, ctx, message)
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any

from msgkit.config import CompilerSettings
from msgkit.core.schema.models import (
    COMPOSABLE_CATEGORIES,
    Category,
    Contract,
    Interface,
    InterfaceUse,
    Operation,
    Schema,
)
from msgkit.core.schema.parser import load_schema, parse_schema
from msgkit.core.types import TypeRegistry, TypeSyntaxError, UnknownTypeError
from msgkit.errors import SchemaError
from msgkit.glue.combinator import combine
from msgkit.glue.models import EntrypointMessage, EntrypointType
from msgkit.messages.dispatch import ErrorConverter
from msgkit.messages.generator import CategoryTypeGenerator
from msgkit.messages.models import MessageCase, MessageType
from msgkit.verify.collision import verify_schema

logger = logging.getLogger(__name__)

Entrypoint = MessageType | EntrypointType


@dataclass(frozen=True)
class CompiledInterface:
    """Message types generated for one interface, by category."""

    interface: Interface
    messages: Mapping[Category, MessageType]

    @property
    def name(self) -> str:
        return self.interface.name

    def __getitem__(self, category: Category) -> MessageType:
        return self.messages[category]


@dataclass(frozen=True)
class CompiledOperation:
    """An operation reachable through a contract entrypoint.

    Attributes:
        operation: The declared operation.
        variant: Entrypoint variant tag, or None for a contract that composes
            no interface.
        message_type: Message type holding the operation's case.
    """

    operation: Operation
    variant: str | None
    message_type: MessageType

    @property
    def case(self) -> type[MessageCase]:
        return self.message_type.case(self.operation.wire_name)


@dataclass(frozen=True)
class CompiledContract:
    """Everything generated for one contract.

    Attributes:
        contract: The declared contract.
        own: The contract's own message types by category.
        composed: Specialized interface message types, by variant tag and category.
        entrypoints: Entrypoint per category the contract can receive.
        registry: Type registry the contract was compiled against.
    """

    contract: Contract
    own: Mapping[Category, MessageType]
    composed: Mapping[str, Mapping[Category, MessageType]]
    entrypoints: Mapping[Category, Entrypoint]
    registry: TypeRegistry = field(repr=False)

    @property
    def name(self) -> str:
        return self.contract.name

    def entrypoint(self, category: Category) -> Entrypoint:
        """Entrypoint of a category.

        Raises:
            KeyError: If the contract receives no messages of this category.
        """
        try:
            return self.entrypoints[category]
        except KeyError:
            raise KeyError(f"{self.name} has no {category.value} entrypoint") from None

    def operations(self, category: Category) -> Iterator[CompiledOperation]:
        """Operations reachable through a category, in entrypoint order."""
        entry = self.entrypoints.get(category)
        if entry is None:
            return
        if isinstance(entry, MessageType):
            for case in entry:
                yield CompiledOperation(case.operation, None, entry)
            return
        for variant in entry:
            for case in variant.message_type:
                yield CompiledOperation(case.operation, variant.tag, variant.message_type)

    def response_type(self, op: CompiledOperation) -> Any:
        """Python type a query response decodes into; Any when unresolvable.

        Placeholders are the owner's generics, bound as the operation's
        message type was specialized.
        """
        message_type = op.message_type
        placeholders = {g.name for g in (*message_type.generics, *message_type.unused_generics)}
        return self.registry.resolve_lenient(
            op.operation.response_type, placeholders, message_type.bindings
        )

    def decode(self, category: Category, raw: Any) -> MessageCase | EntrypointMessage:
        return self.entrypoint(category).decode(raw)

    def dispatch(
        self,
        category: Category,
        receiver: Any,
        ctx: Any,
        message: MessageCase | EntrypointMessage,
        convert_error: ErrorConverter | None = None,
    ) -> Any:
        entry = self.entrypoint(category)
        if isinstance(message, EntrypointMessage) and isinstance(entry, MessageType):
            message = message.message
        return entry.dispatch(receiver, ctx, message, convert_error)

    def handle(
        self,
        category: Category,
        receiver: Any,
        ctx: Any,
        raw: Any,
        convert_error: ErrorConverter | None = None,
    ) -> Any:
        """Decode a raw payload and dispatch it."""
        return self.dispatch(category, receiver, ctx, self.decode(category, raw), convert_error)


@dataclass(frozen=True)
class CompiledSchema:
    """Output of one build."""

    schema: Schema
    interfaces: Mapping[str, CompiledInterface]
    contracts: Mapping[str, CompiledContract]


class Compiler:
    """Compiles schemas against a type registry.

    Args:
        types: Type registry, or a name to Python type mapping.
        settings: Compiler settings.
    """

    def __init__(
        self,
        types: TypeRegistry | Mapping[str, Any] | None = None,
        settings: CompilerSettings | None = None,
    ) -> None:
        self._registry = types if isinstance(types, TypeRegistry) else TypeRegistry(types)
        self._settings = settings or CompilerSettings()

    def compile(self, schema: Schema) -> CompiledSchema:
        """Generate every interface's and contract's types.

        Wire-name collisions are verified over the whole schema first, so a
        colliding schema reports the collision before any other problem.

        Raises:
            SchemaError: On the first violation; nothing is returned then.
        """
        registry = self._registry.merged(schema.types)
        generator = CategoryTypeGenerator(registry, self._settings)

        if self._settings.verify_collisions:
            verify_schema(schema)

        interfaces = {
            iface.name: self._compile_interface(iface, generator) for iface in schema.interfaces
        }
        contracts = {
            item.name: self._compile_contract(item, interfaces, generator, registry)
            for item in schema.contracts
        }
        logger.debug(
            "Compiled %d interface(s) and %d contract(s)", len(interfaces), len(contracts)
        )
        return CompiledSchema(
            schema=schema,
            interfaces=MappingProxyType(interfaces),
            contracts=MappingProxyType(contracts),
        )

    def _compile_interface(
        self, iface: Interface, generator: CategoryTypeGenerator
    ) -> CompiledInterface:
        messages: dict[Category, MessageType] = {}
        for category in COMPOSABLE_CATEGORIES:
            message_type = generator.generate(iface, category)
            if message_type is not None:
                messages[category] = message_type
        return CompiledInterface(iface, MappingProxyType(messages))

    def _compile_contract(
        self,
        contract: Contract,
        interfaces: Mapping[str, CompiledInterface],
        generator: CategoryTypeGenerator,
        registry: TypeRegistry,
    ) -> CompiledContract:
        own: dict[Category, MessageType] = {}
        for category in Category:
            message_type = generator.generate(contract, category)
            if message_type is not None:
                own[category] = message_type

        composed: dict[str, dict[Category, MessageType]] = {}
        for use in contract.uses:
            if use.interface not in interfaces:
                raise SchemaError(f"Interface `{use.interface}` is not declared", use.location)
            composed[use.variant] = self._specialize(
                use, interfaces[use.interface], contract, registry
            )

        entrypoints: dict[Category, Entrypoint] = {Category.INIT: own[Category.INIT]}
        if Category.MIGRATE in own:
            entrypoints[Category.MIGRATE] = own[Category.MIGRATE]
        if len(own[Category.REPLY]):
            entrypoints[Category.REPLY] = own[Category.REPLY]
        for category in COMPOSABLE_CATEGORIES:
            if not contract.uses:
                entrypoints[category] = own[category]
                continue
            entrypoints[category] = combine(
                contract,
                category,
                [(use, composed[use.variant][category]) for use in contract.uses],
                own=own[category],
                settings=self._settings,
            )

        logger.debug("Compiled contract %s: %s", contract.name, [c.value for c in entrypoints])
        return CompiledContract(
            contract=contract,
            own=MappingProxyType(own),
            composed=MappingProxyType(
                {tag: MappingProxyType(types) for tag, types in composed.items()}
            ),
            entrypoints=MappingProxyType(entrypoints),
            registry=registry,
        )

    def _specialize(
        self,
        use: InterfaceUse,
        compiled: CompiledInterface,
        contract: Contract,
        registry: TypeRegistry,
    ) -> dict[Category, MessageType]:
        placeholders = contract.generic_names()
        bindings: dict[str, Any] = {}
        for name, ref in use.generic_args:
            try:
                bindings[name] = registry.resolve(ref, placeholders)
            except (UnknownTypeError, TypeSyntaxError) as e:
                raise SchemaError(
                    f"{e} in generic argument `{name}` of `{use.interface}`", use.location
                ) from e

        specialized: dict[Category, MessageType] = {}
        for category, message_type in compiled.messages.items():
            used = {g.name for g in message_type.generics}
            relevant = {name: tp for name, tp in bindings.items() if name in used}
            specialized[category] = message_type.specialize(relevant)
        return specialized


def compile_schema(
    schema: Schema | Mapping[str, Any] | str | Path,
    types: TypeRegistry | Mapping[str, Any] | None = None,
    settings: CompilerSettings | None = None,
) -> CompiledSchema:
    """Compile a schema, a declaration document or a declaration file.

    Args:
        schema: Parsed schema, declaration mapping, or path to a declaration file.
        types: Type registry or name to Python type mapping.
        settings: Compiler settings; defaults to environment configuration.

    Raises:
        SchemaError: If the declarations are invalid or cannot be compiled.
    """
    if isinstance(schema, (str, Path)):
        schema = load_schema(schema)
    elif not isinstance(schema, Schema):
        schema = parse_schema(schema)
    return Compiler(types, settings).compile(schema)
