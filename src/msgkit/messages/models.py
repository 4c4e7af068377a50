"""Runtime message types produced by the category type generator.

A MessageType groups the cases of one (owner, category) pair. Union
categories (exec, query, privileged, reply) encode externally tagged:

    {"transfer_owner": {"new_owner": "alice"}}

Single-operation categories (init, migrate) encode as a plain record:

    {"admins": ["alice"]}

Usage:
    exec_msg = compiled.interfaces["Ownable"].messages[Category.EXEC]
    message = exec_msg.TransferOwner(new_owner="alice")
    raw = exec_msg.to_json(message)
    assert exec_msg.decode(raw) == message
    exec_msg.dispatch(contract, ctx, message)
"""

from collections.abc import Callable, Iterator, Mapping
from types import MappingProxyType
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic_core import from_json, to_json

from msgkit.core.generics import GenericUsage
from msgkit.core.schema.models import Category, GenericParameter, Operation, WherePredicate
from msgkit.errors import DecodeError
from msgkit.messages.dispatch import ErrorConverter, invoke


class MessageCase(BaseModel):
    """Base of every generated case model.

    Fields are the operation's parameters in declaration order; each field's
    alias is the parameter's wire name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    wire_name: ClassVar[str] = ""
    case_name: ClassVar[str] = ""
    operation: ClassVar["Operation | None"] = None
    message_type: ClassVar["MessageType | None"] = None
    field_names: ClassVar[tuple[str, ...]] = ()

    def field_values(self) -> tuple[Any, ...]:
        """Field values in parameter declaration order."""
        return tuple(getattr(self, name) for name in self.field_names)

    def encode(self) -> Any:
        return self._owner_type().encode(self)

    def to_json(self) -> bytes:
        return self._owner_type().to_json(self)

    def dispatch(self, receiver: Any, ctx: Any, convert_error: ErrorConverter | None = None) -> Any:
        return self._owner_type().dispatch(receiver, ctx, self, convert_error)

    @classmethod
    def _owner_type(cls) -> "MessageType":
        if cls.message_type is None:
            raise TypeError(f"{cls.__name__} is not bound to a message type")
        return cls.message_type


class LenientMessageCase(MessageCase):
    """Case base that ignores unknown fields when decoding."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)


def load_payload(raw: Any) -> Any:
    """Parse JSON text or bytes; already-decoded payloads pass through.

    Raises:
        DecodeError: If the text is not valid JSON.
    """
    if isinstance(raw, (str, bytes, bytearray)):
        try:
            return from_json(raw)
        except ValueError as e:
            raise DecodeError(f"invalid JSON: {e}") from e
    return raw


def _describe_errors(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        loc = ".".join(str(segment) for segment in item["loc"])
        parts.append(f"{loc}: {item['msg']}" if loc else item["msg"])
    return "; ".join(parts)


class MessageType:
    """Generated message type for one owner and category.

    Cases are reachable as attributes by their CamelCase name and through
    `case(wire_name)`. For single-operation categories the type is callable
    and builds its only record.

    Attributes:
        name: Generated type name, e.g. "OwnableExecMsg".
        category: Category of every case.
        owner: Interface or contract the type was generated from.
        error: Declared Error type name of the owner.
        generics: Generics referenced by this category, with bounds.
        unused_generics: Declared generics this category does not reference.
        where: Where predicates kept for this category.
        bindings: Placeholder -> Python type substitutions applied to the cases.
    """

    def __init__(
        self,
        *,
        name: str,
        category: Category,
        owner: str,
        error: str,
        cases: list[type[MessageCase]],
        usage: GenericUsage,
        bindings: Mapping[str, Any] | None = None,
        rebuild: Callable[[dict[str, Any]], "MessageType | None"] | None = None,
    ) -> None:
        self.name = name
        self.category = category
        self.owner = owner
        self.error = error
        self.generics: tuple[GenericParameter, ...] = usage.used
        self.unused_generics: tuple[GenericParameter, ...] = usage.unused
        self.where: tuple[WherePredicate, ...] = usage.where
        self.bindings: Mapping[str, Any] = MappingProxyType(dict(bindings or {}))
        self._cases: dict[str, type[MessageCase]] = {case.wire_name: case for case in cases}
        self._by_case_name: dict[str, type[MessageCase]] = {case.case_name: case for case in cases}
        self._rebuild = rebuild
        for case in cases:
            case.message_type = self

    def __repr__(self) -> str:
        if not self.bindings:
            return f"<MessageType {self.name}>"
        bound = ", ".join(f"{k}={getattr(v, '__name__', v)}" for k, v in self.bindings.items())
        return f"<MessageType {self.name}[{bound}]>"

    def __getattr__(self, name: str) -> type[MessageCase]:
        if name.startswith("_"):
            raise AttributeError(name)
        cases = self.__dict__.get("_by_case_name", {})
        if name in cases:
            return cases[name]
        raise AttributeError(f"{self.name} has no case `{name}`")

    def __iter__(self) -> Iterator[type[MessageCase]]:
        return iter(self._cases.values())

    def __len__(self) -> int:
        return len(self._cases)

    def __contains__(self, message: object) -> bool:
        return isinstance(message, MessageCase) and type(message).message_type is self

    @property
    def single(self) -> bool:
        return self.category.single

    @property
    def cases(self) -> tuple[type[MessageCase], ...]:
        return tuple(self._cases.values())

    def messages(self) -> tuple[str, ...]:
        """Wire names of every case, in declaration order."""
        return tuple(self._cases)

    def case(self, wire_name: str) -> type[MessageCase]:
        """Look up a case by wire name.

        Raises:
            KeyError: If no case has this wire name.
        """
        return self._cases[wire_name]

    @property
    def record(self) -> type[MessageCase]:
        """The only case of a single-operation category."""
        if not self.single:
            raise TypeError(f"{self.name} is a union of {len(self)} cases, not a record")
        return next(iter(self._cases.values()))

    def __call__(self, *args: Any, **kwargs: Any) -> MessageCase:
        record = self.record
        if len(args) > len(record.field_names):
            raise TypeError(
                f"{self.name} takes {len(record.field_names)} positional arguments, got {len(args)}"
            )
        kwargs.update(zip(record.field_names, args))
        return record(**kwargs)

    # Encoding

    def _check_member(self, message: Any) -> MessageCase:
        if message not in self:
            raise TypeError(f"{type(message).__name__} is not a case of {self.name}")
        return message

    def encode(self, message: MessageCase) -> Any:
        """Wire representation as plain JSON-compatible data."""
        payload = self._check_member(message).model_dump(mode="json", by_alias=True)
        if self.single:
            return payload
        return {message.wire_name: payload}

    def to_json(self, message: MessageCase) -> bytes:
        return to_json(self.encode(message))

    def decode(self, raw: Any) -> MessageCase:
        """Decode a wire payload into one of this type's cases.

        Args:
            raw: JSON text or bytes, or already-parsed JSON data.

        Raises:
            DecodeError: If the payload names no known case or its fields
                do not validate.
        """
        payload = load_payload(raw)
        if self.single:
            return self._validate(self.record, payload)

        expected = self._expected()
        if not isinstance(payload, Mapping) or len(payload) != 1:
            raise DecodeError(f"expected an object with exactly one key, {expected}")
        ((key, body),) = payload.items()
        case = self._cases.get(key)
        if case is None:
            raise DecodeError(f"unknown variant `{key}`, {expected}")
        return self._validate(case, body)

    def _expected(self) -> str:
        if not self._cases:
            return "there are no variants"
        return "expected one of " + ", ".join(f"`{name}`" for name in self._cases)

    def _validate(self, case: type[MessageCase], body: Any) -> MessageCase:
        try:
            return case.model_validate(body)
        except ValidationError as e:
            raise DecodeError(f"invalid `{case.wire_name}` message: {_describe_errors(e)}") from e

    # Dispatch

    def dispatch(
        self,
        receiver: Any,
        ctx: Any,
        message: MessageCase,
        convert_error: ErrorConverter | None = None,
    ) -> Any:
        """Invoke the receiver's method for the message's operation.

        Query results are returned as JSON bytes; every other category
        returns the method's result unchanged.
        """
        self._check_member(message)
        return invoke(
            receiver,
            ctx,
            message.operation,
            message.field_values(),
            serialize=self.category is Category.QUERY,
            convert_error=convert_error,
        )

    # Generics

    def specialize(self, bindings: Mapping[str, Any] | None = None, **types: Any) -> "MessageType":
        """Regenerate the type with placeholders bound to concrete Python types.

        Raises:
            TypeError: If a name is not a generic parameter of this type.
        """
        extra = {**(bindings or {}), **types}
        known = {g.name for g in self.generics}
        for name in extra:
            if name not in known:
                raise TypeError(f"`{name}` is not a generic parameter of {self.name}")
        if not extra:
            return self
        if self._rebuild is None:
            raise TypeError(f"{self.name} cannot be specialized")
        specialized = self._rebuild({**self.bindings, **extra})
        if specialized is None:
            raise TypeError(f"{self.name} cannot be specialized")
        return specialized

    def __getitem__(self, args: Any) -> "MessageType":
        if not isinstance(args, tuple):
            args = (args,)
        names = [g.name for g in self.generics]
        if len(args) != len(names):
            raise TypeError(f"{self.name} takes {len(names)} type arguments, got {len(args)}")
        return self.specialize(dict(zip(names, args)))
