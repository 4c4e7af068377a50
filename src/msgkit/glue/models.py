"""Entrypoint types: one tagged union of message types per category.

An entrypoint value wraps a message of one composed message type under its
variant tag. On the wire the tag is invisible: an entrypoint message encodes
exactly as the message it wraps, and decoding tries each variant's message
type in declaration order until one succeeds.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from pydantic_core import to_json

from msgkit.core.schema.models import Category
from msgkit.errors import DecodeError
from msgkit.messages.dispatch import ErrorConverter
from msgkit.messages.models import MessageCase, MessageType, load_payload


@dataclass(frozen=True, slots=True)
class EntrypointVariant:
    """One case of an entrypoint type.

    Attributes:
        tag: Variant tag declared on the contract, or the contract name for
            the contract's own operations.
        owner: Interface or contract the wrapped message type belongs to.
        message_type: Message type wrapped by this case.
    """

    tag: str
    owner: str
    message_type: MessageType


@dataclass(frozen=True, slots=True)
class EntrypointMessage:
    """Decoded entrypoint value: a variant tag plus the wrapped message."""

    variant: str
    message: MessageCase
    entrypoint: EntrypointType | None = field(default=None, compare=False, repr=False)

    def encode(self) -> Any:
        return self.message.encode()

    def dispatch(self, receiver: Any, ctx: Any, convert_error: ErrorConverter | None = None) -> Any:
        if self.entrypoint is None:
            return self.message.dispatch(receiver, ctx, convert_error)
        return self.entrypoint.dispatch(receiver, ctx, self, convert_error)


class EntrypointType:
    """Combined message type for one category of a contract.

    Attributes:
        name: Generated type name, e.g. "ExecMsg".
        category: Category of every wrapped message type.
        contract: Name of the contract this entrypoint belongs to.
        variants: Cases in decoding order.
    """

    def __init__(
        self,
        *,
        name: str,
        category: Category,
        contract: str,
        variants: list[EntrypointVariant],
    ) -> None:
        self.name = name
        self.category = category
        self.contract = contract
        self.variants: tuple[EntrypointVariant, ...] = tuple(variants)
        self._by_tag = {variant.tag: variant for variant in self.variants}

    def __repr__(self) -> str:
        tags = ", ".join(variant.tag for variant in self.variants)
        return f"<EntrypointType {self.contract}.{self.name} [{tags}]>"

    def __iter__(self) -> Iterator[EntrypointVariant]:
        return iter(self.variants)

    def __len__(self) -> int:
        return len(self.variants)

    def __getitem__(self, tag: str) -> MessageType:
        """Message type wrapped by a variant tag.

        Raises:
            KeyError: If no variant has this tag.
        """
        return self._by_tag[tag].message_type

    def tags(self) -> tuple[str, ...]:
        return tuple(self._by_tag)

    def messages(self) -> tuple[str, ...]:
        """Wire names of every wrapped case, variant by variant."""
        return tuple(name for variant in self.variants for name in variant.message_type.messages())

    def wrap(self, message: MessageCase | EntrypointMessage) -> EntrypointMessage:
        """Wrap a message of one of the composed types under its variant tag.

        Raises:
            TypeError: If no variant wraps the message's type.
        """
        if isinstance(message, EntrypointMessage):
            if message.entrypoint is self:
                return message
            message = message.message
        for variant in self.variants:
            if message in variant.message_type:
                return EntrypointMessage(variant.tag, message, self)
        raise TypeError(f"{type(message).__name__} is not a case of {self.contract}.{self.name}")

    def encode(self, message: MessageCase | EntrypointMessage) -> Any:
        wrapped = self.wrap(message)
        return self[wrapped.variant].encode(wrapped.message)

    def to_json(self, message: MessageCase | EntrypointMessage) -> bytes:
        return to_json(self.encode(message))

    def decode(self, raw: Any) -> EntrypointMessage:
        """Decode a payload by trying each variant's message type in order.

        The first variant whose message type accepts the payload wins.

        Raises:
            DecodeError: When no variant accepts the payload; `attempts` holds
                one (tag, reason) pair per variant in attempt order.
        """
        payload = load_payload(raw)
        attempts: list[tuple[str, str]] = []
        for variant in self.variants:
            try:
                message = variant.message_type.decode(payload)
            except DecodeError as e:
                attempts.append((variant.tag, str(e)))
                continue
            return EntrypointMessage(variant.tag, message, self)

        tags = ", ".join(self._by_tag)
        details = "".join(f"\n  as {tag}: {reason}" for tag, reason in attempts)
        raise DecodeError(
            f"expected any of {tags} {self.category.value} messages, "
            f"but the payload decodes to none of them{details}",
            attempts,
        )

    def dispatch(
        self,
        receiver: Any,
        ctx: Any,
        message: MessageCase | EntrypointMessage,
        convert_error: ErrorConverter | None = None,
    ) -> Any:
        """Forward to the wrapped message type's dispatch with the same context."""
        wrapped = self.wrap(message)
        return self[wrapped.variant].dispatch(receiver, ctx, wrapped.message, convert_error)
