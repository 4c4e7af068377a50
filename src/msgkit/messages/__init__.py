"""Generated message types and the generator that builds them."""

from msgkit.messages.dispatch import (
    ErrorConverter,
    declared_error,
    into_error,
    invoke,
    serialize_response,
)
from msgkit.messages.generator import CategoryTypeGenerator, field_attribute
from msgkit.messages.models import LenientMessageCase, MessageCase, MessageType, load_payload

__all__ = [
    # Types
    "MessageCase",
    "LenientMessageCase",
    "MessageType",
    "load_payload",
    # Generation
    "CategoryTypeGenerator",
    "field_attribute",
    # Dispatch
    "ErrorConverter",
    "into_error",
    "declared_error",
    "invoke",
    "serialize_response",
]
