"""Case folding between source identifiers, case names and wire names.

Usage:
    to_snake_case("transferOwner")   # "transfer_owner"
    to_snake_case("HTTPServerReady") # "http_server_ready"
    to_camel_case("transfer_owner")  # "TransferOwner"
"""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[_\-\s]+")
_BOUNDARY = re.compile(r"(?<=[a-z0-9])(?=[A-Z])|(?<=[A-Z])(?=[A-Z][a-z])")


def split_words(name: str) -> list[str]:
    """Split an identifier into words on separators and case boundaries."""
    return [word for word in _SEPARATORS.split(_BOUNDARY.sub("_", name)) if word]


def to_snake_case(name: str) -> str:
    """Canonical wire form: lowercase words joined with underscores."""
    return "_".join(word.lower() for word in split_words(name))


def to_camel_case(name: str) -> str:
    """Case name form: capitalized words joined together."""
    return "".join(word[:1].upper() + word[1:].lower() for word in split_words(name))
