"""Type descriptors and their resolution to Python annotations.

Type expressions are written as `Name` or `Name[arg, ...]`; angle brackets
(`Vec<T>`) are accepted as well. A descriptor is purely symbolic: whether a
name is a generic placeholder depends on the generics declared by its owner.

Usage:
    ref = parse_type("Optional[list[T]]")
    ref.placeholders({"T", "U"})         # {"T"}

    registry = TypeRegistry({"Member": Member})
    registry.resolve(ref, placeholders={"T"}, bindings={"T": int})
    # Optional[list[int]]
"""

from __future__ import annotations

import re
from collections.abc import Callable, Collection, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Optional

_TOKEN = re.compile(r"\s*(?:(?P<ident>[A-Za-z_][A-Za-z0-9_.:]*|\(\))|(?P<punct>[\[\]<>,]))")
_CLOSING = {"[": "]", "<": ">"}


class TypeSyntaxError(ValueError):
    """Raised when a type expression cannot be parsed."""

    pass


class UnknownTypeError(LookupError):
    """Raised when a type name is neither builtin, registered nor a placeholder."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"unknown type `{name}`")


@dataclass(frozen=True, slots=True)
class TypeRef:
    """Symbolic type: a name applied to zero or more argument types."""

    name: str
    args: tuple[TypeRef, ...] = ()

    def __str__(self) -> str:
        if not self.args:
            return self.name
        return f"{self.name}[{', '.join(str(arg) for arg in self.args)}]"

    def walk(self) -> Iterator[TypeRef]:
        """Yield this descriptor and every nested argument, depth first."""
        yield self
        for arg in self.args:
            yield from arg.walk()

    def placeholders(self, declared: Collection[str]) -> set[str]:
        """Names of declared placeholders referenced anywhere in this descriptor."""
        return {node.name for node in self.walk() if node.name in declared}


def parse_type(text: str) -> TypeRef:
    """Parse a type expression.

    Raises:
        TypeSyntaxError: If the text is empty or malformed.
    """
    tokens = _tokenize(text)
    if not tokens:
        raise TypeSyntaxError("empty type expression")
    ref, pos = _parse(tokens, 0, text)
    if pos != len(tokens):
        raise TypeSyntaxError(f"unexpected `{tokens[pos]}` in type `{text}`")
    return ref


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN.match(stripped, pos)
        if match is None or match.end() == pos:
            raise TypeSyntaxError(f"invalid character in type `{text}` at offset {pos}")
        tokens.append(match.group("ident") or match.group("punct"))
        pos = match.end()
    return tokens


def _parse(tokens: list[str], pos: int, text: str) -> tuple[TypeRef, int]:
    if pos >= len(tokens):
        raise TypeSyntaxError(f"unexpected end of type `{text}`")
    name = tokens[pos]
    if not (name[0].isalpha() or name[0] == "_" or name == "()"):
        raise TypeSyntaxError(f"expected a type name in `{text}`, found `{name}`")
    pos += 1
    if pos >= len(tokens) or tokens[pos] not in _CLOSING:
        return TypeRef(name), pos

    closing = _CLOSING[tokens[pos]]
    pos += 1
    args: list[TypeRef] = []
    while True:
        arg, pos = _parse(tokens, pos, text)
        args.append(arg)
        if pos >= len(tokens):
            raise TypeSyntaxError(f"unclosed argument list in type `{text}`")
        if tokens[pos] == ",":
            pos += 1
            continue
        if tokens[pos] == closing:
            return TypeRef(name, tuple(args)), pos + 1
        raise TypeSyntaxError(f"expected `,` or `{closing}` in type `{text}`")


BUILTIN_TYPES: dict[str, Any] = {
    "str": str,
    "String": str,
    "Addr": str,
    "int": int,
    "float": float,
    "f32": float,
    "f64": float,
    "bool": bool,
    "Any": Any,
    "Value": Any,
    "None": None,
    "()": None,
}
BUILTIN_TYPES.update(
    {f"{sign}{bits}": int for sign in ("u", "i") for bits in (8, 16, 32, 64, 128)}
)
BUILTIN_TYPES.update({f"Uint{bits}": int for bits in (64, 128, 256)})


def _optional(args: tuple[Any, ...]) -> Any:
    return Optional[args[0]]


def _tuple(args: tuple[Any, ...]) -> Any:
    return tuple[args]


BUILTIN_CONSTRUCTORS: dict[str, tuple[int | None, Callable[[tuple[Any, ...]], Any]]] = {
    "list": (1, lambda args: list[args[0]]),
    "Vec": (1, lambda args: list[args[0]]),
    "set": (1, lambda args: set[args[0]]),
    "dict": (2, lambda args: dict[args[0], args[1]]),
    "Map": (2, lambda args: dict[args[0], args[1]]),
    "HashMap": (2, lambda args: dict[args[0], args[1]]),
    "BTreeMap": (2, lambda args: dict[args[0], args[1]]),
    "Optional": (1, _optional),
    "Option": (1, _optional),
    "tuple": (None, _tuple),
}
"""Parameterized builtins: name -> (expected argument count or None, constructor)."""


class TypeRegistry:
    """Maps type names used in declarations to Python annotations.

    Builtin scalar and container names are always available; anything else
    (pydantic models, dataclasses, enums) must be registered by name.

    Args:
        types: Initial name to Python type mapping.
    """

    def __init__(self, types: Mapping[str, Any] | None = None) -> None:
        self._types: dict[str, Any] = dict(types or {})

    def register(self, name: str, tp: Any) -> None:
        """Register a Python type under a declaration name."""
        self._types[name] = tp

    def merged(self, types: Mapping[str, Any]) -> TypeRegistry:
        """New registry with extra names; existing registrations win."""
        return TypeRegistry({**types, **self._types})

    def __contains__(self, name: object) -> bool:
        return name in self._types or name in BUILTIN_TYPES or name in BUILTIN_CONSTRUCTORS

    def resolve(
        self,
        ref: TypeRef,
        placeholders: Collection[str] = (),
        bindings: Mapping[str, Any] | None = None,
    ) -> Any:
        """Resolve a descriptor to a Python annotation.

        Placeholders without a binding resolve to Any.

        Raises:
            UnknownTypeError: If a name cannot be resolved.
            TypeSyntaxError: If a builtin container gets the wrong arity.
        """
        bindings = bindings or {}
        if ref.name in placeholders:
            return bindings.get(ref.name, Any)

        args = tuple(self.resolve(arg, placeholders, bindings) for arg in ref.args)

        if ref.name in self._types:
            tp = self._types[ref.name]
            if not args:
                return tp
            return tp[args[0]] if len(args) == 1 else tp[args]

        if ref.name in BUILTIN_CONSTRUCTORS:
            arity, build = BUILTIN_CONSTRUCTORS[ref.name]
            if arity is not None and len(args) != arity:
                raise TypeSyntaxError(
                    f"`{ref.name}` takes {arity} type argument(s), got {len(args)} in `{ref}`"
                )
            return build(args)

        if ref.name in BUILTIN_TYPES and not args:
            return BUILTIN_TYPES[ref.name]

        raise UnknownTypeError(ref.name)

    def resolve_lenient(
        self,
        ref: TypeRef | None,
        placeholders: Collection[str] = (),
        bindings: Mapping[str, Any] | None = None,
    ) -> Any:
        """Like resolve(), but unknown or missing types resolve to Any."""
        if ref is None:
            return Any
        try:
            return self.resolve(ref, placeholders, bindings)
        except (UnknownTypeError, TypeSyntaxError):
            return Any
