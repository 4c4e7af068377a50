"""Tests for type descriptors and the type registry."""

from typing import Any, Optional

import pytest

from msgkit.core.types import TypeRef, TypeRegistry, TypeSyntaxError, UnknownTypeError, parse_type


class Member:
    pass


def test_parse_simple_name() -> None:
    assert parse_type("String") == TypeRef("String")


def test_parse_nested_arguments() -> None:
    ref = parse_type("dict[ str , list[int] ]")

    assert ref == TypeRef("dict", (TypeRef("str"), TypeRef("list", (TypeRef("int"),))))
    assert str(ref) == "dict[str, list[int]]"


def test_parse_angle_brackets() -> None:
    """Vec<T> and Vec[T] describe the same type."""
    assert parse_type("Vec<T>") == parse_type("Vec[T]")
    assert parse_type("Option<Vec<Addr>>") == parse_type("Option[Vec[Addr]]")


def test_parse_unit_and_paths() -> None:
    assert parse_type("()") == TypeRef("()")
    assert parse_type("cosmwasm_std::Addr") == TypeRef("cosmwasm_std::Addr")


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("", "empty type expression"),
        ("list[", "unexpected end"),
        ("list[int", "unclosed argument list"),
        ("list[int>", "expected `,` or `]`"),
        ("list int", "unexpected `int`"),
        ("list[$]", "invalid character"),
        ("[int]", "expected a type name"),
    ],
)
def test_parse_errors(text: str, message: str) -> None:
    with pytest.raises(TypeSyntaxError, match=message):
        parse_type(text)


def test_placeholders_walk_nested_arguments() -> None:
    ref = parse_type("Map[K, Vec[Option[V]]]")

    assert ref.placeholders({"K", "V", "W"}) == {"K", "V"}
    assert [node.name for node in ref.walk()] == ["Map", "K", "Vec", "Option", "V"]


def test_resolve_builtins() -> None:
    registry = TypeRegistry()

    assert registry.resolve(parse_type("String")) is str
    assert registry.resolve(parse_type("u128")) is int
    assert registry.resolve(parse_type("Uint128")) is int
    assert registry.resolve(parse_type("Vec[Addr]")) == list[str]
    assert registry.resolve(parse_type("Map[String, u64]")) == dict[str, int]
    assert registry.resolve(parse_type("Option[bool]")) == Optional[bool]
    assert registry.resolve(parse_type("tuple[int, str]")) == tuple[int, str]


def test_resolve_placeholders() -> None:
    """Unbound placeholders resolve to Any; bound ones to their binding."""
    registry = TypeRegistry()
    ref = parse_type("Optional[list[T]]")

    assert registry.resolve(ref, {"T"}) == Optional[list[Any]]
    assert registry.resolve(ref, {"T"}, {"T": int}) == Optional[list[int]]


def test_resolve_registered_types() -> None:
    registry = TypeRegistry({"Member": Member})

    assert registry.resolve(parse_type("Vec[Member]")) == list[Member]
    assert "Member" in registry
    assert "Vec" in registry
    assert "Missing" not in registry


def test_resolve_registered_generic() -> None:
    registry = TypeRegistry({"Pair": tuple})

    assert registry.resolve(parse_type("Pair[int, str]")) == tuple[int, str]


def test_resolve_unknown_type() -> None:
    registry = TypeRegistry()

    with pytest.raises(UnknownTypeError) as exc_info:
        registry.resolve(parse_type("Vec[Member]"))

    assert exc_info.value.name == "Member"


def test_resolve_wrong_arity() -> None:
    with pytest.raises(TypeSyntaxError, match="takes 1 type argument"):
        TypeRegistry().resolve(parse_type("Vec[int, str]"))


def test_resolve_lenient_falls_back_to_any() -> None:
    registry = TypeRegistry()

    assert registry.resolve_lenient(None) is Any
    assert registry.resolve_lenient(parse_type("Member")) is Any
    assert registry.resolve_lenient(parse_type("u8")) is int


def test_merged_keeps_existing_registrations() -> None:
    registry = TypeRegistry({"Member": Member})
    merged = registry.merged({"Member": int, "Extra": float})

    assert merged.resolve(parse_type("Member")) is Member
    assert merged.resolve(parse_type("Extra")) is float
    assert "Extra" not in registry
