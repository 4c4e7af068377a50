"""Tests for generated message types."""

import pytest
from hypothesis import given
from hypothesis import strategies as st
from pydantic import BaseModel, ValidationError

from msgkit import Category, CompilerSettings, DecodeError, SchemaError, TypeRegistry, parse_schema
from msgkit.messages import CategoryTypeGenerator
from msgkit.messages.generator import field_attribute


class Member(BaseModel):
    name: str
    weight: int = 1


def _owner(operations, generics=()):
    schema = parse_schema(
        {
            "interfaces": [
                {
                    "name": "Bank",
                    "error": "BankError",
                    "generics": list(generics),
                    "operations": operations,
                }
            ]
        }
    )
    return schema.interface("Bank")


@pytest.fixture
def bank():
    return _owner(
        [
            {"name": "deposit", "category": "exec", "params": ["amount: u128", "memo: String"]},
            {"name": "setLimit", "category": "exec", "params": ["maxValue: u64"]},
            {"name": "reset", "category": "exec"},
            {"name": "balance", "category": "query", "params": ["owner: Addr"], "returns": "u128"},
        ]
    )


@pytest.fixture
def exec_msg(bank):
    return CategoryTypeGenerator().generate(bank, Category.EXEC)


def test_union_cases_follow_declaration_order(exec_msg) -> None:
    assert exec_msg.name == "BankExecMsg"
    assert exec_msg.owner == "Bank"
    assert exec_msg.error == "BankError"
    assert exec_msg.messages() == ("deposit", "set_limit", "reset")
    assert [case.__name__ for case in exec_msg] == ["Deposit", "SetLimit", "Reset"]
    assert len(exec_msg) == 3


def test_case_fields_keep_parameter_order(exec_msg) -> None:
    deposit = exec_msg.Deposit

    assert deposit.field_names == ("amount", "memo")
    assert deposit.wire_name == "deposit"
    assert deposit.operation.name == "deposit"
    assert exec_msg.case("set_limit") is exec_msg.SetLimit


def test_encode_is_externally_tagged(exec_msg) -> None:
    message = exec_msg.SetLimit(max_value=10)

    assert message.encode() == {"set_limit": {"max_value": 10}}
    assert exec_msg.Reset().encode() == {"reset": {}}
    assert exec_msg.to_json(message) == b'{"set_limit":{"max_value":10}}'


def test_decode_round_trip(exec_msg) -> None:
    message = exec_msg.Deposit(amount=5, memo="rent")

    assert exec_msg.decode(message.to_json()) == message
    assert exec_msg.decode('{"deposit": {"amount": 5, "memo": "rent"}}') == message
    assert exec_msg.decode({"deposit": {"amount": 5, "memo": "rent"}}) == message


@given(amount=st.integers(min_value=0, max_value=2**64 - 1), memo=st.text(max_size=20))
def test_round_trip_property(amount: int, memo: str) -> None:
    """PROPERTY: decode(encode(m)) == m for any valid deposit."""
    params = ["amount: u64", "memo: String"]
    operations = [{"name": "deposit", "category": "exec", "params": params}]
    exec_msg = CategoryTypeGenerator().generate(_owner(operations), Category.EXEC)
    message = exec_msg.Deposit(amount=amount, memo=memo)

    assert exec_msg.decode(exec_msg.to_json(message)) == message


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({}, "expected an object with exactly one key, expected one of `deposit`"),
        ({"reset": {}, "deposit": {}}, "exactly one key"),
        ([], "exactly one key"),
        ({"withdraw": {}}, "unknown variant `withdraw`, expected one of `deposit`, `set_limit`"),
        ({"deposit": {"amount": "x", "memo": "m"}}, "invalid `deposit` message: amount"),
        ({"deposit": {"amount": 1}}, "invalid `deposit` message: memo: Field required"),
        ("{not json", "invalid JSON"),
    ],
)
def test_decode_errors(exec_msg, payload, message: str) -> None:
    with pytest.raises(DecodeError, match=message):
        exec_msg.decode(payload)


def test_unknown_fields_rejected_by_default(exec_msg) -> None:
    with pytest.raises(DecodeError, match="Extra inputs are not permitted"):
        exec_msg.decode({"reset": {"force": True}})


def test_lenient_decoding_ignores_unknown_fields(bank) -> None:
    generator = CategoryTypeGenerator(settings=CompilerSettings(strict_decoding=False))
    exec_msg = generator.generate(bank, Category.EXEC)

    assert exec_msg.decode({"reset": {"force": True}}) == exec_msg.Reset()


def test_decode_errors_are_value_errors(exec_msg) -> None:
    with pytest.raises(ValueError):
        exec_msg.decode({"withdraw": {}})


def test_cases_are_frozen(exec_msg) -> None:
    message = exec_msg.SetLimit(max_value=1)

    with pytest.raises(ValidationError):
        message.max_value = 2


def test_wire_names_are_snake_case_aliases(exec_msg) -> None:
    """Python attributes and wire names agree for snake_case parameters."""
    by_alias = exec_msg.SetLimit.model_validate({"max_value": 3})
    by_name = exec_msg.SetLimit(max_value=3)

    assert by_alias == by_name
    assert by_alias.model_dump(by_alias=True) == {"max_value": 3}


def test_reserved_parameter_names_get_suffixed() -> None:
    exec_msg = CategoryTypeGenerator().generate(
        _owner(
            [
                {
                    "name": "send",
                    "category": "exec",
                    "params": ["from: Addr", "encode: bool", "_hidden: u8"],
                }
            ]
        ),
        Category.EXEC,
    )
    send = exec_msg.Send

    assert send.field_names == ("from_", "encode_", "hidden_")
    message = exec_msg.decode({"send": {"from": "alice", "encode": True, "hidden": 1}})
    assert message.from_ == "alice"
    assert message.encode() == {"send": {"from": "alice", "encode": True, "hidden": 1}}


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("amount", "amount"),
        ("class", "class_"),
        ("dispatch", "dispatch_"),
        ("model_config", "model_config_"),
        ("_", "field_"),
    ],
)
def test_field_attribute(name: str, expected: str) -> None:
    assert field_attribute(name) == expected


def test_optional_parameters_may_be_omitted() -> None:
    exec_msg = CategoryTypeGenerator().generate(
        _owner([{"name": "tag", "category": "exec", "params": ["label: Option<String>"]}]),
        Category.EXEC,
    )

    message = exec_msg.decode({"tag": {}})

    assert message.label is None
    assert message.encode() == {"tag": {"label": None}}


def test_registered_model_types() -> None:
    generator = CategoryTypeGenerator(TypeRegistry({"Member": Member}))
    exec_msg = generator.generate(
        _owner([{"name": "add", "category": "exec", "params": ["members: Vec<Member>"]}]),
        Category.EXEC,
    )

    message = exec_msg.decode({"add": {"members": [{"name": "ann"}]}})

    assert message.members == [Member(name="ann", weight=1)]
    assert message.encode() == {"add": {"members": [{"name": "ann", "weight": 1}]}}


def test_unknown_parameter_type() -> None:
    owner = _owner([{"name": "add", "category": "exec", "params": ["member: Member"]}])

    with pytest.raises(SchemaError, match="unknown type `Member` in parameter `member` of `add`"):
        CategoryTypeGenerator().generate(owner, Category.EXEC)


def test_empty_union_category_still_generated(bank) -> None:
    privileged = CategoryTypeGenerator().generate(bank, Category.PRIVILEGED)

    assert privileged is not None
    assert len(privileged) == 0
    with pytest.raises(DecodeError, match="there are no variants"):
        privileged.decode({"anything": {}})


def test_missing_single_category_is_none(bank) -> None:
    assert CategoryTypeGenerator().generate(bank, Category.MIGRATE) is None


def test_init_is_a_plain_record(registry_schema) -> None:
    registry = registry_schema.contract("Registry")
    init = CategoryTypeGenerator().generate(registry, Category.INIT)

    message = init("alice")

    assert init.single
    assert init.name == "RegistryInitMsg"
    assert init.record is type(message)
    assert message.encode() == {"admin": "alice"}
    assert init.decode(b'{"admin": "alice"}') == message
    with pytest.raises(TypeError, match="takes 1 positional arguments, got 2"):
        init("alice", "bob")


def test_record_on_union_raises(exec_msg) -> None:
    with pytest.raises(TypeError, match="is a union of 3 cases"):
        exec_msg.record


def test_unknown_case_attribute(exec_msg) -> None:
    with pytest.raises(AttributeError, match="BankExecMsg has no case `Withdraw`"):
        exec_msg.Withdraw


def test_membership_and_foreign_cases(bank, exec_msg) -> None:
    query_msg = CategoryTypeGenerator().generate(bank, Category.QUERY)
    balance = query_msg.Balance(owner="alice")

    assert exec_msg.Reset() in exec_msg
    assert balance not in exec_msg
    with pytest.raises(TypeError, match="is not a case of BankExecMsg"):
        exec_msg.encode(balance)


def test_case_docstring_comes_from_declaration() -> None:
    exec_msg = CategoryTypeGenerator().generate(
        _owner([{"name": "reset", "category": "exec", "doc": "Clear every balance."}]),
        Category.EXEC,
    )

    assert exec_msg.Reset.__doc__ == "Clear every balance."


class TestGenerics:
    """Generic placeholders and specialization."""

    @pytest.fixture
    def store(self):
        return _owner(
            [
                {"name": "put", "category": "exec", "params": ["value: A"]},
                {"name": "get", "category": "query", "params": ["key: B"]},
            ],
            generics=["A: Clone", "B"],
        )

    def test_unbound_placeholders_accept_anything(self, store) -> None:
        exec_msg = CategoryTypeGenerator().generate(store, Category.EXEC)

        assert exec_msg.decode({"put": {"value": {"any": ["thing"]}}}).value == {"any": ["thing"]}
        assert [g.name for g in exec_msg.generics] == ["A"]
        assert [g.name for g in exec_msg.unused_generics] == ["B"]

    def test_specialize_binds_used_generics(self, store) -> None:
        exec_msg = CategoryTypeGenerator().generate(store, Category.EXEC)

        specialized = exec_msg.specialize(A=int)

        assert specialized.bindings == {"A": int}
        assert specialized.decode({"put": {"value": "7"}}).value == 7
        with pytest.raises(DecodeError, match="invalid `put` message"):
            specialized.decode({"put": {"value": "seven"}})
        assert repr(specialized) == "<MessageType BankExecMsg[A=int]>"

    def test_getitem_binds_positionally(self, store) -> None:
        exec_msg = CategoryTypeGenerator().generate(store, Category.EXEC)

        assert exec_msg[int].bindings == {"A": int}
        with pytest.raises(TypeError, match="takes 1 type arguments, got 2"):
            exec_msg[int, str]

    def test_specialize_rejects_unused_generic(self, store) -> None:
        exec_msg = CategoryTypeGenerator().generate(store, Category.EXEC)

        with pytest.raises(TypeError, match="`B` is not a generic parameter of BankExecMsg"):
            exec_msg.specialize(B=int)

    def test_specialize_without_bindings_is_identity(self, store) -> None:
        exec_msg = CategoryTypeGenerator().generate(store, Category.EXEC)

        assert exec_msg.specialize() is exec_msg
