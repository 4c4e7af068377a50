"""Declaration documents -> Schema model.

Usage:
    schema = load_schema("contracts/registry.toml")
    schema = parse_schema({"interfaces": [...], "contracts": [...]})

Every rejected declaration raises SchemaError pointing at the offending node.
"""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from msgkit.core.schema.declarations import (
    ContractDecl,
    GenericDecl,
    InterfaceDecl,
    MessagesDecl,
    OperationDecl,
    ParamDecl,
    SchemaDecl,
)
from msgkit.core.schema.models import (
    Category,
    Contract,
    GenericParameter,
    Interface,
    InterfaceUse,
    Location,
    Operation,
    Parameter,
    Schema,
    WherePredicate,
)
from msgkit.core.types import TypeRef, TypeSyntaxError, parse_type
from msgkit.errors import SchemaError

logger = logging.getLogger(__name__)

_MISSING_ERROR_HINT = (
    "Error is the type returned by generated dispatch functions; it has to be "
    "convertible from StdError."
)


def load_schema(path: str | Path) -> Schema:
    """Load and parse a declaration document from a JSON, TOML or YAML file.

    Raises:
        SchemaError: If the file cannot be read or its declarations are invalid.
    """
    path = Path(path)
    suffix = path.suffix.lower()
    try:
        if suffix == ".json":
            with path.open(encoding="utf-8") as fh:
                document = json.load(fh)
        elif suffix == ".toml":
            with path.open("rb") as fh:
                document = tomllib.load(fh)
        elif suffix in (".yaml", ".yml"):
            with path.open(encoding="utf-8") as fh:
                document = yaml.safe_load(fh) or {}
        else:
            raise SchemaError(f"unsupported schema file type `{suffix}`", Location(str(path)))
    except OSError as e:
        raise SchemaError(f"cannot read schema file: {e}", Location(str(path))) from e
    except (json.JSONDecodeError, tomllib.TOMLDecodeError, yaml.YAMLError) as e:
        raise SchemaError(f"malformed schema file: {e}", Location(str(path))) from e

    if not isinstance(document, Mapping):
        raise SchemaError("schema document must be a mapping", Location(str(path)))
    return parse_schema(document, source=str(path))


def parse_schema(
    document: Mapping[str, Any] | SchemaDecl,
    source: str = "<document>",
    types: Mapping[str, Any] | None = None,
) -> Schema:
    """Parse a declaration document into a Schema.

    Args:
        document: Raw mapping or an already validated SchemaDecl.
        source: Name used in diagnostic locations.
        types: Python types to carry on the schema for later resolution.

    Raises:
        SchemaError: On the first invalid declaration.
    """
    root = Location(source)
    if isinstance(document, SchemaDecl):
        decl = document
    else:
        try:
            decl = SchemaDecl.model_validate(document)
        except ValidationError as e:
            raise _schema_error_from_validation(e, root) from e

    interfaces: list[Interface] = []
    seen: dict[str, Location] = {}
    for index, iface_decl in enumerate(decl.interfaces):
        loc = _decl_location(iface_decl, root.child("interfaces").child(f"[{index}]"))
        _check_unique(iface_decl.name, "interface", loc, seen)
        interfaces.append(_parse_interface(iface_decl, loc))

    by_name = {iface.name: iface for iface in interfaces}
    contracts: list[Contract] = []
    seen = {}
    for index, contract_decl in enumerate(decl.contracts):
        loc = _decl_location(contract_decl, root.child("contracts").child(f"[{index}]"))
        _check_unique(contract_decl.name, "contract", loc, seen)
        contracts.append(_parse_contract(contract_decl, loc, by_name))

    logger.debug(
        "Parsed schema %s: %d interface(s), %d contract(s)", source, len(interfaces), len(contracts)
    )
    return Schema(interfaces=tuple(interfaces), contracts=tuple(contracts), types=dict(types or {}))


def _schema_error_from_validation(error: ValidationError, root: Location) -> SchemaError:
    first = error.errors()[0]
    path = ""
    for part in first["loc"]:
        path += f"[{part}]" if isinstance(part, int) else (f".{part}" if path else str(part))
    extra = error.error_count() - 1
    hint = f"{extra} more validation error(s) in this document" if extra else None
    return SchemaError(first["msg"], Location(root.source, path), hint=hint)


def _decl_location(decl: InterfaceDecl | OperationDecl, fallback: Location) -> Location:
    if decl.file is not None:
        return Location(decl.file, fallback.path, decl.line)
    return fallback


def _check_unique(name: str, kind: str, loc: Location, seen: dict[str, Location]) -> None:
    if name in seen:
        raise SchemaError(
            f"duplicate {kind} `{name}`",
            loc,
            hint=f"{kind} `{name}` previously defined here",
            hint_location=seen[name],
        )
    seen[name] = loc


def _parse_type(text: str, loc: Location) -> TypeRef:
    try:
        return parse_type(text)
    except TypeSyntaxError as e:
        raise SchemaError(str(e), loc) from e


def _parse_generics(
    decls: Sequence[GenericDecl | str], loc: Location
) -> tuple[GenericParameter, ...]:
    generics: list[GenericParameter] = []
    seen: dict[str, Location] = {}
    for index, decl in enumerate(decls):
        item_loc = loc.child(f"[{index}]")
        if isinstance(decl, str):
            try:
                predicate = WherePredicate.parse(decl)
            except ValueError as e:
                raise SchemaError(str(e), item_loc) from e
            generic = GenericParameter(predicate.subject, predicate.bounds)
        else:
            generic = GenericParameter(decl.name.strip(), tuple(b.strip() for b in decl.bounds))
        if not generic.name.isidentifier():
            raise SchemaError(f"invalid generic parameter name `{generic.name}`", item_loc)
        _check_unique(generic.name, "generic parameter", item_loc, seen)
        generics.append(generic)
    return tuple(generics)


def _parse_where(decls: Sequence[str], loc: Location) -> tuple[WherePredicate, ...]:
    predicates: list[WherePredicate] = []
    for index, text in enumerate(decls):
        try:
            predicates.append(WherePredicate.parse(text))
        except ValueError as e:
            raise SchemaError(str(e), loc.child(f"[{index}]")) from e
    return tuple(predicates)


def _parse_param(decl: ParamDecl | str, loc: Location) -> Parameter:
    if isinstance(decl, str):
        name, sep, type_text = decl.partition(":")
        if not sep:
            raise SchemaError(f"parameter `{decl}` must be written as `name: type`", loc)
    else:
        name, type_text = decl.name, decl.type
    name = name.strip()
    if not name.isidentifier():
        raise SchemaError(f"invalid parameter name `{name}`", loc)
    return Parameter(name=name, type=_parse_type(type_text, loc))


def _parse_operation(decl: OperationDecl, loc: Location) -> Operation:
    try:
        category = Category.from_tag(decl.category)
    except ValueError as e:
        raise SchemaError(str(e), loc) from e

    if not decl.name.isidentifier():
        raise SchemaError(f"invalid operation name `{decl.name}`", loc)
    if decl.response is not None and category is not Category.QUERY:
        raise SchemaError(
            f"`response` is only allowed on query operations, `{decl.name}` is {category.value}",
            loc,
        )

    params: list[Parameter] = []
    seen: dict[str, Location] = {}
    for index, param_decl in enumerate(decl.params):
        param_loc = loc.child("params").child(f"[{index}]")
        param = _parse_param(param_decl, param_loc)
        _check_unique(param.wire_name, "parameter", param_loc, seen)
        params.append(param)

    return Operation(
        name=decl.name,
        category=category,
        params=tuple(params),
        returns=_parse_type(decl.returns, loc) if decl.returns else None,
        response=_parse_type(decl.response, loc) if decl.response else None,
        doc=decl.doc,
        location=loc,
    )


def _parse_operations(decls: Sequence[OperationDecl], loc: Location) -> tuple[Operation, ...]:
    operations: list[Operation] = []
    seen: dict[tuple[Category, str], Location] = {}
    case_names: dict[tuple[Category, str], tuple[str, Location]] = {}
    for index, decl in enumerate(decls):
        op_loc = _decl_location(decl, loc.child(f"[{index}]"))
        op = _parse_operation(decl, op_loc)
        key = (op.category, op.wire_name)
        if key in seen:
            raise SchemaError(
                f"duplicate {op.category.value} message `{op.wire_name}`",
                op.location,
                hint="message previously defined here",
                hint_location=seen[key],
            )
        seen[key] = op_loc
        case_key = (op.category, op.case_name)
        if case_key in case_names:
            other, other_loc = case_names[case_key]
            raise SchemaError(
                f"{op.category.value} messages `{other}` and `{op.wire_name}` "
                f"both generate case `{op.case_name}`",
                op.location,
                hint="message previously defined here",
                hint_location=other_loc,
            )
        case_names[case_key] = (op.wire_name, op_loc)
        operations.append(op)
    return tuple(operations)


def _parse_interface(decl: InterfaceDecl, loc: Location) -> Interface:
    if decl.error is None:
        raise SchemaError(
            f"Missing `Error` type defined for interface `{decl.name}`",
            loc,
            hint=_MISSING_ERROR_HINT,
        )

    operations = _parse_operations(decl.operations, loc.child("operations"))
    for op in operations:
        if not op.category.composable:
            raise SchemaError(
                f"{op.category.value} messages are not supported on interfaces, "
                f"they should be defined on contracts directly",
                op.location,
            )

    return Interface(
        name=decl.name,
        error=decl.error,
        generics=_parse_generics(decl.generics, loc.child("generics")),
        where=_parse_where(decl.where, loc.child("where")),
        operations=operations,
        doc=decl.doc,
        location=loc,
    )


def _parse_use(
    decl: MessagesDecl | str, loc: Location, interfaces: Mapping[str, Interface]
) -> InterfaceUse:
    if isinstance(decl, str):
        decl = MessagesDecl(interface=decl)
    iface = interfaces.get(decl.interface)
    if iface is None:
        raise SchemaError(f"contract composes undeclared interface `{decl.interface}`", loc)

    declared = iface.generic_names()
    generic_args: list[tuple[str, TypeRef]] = []
    for name, type_text in decl.generic_args.items():
        if name not in declared:
            raise SchemaError(
                f"interface `{iface.name}` has no generic parameter `{name}`",
                loc.child("generic_args"),
            )
        generic_args.append((name, _parse_type(type_text, loc.child("generic_args"))))

    variant = decl.variant or decl.interface
    if not variant.isidentifier():
        raise SchemaError(f"invalid variant name `{variant}`", loc)
    return InterfaceUse(
        interface=decl.interface,
        variant=variant,
        generic_args=tuple(generic_args),
        location=loc,
    )


def _parse_contract(
    decl: ContractDecl, loc: Location, interfaces: Mapping[str, Interface]
) -> Contract:
    if decl.error is None:
        raise SchemaError(
            f"Missing `Error` type defined for contract `{decl.name}`",
            loc,
            hint=_MISSING_ERROR_HINT,
        )

    operations = _parse_operations(decl.operations, loc.child("operations"))

    inits = [op for op in operations if op.category is Category.INIT]
    if not inits:
        raise SchemaError(f"No instantiation message declared for contract `{decl.name}`", loc)
    if len(inits) > 1:
        raise SchemaError(
            "More than one instantiation message",
            inits[1].location,
            hint="Instantiation message previously defined here",
            hint_location=inits[0].location,
        )
    migrates = [op for op in operations if op.category is Category.MIGRATE]
    if len(migrates) > 1:
        raise SchemaError(
            "More than one migration message",
            migrates[1].location,
            hint="Migration message previously defined here",
            hint_location=migrates[0].location,
        )

    uses: list[InterfaceUse] = []
    variants: dict[str, Location] = {}
    for index, use_decl in enumerate(decl.messages):
        use_loc = loc.child("messages").child(f"[{index}]")
        use = _parse_use(use_decl, use_loc, interfaces)
        _check_unique(use.variant, "variant", use_loc, variants)
        uses.append(use)

    return Contract(
        name=decl.name,
        error=decl.error,
        generics=_parse_generics(decl.generics, loc.child("generics")),
        where=_parse_where(decl.where, loc.child("where")),
        operations=operations,
        uses=tuple(uses),
        doc=decl.doc,
        location=loc,
    )
