"""Raw declaration document models.

A declaration document is the explicit schema-description format consumed by
the parser. It can come from JSON, TOML or YAML files, from a plain dict, or
from the decorator front-end.

Usage:
    {
        "interfaces": [{
            "name": "Ownable",
            "error": "OwnableError",
            "operations": [
                {"name": "transfer_owner", "category": "exec",
                 "params": ["new_owner: str"]},
                {"name": "owner", "category": "query", "returns": "str"},
            ],
        }],
        "contracts": [{
            "name": "Registry",
            "error": "ContractError",
            "messages": [{"interface": "Ownable", "variant": "Ownable"}],
            "operations": [{"name": "instantiate", "category": "init"}],
        }],
    }
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class _Declaration(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)


class GenericDecl(_Declaration):
    """Generic parameter; also accepted as a `"T: Bound + Bound"` string."""

    name: str
    bounds: list[str] = Field(default_factory=list)


class ParamDecl(_Declaration):
    """Operation parameter; also accepted as a `"name: type"` string."""

    name: str
    type: str


class OperationDecl(_Declaration):
    name: str
    category: str
    params: list[ParamDecl | str] = Field(default_factory=list)
    returns: str | None = None
    response: str | None = None
    doc: str | None = None
    file: str | None = None
    line: int | None = None


class MessagesDecl(_Declaration):
    """Interface composed by a contract; also accepted as the bare interface name."""

    interface: str
    variant: str | None = None
    generic_args: dict[str, str] = Field(default_factory=dict)


class InterfaceDecl(_Declaration):
    name: str
    error: str | None = None
    generics: list[GenericDecl | str] = Field(default_factory=list)
    where: list[str] = Field(default_factory=list)
    operations: list[OperationDecl] = Field(default_factory=list)
    doc: str | None = None
    file: str | None = None
    line: int | None = None


class ContractDecl(InterfaceDecl):
    messages: list[MessagesDecl | str] = Field(default_factory=list)


class SchemaDecl(_Declaration):
    interfaces: list[InterfaceDecl] = Field(default_factory=list)
    contracts: list[ContractDecl] = Field(default_factory=list)
