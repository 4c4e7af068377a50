"""Schema model and the front-ends that build it."""

from msgkit.core.schema.declarations import (
    ContractDecl,
    GenericDecl,
    InterfaceDecl,
    MessagesDecl,
    OperationDecl,
    ParamDecl,
    SchemaDecl,
)
from msgkit.core.schema.decorators import (
    MsgMarker,
    annotation_to_expr,
    assemble_schema,
    contract,
    declaration_of,
    interface,
    msg,
)
from msgkit.core.schema.models import (
    COMPOSABLE_CATEGORIES,
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
from msgkit.core.schema.parser import load_schema, parse_schema

__all__ = [
    # Models
    "Category",
    "COMPOSABLE_CATEGORIES",
    "Location",
    "GenericParameter",
    "WherePredicate",
    "Parameter",
    "Operation",
    "Interface",
    "InterfaceUse",
    "Contract",
    "Schema",
    # Declarations
    "SchemaDecl",
    "InterfaceDecl",
    "ContractDecl",
    "OperationDecl",
    "ParamDecl",
    "GenericDecl",
    "MessagesDecl",
    # Parsing
    "parse_schema",
    "load_schema",
    # Decorators
    "interface",
    "contract",
    "msg",
    "MsgMarker",
    "assemble_schema",
    "declaration_of",
    "annotation_to_expr",
]
