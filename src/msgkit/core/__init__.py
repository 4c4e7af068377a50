"""Core functionalities: schema model, type descriptors and generic analysis.

Architecture Note:
    core/ contains pure, stateless building blocks. Schema instances are
    immutable once parsed; everything downstream (messages/, glue/, verify/)
    is a pure function of them.
"""

from msgkit.core.generics import GenericUsage, analyze_generics
from msgkit.core.naming import to_camel_case, to_snake_case
from msgkit.core.schema import (
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
    assemble_schema,
    contract,
    interface,
    load_schema,
    msg,
    parse_schema,
)
from msgkit.core.types import TypeRef, TypeRegistry, TypeSyntaxError, UnknownTypeError, parse_type

__all__ = [
    # Naming
    "to_snake_case",
    "to_camel_case",
    # Types
    "TypeRef",
    "TypeRegistry",
    "TypeSyntaxError",
    "UnknownTypeError",
    "parse_type",
    # Schema
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
    "parse_schema",
    "load_schema",
    "interface",
    "contract",
    "msg",
    "assemble_schema",
    # Generics
    "GenericUsage",
    "analyze_generics",
]
