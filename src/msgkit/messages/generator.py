"""Category type generator.

Turns the operations of one category of an interface or contract into a
MessageType: one pydantic case model per operation, built with
`pydantic.create_model`, plus the generics analysis for that category.

Usage:
    generator = CategoryTypeGenerator(TypeRegistry({"Member": Member}))
    exec_msg = generator.generate(schema.interface("Ownable"), Category.EXEC)
"""

from __future__ import annotations

import keyword
import logging
from collections.abc import Collection, Mapping
from typing import Any

from pydantic import Field, create_model

from msgkit.config import CompilerSettings
from msgkit.core.generics import analyze_generics
from msgkit.core.schema.models import Category, Contract, Interface, Operation
from msgkit.core.types import TypeRegistry, TypeSyntaxError, UnknownTypeError
from msgkit.errors import SchemaError
from msgkit.messages.models import LenientMessageCase, MessageCase, MessageType

logger = logging.getLogger(__name__)

_RESERVED = frozenset(dir(MessageCase))
_OPTIONAL_NAMES = frozenset({"Optional", "Option"})


def field_attribute(name: str) -> str:
    """Python attribute for a parameter; the wire name stays the field alias."""
    attr = name
    if keyword.iskeyword(attr) or attr in _RESERVED or attr.startswith(("_", "model_")):
        attr = f"{attr.lstrip('_') or 'field'}_"
    return attr


class CategoryTypeGenerator:
    """Generates message types for (owner, category) pairs.

    Args:
        registry: Resolves declared type names to Python types.
        settings: Compiler settings; `strict_decoding` selects the case base.
    """

    def __init__(
        self,
        registry: TypeRegistry | None = None,
        settings: CompilerSettings | None = None,
    ) -> None:
        self._registry = registry or TypeRegistry()
        self._settings = settings or CompilerSettings()

    def generate(
        self,
        owner: Interface | Contract,
        category: Category,
        bindings: Mapping[str, Any] | None = None,
    ) -> MessageType | None:
        """Generate the message type for one category of an owner.

        Args:
            owner: Interface or contract declaring the operations.
            category: Category to generate.
            bindings: Placeholder -> Python type substitutions.

        Returns:
            The generated type, or None for a single-operation category the
            owner does not declare. Union categories always produce a type,
            possibly with no cases.

        Raises:
            SchemaError: If a parameter type cannot be resolved.
        """
        operations = owner.operations_for(category)
        if category.single and not operations:
            return None

        bound = dict(bindings or {})
        usage = analyze_generics(owner.generics, owner.where, operations)
        type_name = owner.type_name(category)
        placeholders = owner.generic_names()
        cases = [
            self._case_model(type_name, op, placeholders, bound, single=category.single)
            for op in operations
        ]
        logger.debug(
            "Generated %s with %d case(s), generics used=%s unused=%s",
            type_name,
            len(cases),
            usage.used_names(),
            tuple(g.name for g in usage.unused),
        )

        def rebuild(new_bindings: dict[str, Any]) -> MessageType | None:
            return self.generate(owner, category, new_bindings)

        return MessageType(
            name=type_name,
            category=category,
            owner=owner.name,
            error=owner.error,
            cases=cases,
            usage=usage,
            bindings=bound,
            rebuild=rebuild,
        )

    def _case_model(
        self,
        type_name: str,
        op: Operation,
        placeholders: Collection[str],
        bindings: Mapping[str, Any],
        *,
        single: bool,
    ) -> type[MessageCase]:
        fields: dict[str, Any] = {}
        for param in op.params:
            try:
                annotation = self._registry.resolve(param.type, placeholders, bindings)
            except (UnknownTypeError, TypeSyntaxError) as e:
                raise SchemaError(
                    f"{e} in parameter `{param.name}` of `{op.name}`", op.location
                ) from e
            # Optional parameters may be omitted on the wire.
            if param.type.name in _OPTIONAL_NAMES:
                info = Field(default=None, alias=param.wire_name)
            else:
                info = Field(alias=param.wire_name)
            fields[field_attribute(param.name)] = (annotation, info)

        base = MessageCase if self._settings.strict_decoding else LenientMessageCase
        model_name = type_name if single else op.case_name
        model = create_model(model_name, __base__=base, __doc__=op.doc, **fields)
        model.__qualname__ = model_name if single else f"{type_name}.{op.case_name}"
        model.wire_name = op.wire_name
        model.case_name = op.case_name
        model.operation = op
        model.field_names = tuple(fields)
        return model
