"""Multi-interface combinator.

Merges the message types a contract's composed interfaces contribute to one
category, plus the contract's own operations of that category, into a single
EntrypointType.

Usage:
    entry = combine(
        contract,
        Category.EXEC,
        [(ownable_use, ownable_exec), (pausable_use, pausable_exec)],
        own=registry_exec,
    )
    entry.decode({"transfer_owner": {"new_owner": "alice"}}).variant  # "Ownable"
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from msgkit.config import CompilerSettings
from msgkit.core.schema.models import Category, Contract, InterfaceUse
from msgkit.errors import SchemaError
from msgkit.glue.models import EntrypointType, EntrypointVariant
from msgkit.messages.models import MessageType
from msgkit.verify.collision import verify_no_collisions

logger = logging.getLogger(__name__)


def combine(
    contract: Contract,
    category: Category,
    composed: Sequence[tuple[InterfaceUse, MessageType]],
    own: MessageType | None = None,
    settings: CompilerSettings | None = None,
) -> EntrypointType:
    """Build the entrypoint type of one category.

    Variants follow the contract's interface declaration order; the
    contract's own operations, when it declares any, form a trailing variant
    tagged with the contract name.

    Args:
        contract: Contract composing the interfaces.
        category: Category being combined; must be composable.
        composed: (interface use, interface message type) pairs in declaration order.
        own: The contract's own message type for this category.
        settings: Compiler settings; `verify_collisions` gates the verifier.

    Raises:
        SchemaError: If the category is not composable or a variant tag is
            used twice.
        CollisionError: If two variants contribute the same wire name.
    """
    settings = settings or CompilerSettings()
    if not category.composable:
        raise SchemaError(
            f"{category.value} messages cannot be combined across interfaces", contract.location
        )

    variants = [
        EntrypointVariant(tag=use.variant, owner=message_type.owner, message_type=message_type)
        for use, message_type in composed
    ]
    if own is not None and len(own):
        variants.append(EntrypointVariant(tag=contract.name, owner=contract.name, message_type=own))

    seen: dict[str, EntrypointVariant] = {}
    for variant in variants:
        if variant.tag in seen:
            raise SchemaError(
                f"Variant `{variant.tag}` is used by both `{seen[variant.tag].owner}` "
                f"and `{variant.owner}`",
                contract.location,
            )
        seen[variant.tag] = variant

    if settings.verify_collisions:
        verify_no_collisions(
            [(variant.owner, variant.message_type.messages()) for variant in variants],
            category,
            contract.location,
        )

    logger.debug(
        "Combined %s %s from variants %s",
        contract.name,
        category.type_suffix,
        [variant.tag for variant in variants],
    )
    return EntrypointType(
        name=category.type_suffix,
        category=category,
        contract=contract.name,
        variants=variants,
    )
