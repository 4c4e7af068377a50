"""msgkit: compile interface and contract declarations into wire message types.

Usage:
    from msgkit import Category, compile_schema

    compiled = compile_schema({
        "interfaces": [{
            "name": "Ownable",
            "error": "StdError",
            "operations": [
                {"name": "transfer_owner", "category": "exec", "params": ["new_owner: String"]},
            ],
        }],
        "contracts": [{
            "name": "Registry",
            "error": "StdError",
            "messages": ["Ownable"],
            "operations": [{"name": "instantiate", "category": "init"}],
        }],
    })

    registry = compiled.contracts["Registry"]
    message = registry.decode(Category.EXEC, '{"transfer_owner": {"new_owner": "alice"}}')
    registry.dispatch(Category.EXEC, implementation, ctx, message)
"""

__version__ = "0.1.0"

# Compiler
from msgkit.compiler import (
    CompiledContract,
    CompiledInterface,
    CompiledSchema,
    Compiler,
    compile_schema,
)

# Configuration
from msgkit.config import CompilerSettings

# Schema model and front-ends
from msgkit.core import (
    Category,
    Contract,
    Interface,
    Operation,
    Schema,
    TypeRegistry,
    assemble_schema,
    contract,
    interface,
    load_schema,
    msg,
    parse_schema,
)

# Errors
from msgkit.errors import (
    CollisionError,
    DecodeError,
    DispatchError,
    MsgkitError,
    SchemaError,
    SerializationError,
    StdError,
)

# Generated types
from msgkit.glue import EntrypointMessage, EntrypointType, combine
from msgkit.messages import CategoryTypeGenerator, MessageCase, MessageType, into_error

# Verification
from msgkit.verify import verify_no_collisions, verify_schema

__all__ = [
    "__version__",
    # Compiler
    "Compiler",
    "compile_schema",
    "CompiledSchema",
    "CompiledInterface",
    "CompiledContract",
    # Configuration
    "CompilerSettings",
    # Schema
    "Category",
    "Operation",
    "Interface",
    "Contract",
    "Schema",
    "TypeRegistry",
    "parse_schema",
    "load_schema",
    "interface",
    "contract",
    "msg",
    "assemble_schema",
    # Errors
    "MsgkitError",
    "SchemaError",
    "CollisionError",
    "StdError",
    "DecodeError",
    "DispatchError",
    "SerializationError",
    # Generated types
    "CategoryTypeGenerator",
    "MessageType",
    "MessageCase",
    "EntrypointType",
    "EntrypointMessage",
    "combine",
    "into_error",
    # Verification
    "verify_no_collisions",
    "verify_schema",
]
