"""Compiler facade tying the schema, generator and combinator together."""

from msgkit.compiler.compiler import (
    CompiledContract,
    CompiledInterface,
    CompiledOperation,
    CompiledSchema,
    Compiler,
    Entrypoint,
    compile_schema,
)

__all__ = [
    "Compiler",
    "compile_schema",
    "CompiledSchema",
    "CompiledInterface",
    "CompiledContract",
    "CompiledOperation",
    "Entrypoint",
]
