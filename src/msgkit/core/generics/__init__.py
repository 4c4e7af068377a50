"""Generic usage analysis: which placeholders a generated type keeps."""

from msgkit.core.generics.analyzer import (
    GenericUsage,
    analyze_generics,
    collect_placeholders,
    referenced_types,
)

__all__ = [
    "GenericUsage",
    "analyze_generics",
    "collect_placeholders",
    "referenced_types",
]
