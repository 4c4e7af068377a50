"""Build-time verification passes."""

from msgkit.verify.collision import find_collision, verify_no_collisions, verify_schema

__all__ = [
    "find_collision",
    "verify_no_collisions",
    "verify_schema",
]
