"""Multi-interface combinator and the entrypoint types it produces."""

from msgkit.glue.combinator import combine
from msgkit.glue.models import EntrypointMessage, EntrypointType, EntrypointVariant

__all__ = [
    "combine",
    "EntrypointType",
    "EntrypointVariant",
    "EntrypointMessage",
]
