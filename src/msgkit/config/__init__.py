"""Configuration module using Pydantic Settings.

Usage:
    from msgkit.config import CompilerSettings

    settings = CompilerSettings(strict_decoding=False)
"""

from msgkit.config.settings import CompilerSettings

__all__ = [
    "CompilerSettings",
]
