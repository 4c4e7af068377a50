"""Configuration settings using Pydantic Settings.

Usage:
    from msgkit.config import CompilerSettings

    # Load from environment variables (MSGKIT_*)
    settings = CompilerSettings()

    # Or override with explicit values
    settings = CompilerSettings(strict_decoding=False)
"""

from __future__ import annotations

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class CompilerSettings(BaseSettings):  # type: ignore[misc]
    """Configuration for schema compilation.

    Attributes:
        verify_collisions: Run the wire-name collision verifier before
            combining interfaces. Disabling it only makes sense for debugging
            decode order; a colliding schema is never a valid build.
        strict_decoding: Reject unknown fields when decoding messages.
        log_level: Level the CLI configures for msgkit loggers.

    Environment Variables:
        MSGKIT_VERIFY_COLLISIONS
        MSGKIT_STRICT_DECODING
        MSGKIT_LOG_LEVEL
    """

    model_config = SettingsConfigDict(
        env_prefix="MSGKIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    verify_collisions: bool = True
    strict_decoding: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "WARNING"
