# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Core configuration - centralized config for the semid package.

All environment-based configuration should flow through this module.

Usage:
    from semid.core.config import get_config
    config = get_config()

    seed = config.entropy_seed_bytes()
    state_file = config.state_file
"""

from __future__ import annotations

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigException

DEFAULT_DERIVATION_PATH = "semid/identity/v1"
DEFAULT_STATE_FILE = str(Path.home() / ".semid" / "state.json")


class SemidSettings(BaseSettings):
    """Configuration settings for semid.

    Settings can be configured via environment variables with the SEMID_
    prefix, or through a ``.env`` file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # ENTROPY SETTINGS
    # ==========================================================================

    entropy_seed: str | None = Field(
        default=None,
        description="Hex-encoded host secret the entropy source derives from",
        validation_alias="SEMID_ENTROPY_SEED",
    )
    derivation_path: str = Field(
        default=DEFAULT_DERIVATION_PATH,
        description="Application-scoped derivation path passed to the entropy source",
        validation_alias="SEMID_DERIVATION_PATH",
    )

    # ==========================================================================
    # STATE SETTINGS
    # ==========================================================================

    state_file: str = Field(
        default=DEFAULT_STATE_FILE,
        description="Path of the file-backed identity registry",
        validation_alias="SEMID_STATE_FILE",
    )
    state_key: str | None = Field(
        default=None,
        description="Hex-encoded 32-byte AES-GCM key; encrypts the state file when set",
        validation_alias="SEMID_STATE_KEY",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="SEMID_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="SEMID_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="SEMID_LOG_FILE",
    )

    # ==========================================================================
    # DECODED VALUES
    # ==========================================================================

    def entropy_seed_bytes(self) -> bytes | None:
        """Decode ``entropy_seed``, or None when unset."""
        return _decode_hex("SEMID_ENTROPY_SEED", self.entropy_seed)

    def state_key_bytes(self) -> bytes | None:
        """Decode ``state_key``, or None when unset. Must be 32 bytes."""
        key = _decode_hex("SEMID_STATE_KEY", self.state_key)
        if key is not None and len(key) != 32:
            raise ConfigException(
                f"SEMID_STATE_KEY must be 32 bytes, got {len(key)}",
                missing_vars=["SEMID_STATE_KEY"],
            )
        return key


def _decode_hex(var: str, value: str | None) -> bytes | None:
    if not value:
        return None
    text = value[2:] if value.startswith(("0x", "0X")) else value
    try:
        return bytes.fromhex(text)
    except ValueError as e:
        raise ConfigException(f"{var} is not valid hex", missing_vars=[var]) from e


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: SemidSettings | None = None


def get_config() -> SemidSettings:
    """Get the global configuration instance.

    Returns:
        The singleton SemidSettings instance.
    """
    global _config
    if _config is None:
        _config = SemidSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
