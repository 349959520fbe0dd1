"""Core infrastructure for semid: configuration, errors and logging."""

from .config import SemidSettings, clear_config_cache, get_config
from .exceptions import (
    ConfigException,
    EntropySourceUnavailableError,
    InvalidEntropyError,
    InvalidParamsError,
    MethodNotFoundError,
    RegistryConflictError,
    SemidException,
    StorageUnavailableError,
)

__all__ = [
    "SemidSettings",
    "get_config",
    "clear_config_cache",
    "SemidException",
    "ConfigException",
    "MethodNotFoundError",
    "InvalidParamsError",
    "InvalidEntropyError",
    "EntropySourceUnavailableError",
    "StorageUnavailableError",
    "RegistryConflictError",
]
