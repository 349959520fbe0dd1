# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Custom exception hierarchy for semid.

Every failure of an identity operation is immediately fatal to that
invocation. Nothing here is retried internally: callers cannot safely repeat
an operation without knowing whether storage was mutated.
"""

from __future__ import annotations


class SemidException(Exception):  # noqa: N818 - mirrors the project naming
    """Base exception for all semid errors."""

    def __init__(self, message: str, details: dict | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class ConfigException(SemidException):
    """Exception for configuration errors.

    Raised when:
    - A required setting (e.g. the entropy seed) is missing
    - A setting holds a value that cannot be decoded
    """

    def __init__(self, message: str, missing_vars: list[str] | None = None):
        details = {}
        if missing_vars:
            details["missing_vars"] = missing_vars
        super().__init__(message, details)
        self.missing_vars = missing_vars or []


class MethodNotFoundError(SemidException):
    """The requested operation name is not recognized."""

    def __init__(self, method: str):
        super().__init__(f"Method not found: {method}", {"method": method})
        self.method = method


class InvalidParamsError(SemidException):
    """Operation parameters are malformed."""


class InvalidEntropyError(SemidException):
    """Derived entropy fails the minimum length or type checks.

    Indicates a host or integration bug, never a transient fault.
    """


class EntropySourceUnavailableError(SemidException):
    """The host secret could not be derived. No identity is created."""


class StorageUnavailableError(SemidException):
    """The registry could not be read or written.

    The registry guarantees the previously persisted state is intact.
    """


class RegistryConflictError(StorageUnavailableError):
    """The persisted mapping changed between load and save."""
