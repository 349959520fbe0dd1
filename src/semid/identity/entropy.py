# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Entropy sources and per-identity entropy derivation.

The host secret is reached only through an :class:`EntropySource`
capability, always along one fixed application-scoped derivation path. The
:class:`EntropyDeriver` then mixes in the caller's salt with SHA-256, so the
identity seed is a pure function of (host secret, salt):

    D = SHA-256(E)                  no salt, or empty salt
    D = SHA-256(E || UTF-8(salt))   otherwise

An absent salt and an empty-string salt derive the same seed.
"""

from __future__ import annotations

import hashlib
import logging
from typing import Protocol, runtime_checkable

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

from ..core.config import DEFAULT_DERIVATION_PATH
from ..core.exceptions import (
    EntropySourceUnavailableError,
    InvalidEntropyError,
    SemidException,
)

logger = logging.getLogger(__name__)

ENTROPY_LENGTH = 32

# ---------------------------------------------------------------------------
# Source protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class EntropySource(Protocol):
    """Host capability returning deterministic secret bytes for a path.

    Same path must always yield the same bytes within one trusted context.
    """

    async def get_entropy(self, path: str) -> bytes: ...


# ---------------------------------------------------------------------------
# Implementations
# ---------------------------------------------------------------------------


class StaticEntropySource:
    """Returns fixed bytes for every path. Records the paths requested."""

    def __init__(self, secret: bytes) -> None:
        self._secret = secret
        self.requested_paths: list[str] = []

    async def get_entropy(self, path: str) -> bytes:
        self.requested_paths.append(path)
        return self._secret


class SeedEntropySource:
    """Derives path-scoped secrets from a host seed with HKDF-SHA256.

    The derivation path is the HKDF ``info`` parameter, so distinct paths
    yield independent secrets from one seed.
    """

    def __init__(self, seed: bytes) -> None:
        if not seed:
            raise EntropySourceUnavailableError("Host seed is empty")
        self._seed = seed

    @classmethod
    def from_config(cls) -> SeedEntropySource:
        """Build from ``SEMID_ENTROPY_SEED``.

        Raises:
            EntropySourceUnavailableError: If no seed is configured.
            ConfigException: If the seed is not valid hex.
        """
        from ..core.config import get_config

        seed = get_config().entropy_seed_bytes()
        if seed is None:
            raise EntropySourceUnavailableError(
                "No host seed configured (set SEMID_ENTROPY_SEED)",
                {"missing_vars": ["SEMID_ENTROPY_SEED"]},
            )
        return cls(seed)

    async def get_entropy(self, path: str) -> bytes:
        hkdf = HKDF(
            algorithm=hashes.SHA256(),
            length=ENTROPY_LENGTH,
            salt=None,
            info=path.encode("utf-8"),
        )
        return hkdf.derive(self._seed)


# ---------------------------------------------------------------------------
# Deriver
# ---------------------------------------------------------------------------


class EntropyDeriver:
    """Combines host entropy with an optional salt into an identity seed."""

    def __init__(
        self,
        source: EntropySource,
        path: str = DEFAULT_DERIVATION_PATH,
    ) -> None:
        self._source = source
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    async def derive(self, salt: str | None = None) -> bytes:
        """Derive the 32-byte identity seed for ``salt``.

        Raises:
            EntropySourceUnavailableError: If the host source fails.
            InvalidEntropyError: If the host source returns no usable bytes.
        """
        try:
            raw = await self._source.get_entropy(self._path)
        except SemidException:
            raise
        except Exception as e:
            raise EntropySourceUnavailableError(
                f"Entropy source failed: {e}", {"path": self._path}
            ) from e

        if not isinstance(raw, (bytes, bytearray)) or not raw:
            raise InvalidEntropyError(
                "Entropy source returned no bytes",
                {"path": self._path, "type": type(raw).__name__},
            )

        hasher = hashlib.sha256(bytes(raw))
        if salt:
            hasher.update(salt.encode("utf-8"))
        logger.debug("Derived identity entropy (salted=%s)", bool(salt))
        return hasher.digest()
