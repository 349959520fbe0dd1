# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Identity value object and factory.

An :class:`Identity` is rebuilt from derived entropy on every registration
and is never loaded from storage as a live object; only its serialized form
(``"0x"`` + hex of the private value) is persisted. Identical entropy always
yields a byte-identical private value and commitment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from ..core.exceptions import InvalidEntropyError
from .commitment import Committer, FieldHashCommitter, format_commitment
from .entropy import ENTROPY_LENGTH

logger = logging.getLogger(__name__)

MIN_ENTROPY_LENGTH = ENTROPY_LENGTH


@dataclass(frozen=True)
class Identity:
    """A group-membership identity.

    Attributes:
        private_value: Secret seed bytes. Never logged, never exported
            outside the registry.
        commitment: Public commitment to ``private_value``.
    """

    private_value: bytes = field(repr=False)
    commitment: int

    @property
    def commitment_hex(self) -> str:
        """The commitment as a fixed-width ``0x``-prefixed hex string."""
        return format_commitment(self.commitment)

    def serialize(self) -> str:
        """Encode the private value for the registry."""
        return "0x" + self.private_value.hex()

    @classmethod
    def from_serialized(
        cls,
        serialized: str,
        committer: Committer | None = None,
    ) -> Identity:
        """Rebuild an identity from its registry encoding.

        Raises:
            InvalidEntropyError: If ``serialized`` is not a valid encoding.
        """
        text = serialized[2:] if serialized.startswith("0x") else serialized
        try:
            private_value = bytes.fromhex(text)
        except ValueError as e:
            raise InvalidEntropyError("Serialized identity is not valid hex") from e
        return IdentityFactory(committer).create(private_value)


class IdentityFactory:
    """Builds identities from derived entropy.

    The private value is the entropy itself; commitment arithmetic is
    delegated to the injected :class:`Committer`.
    """

    def __init__(self, committer: Committer | None = None) -> None:
        self._committer = committer or FieldHashCommitter()

    def create(self, entropy: bytes) -> Identity:
        """Create the identity for ``entropy``.

        Raises:
            InvalidEntropyError: If ``entropy`` is not bytes or is shorter
                than :data:`MIN_ENTROPY_LENGTH`.
        """
        if not isinstance(entropy, (bytes, bytearray)):
            raise InvalidEntropyError(
                "Entropy must be bytes",
                {"type": type(entropy).__name__},
            )
        if len(entropy) < MIN_ENTROPY_LENGTH:
            raise InvalidEntropyError(
                f"Entropy must be at least {MIN_ENTROPY_LENGTH} bytes",
                {"length": len(entropy)},
            )

        private_value = bytes(entropy)
        commitment = self._committer.commit(private_value)
        return Identity(private_value=private_value, commitment=commitment)
