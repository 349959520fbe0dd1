# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Commitment primitive for identities.

The identity layer treats commitment as a black box: deterministic,
collision-resistant and one-way. Anything satisfying :class:`Committer` can
be supplied to :class:`~semid.identity.identity.IdentityFactory`.

The default :class:`FieldHashCommitter` hashes the private value with a
domain tag and reduces the digest into the BN254 scalar field, so the
commitment is a valid field element for Semaphore-style membership circuits.
"""

from __future__ import annotations

import hashlib
from typing import Protocol, runtime_checkable

# Order of the BN254 scalar field (the SNARK field used by Semaphore)
SNARK_SCALAR_FIELD = 21888242871839275222246405745257275088548364400416034343698204186575808495617

COMMITMENT_DOMAIN = b"semid/commitment/v1"
COMMITMENT_HEX_WIDTH = 64


@runtime_checkable
class Committer(Protocol):
    """Capability turning a private value into a public commitment."""

    def commit(self, private_value: bytes) -> int: ...


class FieldHashCommitter:
    """SHA-256 commitment reduced into the SNARK scalar field."""

    def __init__(self, domain: bytes = COMMITMENT_DOMAIN) -> None:
        self._domain = domain

    def commit(self, private_value: bytes) -> int:
        digest = hashlib.sha256(self._domain + private_value).digest()
        return int.from_bytes(digest, "big") % SNARK_SCALAR_FIELD


def format_commitment(commitment: int) -> str:
    """Render a commitment as ``0x`` + 64 lowercase hex digits.

    Raises:
        ValueError: If the value is negative or wider than 256 bits.
    """
    if commitment < 0 or commitment.bit_length() > COMMITMENT_HEX_WIDTH * 4:
        raise ValueError(f"Commitment out of range: {commitment}")
    return "0x" + format(commitment, f"0{COMMITMENT_HEX_WIDTH}x")
