"""Deterministic named identities.

Key concepts:
- **EntropySource**: Host capability returning secret bytes for a path.
- **EntropyDeriver**: Mixes a salt into host entropy to seed one identity.
- **IdentityFactory**: Turns a seed into an :class:`Identity` (private value
  plus public commitment) through a pluggable :class:`Committer`.
- **Registry**: Persisted name → serialized identity mapping.
"""

from semid.identity.commitment import (
    SNARK_SCALAR_FIELD,
    Committer,
    FieldHashCommitter,
    format_commitment,
)
from semid.identity.entropy import (
    ENTROPY_LENGTH,
    EntropyDeriver,
    EntropySource,
    SeedEntropySource,
    StaticEntropySource,
)
from semid.identity.identity import MIN_ENTROPY_LENGTH, Identity, IdentityFactory
from semid.identity.registry import (
    FileStateStore,
    MemoryStateStore,
    Registry,
    StateStore,
)

__all__ = [
    "SNARK_SCALAR_FIELD",
    "Committer",
    "FieldHashCommitter",
    "format_commitment",
    "ENTROPY_LENGTH",
    "EntropyDeriver",
    "EntropySource",
    "SeedEntropySource",
    "StaticEntropySource",
    "MIN_ENTROPY_LENGTH",
    "Identity",
    "IdentityFactory",
    "FileStateStore",
    "MemoryStateStore",
    "Registry",
    "StateStore",
]
