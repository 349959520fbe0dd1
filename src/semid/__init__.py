# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Semid - named, deterministic zero-knowledge group identities.

One host secret yields any number of identities, each addressed by a name and
optionally separated by a salt. Every identity exposes a public commitment
(safe to share, used as a group-membership leaf) and keeps a private value in
the host-managed registry.

Architecture:
  EntropySource (host secret, fixed derivation path)
    → EntropyDeriver (mixes in the caller's salt)
    → IdentityFactory (private value + commitment)
    → Registry (name → serialized identity, read-modify-write)

CLI entry point: ``semid``
"""

__version__ = "0.1.0"
