#!/usr/bin/env python3
"""Example 01: Named identities - register several identities from one secret.

This example demonstrates the core semid workflow:
1. Deriving identities for several names from a single host secret
2. Separating identities with salts
3. Re-deriving the same commitment later without stored secrets

Requirements:
    - `pip install -e .` from the repository root

Usage:
    python examples/01_named_identities.py
"""

from __future__ import annotations

import asyncio
import os

from semid.identity import (
    EntropyDeriver,
    Identity,
    IdentityFactory,
    MemoryStateStore,
    Registry,
    SeedEntropySource,
)
from semid.server import REGISTER_IDENTITY, OperationHandler


async def run() -> None:
    store = MemoryStateStore()
    handler = OperationHandler(
        deriver=EntropyDeriver(SeedEntropySource(os.urandom(32))),
        factory=IdentityFactory(),
        registry=Registry(store),
    )

    print("=" * 60)
    print("  semid Example 01: Named identities")
    print("=" * 60)
    print()

    # =========================================================================
    # Step 1: Register identities under different names and salts
    # =========================================================================
    for name, salt in [(None, None), ("work", "work"), ("gaming", "gaming")]:
        commitment = await handler.handle(REGISTER_IDENTITY, {"name": name, "salt": salt})
        print(f"  {name or 'default':<8} {commitment}")
    print()

    # =========================================================================
    # Step 2: Same salt, same commitment
    # =========================================================================
    again = await handler.handle(REGISTER_IDENTITY, {"name": "work", "salt": "work"})
    print(f"  work again  {again}")
    print()

    # =========================================================================
    # Step 3: Rebuild identities from the registry
    # =========================================================================
    mapping = await handler.registry.load()
    for name, serialized in sorted(mapping.items()):
        print(f"  {name:<8} -> {Identity.from_serialized(serialized).commitment_hex}")


def main() -> None:
    asyncio.run(run())


if __name__ == "__main__":
    main()
