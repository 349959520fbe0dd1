# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Semid Contributors

"""Named identity registry over a host-managed state store.

The registry is the only component that reads or writes identity state.
Every registration loads the whole mapping, updates it in memory, and writes
the whole mapping back:

    mapping = await registry.load()
    updated = Registry.put(mapping, "alice", identity.serialize())
    await registry.save(updated, expected=mapping)

``save`` with ``expected`` applies only the names this caller changed on top of
what storage holds at write time, so a registration that landed between
``load`` and ``save`` under another name is kept. If both touched the same
name the write is refused with :class:`RegistryConflictError`. The check is
serialized per :class:`Registry` instance; the file store does not lock across
processes.
"""

from __future__ import annotations

import asyncio
import copy
import json
import logging
import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any, Protocol, runtime_checkable

from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..core.exceptions import (
    InvalidParamsError,
    RegistryConflictError,
    SemidException,
    StorageUnavailableError,
)

logger = logging.getLogger(__name__)

ENCRYPTED_ALGORITHM = "AES-256-GCM"

# ---------------------------------------------------------------------------
# Store protocol
# ---------------------------------------------------------------------------


@runtime_checkable
class StateStore(Protocol):
    """Opaque persistent key-value blob managed by the host."""

    async def get(self) -> dict[str, Any] | None: ...
    async def set(self, state: dict[str, Any]) -> None: ...


# ---------------------------------------------------------------------------
# In-memory store (default / tests)
# ---------------------------------------------------------------------------


class MemoryStateStore:
    """Keeps the state blob in memory. Counts reads and writes."""

    def __init__(self, state: dict[str, Any] | None = None) -> None:
        self._state = copy.deepcopy(state) if state is not None else None
        self.reads = 0
        self.writes = 0

    async def get(self) -> dict[str, Any] | None:
        self.reads += 1
        return copy.deepcopy(self._state)

    async def set(self, state: dict[str, Any]) -> None:
        self.writes += 1
        self._state = copy.deepcopy(state)


# ---------------------------------------------------------------------------
# File store
# ---------------------------------------------------------------------------


class FileStateStore:
    """JSON file store with atomic replace and optional encryption at rest.

    Writes go to a temp file that is renamed over the target, so readers see
    either the old or the new blob. With a 32-byte ``key`` the blob is sealed
    with AES-256-GCM.
    """

    def __init__(self, path: str | Path, key: bytes | None = None) -> None:
        self._path = Path(path).expanduser()
        self._aead = AESGCM(key) if key is not None else None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def encrypted(self) -> bool:
        return self._aead is not None

    @classmethod
    def from_config(cls) -> FileStateStore:
        from ..core.config import get_config

        config = get_config()
        return cls(config.state_file, key=config.state_key_bytes())

    async def get(self) -> dict[str, Any] | None:
        return await asyncio.to_thread(self._read)

    async def set(self, state: dict[str, Any]) -> None:
        await asyncio.to_thread(self._write, state)

    def _read(self) -> dict[str, Any] | None:
        if not self._path.exists():
            return None

        data = json.loads(self._path.read_text(encoding="utf-8"))
        sealed = isinstance(data, dict) and data.get("algorithm") == ENCRYPTED_ALGORITHM
        if self._aead is None:
            if sealed:
                raise ValueError(f"State file {self._path} is encrypted; set SEMID_STATE_KEY")
            return data

        if not sealed:
            raise ValueError(f"State file {self._path} is not encrypted")
        plaintext = self._aead.decrypt(
            bytes.fromhex(data["nonce"]),
            bytes.fromhex(data["ciphertext"]),
            None,
        )
        return json.loads(plaintext)

    def _write(self, state: dict[str, Any]) -> None:
        payload = json.dumps(state, sort_keys=True)
        if self._aead is not None:
            nonce = os.urandom(12)
            ciphertext = self._aead.encrypt(nonce, payload.encode("utf-8"), None)
            payload = json.dumps(
                {
                    "algorithm": ENCRYPTED_ALGORITHM,
                    "nonce": nonce.hex(),
                    "ciphertext": ciphertext.hex(),
                }
            )

        self._path.parent.mkdir(parents=True, exist_ok=True)
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")

        # Write to temp file first, then rename (atomic on POSIX)
        temp_path.unlink(missing_ok=True)
        try:
            fd = os.open(temp_path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            temp_path.replace(self._path)
        except Exception:
            if temp_path.exists():
                temp_path.unlink()
            raise


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------


class Registry:
    """Durable mapping from identity name to serialized identity.

    Lifecycle is Uninitialized until the first :meth:`load`, Initialized
    afterwards. Absent state always loads as an empty mapping.
    """

    def __init__(self, store: StateStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def load(self) -> dict[str, str]:
        """Read the full persisted mapping.

        Raises:
            StorageUnavailableError: If the store cannot be read or holds
                something other than a name → string mapping.
        """
        mapping = await self._read()
        self._initialized = True
        return mapping

    async def save(
        self,
        mapping: Mapping[str, str],
        expected: Mapping[str, str] | None = None,
    ) -> None:
        """Persist ``mapping``.

        Args:
            mapping: The complete new mapping.
            expected: The mapping observed at load time. When given, only the
                names that differ between ``expected`` and ``mapping`` are
                applied on top of what storage holds now, so registrations
                that landed in between are kept.

        Raises:
            RegistryConflictError: If a name this call changes was also
                changed in storage since ``expected``.
            StorageUnavailableError: If the write fails. The previous state
                is left intact.
        """
        async with self._lock:
            if expected is None:
                await self._write(dict(mapping))
                return

            current = await self._read()
            if current == dict(expected):
                await self._write(dict(mapping))
                return

            ours = _changed_names(expected, mapping)
            theirs = _changed_names(expected, current)
            overlap = sorted(ours & theirs)
            if overlap:
                raise RegistryConflictError(
                    "Registry changed since it was loaded",
                    {"changed_names": overlap},
                )

            merged = dict(current)
            for name in ours:
                if name in mapping:
                    merged[name] = mapping[name]
                else:
                    merged.pop(name, None)
            logger.debug("Merged %d concurrent registry change(s)", len(theirs))
            await self._write(merged)

    async def clear(self) -> None:
        """Reset the persisted mapping to empty."""
        async with self._lock:
            await self._write({})
        logger.info("Identity registry cleared")

    @staticmethod
    def put(mapping: Mapping[str, str], name: str, serialized: str) -> dict[str, str]:
        """Return a copy of ``mapping`` with ``name`` bound to ``serialized``."""
        if not isinstance(name, str) or not name:
            raise InvalidParamsError("Identity name must be a non-empty string")
        updated = dict(mapping)
        updated[name] = serialized
        return updated

    async def _read(self) -> dict[str, str]:
        try:
            state = await self._store.get()
        except SemidException:
            raise
        except Exception as e:
            raise StorageUnavailableError(f"Failed to load registry: {e}") from e

        if state is None:
            return {}
        if not isinstance(state, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in state.items()
        ):
            raise StorageUnavailableError("Persisted registry state is malformed")
        return dict(state)

    async def _write(self, mapping: dict[str, str]) -> None:
        try:
            await self._store.set(mapping)
        except SemidException:
            raise
        except Exception as e:
            raise StorageUnavailableError(f"Failed to save registry: {e}") from e
        logger.debug("Registry saved (%d identities)", len(mapping))


def _changed_names(before: Mapping[str, str], after: Mapping[str, str]) -> set[str]:
    return {
        name
        for name in before.keys() | after.keys()
        if before.get(name) != after.get(name)
    }
