"""Global test fixtures for the semid test suite."""

from __future__ import annotations

import os

import pytest

from semid.core.config import clear_config_cache
from semid.identity.entropy import EntropyDeriver, StaticEntropySource
from semid.identity.identity import IdentityFactory
from semid.identity.registry import MemoryStateStore, Registry
from semid.server.rpc import OperationHandler

HOST_SECRET = bytes(range(32))

# ============================================================================
# Environment Fixtures
# ============================================================================


@pytest.fixture
def clean_env(monkeypatch):
    """Remove all SEMID_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("SEMID_"):
            monkeypatch.delenv(key, raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def semid_env(clean_env, monkeypatch, tmp_path):
    """Point config at a temp state file and a fixed host seed."""
    monkeypatch.setenv("SEMID_ENTROPY_SEED", HOST_SECRET.hex())
    monkeypatch.setenv("SEMID_STATE_FILE", str(tmp_path / "state.json"))
    clear_config_cache()
    return tmp_path / "state.json"


# ============================================================================
# Component Fixtures
# ============================================================================


@pytest.fixture
def entropy_source():
    return StaticEntropySource(HOST_SECRET)


@pytest.fixture
def state_store():
    return MemoryStateStore()


@pytest.fixture
def registry(state_store):
    return Registry(state_store)


@pytest.fixture
def handler(entropy_source, registry):
    return OperationHandler(
        deriver=EntropyDeriver(entropy_source),
        factory=IdentityFactory(),
        registry=registry,
    )
