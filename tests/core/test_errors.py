"""Tests for the semid exception hierarchy."""

from __future__ import annotations

import pytest

from semid.core.exceptions import (
    ConfigException,
    EntropySourceUnavailableError,
    InvalidEntropyError,
    InvalidParamsError,
    MethodNotFoundError,
    RegistryConflictError,
    SemidException,
    StorageUnavailableError,
)


class TestSemidException:
    def test_to_dict(self):
        e = SemidException("boom", {"k": "v"})
        assert e.to_dict() == {"error": "SemidException", "message": "boom", "details": {"k": "v"}}
        assert str(e) == "boom"

    def test_details_default(self):
        assert SemidException("boom").details == {}

    @pytest.mark.parametrize(
        "cls",
        [
            ConfigException,
            InvalidParamsError,
            InvalidEntropyError,
            EntropySourceUnavailableError,
            StorageUnavailableError,
            RegistryConflictError,
        ],
    )
    def test_hierarchy(self, cls):
        assert issubclass(cls, SemidException)


class TestMethodNotFoundError:
    def test_message(self):
        e = MethodNotFoundError("getIdentity")
        assert e.message == "Method not found: getIdentity"
        assert e.method == "getIdentity"
        assert e.to_dict()["details"] == {"method": "getIdentity"}


class TestConfigException:
    def test_missing_vars(self):
        e = ConfigException("bad", missing_vars=["SEMID_ENTROPY_SEED"])
        assert e.details == {"missing_vars": ["SEMID_ENTROPY_SEED"]}

    def test_no_missing_vars(self):
        assert ConfigException("bad").missing_vars == []
