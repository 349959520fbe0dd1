"""Tests for Identity, IdentityFactory and the commitment primitive."""

from __future__ import annotations

import hashlib

import pytest

from semid.core.exceptions import InvalidEntropyError
from semid.identity.commitment import (
    COMMITMENT_DOMAIN,
    SNARK_SCALAR_FIELD,
    Committer,
    FieldHashCommitter,
    format_commitment,
)
from semid.identity.identity import MIN_ENTROPY_LENGTH, Identity, IdentityFactory

ENTROPY = hashlib.sha256(b"host secret").digest()


class _XorCommitter:
    """Test double: commitment is the private value's first byte."""

    def __init__(self):
        self.calls: list[bytes] = []

    def commit(self, private_value: bytes) -> int:
        self.calls.append(private_value)
        return private_value[0]


# ---------------------------------------------------------------------------
# Commitment
# ---------------------------------------------------------------------------


class TestFieldHashCommitter:
    def test_matches_definition(self):
        expected = int.from_bytes(hashlib.sha256(COMMITMENT_DOMAIN + ENTROPY).digest(), "big") % SNARK_SCALAR_FIELD
        assert FieldHashCommitter().commit(ENTROPY) == expected

    def test_in_field(self):
        for i in range(20):
            value = FieldHashCommitter().commit(bytes([i]) * 32)
            assert 0 <= value < SNARK_SCALAR_FIELD

    def test_domain_separates(self):
        assert FieldHashCommitter(b"a").commit(ENTROPY) != FieldHashCommitter(b"b").commit(ENTROPY)

    def test_satisfies_protocol(self):
        assert isinstance(FieldHashCommitter(), Committer)


class TestFormatCommitment:
    def test_fixed_width(self):
        assert format_commitment(1) == "0x" + "0" * 63 + "1"
        assert len(format_commitment(SNARK_SCALAR_FIELD - 1)) == 66

    def test_lowercase(self):
        assert format_commitment(0xABC).endswith("abc")

    def test_out_of_range(self):
        with pytest.raises(ValueError):
            format_commitment(-1)
        with pytest.raises(ValueError):
            format_commitment(1 << 256)


# ---------------------------------------------------------------------------
# IdentityFactory
# ---------------------------------------------------------------------------


class TestIdentityFactory:
    def test_private_value_is_entropy(self):
        identity = IdentityFactory().create(ENTROPY)
        assert identity.private_value == ENTROPY

    def test_commitment_from_committer(self):
        identity = IdentityFactory().create(ENTROPY)
        assert identity.commitment == FieldHashCommitter().commit(ENTROPY)

    def test_deterministic(self):
        a = IdentityFactory().create(ENTROPY)
        b = IdentityFactory().create(ENTROPY)
        assert a == b
        assert a.commitment_hex == b.commitment_hex

    def test_different_entropy_different_commitment(self):
        a = IdentityFactory().create(ENTROPY)
        b = IdentityFactory().create(hashlib.sha256(b"other").digest())
        assert a.commitment != b.commitment

    def test_injected_committer(self):
        committer = _XorCommitter()
        identity = IdentityFactory(committer).create(b"\x07" * 32)
        assert identity.commitment == 7
        assert committer.calls == [b"\x07" * 32]

    def test_accepts_bytearray(self):
        identity = IdentityFactory().create(bytearray(ENTROPY))
        assert identity.private_value == ENTROPY

    def test_accepts_longer_entropy(self):
        identity = IdentityFactory().create(b"\x01" * 64)
        assert len(identity.private_value) == 64

    def test_rejects_short_entropy(self):
        with pytest.raises(InvalidEntropyError) as exc_info:
            IdentityFactory().create(b"\x01" * (MIN_ENTROPY_LENGTH - 1))
        assert exc_info.value.details == {"length": MIN_ENTROPY_LENGTH - 1}

    def test_rejects_empty_entropy(self):
        with pytest.raises(InvalidEntropyError):
            IdentityFactory().create(b"")

    def test_rejects_non_bytes(self):
        with pytest.raises(InvalidEntropyError):
            IdentityFactory().create(ENTROPY.hex())


# ---------------------------------------------------------------------------
# Identity
# ---------------------------------------------------------------------------


class TestIdentity:
    def test_serialize(self):
        identity = IdentityFactory().create(ENTROPY)
        assert identity.serialize() == "0x" + ENTROPY.hex()

    def test_from_serialized_rebuilds(self):
        identity = IdentityFactory().create(ENTROPY)
        restored = Identity.from_serialized(identity.serialize())
        assert restored == identity

    def test_from_serialized_without_prefix(self):
        assert Identity.from_serialized(ENTROPY.hex()).private_value == ENTROPY

    def test_from_serialized_invalid(self):
        with pytest.raises(InvalidEntropyError):
            Identity.from_serialized("0xnothex")

    def test_repr_hides_private_value(self):
        identity = IdentityFactory().create(ENTROPY)
        assert ENTROPY.hex() not in repr(identity)
        assert "private_value" not in repr(identity)

    def test_frozen(self):
        identity = IdentityFactory().create(ENTROPY)
        with pytest.raises(AttributeError):
            identity.commitment = 0  # type: ignore[misc]
