"""
Tests for fingerprint contents, costs and subtypes.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import hashlib
from itertools import permutations

import pytest

from cryptoconditions.conditions import Condition, ConditionType, MAX_COST
from cryptoconditions.condition_codec import encode_condition
from cryptoconditions.errors import ValidationError
from cryptoconditions.fingerprints import (
    ED25519_COST,
    compound_subtypes,
    ed25519_condition,
    ed25519_fingerprint_contents,
    prefix_condition,
    prefix_cost,
    prefix_fingerprint_contents,
    preimage_condition,
    rsa_condition,
    rsa_cost,
    rsa_fingerprint_contents,
    sort_canonical,
    threshold_condition,
    threshold_cost,
)


class TestCanonicalOrder:
    """Tests for SET OF ordering."""

    def test_bytewise_unsigned(self):
        """Test ordering compares octets as unsigned values."""
        assert sort_canonical([b"\xff", b"\x01", b"\x80"]) == [b"\x01", b"\x80", b"\xff"]

    def test_shorter_prefix_first(self):
        """Test a prefix of another encoding sorts before it."""
        assert sort_canonical([b"\x02", b"\x01\x05", b"\x01"]) == [b"\x01", b"\x01\x05", b"\x02"]


class TestCosts:
    """Tests for per-type cost formulas."""

    def test_preimage_cost_is_length(self):
        """Test preimage cost equals preimage length."""
        assert preimage_condition(b"").cost == 0
        assert preimage_condition(b"abc").cost == 3

    def test_prefix_cost(self):
        """Test prefix cost adds prefix, limit, subcost and overhead."""
        assert prefix_cost(b"Ying ", 100, 131072) == 5 + 100 + 131072 + 1024

    def test_threshold_cost_uses_largest(self):
        """Test threshold cost sums the largest costs."""
        assert threshold_cost(2, [1, 3, 2]) == 3 + 2 + 3 * 1024
        assert threshold_cost(1, [10]) == 10 + 1024

    def test_threshold_cost_threshold_too_large(self):
        """Test a threshold above the subcondition count is rejected."""
        with pytest.raises(ValidationError):
            threshold_cost(3, [1, 2])

    def test_rsa_cost(self):
        """Test RSA cost is bit length squared over 64."""
        assert rsa_cost((1 << 2047) | 1) == 65536
        assert rsa_cost((1 << 4095) | 1) == 262144

    def test_ed25519_cost(self):
        """Test Ed25519 cost is constant."""
        assert ed25519_condition(bytes(32)).cost == ED25519_COST == 131072


class TestFingerprintContents:
    """Tests for the bytes hashed into each fingerprint."""

    def test_preimage_fingerprint(self):
        """Test preimage fingerprint is SHA-256 of the preimage."""
        assert preimage_condition(b"abc").fingerprint == hashlib.sha256(b"abc").digest()

    def test_ed25519_contents(self):
        """Test Ed25519 contents wrap the key in a SEQUENCE."""
        public_key = bytes(range(32))
        contents = ed25519_fingerprint_contents(public_key)
        assert contents == b"\x30\x22\x80\x20" + public_key
        assert ed25519_condition(public_key).fingerprint == hashlib.sha256(contents).digest()

    def test_rsa_contents(self):
        """Test RSA contents wrap the unsigned modulus."""
        modulus = (1 << 2047) | 1
        modulus_bytes = modulus.to_bytes(256, "big")
        assert rsa_fingerprint_contents(modulus) == b"\x30\x82\x01\x04\x80\x82\x01\x00" + modulus_bytes

    def test_prefix_contents(self):
        """Test prefix contents layout."""
        subcondition = preimage_condition(b"")
        encoded = encode_condition(subcondition)
        contents = prefix_fingerprint_contents(b"", 0, subcondition)
        expected_body = b"\x80\x00" + b"\x81\x01\x00" + b"\xa2\x27" + encoded
        assert contents == b"\x30\x2e" + expected_body

    def test_prefix_fingerprint(self):
        """Test prefix fingerprint hashes the contents."""
        subcondition = preimage_condition(b"secret")
        condition = prefix_condition(b"P", 10, subcondition)
        contents = prefix_fingerprint_contents(b"P", 10, subcondition)
        assert condition.fingerprint == hashlib.sha256(contents).digest()


class TestPrefixCondition:
    """Tests for prefix_condition."""

    def test_subtypes_from_subcondition(self):
        """Test subtypes include the subcondition type."""
        condition = prefix_condition(b"", 0, ed25519_condition(bytes(32)))
        assert condition.subtypes == {ConditionType.ED25519_SHA256}

    def test_nested_prefix_excludes_own_type(self):
        """Test a prefix over a prefix does not list prefix."""
        inner = prefix_condition(b"a", 0, preimage_condition(b"x"))
        outer = prefix_condition(b"b", 0, inner)
        assert outer.subtypes == {ConditionType.PREIMAGE_SHA256}

    def test_negative_limit_rejected(self):
        """Test max message length must be non-negative."""
        with pytest.raises(ValidationError):
            prefix_condition(b"", -1, preimage_condition(b""))

    def test_limit_bounded(self):
        """Test max message length is capped."""
        with pytest.raises(ValidationError):
            prefix_condition(b"", MAX_COST + 1, preimage_condition(b""))


class TestThresholdCondition:
    """Tests for threshold_condition."""

    @pytest.fixture
    def subconditions(self):
        return [
            preimage_condition(b"one"),
            ed25519_condition(bytes(range(32))),
            prefix_condition(b"p", 5, preimage_condition(b"two")),
        ]

    def test_order_independent(self, subconditions):
        """Test every ordering of subconditions gives the same condition."""
        results = {threshold_condition(2, p) for p in permutations(subconditions)}
        assert len(results) == 1

    def test_cost(self, subconditions):
        """Test threshold cost over real subconditions."""
        condition = threshold_condition(2, subconditions)
        costs = sorted((c.cost for c in subconditions), reverse=True)
        assert condition.cost == costs[0] + costs[1] + 3 * 1024

    def test_subtypes_exclude_threshold(self, subconditions):
        """Test subtypes gather nested types but never threshold itself."""
        inner = threshold_condition(1, subconditions[:1])
        condition = threshold_condition(1, subconditions + [inner])
        assert condition.subtypes == {
            ConditionType.PREIMAGE_SHA256,
            ConditionType.ED25519_SHA256,
            ConditionType.PREFIX_SHA256,
        }

    def test_zero_threshold_rejected(self, subconditions):
        """Test a zero threshold is rejected."""
        with pytest.raises(ValidationError):
            threshold_condition(0, subconditions)

    def test_threshold_above_count_rejected(self, subconditions):
        """Test a threshold above the subcondition count is rejected."""
        with pytest.raises(ValidationError):
            threshold_condition(4, subconditions)


class TestCompoundSubtypes:
    """Tests for compound_subtypes."""

    def test_includes_nested_subtypes(self):
        """Test subtypes of compound children are inherited."""
        child = Condition(
            ConditionType.THRESHOLD_SHA256,
            bytes(32),
            0,
            {ConditionType.RSA_SHA256, ConditionType.PREFIX_SHA256},
        )
        subtypes = compound_subtypes(ConditionType.PREFIX_SHA256, [child])
        assert subtypes == {ConditionType.THRESHOLD_SHA256, ConditionType.RSA_SHA256}


class TestRsaCondition:
    """Tests for rsa_condition modulus bounds."""

    def test_bounds(self):
        """Test modulus bit length must be in (1017, 4096]."""
        rsa_condition((1 << 1017) | 1)
        rsa_condition((1 << 4095) | 1)
        with pytest.raises(ValidationError):
            rsa_condition((1 << 1016) | 1)
        with pytest.raises(ValidationError):
            rsa_condition(1 << 4096)
