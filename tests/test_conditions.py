"""
Tests for condition types and the Condition value.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import pytest

from cryptoconditions.conditions import Condition, ConditionType, MAX_COST
from cryptoconditions.errors import ValidationError


FINGERPRINT = bytes(range(32))


class TestConditionType:
    """Tests for ConditionType codes and names."""

    def test_type_codes(self):
        """Test the registered type codes."""
        assert ConditionType.PREIMAGE_SHA256 == 0
        assert ConditionType.PREFIX_SHA256 == 1
        assert ConditionType.THRESHOLD_SHA256 == 2
        assert ConditionType.RSA_SHA256 == 3
        assert ConditionType.ED25519_SHA256 == 4

    def test_type_names(self):
        """Test URI names of each type."""
        assert ConditionType.PREIMAGE_SHA256.type_name == "preimage-sha-256"
        assert ConditionType.PREFIX_SHA256.type_name == "prefix-sha-256"
        assert ConditionType.THRESHOLD_SHA256.type_name == "threshold-sha-256"
        assert ConditionType.RSA_SHA256.type_name == "rsa-sha-256"
        assert ConditionType.ED25519_SHA256.type_name == "ed25519-sha-256"

    def test_from_name_is_case_insensitive(self):
        """Test name lookup ignores case."""
        assert ConditionType.from_name("PREFIX-SHA-256") == ConditionType.PREFIX_SHA256
        assert ConditionType.from_name("Ed25519-Sha-256") == ConditionType.ED25519_SHA256

    def test_from_name_unknown(self):
        """Test unknown names are rejected."""
        with pytest.raises(ValueError):
            ConditionType.from_name("preimage-sha-512")

    def test_compound_types(self):
        """Test only prefix and threshold are compound."""
        compound = {t for t in ConditionType if t.is_compound}
        assert compound == {ConditionType.PREFIX_SHA256, ConditionType.THRESHOLD_SHA256}


class TestCondition:
    """Tests for Condition construction and equality."""

    def test_simple_condition(self):
        """Test building a simple condition."""
        condition = Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, 7)
        assert condition.cost == 7
        assert condition.subtypes is None
        assert not condition.is_compound

    def test_type_code_is_normalized(self):
        """Test a plain int type code becomes a ConditionType."""
        condition = Condition(4, FINGERPRINT, 131072)
        assert condition.type is ConditionType.ED25519_SHA256

    def test_compound_condition_subtypes_frozen(self):
        """Test subtypes are stored as a frozenset of types."""
        condition = Condition(ConditionType.PREFIX_SHA256, FINGERPRINT, 1024, [4, 0])
        assert condition.subtypes == frozenset(
            {ConditionType.ED25519_SHA256, ConditionType.PREIMAGE_SHA256}
        )
        assert condition.is_compound

    def test_compound_condition_may_have_empty_subtypes(self):
        """Test an empty subtype set is allowed for compound types."""
        condition = Condition(ConditionType.THRESHOLD_SHA256, FINGERPRINT, 0, frozenset())
        assert condition.subtypes == frozenset()

    def test_unknown_type_rejected(self):
        """Test unknown type codes are rejected."""
        with pytest.raises(ValidationError):
            Condition(5, FINGERPRINT, 0)

    def test_short_fingerprint_rejected(self):
        """Test fingerprints must be 32 bytes."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT[:31], 0)

    def test_non_bytes_fingerprint_rejected(self):
        """Test fingerprints must be bytes."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREIMAGE_SHA256, "a" * 32, 0)

    def test_negative_cost_rejected(self):
        """Test negative cost is rejected."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, -1)

    def test_cost_upper_bound(self):
        """Test cost is capped at the signed 64-bit maximum."""
        Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, MAX_COST)
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, MAX_COST + 1)

    def test_bool_cost_rejected(self):
        """Test bool is not accepted as a cost."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, True)

    def test_compound_requires_subtypes(self):
        """Test compound conditions must carry subtypes."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.THRESHOLD_SHA256, FINGERPRINT, 1024)

    def test_simple_rejects_subtypes(self):
        """Test simple conditions cannot carry subtypes."""
        with pytest.raises(ValidationError):
            Condition(ConditionType.RSA_SHA256, FINGERPRINT, 65536, frozenset())

    def test_compound_rejects_own_type(self):
        """Test a compound condition cannot list its own type as a subtype."""
        with pytest.raises(ValidationError):
            Condition(
                ConditionType.THRESHOLD_SHA256,
                FINGERPRINT,
                1024,
                {ConditionType.THRESHOLD_SHA256, ConditionType.PREIMAGE_SHA256},
            )
        with pytest.raises(ValidationError):
            Condition(ConditionType.PREFIX_SHA256, FINGERPRINT, 1024, {ConditionType.PREFIX_SHA256})

    def test_equality_covers_all_fields(self):
        """Test conditions are equal only when every field matches."""
        base = Condition(ConditionType.PREFIX_SHA256, FINGERPRINT, 10, {0})
        assert base == Condition(ConditionType.PREFIX_SHA256, bytearray(FINGERPRINT), 10, [0])
        assert base != Condition(ConditionType.PREFIX_SHA256, FINGERPRINT, 11, {0})
        assert base != Condition(ConditionType.PREFIX_SHA256, FINGERPRINT, 10, {4})
        assert base != Condition(ConditionType.THRESHOLD_SHA256, FINGERPRINT, 10, {0})
        assert base != Condition(ConditionType.PREFIX_SHA256, bytes(32), 10, {0})

    def test_hashable(self):
        """Test equal conditions hash alike."""
        a = Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, 3)
        b = Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, 3)
        assert len({a, b}) == 1

    def test_immutable(self):
        """Test conditions cannot be modified."""
        condition = Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, 3)
        with pytest.raises(AttributeError):
            condition.cost = 4

    def test_str_is_uri(self):
        """Test str() renders the condition URI."""
        condition = Condition(ConditionType.PREIMAGE_SHA256, FINGERPRINT, 3)
        assert str(condition).startswith("ni:///sha-256;")
        assert str(condition).endswith("?fpt=preimage-sha-256&cost=3")
