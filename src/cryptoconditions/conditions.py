"""
Crypto-Conditions - Condition Types

Implements the five condition types and the Condition value: a type,
a 32-byte fingerprint, a cost and, for compound types, the set of
subtypes found beneath it.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from .errors import ValidationError


FINGERPRINT_LENGTH = 32

# Costs, thresholds and message lengths are signed 64-bit values on the wire
MAX_COST = 2**63 - 1


class ConditionType(IntEnum):
    """Condition type codes, used as the CHOICE tag in every encoding."""
    PREIMAGE_SHA256 = 0
    PREFIX_SHA256 = 1
    THRESHOLD_SHA256 = 2
    RSA_SHA256 = 3
    ED25519_SHA256 = 4

    @property
    def type_name(self) -> str:
        """Lowercase name used in condition URIs, e.g. 'preimage-sha-256'."""
        return _TYPE_NAMES[self]

    @property
    def is_compound(self) -> bool:
        return self in COMPOUND_TYPES

    @classmethod
    def from_name(cls, name: str) -> "ConditionType":
        """Look up a type by its URI name, case-insensitively."""
        for condition_type, type_name in _TYPE_NAMES.items():
            if type_name == name.lower():
                return condition_type
        raise ValueError(f"Unknown condition type name: {name}")


_TYPE_NAMES = {
    ConditionType.PREIMAGE_SHA256: "preimage-sha-256",
    ConditionType.PREFIX_SHA256: "prefix-sha-256",
    ConditionType.THRESHOLD_SHA256: "threshold-sha-256",
    ConditionType.RSA_SHA256: "rsa-sha-256",
    ConditionType.ED25519_SHA256: "ed25519-sha-256",
}

COMPOUND_TYPES = frozenset({ConditionType.PREFIX_SHA256, ConditionType.THRESHOLD_SHA256})


@dataclass(frozen=True)
class Condition:
    """
    A public commitment to an event.

    Two conditions are equal when type, fingerprint, cost and subtypes
    all match; this is the comparison verification relies on.
    subtypes is None for simple types and a frozenset for compound ones.
    """
    type: ConditionType
    fingerprint: bytes
    cost: int
    subtypes: Optional[frozenset] = None

    def __post_init__(self):
        try:
            condition_type = ConditionType(self.type)
        except ValueError:
            raise ValidationError(f"Unknown condition type code: {self.type!r}") from None
        object.__setattr__(self, "type", condition_type)

        if not isinstance(self.fingerprint, (bytes, bytearray)):
            raise ValidationError("fingerprint must be bytes")
        if len(self.fingerprint) != FINGERPRINT_LENGTH:
            raise ValidationError(
                f"fingerprint must be {FINGERPRINT_LENGTH} bytes, got {len(self.fingerprint)}"
            )
        object.__setattr__(self, "fingerprint", bytes(self.fingerprint))

        if isinstance(self.cost, bool) or not isinstance(self.cost, int):
            raise ValidationError("cost must be an int")
        if self.cost < 0:
            raise ValidationError("cost must be non-negative")
        if self.cost > MAX_COST:
            raise ValidationError(f"cost exceeds maximum of {MAX_COST}")

        if condition_type.is_compound:
            if self.subtypes is None:
                raise ValidationError(f"{condition_type.type_name} condition requires subtypes")
            try:
                subtypes = frozenset(ConditionType(t) for t in self.subtypes)
            except ValueError:
                raise ValidationError("subtypes contains an unknown type code") from None
            if condition_type in subtypes:
                raise ValidationError(
                    f"{condition_type.type_name} condition cannot list its own type as a subtype"
                )
            object.__setattr__(self, "subtypes", subtypes)
        elif self.subtypes is not None:
            raise ValidationError(f"{condition_type.type_name} condition cannot carry subtypes")

    @property
    def is_compound(self) -> bool:
        return self.type.is_compound

    def __str__(self) -> str:
        from .uri import condition_to_uri
        return condition_to_uri(self)
