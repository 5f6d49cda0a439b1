"""
Crypto-Conditions - Fulfillment Types

One frozen dataclass per condition type. Each fulfillment derives its
condition once, at construction, from the data it carries; the derived
condition is never taken from outside.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional, Union

from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives import serialization

from .conditions import Condition, ConditionType
from .condition_codec import encode_condition
from .errors import ValidationError
from .fingerprints import (
    ED25519_PUBLIC_KEY_LENGTH,
    ED25519_SIGNATURE_LENGTH,
    ed25519_condition,
    ed25519_fingerprint_contents,
    modulus_to_bytes,
    prefix_condition,
    prefix_fingerprint_contents,
    preimage_condition,
    preimage_fingerprint_contents,
    rsa_condition,
    rsa_fingerprint_contents,
    threshold_condition,
    threshold_fingerprint_contents,
    validate_rsa_modulus,
)
from .provider import RSA_PUBLIC_EXPONENT, CryptoProvider


def _require_bytes(value, name: str) -> bytes:
    if not isinstance(value, (bytes, bytearray, memoryview)):
        raise ValidationError(f"{name} must be bytes, got {type(value).__name__}")
    return bytes(value)


class _Verifiable:
    """Adds fulfillment.verify(condition, message) to every variant."""

    def verify(
        self,
        condition: Condition,
        message: bytes = b"",
        provider: Optional[CryptoProvider] = None,
    ) -> bool:
        # verify imports this module
        from .verify import verify
        return verify(self, condition, message, provider=provider)


@dataclass(frozen=True)
class PreimageSha256Fulfillment(_Verifiable):
    """Reveals the preimage whose SHA-256 digest is the fingerprint."""
    preimage: bytes
    condition: Condition = field(init=False, repr=False, compare=False)

    type: ClassVar[ConditionType] = ConditionType.PREIMAGE_SHA256

    def __post_init__(self):
        object.__setattr__(self, "preimage", _require_bytes(self.preimage, "preimage"))
        object.__setattr__(self, "condition", preimage_condition(self.preimage))

    @property
    def fingerprint_contents(self) -> bytes:
        return preimage_fingerprint_contents(self.preimage)


@dataclass(frozen=True)
class PrefixSha256Fulfillment(_Verifiable):
    """
    Prepends a fixed prefix to the message before handing it to the
    subfulfillment. Messages longer than max_message_length are refused.
    """
    prefix: bytes
    max_message_length: int
    subfulfillment: "Fulfillment"
    condition: Condition = field(init=False, repr=False, compare=False)

    type: ClassVar[ConditionType] = ConditionType.PREFIX_SHA256

    def __post_init__(self):
        object.__setattr__(self, "prefix", _require_bytes(self.prefix, "prefix"))
        if not isinstance(self.subfulfillment, FULFILLMENT_TYPES):
            raise ValidationError("subfulfillment must be a fulfillment")
        object.__setattr__(
            self,
            "condition",
            prefix_condition(self.prefix, self.max_message_length, self.subfulfillment.condition),
        )

    @property
    def subcondition(self) -> Condition:
        return self.subfulfillment.condition

    @property
    def fingerprint_contents(self) -> bytes:
        return prefix_fingerprint_contents(
            self.prefix, self.max_message_length, self.subfulfillment.condition
        )


@dataclass(frozen=True)
class ThresholdSha256Fulfillment(_Verifiable):
    """
    Fulfills `threshold` of a set of subconditions.

    subfulfillments are the fulfilled children; subconditions are the
    remaining children, present only as conditions. The threshold is
    the number of subfulfillments. Both tuples are kept in canonical
    (encoded byte) order, so equal fulfillments compare equal no matter
    how the children were supplied.
    """
    subconditions: tuple
    subfulfillments: tuple
    condition: Condition = field(init=False, repr=False, compare=False)

    type: ClassVar[ConditionType] = ConditionType.THRESHOLD_SHA256

    def __post_init__(self):
        subconditions = tuple(self.subconditions)
        subfulfillments = tuple(self.subfulfillments)
        for subcondition in subconditions:
            if not isinstance(subcondition, Condition):
                raise ValidationError("subconditions must be conditions")
        for subfulfillment in subfulfillments:
            if not isinstance(subfulfillment, FULFILLMENT_TYPES):
                raise ValidationError("subfulfillments must be fulfillments")
        if not subfulfillments:
            raise ValidationError("threshold fulfillment requires at least one subfulfillment")

        # fulfillment_codec imports this module
        from .fulfillment_codec import encode_fulfillment

        object.__setattr__(
            self, "subconditions", tuple(sorted(subconditions, key=encode_condition))
        )
        object.__setattr__(
            self, "subfulfillments", tuple(sorted(subfulfillments, key=encode_fulfillment))
        )
        object.__setattr__(
            self,
            "condition",
            threshold_condition(self.threshold, self.all_subconditions),
        )

    @property
    def threshold(self) -> int:
        return len(self.subfulfillments)

    @property
    def all_subconditions(self) -> list[Condition]:
        """Declared subconditions plus those derived from the subfulfillments."""
        return list(self.subconditions) + [f.condition for f in self.subfulfillments]

    @property
    def fingerprint_contents(self) -> bytes:
        return threshold_fingerprint_contents(self.threshold, self.all_subconditions)


@dataclass(frozen=True)
class RsaSha256Fulfillment(_Verifiable):
    """RSASSA-PSS signature with a public key using exponent 65537."""
    modulus: int
    signature: bytes
    public_exponent: int = RSA_PUBLIC_EXPONENT
    condition: Condition = field(init=False, repr=False, compare=False)

    type: ClassVar[ConditionType] = ConditionType.RSA_SHA256

    def __post_init__(self):
        if self.public_exponent != RSA_PUBLIC_EXPONENT:
            raise ValidationError(
                f"public exponent must be {RSA_PUBLIC_EXPONENT}, got {self.public_exponent}"
            )
        validate_rsa_modulus(self.modulus)
        signature = _require_bytes(self.signature, "signature")
        if len(signature) != len(self.modulus_bytes):
            raise ValidationError(
                f"signature must be {len(self.modulus_bytes)} bytes to match the modulus, "
                f"got {len(signature)}"
            )
        object.__setattr__(self, "signature", signature)
        object.__setattr__(self, "condition", rsa_condition(self.modulus))

    @classmethod
    def from_public_key(cls, public_key: RSAPublicKey, signature: bytes) -> "RsaSha256Fulfillment":
        numbers = public_key.public_numbers()
        return cls(modulus=numbers.n, signature=signature, public_exponent=numbers.e)

    @property
    def modulus_bytes(self) -> bytes:
        return modulus_to_bytes(self.modulus)

    @property
    def fingerprint_contents(self) -> bytes:
        return rsa_fingerprint_contents(self.modulus)


@dataclass(frozen=True)
class Ed25519Sha256Fulfillment(_Verifiable):
    """Ed25519 signature together with the 32-byte public key."""
    public_key: bytes
    signature: bytes
    condition: Condition = field(init=False, repr=False, compare=False)

    type: ClassVar[ConditionType] = ConditionType.ED25519_SHA256

    def __post_init__(self):
        public_key = _require_bytes(self.public_key, "public_key")
        signature = _require_bytes(self.signature, "signature")
        if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
            raise ValidationError(
                f"public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}"
            )
        if len(signature) != ED25519_SIGNATURE_LENGTH:
            raise ValidationError(
                f"signature must be {ED25519_SIGNATURE_LENGTH} bytes, got {len(signature)}"
            )
        object.__setattr__(self, "public_key", public_key)
        object.__setattr__(self, "signature", signature)
        object.__setattr__(self, "condition", ed25519_condition(public_key))

    @classmethod
    def from_public_key(
        cls, public_key: Ed25519PublicKey, signature: bytes
    ) -> "Ed25519Sha256Fulfillment":
        raw = public_key.public_bytes(
            encoding=serialization.Encoding.Raw,
            format=serialization.PublicFormat.Raw,
        )
        return cls(public_key=raw, signature=signature)

    @property
    def fingerprint_contents(self) -> bytes:
        return ed25519_fingerprint_contents(self.public_key)


Fulfillment = Union[
    PreimageSha256Fulfillment,
    PrefixSha256Fulfillment,
    ThresholdSha256Fulfillment,
    RsaSha256Fulfillment,
    Ed25519Sha256Fulfillment,
]

FULFILLMENT_TYPES = (
    PreimageSha256Fulfillment,
    PrefixSha256Fulfillment,
    ThresholdSha256Fulfillment,
    RsaSha256Fulfillment,
    Ed25519Sha256Fulfillment,
)
