"""
Crypto-Conditions - Fingerprints, Costs and Subtypes

Pure functions that derive a condition from its type-specific inputs.
The fingerprint of every type is SHA-256 over canonical fingerprint
contents:

- preimage:  the preimage itself
- prefix:    SEQUENCE { [0] prefix, [1] maxMessageLength, [2] subcondition }
- threshold: SEQUENCE { [0] threshold, [1] SET OF subconditions }
- rsa:       SEQUENCE { [0] modulus }
- ed25519:   SEQUENCE { [0] publicKey }

Threshold subconditions are sorted by their encoded bytes before
hashing, so the fingerprint does not depend on the order they are
supplied in.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from typing import Iterable, Sequence

from .conditions import Condition, ConditionType, MAX_COST
from .condition_codec import encode_condition
from .der import SEQUENCE, constructed_tag, encode_integer, encode_tlv, primitive_tag
from .errors import ValidationError
from .provider import sha256


PREFIX_COST_OVERHEAD = 1024
THRESHOLD_COST_PER_SUBCONDITION = 1024
ED25519_COST = 131072

ED25519_PUBLIC_KEY_LENGTH = 32
ED25519_SIGNATURE_LENGTH = 64

# Modulus bit length must lie in (RSA_MIN_MODULUS_BITS, RSA_MAX_MODULUS_BITS]
RSA_MIN_MODULUS_BITS = 1017
RSA_MAX_MODULUS_BITS = 4096


def sort_canonical(encodings: Iterable[bytes]) -> list[bytes]:
    """
    Sort encodings into canonical SET OF order.

    Unsigned byte-wise comparison; when one encoding is a prefix of
    another the shorter sorts first. This is exactly Python's ordering
    of bytes objects.
    """
    return sorted(bytes(e) for e in encodings)


def modulus_to_bytes(modulus: int) -> bytes:
    """Minimal unsigned big-endian octets of an RSA modulus."""
    return modulus.to_bytes((modulus.bit_length() + 7) // 8, "big")


def _check_bounded(value: int, name: str) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an int")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative")
    if value > MAX_COST:
        raise ValidationError(f"{name} exceeds maximum of {MAX_COST}")


def compound_subtypes(own_type: ConditionType, subconditions: Iterable[Condition]) -> frozenset:
    """Types found beneath a compound condition, never including its own type."""
    subtypes = set()
    for subcondition in subconditions:
        subtypes.add(subcondition.type)
        if subcondition.is_compound:
            subtypes.update(subcondition.subtypes)
    subtypes.discard(own_type)
    return frozenset(subtypes)


# ---------------------------------------------------------------------------
# Preimage
# ---------------------------------------------------------------------------


def preimage_fingerprint_contents(preimage: bytes) -> bytes:
    return bytes(preimage)


def preimage_cost(preimage: bytes) -> int:
    return len(preimage)


def preimage_condition(preimage: bytes) -> Condition:
    return Condition(
        ConditionType.PREIMAGE_SHA256,
        sha256(preimage_fingerprint_contents(preimage)),
        preimage_cost(preimage),
    )


# ---------------------------------------------------------------------------
# Prefix
# ---------------------------------------------------------------------------


def prefix_fingerprint_contents(
    prefix: bytes,
    max_message_length: int,
    subcondition: Condition,
) -> bytes:
    body = encode_tlv(primitive_tag(0), bytes(prefix))
    body += encode_tlv(primitive_tag(1), encode_integer(max_message_length))
    body += encode_tlv(constructed_tag(2), encode_condition(subcondition))
    return encode_tlv(SEQUENCE, body)


def prefix_cost(prefix: bytes, max_message_length: int, subcondition_cost: int) -> int:
    """cost = len(prefix) + maxMessageLength + subcondition cost + 1024"""
    return len(prefix) + max_message_length + subcondition_cost + PREFIX_COST_OVERHEAD


def prefix_condition(
    prefix: bytes,
    max_message_length: int,
    subcondition: Condition,
) -> Condition:
    """Condition for a prefix over the given subcondition."""
    _check_bounded(max_message_length, "max_message_length")
    return Condition(
        ConditionType.PREFIX_SHA256,
        sha256(prefix_fingerprint_contents(prefix, max_message_length, subcondition)),
        prefix_cost(prefix, max_message_length, subcondition.cost),
        compound_subtypes(ConditionType.PREFIX_SHA256, [subcondition]),
    )


# ---------------------------------------------------------------------------
# Threshold
# ---------------------------------------------------------------------------


def threshold_fingerprint_contents(threshold: int, subconditions: Iterable[Condition]) -> bytes:
    encoded = sort_canonical(encode_condition(c) for c in subconditions)
    body = encode_tlv(primitive_tag(0), encode_integer(threshold))
    body += encode_tlv(constructed_tag(1), b"".join(encoded))
    return encode_tlv(SEQUENCE, body)


def threshold_cost(threshold: int, costs: Sequence[int]) -> int:
    """cost = sum of the threshold largest costs + 1024 per subcondition"""
    if threshold > len(costs):
        raise ValidationError(
            f"threshold {threshold} exceeds the {len(costs)} available subconditions"
        )
    largest = sorted(costs, reverse=True)[:threshold]
    return sum(largest) + THRESHOLD_COST_PER_SUBCONDITION * len(costs)


def threshold_condition(threshold: int, subconditions: Iterable[Condition]) -> Condition:
    """
    Condition for a threshold over the given subconditions.

    subconditions is every child, fulfilled or not; threshold is how
    many of them a fulfillment must satisfy.
    """
    subconditions = list(subconditions)
    _check_bounded(threshold, "threshold")
    if threshold < 1:
        raise ValidationError("threshold must be at least 1")
    return Condition(
        ConditionType.THRESHOLD_SHA256,
        sha256(threshold_fingerprint_contents(threshold, subconditions)),
        threshold_cost(threshold, [c.cost for c in subconditions]),
        compound_subtypes(ConditionType.THRESHOLD_SHA256, subconditions),
    )


# ---------------------------------------------------------------------------
# RSA
# ---------------------------------------------------------------------------


def validate_rsa_modulus(modulus: int) -> None:
    if isinstance(modulus, bool) or not isinstance(modulus, int):
        raise ValidationError("modulus must be an int")
    bits = modulus.bit_length()
    if not RSA_MIN_MODULUS_BITS < bits <= RSA_MAX_MODULUS_BITS:
        raise ValidationError(
            f"modulus bit length {bits} outside "
            f"({RSA_MIN_MODULUS_BITS}, {RSA_MAX_MODULUS_BITS}]"
        )


def rsa_fingerprint_contents(modulus: int) -> bytes:
    return encode_tlv(SEQUENCE, encode_tlv(primitive_tag(0), modulus_to_bytes(modulus)))


def rsa_cost(modulus: int) -> int:
    """cost = floor(bitlength^2 / 64)"""
    bits = modulus.bit_length()
    return bits * bits // 64


def rsa_condition(modulus: int) -> Condition:
    validate_rsa_modulus(modulus)
    return Condition(
        ConditionType.RSA_SHA256,
        sha256(rsa_fingerprint_contents(modulus)),
        rsa_cost(modulus),
    )


# ---------------------------------------------------------------------------
# Ed25519
# ---------------------------------------------------------------------------


def ed25519_fingerprint_contents(public_key: bytes) -> bytes:
    return encode_tlv(SEQUENCE, encode_tlv(primitive_tag(0), bytes(public_key)))


def ed25519_condition(public_key: bytes) -> Condition:
    if len(public_key) != ED25519_PUBLIC_KEY_LENGTH:
        raise ValidationError(
            f"Ed25519 public key must be {ED25519_PUBLIC_KEY_LENGTH} bytes, got {len(public_key)}"
        )
    return Condition(
        ConditionType.ED25519_SHA256,
        sha256(ed25519_fingerprint_contents(public_key)),
        ED25519_COST,
    )
