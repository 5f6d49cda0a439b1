"""
Crypto-Conditions - Fulfillment Verification

Implements verify(): checking that a fulfillment satisfies a condition
for a given message.

Verification is:
- Gated by equality: the fulfillment's own derived condition must equal
  the supplied condition before any cryptography runs
- Binary: semantic failures return False
- Strict about contracts: a type mismatch or an over-long prefix
  message raises instead of returning False
- Read-only: the same call always gives the same answer

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from typing import Callable, Optional, Union

from .conditions import Condition, ConditionType
from .condition_codec import decode_condition
from .errors import TypeMismatchError, ValidationError
from .fulfillment_codec import decode_fulfillment
from .fulfillments import (
    Ed25519Sha256Fulfillment,
    Fulfillment,
    PrefixSha256Fulfillment,
    PreimageSha256Fulfillment,
    RsaSha256Fulfillment,
    ThresholdSha256Fulfillment,
)
from .provider import CryptoProvider, DEFAULT_PROVIDER
from .uri import parse_condition_uri


logger = logging.getLogger(__name__)


def _verify_preimage(
    fulfillment: PreimageSha256Fulfillment,
    message: bytes,
    provider: CryptoProvider,
) -> bool:
    # Matching fingerprints already prove knowledge of the preimage
    return True


def _verify_prefix(
    fulfillment: PrefixSha256Fulfillment,
    message: bytes,
    provider: CryptoProvider,
) -> bool:
    if len(message) > fulfillment.max_message_length:
        raise ValidationError(
            f"message length {len(message)} exceeds maximum message length "
            f"{fulfillment.max_message_length}"
        )
    subfulfillment = fulfillment.subfulfillment
    return verify(
        subfulfillment,
        subfulfillment.condition,
        fulfillment.prefix + message,
        provider=provider,
    )


def _verify_threshold(
    fulfillment: ThresholdSha256Fulfillment,
    message: bytes,
    provider: CryptoProvider,
) -> bool:
    for subfulfillment in fulfillment.subfulfillments:
        if not verify(subfulfillment, subfulfillment.condition, message, provider=provider):
            return False
    return True


def _verify_rsa(
    fulfillment: RsaSha256Fulfillment,
    message: bytes,
    provider: CryptoProvider,
) -> bool:
    valid = provider.rsa_pss_verify(
        fulfillment.modulus,
        fulfillment.public_exponent,
        message,
        fulfillment.signature,
    )
    if not valid:
        logger.debug("rsa-sha-256 signature rejected by provider")
    return valid


def _verify_ed25519(
    fulfillment: Ed25519Sha256Fulfillment,
    message: bytes,
    provider: CryptoProvider,
) -> bool:
    valid = provider.ed25519_verify(fulfillment.public_key, message, fulfillment.signature)
    if not valid:
        logger.debug("ed25519-sha-256 signature rejected by provider")
    return valid


_VERIFIERS: dict[ConditionType, Callable[..., bool]] = {
    ConditionType.PREIMAGE_SHA256: _verify_preimage,
    ConditionType.PREFIX_SHA256: _verify_prefix,
    ConditionType.THRESHOLD_SHA256: _verify_threshold,
    ConditionType.RSA_SHA256: _verify_rsa,
    ConditionType.ED25519_SHA256: _verify_ed25519,
}


def verify(
    fulfillment: Fulfillment,
    condition: Condition,
    message: bytes = b"",
    provider: Optional[CryptoProvider] = None,
) -> bool:
    """
    Verify that a fulfillment satisfies a condition for a message.

    Steps:
    1. The condition must be of the fulfillment's type and the message
       must be bytes (TypeMismatchError)
    2. The fulfillment's derived condition must equal the given one,
       otherwise False with no cryptographic work done
    3. Type-specific check: preimages pass, signatures go to the
       provider, prefixes verify prefix || message against their
       subfulfillment, thresholds require every subfulfillment to verify

    Returns True only if every step passes.
    """
    if provider is None:
        provider = DEFAULT_PROVIDER

    if not isinstance(condition, Condition):
        raise TypeMismatchError(
            f"expected a Condition, got {type(condition).__name__}"
        )
    if condition.type != fulfillment.type:
        raise TypeMismatchError(
            f"cannot verify a {fulfillment.type.type_name} fulfillment "
            f"against a {condition.type.type_name} condition"
        )
    if not isinstance(message, (bytes, bytearray, memoryview)):
        raise TypeMismatchError(f"message must be bytes, got {type(message).__name__}")

    if fulfillment.condition != condition:
        logger.debug(
            "%s fulfillment does not match condition (cost %d vs %d)",
            fulfillment.type.type_name,
            fulfillment.condition.cost,
            condition.cost,
        )
        return False

    return _VERIFIERS[fulfillment.type](fulfillment, bytes(message), provider)


def validate_fulfillment(
    fulfillment: Union[Fulfillment, bytes],
    condition: Union[Condition, bytes, str],
    message: bytes = b"",
    provider: Optional[CryptoProvider] = None,
) -> bool:
    """
    Decode (where needed) and verify in one call.

    The fulfillment may be given in binary form; the condition may be
    given in binary form or as an ni: URI. Malformed input raises
    DecodingError / UriDecodingError rather than returning False.
    """
    if isinstance(fulfillment, (bytes, bytearray)):
        fulfillment = decode_fulfillment(fulfillment)
    if isinstance(condition, str):
        condition = parse_condition_uri(condition)
    elif isinstance(condition, (bytes, bytearray)):
        condition = decode_condition(condition)
    return verify(fulfillment, condition, message, provider=provider)
