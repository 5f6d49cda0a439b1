"""
Crypto-Conditions - Reference Implementation

This package implements crypto-conditions: compact, shareable
descriptions of an event (Condition) and proofs that the event
occurred (Fulfillment), including:

- Five condition types: PREIMAGE-SHA-256, PREFIX-SHA-256,
  THRESHOLD-SHA-256, RSA-SHA-256 and ED25519-SHA-256
- Canonical DER encoding of conditions and fulfillments
- ni: URIs for conditions
- Recursive verification of fulfillments against conditions
- RSA-PSS and Ed25519 signature checks via the cryptography package

SPDX-License-Identifier: AGPL-3.0-or-later
"""

__version__ = "1.0.0"

from .conditions import Condition, ConditionType
from .errors import (
    CryptoConditionError,
    ValidationError,
    DecodingError,
    UriDecodingError,
    TypeMismatchError,
)
from .fulfillments import (
    Fulfillment,
    PreimageSha256Fulfillment,
    PrefixSha256Fulfillment,
    ThresholdSha256Fulfillment,
    RsaSha256Fulfillment,
    Ed25519Sha256Fulfillment,
)
from .fingerprints import (
    preimage_condition,
    prefix_condition,
    threshold_condition,
    rsa_condition,
    ed25519_condition,
)
from .condition_codec import encode_condition, decode_condition
from .fulfillment_codec import encode_fulfillment, decode_fulfillment
from .uri import condition_to_uri, parse_condition_uri
from .provider import CryptoProvider, CryptographyProvider, DEFAULT_PROVIDER
from .verify import verify, validate_fulfillment

__all__ = [
    "Condition",
    "ConditionType",
    "CryptoConditionError",
    "ValidationError",
    "DecodingError",
    "UriDecodingError",
    "TypeMismatchError",
    "Fulfillment",
    "PreimageSha256Fulfillment",
    "PrefixSha256Fulfillment",
    "ThresholdSha256Fulfillment",
    "RsaSha256Fulfillment",
    "Ed25519Sha256Fulfillment",
    "preimage_condition",
    "prefix_condition",
    "threshold_condition",
    "rsa_condition",
    "ed25519_condition",
    "encode_condition",
    "decode_condition",
    "encode_fulfillment",
    "decode_fulfillment",
    "condition_to_uri",
    "parse_condition_uri",
    "CryptoProvider",
    "CryptographyProvider",
    "DEFAULT_PROVIDER",
    "verify",
    "validate_fulfillment",
]
