"""
Crypto-Conditions - Fulfillment Binary Encoding

Canonical DER encoding of fulfillments, one shape per type:

    preimage   [0] { [0] preimage }
    prefix     [1] { [0] prefix, [1] maxMessageLength, [2] { subfulfillment } }
    threshold  [2] { [0] SET OF subfulfillment, [1] SET OF subcondition }
    rsa        [3] { [0] modulus, [1] signature }
    ed25519    [4] { [0] publicKey, [1] signature }

Threshold subconditions are only the unfulfilled children; the
conditions of the subfulfillments are recomputed on decode. Both SET OF
fields are in canonical order and out-of-order input is rejected.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from typing import Callable

from .conditions import ConditionType
from .condition_codec import encode_condition, read_condition
from .der import DerReader, constructed_tag, encode_integer, encode_tlv, primitive_tag
from .errors import DecodingError, ValidationError
from .fingerprints import sort_canonical
from .fulfillments import (
    Ed25519Sha256Fulfillment,
    Fulfillment,
    PrefixSha256Fulfillment,
    PreimageSha256Fulfillment,
    RsaSha256Fulfillment,
    ThresholdSha256Fulfillment,
)


logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_preimage(fulfillment: PreimageSha256Fulfillment) -> bytes:
    return encode_tlv(primitive_tag(0), fulfillment.preimage)


def _encode_prefix(fulfillment: PrefixSha256Fulfillment) -> bytes:
    body = encode_tlv(primitive_tag(0), fulfillment.prefix)
    body += encode_tlv(primitive_tag(1), encode_integer(fulfillment.max_message_length))
    body += encode_tlv(constructed_tag(2), encode_fulfillment(fulfillment.subfulfillment))
    return body


def _encode_threshold(fulfillment: ThresholdSha256Fulfillment) -> bytes:
    subfulfillments = sort_canonical(encode_fulfillment(f) for f in fulfillment.subfulfillments)
    subconditions = sort_canonical(encode_condition(c) for c in fulfillment.subconditions)
    body = encode_tlv(constructed_tag(0), b"".join(subfulfillments))
    body += encode_tlv(constructed_tag(1), b"".join(subconditions))
    return body


def _encode_rsa(fulfillment: RsaSha256Fulfillment) -> bytes:
    body = encode_tlv(primitive_tag(0), fulfillment.modulus_bytes)
    body += encode_tlv(primitive_tag(1), fulfillment.signature)
    return body


def _encode_ed25519(fulfillment: Ed25519Sha256Fulfillment) -> bytes:
    body = encode_tlv(primitive_tag(0), fulfillment.public_key)
    body += encode_tlv(primitive_tag(1), fulfillment.signature)
    return body


_ENCODERS: dict[ConditionType, Callable[..., bytes]] = {
    ConditionType.PREIMAGE_SHA256: _encode_preimage,
    ConditionType.PREFIX_SHA256: _encode_prefix,
    ConditionType.THRESHOLD_SHA256: _encode_threshold,
    ConditionType.RSA_SHA256: _encode_rsa,
    ConditionType.ED25519_SHA256: _encode_ed25519,
}


def encode_fulfillment(fulfillment: Fulfillment) -> bytes:
    """Encode a fulfillment to its canonical binary form."""
    body = _ENCODERS[fulfillment.type](fulfillment)
    return encode_tlv(constructed_tag(fulfillment.type), body)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _read_preimage(body: DerReader) -> PreimageSha256Fulfillment:
    preimage = body.read(primitive_tag(0), "preimage")
    return PreimageSha256Fulfillment(preimage)


def _read_prefix(body: DerReader) -> PrefixSha256Fulfillment:
    prefix = body.read(primitive_tag(0), "prefix")
    max_message_length = body.read_integer(primitive_tag(1), "max_message_length")
    wrapper = body.read_nested(constructed_tag(2), "subfulfillment")
    subfulfillment = read_fulfillment(wrapper)
    wrapper.finish("subfulfillment")
    return PrefixSha256Fulfillment(prefix, max_message_length, subfulfillment)


def _read_canonical_set(reader: DerReader, field: str, read_element: Callable) -> list:
    """Read SET OF elements, checking they appear in canonical order."""
    elements = []
    previous = None
    while not reader.at_end():
        start = reader.offset
        elements.append(read_element(reader))
        encoded = reader.data[start:reader.offset]
        if previous is not None and encoded < previous:
            raise DecodingError("SET OF elements are not in canonical order", field, start)
        previous = encoded
    return elements


def _read_threshold(body: DerReader) -> ThresholdSha256Fulfillment:
    subfulfillments = _read_canonical_set(
        body.read_nested(constructed_tag(0), "subfulfillments"),
        "subfulfillments",
        read_fulfillment,
    )
    subconditions = _read_canonical_set(
        body.read_nested(constructed_tag(1), "subconditions"),
        "subconditions",
        read_condition,
    )
    return ThresholdSha256Fulfillment(tuple(subconditions), tuple(subfulfillments))


def _read_rsa(body: DerReader) -> RsaSha256Fulfillment:
    modulus_offset = body.offset
    modulus = body.read(primitive_tag(0), "modulus")
    if not modulus or modulus[0] == 0x00:
        raise DecodingError("modulus is not minimally encoded", "modulus", modulus_offset)
    signature = body.read(primitive_tag(1), "signature")
    return RsaSha256Fulfillment(int.from_bytes(modulus, "big"), signature)


def _read_ed25519(body: DerReader) -> Ed25519Sha256Fulfillment:
    public_key = body.read(primitive_tag(0), "public_key")
    signature = body.read(primitive_tag(1), "signature")
    return Ed25519Sha256Fulfillment(public_key, signature)


_READERS: dict[ConditionType, Callable[[DerReader], Fulfillment]] = {
    ConditionType.PREIMAGE_SHA256: _read_preimage,
    ConditionType.PREFIX_SHA256: _read_prefix,
    ConditionType.THRESHOLD_SHA256: _read_threshold,
    ConditionType.RSA_SHA256: _read_rsa,
    ConditionType.ED25519_SHA256: _read_ed25519,
}


def read_fulfillment(reader: DerReader) -> Fulfillment:
    """Read one fulfillment from the reader's current position."""
    start = reader.offset
    tag = reader.peek_tag("fulfillment")
    try:
        fulfillment_type = ConditionType(tag - 0xA0)
    except ValueError:
        raise DecodingError(f"unknown fulfillment tag 0x{tag:02X}", "fulfillment", start) from None

    body = reader.read_nested(tag, "fulfillment")
    try:
        fulfillment = _READERS[fulfillment_type](body)
    except ValidationError as exc:
        raise DecodingError(str(exc), fulfillment_type.type_name, start) from exc
    body.finish(fulfillment_type.type_name)
    return fulfillment


def decode_fulfillment(data: bytes) -> Fulfillment:
    """
    Decode a fulfillment from its binary form.

    The input must hold exactly one canonically encoded fulfillment;
    nested fulfillments and conditions go through the same checks.
    """
    reader = DerReader(data)
    try:
        fulfillment = read_fulfillment(reader)
        reader.finish("fulfillment")
    except DecodingError as exc:
        logger.debug("fulfillment decoding failed: %s", exc)
        raise
    return fulfillment
