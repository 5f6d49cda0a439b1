"""
Crypto-Conditions - Condition Binary Encoding

Canonical DER encoding of conditions:

    [type] { [0] fingerprint, [1] cost, [2] subtypes }

The subtypes BIT STRING is only present for prefix and threshold
conditions.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import logging
from typing import Iterable

from .conditions import Condition, ConditionType, FINGERPRINT_LENGTH
from .der import DerReader, constructed_tag, encode_integer, encode_tlv, primitive_tag
from .errors import DecodingError, ValidationError


logger = logging.getLogger(__name__)

# Five known types leave at least three unused bits in the payload byte
_MIN_UNUSED_BITS = 8 - len(ConditionType)


def encode_subtypes(subtypes: Iterable[ConditionType]) -> bytes:
    """
    Encode a set of types as BIT STRING content octets.

    Bit n (counting from the most significant bit) marks type code n.
    Trailing zero bits are dropped, so the unused-bit count is
    7 - highest type code. The empty set is the single octet 0x00.
    """
    codes = {int(t) for t in subtypes}
    if not codes:
        return b"\x00"

    packed = 0
    for code in codes:
        packed |= 0x80 >> code
    return bytes([7 - max(codes), packed])


def decode_subtypes(content: bytes, offset: int = 0) -> frozenset:
    """Parse BIT STRING content octets produced by encode_subtypes."""
    if not content:
        raise DecodingError("empty bit string", "subtypes", offset)
    if len(content) == 1:
        if content[0] != 0:
            raise DecodingError("bit string without payload declares unused bits", "subtypes", offset)
        return frozenset()
    if len(content) > 2:
        raise DecodingError("bit string has more than one payload byte", "subtypes", offset)

    unused, packed = content[0], content[1]
    if unused < _MIN_UNUSED_BITS or unused > 7:
        raise DecodingError(f"implausible unused bit count {unused}", "subtypes", offset)
    if packed & ((1 << unused) - 1):
        raise DecodingError("bit string padding is not zero", "subtypes", offset)
    if not packed & (1 << unused):
        raise DecodingError("bit string has trailing zero bits", "subtypes", offset)

    return frozenset(t for t in ConditionType if packed & (0x80 >> t))


def encode_condition(condition: Condition) -> bytes:
    """Encode a condition to its canonical binary form."""
    body = encode_tlv(primitive_tag(0), condition.fingerprint)
    body += encode_tlv(primitive_tag(1), encode_integer(condition.cost))
    if condition.is_compound:
        body += encode_tlv(primitive_tag(2), encode_subtypes(condition.subtypes))
    return encode_tlv(constructed_tag(condition.type), body)


def read_condition(reader: DerReader) -> Condition:
    """Read one condition from the reader's current position."""
    start = reader.offset
    tag = reader.peek_tag("condition")
    try:
        condition_type = ConditionType(tag - 0xA0)
    except ValueError:
        raise DecodingError(f"unknown condition tag 0x{tag:02X}", "condition", start) from None

    body = reader.read_nested(tag, "condition")

    fingerprint_offset = body.offset
    fingerprint = body.read(primitive_tag(0), "fingerprint")
    if len(fingerprint) != FINGERPRINT_LENGTH:
        raise DecodingError(
            f"fingerprint must be {FINGERPRINT_LENGTH} bytes, got {len(fingerprint)}",
            "fingerprint",
            fingerprint_offset,
        )

    cost = body.read_integer(primitive_tag(1), "cost")

    subtypes = None
    if condition_type.is_compound:
        subtypes_offset = body.offset
        subtypes = decode_subtypes(body.read(primitive_tag(2), "subtypes"), subtypes_offset)
    body.finish("condition")

    try:
        return Condition(condition_type, fingerprint, cost, subtypes)
    except ValidationError as exc:
        raise DecodingError(str(exc), "condition", start) from exc


def decode_condition(data: bytes) -> Condition:
    """
    Decode a condition from its binary form.

    The input must hold exactly one canonically encoded condition.
    """
    reader = DerReader(data)
    try:
        condition = read_condition(reader)
        reader.finish("condition")
    except DecodingError as exc:
        logger.debug("condition decoding failed: %s", exc)
        raise
    return condition
