"""
Crypto-Conditions - DER Primitives

The subset of ASN.1 DER used by crypto-conditions: definite lengths,
single-byte tags, non-negative INTEGERs, OCTET STRINGs and constructed
wrappers. Encoding is canonical; decoding rejects anything that is not.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from typing import Optional, Tuple

from .errors import DecodingError


SEQUENCE = 0x30
CONTEXT_PRIMITIVE = 0x80
CONTEXT_CONSTRUCTED = 0xA0

# Longest length prefix we accept (4 bytes of length = 4 GiB)
_MAX_LENGTH_OCTETS = 4


def primitive_tag(number: int) -> int:
    """Context-specific primitive tag, e.g. [0] -> 0x80."""
    return CONTEXT_PRIMITIVE | number


def constructed_tag(number: int) -> int:
    """Context-specific constructed tag, e.g. [2] -> 0xA2."""
    return CONTEXT_CONSTRUCTED | number


def encode_length(length: int) -> bytes:
    """DER definite length, short form below 128, minimal long form above."""
    if length < 0:
        raise ValueError("length must be non-negative")
    if length < 0x80:
        return bytes([length])
    octets = length.to_bytes((length.bit_length() + 7) // 8, "big")
    return bytes([0x80 | len(octets)]) + octets


def encode_tlv(tag: int, content: bytes) -> bytes:
    return bytes([tag]) + encode_length(len(content)) + content


def encode_integer(value: int) -> bytes:
    """Content octets of a non-negative INTEGER in minimal two's complement."""
    if value < 0:
        raise ValueError("integer must be non-negative")
    return value.to_bytes(value.bit_length() // 8 + 1, "big")


def decode_integer(content: bytes, field: str, offset: int) -> int:
    """Parse INTEGER content octets, rejecting negative or padded values."""
    if not content:
        raise DecodingError("empty integer", field, offset)
    if content[0] & 0x80:
        raise DecodingError("negative integer", field, offset)
    if len(content) > 1 and content[0] == 0x00 and not content[1] & 0x80:
        raise DecodingError("integer is not minimally encoded", field, offset)
    return int.from_bytes(content, "big")


class DerReader:
    """
    Sequential reader over one DER region.

    Offsets reported in errors are absolute positions in the original
    buffer, so nested readers still point at the offending byte.
    """

    def __init__(self, data: bytes, offset: int = 0, end: Optional[int] = None):
        self.data = bytes(data)
        self.offset = offset
        self.end = len(self.data) if end is None else end

    def at_end(self) -> bool:
        return self.offset >= self.end

    def peek_tag(self, field: str) -> int:
        if self.at_end():
            raise DecodingError("unexpected end of data", field, self.offset)
        return self.data[self.offset]

    def _read_header(self, field: str) -> Tuple[int, int, int]:
        """Return (tag, content_start, content_end) and validate the length."""
        start = self.offset
        tag = self.peek_tag(field)
        if tag & 0x1F == 0x1F:
            raise DecodingError("multi-byte tags are not supported", field, start)

        pos = start + 1
        if pos >= self.end:
            raise DecodingError("missing length", field, pos)
        first = self.data[pos]
        pos += 1

        if first < 0x80:
            length = first
        elif first == 0x80:
            raise DecodingError("indefinite length is not allowed", field, pos - 1)
        else:
            count = first & 0x7F
            if count > _MAX_LENGTH_OCTETS:
                raise DecodingError("length prefix too long", field, pos - 1)
            if pos + count > self.end:
                raise DecodingError("truncated length", field, pos)
            octets = self.data[pos:pos + count]
            if octets[0] == 0x00:
                raise DecodingError("length is not minimally encoded", field, pos)
            length = int.from_bytes(octets, "big")
            if length < 0x80:
                raise DecodingError("length is not minimally encoded", field, pos)
            pos += count

        if pos + length > self.end:
            raise DecodingError(
                f"declared length {length} exceeds available {self.end - pos} bytes",
                field,
                pos,
            )
        return tag, pos, pos + length

    def read_any(self, field: str) -> Tuple[int, bytes]:
        """Read the next element of any tag, returning (tag, content)."""
        tag, content_start, content_end = self._read_header(field)
        self.offset = content_end
        return tag, self.data[content_start:content_end]

    def read(self, tag: int, field: str) -> bytes:
        """Read the next element, which must carry the given tag."""
        actual = self.peek_tag(field)
        if actual != tag:
            raise DecodingError(
                f"expected tag 0x{tag:02X}, found 0x{actual:02X}", field, self.offset
            )
        _, content = self.read_any(field)
        return content

    def read_integer(self, tag: int, field: str) -> int:
        element_offset = self.offset
        content = self.read(tag, field)
        return decode_integer(content, field, element_offset)

    def read_nested(self, tag: int, field: str) -> "DerReader":
        """Read a constructed element and return a reader over its content."""
        actual = self.peek_tag(field)
        if actual != tag:
            raise DecodingError(
                f"expected tag 0x{tag:02X}, found 0x{actual:02X}", field, self.offset
            )
        _, content_start, content_end = self._read_header(field)
        self.offset = content_end
        return DerReader(self.data, content_start, content_end)

    def finish(self, field: str) -> None:
        """Fail if any bytes remain in this region."""
        if not self.at_end():
            raise DecodingError(
                f"{self.end - self.offset} trailing bytes", field, self.offset
            )
