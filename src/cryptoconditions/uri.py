"""
Crypto-Conditions - Condition URIs

Conditions are shared as RFC 6920 named-information URIs:

    ni:///sha-256;<fingerprint>?fpt=<type>&cost=<cost>[&subtypes=<types>]

The fingerprint is unpadded base64url. Query parameters are always
written in the order fpt, cost, subtypes, with subtypes listed by type
code, so serialization of a given condition is unique.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import base64
import binascii
import re
from urllib.parse import parse_qsl

from rfc3986 import uri_reference
from rfc3986.exceptions import ValidationError as RfcValidationError
from rfc3986.validators import Validator

from .conditions import Condition, ConditionType, FINGERPRINT_LENGTH
from .errors import UriDecodingError, ValidationError


SCHEME = "ni"
HASH_FUNCTION = "sha-256"

_BASE64URL = re.compile(r"^[A-Za-z0-9_-]+$")
_DECIMAL = re.compile(r"^(0|[1-9][0-9]*)$")


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(text: str) -> bytes:
    if not _BASE64URL.match(text):
        raise UriDecodingError("fingerprint is not unpadded base64url", "fingerprint")
    try:
        data = base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))
    except (binascii.Error, ValueError):
        raise UriDecodingError("fingerprint is not valid base64url", "fingerprint") from None
    # Reject encodings with stray low bits that would not survive a round trip
    if _b64url_encode(data) != text:
        raise UriDecodingError("fingerprint is not canonical base64url", "fingerprint")
    return data


def condition_to_uri(condition: Condition) -> str:
    """Serialize a condition to its ni: URI."""
    uri = (
        f"{SCHEME}:///{HASH_FUNCTION};{_b64url_encode(condition.fingerprint)}"
        f"?fpt={condition.type.type_name}&cost={condition.cost}"
    )
    if condition.is_compound:
        names = ",".join(t.type_name for t in sorted(condition.subtypes))
        uri += f"&subtypes={names}"
    return uri


def parse_condition_uri(text: str) -> Condition:
    """
    Parse an ni: condition URI.

    Raises UriDecodingError for a foreign scheme, an unsupported hash
    function, missing fpt or cost, a malformed fingerprint, or an unknown
    type name. Unrecognized query parameters are ignored.
    """
    if not isinstance(text, str):
        raise UriDecodingError("condition URI must be a string")

    uri = uri_reference(text.strip()).normalize()
    validator = (
        Validator()
        .require_presence_of("scheme", "path", "query")
        .allow_schemes(SCHEME)
    )
    try:
        validator.validate(uri)
    except RfcValidationError as exc:
        raise UriDecodingError(f"Invalid condition URI: {exc}") from None

    if uri.authority:
        raise UriDecodingError("condition URI must not name an authority", "authority")
    if uri.fragment:
        raise UriDecodingError("condition URI must not contain a fragment", "fragment")

    algorithm, sep, encoded_fingerprint = uri.path.lstrip("/").partition(";")
    if not sep or algorithm.lower() != HASH_FUNCTION:
        raise UriDecodingError(f"unsupported hash function '{algorithm}'", "path")
    fingerprint = _b64url_decode(encoded_fingerprint)
    if len(fingerprint) != FINGERPRINT_LENGTH:
        raise UriDecodingError(
            f"fingerprint must be {FINGERPRINT_LENGTH} bytes, got {len(fingerprint)}",
            "fingerprint",
        )

    try:
        pairs = parse_qsl(uri.query, keep_blank_values=True, strict_parsing=True)
    except ValueError as exc:
        raise UriDecodingError(f"malformed query: {exc}", "query") from None
    params: dict[str, str] = {}
    for key, value in pairs:
        if key in params:
            raise UriDecodingError(f"duplicate query parameter '{key}'", key)
        params[key] = value

    if "fpt" not in params:
        raise UriDecodingError("missing fingerprint type", "fpt")
    try:
        condition_type = ConditionType.from_name(params["fpt"])
    except ValueError:
        raise UriDecodingError(f"unknown condition type '{params['fpt']}'", "fpt") from None

    if "cost" not in params:
        raise UriDecodingError("missing cost", "cost")
    if not _DECIMAL.match(params["cost"]):
        raise UriDecodingError(f"cost '{params['cost']}' is not a decimal integer", "cost")
    cost = int(params["cost"])

    subtypes = None
    if condition_type.is_compound:
        if "subtypes" not in params:
            raise UriDecodingError("missing subtypes for compound condition", "subtypes")
        names = [n for n in params["subtypes"].split(",") if n]
        try:
            subtypes = frozenset(ConditionType.from_name(n) for n in names)
        except ValueError as exc:
            raise UriDecodingError(str(exc), "subtypes") from None
    elif "subtypes" in params:
        raise UriDecodingError(
            f"{condition_type.type_name} condition cannot carry subtypes", "subtypes"
        )

    try:
        return Condition(condition_type, fingerprint, cost, subtypes)
    except ValidationError as exc:
        raise UriDecodingError(str(exc)) from exc
