"""
Crypto-Conditions - Error Types

Every failure surfaced by this package is a CryptoConditionError. Semantic
verification failures are not errors: verify() returns False for those.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

from typing import Optional


class CryptoConditionError(Exception):
    """Base exception for crypto-condition operations."""
    pass


class ValidationError(CryptoConditionError, ValueError):
    """Raised when a condition or fulfillment is built from out-of-contract values."""
    pass


class DecodingError(CryptoConditionError, ValueError):
    """Raised when binary input is not a canonical encoding."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        offset: Optional[int] = None,
    ):
        if field is not None and offset is not None:
            message = f"{message} (field={field}, offset={offset})"
        elif field is not None:
            message = f"{message} (field={field})"
        super().__init__(message)
        self.field = field
        self.offset = offset


class UriDecodingError(DecodingError):
    """Raised when a condition URI is malformed."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, field=field)


class TypeMismatchError(CryptoConditionError, TypeError):
    """Raised when a fulfillment is verified against a condition of another type."""
    pass
