"""
Crypto-Conditions - Cryptographic Provider

Fingerprints are always plain SHA-256 via sha256() below. Signature
checks go through a CryptoProvider: RSASSA-PSS and Ed25519
verification. The default provider is backed by the cryptography
package; callers may pass their own implementation to verify().

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import hashlib
from typing import Protocol

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PublicKey


RSA_PUBLIC_EXPONENT = 65537
RSA_PSS_SALT_LENGTH = 32


def sha256(data: bytes) -> bytes:
    """Raw 32-byte SHA-256 digest."""
    return hashlib.sha256(data).digest()


def rsa_pss_padding() -> padding.PSS:
    """PSS parameters mandated for RSA-SHA-256 conditions."""
    return padding.PSS(
        mgf=padding.MGF1(hashes.SHA256()),
        salt_length=RSA_PSS_SALT_LENGTH,
    )


class CryptoProvider(Protocol):
    """Primitives a verifier needs. Implementations must be side-effect free."""

    def rsa_pss_verify(
        self,
        modulus: int,
        exponent: int,
        message: bytes,
        signature: bytes,
    ) -> bool:
        ...

    def ed25519_verify(
        self,
        public_key: bytes,
        message: bytes,
        signature: bytes,
    ) -> bool:
        ...


class CryptographyProvider:
    """CryptoProvider backed by the cryptography package."""

    def rsa_pss_verify(
        self,
        modulus: int,
        exponent: int,
        message: bytes,
        signature: bytes,
    ) -> bool:
        """Verify an RSASSA-PSS (SHA-256, MGF1-SHA-256, 32-byte salt) signature."""
        public_key = rsa.RSAPublicNumbers(exponent, modulus).public_key()
        try:
            public_key.verify(signature, message, rsa_pss_padding(), hashes.SHA256())
            return True
        except InvalidSignature:
            return False

    def ed25519_verify(
        self,
        public_key: bytes,
        message: bytes,
        signature: bytes,
    ) -> bool:
        """Verify an Ed25519 signature."""
        key = Ed25519PublicKey.from_public_bytes(public_key)
        try:
            key.verify(signature, message)
            return True
        except InvalidSignature:
            return False


DEFAULT_PROVIDER = CryptographyProvider()
