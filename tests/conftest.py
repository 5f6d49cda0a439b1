"""
Pytest configuration and shared fixtures.

SPDX-License-Identifier: AGPL-3.0-or-later
"""

import sys
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ed25519, rsa

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from cryptoconditions.fulfillments import (  # noqa: E402
    Ed25519Sha256Fulfillment,
    RsaSha256Fulfillment,
)
from cryptoconditions.provider import rsa_pss_padding  # noqa: E402


@pytest.fixture
def ed25519_private_key():
    """A fresh Ed25519 signing key."""
    return ed25519.Ed25519PrivateKey.generate()


@pytest.fixture(scope="session")
def rsa_private_key():
    """A 2048-bit RSA key, generated once per session."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture
def sign_ed25519(ed25519_private_key):
    """Build an Ed25519 fulfillment over the given message."""
    def _sign(message: bytes) -> Ed25519Sha256Fulfillment:
        signature = ed25519_private_key.sign(message)
        return Ed25519Sha256Fulfillment.from_public_key(
            ed25519_private_key.public_key(), signature
        )
    return _sign


@pytest.fixture
def sign_rsa(rsa_private_key):
    """Build an RSA-SHA-256 fulfillment over the given message."""
    def _sign(message: bytes) -> RsaSha256Fulfillment:
        signature = rsa_private_key.sign(message, rsa_pss_padding(), hashes.SHA256())
        return RsaSha256Fulfillment.from_public_key(rsa_private_key.public_key(), signature)
    return _sign
