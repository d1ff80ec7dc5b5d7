"""Shared fixtures: a throwaway provider key pair and token signing."""

import base64

import pytest
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def _public_key_material(private_key) -> str:
    der = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return base64.b64encode(der).decode("ascii")


@pytest.fixture(scope="session")
def private_key():
    """Provider signing key."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def other_private_key():
    """A key the provider does not use."""
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def key_material(private_key):
    """Base64 DER public key, as served by the provider."""
    return _public_key_material(private_key)


@pytest.fixture(scope="session")
def other_key_material(other_private_key):
    return _public_key_material(other_private_key)


@pytest.fixture(scope="session")
def sign(private_key):
    """Issue a token the way the provider does."""
    def _sign(username: str, hostname: str, key=None) -> str:
        signer = key or private_key
        signature = signer.sign(
            f"{username}-{hostname}".encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA1(),
        )
        return base64.b64encode(signature).decode("ascii")
    return _sign
