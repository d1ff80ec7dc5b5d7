"""
Verification of S3O token signatures.

A token is the provider's RSA signature (PKCS#1 v1.5, SHA-1) over
"<username>-<hostname>". The two fields are joined without escaping, so a
hyphen in either can make two different pairs produce the same message.
"""

import base64
import binascii

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding, rsa


def build_message(username: str, hostname: str) -> str:
    """
    Build the message the provider signs.

    Examples:
        >>> build_message("jane.doe", "app.example.com")
        'jane.doe-app.example.com'
    """
    return f"{username}-{hostname}"


def verify_signature(
    message: str,
    signature_b64: str | None,
    key: rsa.RSAPublicKey,
) -> bool:
    """
    Check a base64 signature over message.

    Args:
        message: Signed message, see build_message
        signature_b64: Base64 signature from the token
        key: Provider public key

    Returns:
        True if the signature is valid. Malformed, non-canonical or
        missing signatures return False.
    """
    if not signature_b64:
        return False

    try:
        signature = base64.b64decode(signature_b64, validate=True)
    except (binascii.Error, ValueError):
        return False

    # Non-canonical encodings (stray padding bits) decode to the same bytes
    if base64.b64encode(signature).decode("ascii") != signature_b64:
        return False

    try:
        key.verify(
            signature,
            message.encode("utf-8"),
            padding.PKCS1v15(),
            hashes.SHA1(),
        )
    except InvalidSignature:
        return False

    return True
