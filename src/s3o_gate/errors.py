"""
Exceptions raised by the S3O gate.
"""


class S3OError(Exception):
    """Base class for S3O gate errors."""


class KeyFormatError(S3OError, ValueError):
    """The public key material is not a well-formed RSA public key container."""


class KeyUnavailableError(S3OError):
    """The provider's public key has not been downloaded yet."""
