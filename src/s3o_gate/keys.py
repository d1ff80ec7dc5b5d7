"""
S3O public key handling.

The provider publishes its public key at https://s3o.ft.com/publickey as a
base64 wrapped DER SubjectPublicKeyInfo. It changes sporadically and without
warning, so hosts keep a fresh snapshot and hand the gate a zero-argument
callable returning it.
"""

from __future__ import annotations

import base64
import binascii
import logging
from functools import lru_cache
from typing import Callable, Union

import httpx
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.serialization import load_der_public_key

from .config import DEFAULT_PUBLIC_KEY_URL, KEY_UNAVAILABLE_MESSAGE, GateConfig
from .errors import KeyFormatError, KeyUnavailableError

logger = logging.getLogger(__name__)

KeyMaterial = Union[str, bytes]

# Returns the current key snapshot, or None before the first download
KeyMaterialSource = Callable[[], Union[KeyMaterial, None]]


@lru_cache(maxsize=8)
def convert_public_key(raw: KeyMaterial) -> rsa.RSAPublicKey:
    """
    Convert base64 wrapped DER key material into an RSA public key.

    Args:
        raw: Base64 text (or bytes) of a DER SubjectPublicKeyInfo

    Returns:
        RSAPublicKey usable for signature verification

    Raises:
        KeyFormatError: If the material is not a base64 DER RSA public key
    """
    try:
        der = base64.b64decode(raw)
    except (binascii.Error, ValueError) as e:
        raise KeyFormatError(f"Public key is not valid base64: {e}") from e

    if not der:
        raise KeyFormatError("Public key is empty")

    try:
        key = load_der_public_key(der)
    except (ValueError, UnsupportedAlgorithm) as e:
        raise KeyFormatError(f"Public key is not a DER public key: {e}") from e

    if not isinstance(key, rsa.RSAPublicKey):
        raise KeyFormatError(
            f"Public key must be RSA, got {type(key).__name__}"
        )

    return key


def require_key(source: KeyMaterialSource) -> KeyMaterial:
    """
    Return the current key material, raising if none is loaded yet.

    Raises:
        KeyUnavailableError: If the source has no key yet
    """
    material = source()
    if not material:
        raise KeyUnavailableError(KEY_UNAVAILABLE_MESSAGE)
    return material


class StaticKeySource:
    """
    Key source holding a snapshot set by the host application.

    Example:
        >>> source = StaticKeySource()
        >>> source() is None
        True
        >>> source.update(key_text)
    """

    def __init__(self, material: KeyMaterial | None = None):
        self._material = material

    def __call__(self) -> KeyMaterial | None:
        return self._material

    def update(self, material: KeyMaterial | None) -> None:
        """Replace the snapshot."""
        self._material = material


class PublicKeyFetcher(StaticKeySource):
    """
    Key source that downloads the provider's public key over HTTP.

    A download only replaces the snapshot when the new key parses, so a
    bad response never evicts a working key. Scheduling refreshes is left
    to the host application.

    Args:
        url: URL serving the base64 DER public key.
            Default: https://s3o.ft.com/publickey
        timeout_s: Request timeout in seconds. Default: 5.0

    Example:
        >>> fetcher = PublicKeyFetcher()
        >>> await fetcher.refresh()
        True
        >>> app.add_middleware(S3OASGIMiddleware, key_source=fetcher)
    """

    def __init__(
        self,
        url: str = DEFAULT_PUBLIC_KEY_URL,
        timeout_s: float = 5.0,
    ):
        super().__init__()
        self.url = url
        self.timeout_s = timeout_s

    @classmethod
    def from_config(cls, config: GateConfig, timeout_s: float = 5.0) -> "PublicKeyFetcher":
        """Build a fetcher for the public key URL in a GateConfig."""
        return cls(url=config.public_key_url, timeout_s=timeout_s)

    async def refresh(self) -> bool:
        """
        Download the key asynchronously.

        Returns:
            True if the snapshot was replaced
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout_s) as client:
                response = await client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning("S3O: Could not download public key from %s: %s", self.url, e)
            return False

        return self._accept(response)

    def refresh_sync(self) -> bool:
        """
        Download the key synchronously.

        Returns:
            True if the snapshot was replaced
        """
        try:
            with httpx.Client(timeout=self.timeout_s) as client:
                response = client.get(self.url)
        except httpx.HTTPError as e:
            logger.warning("S3O: Could not download public key from %s: %s", self.url, e)
            return False

        return self._accept(response)

    def _accept(self, response: httpx.Response) -> bool:
        """Validate a key response and swap it in."""
        if response.status_code != 200:
            logger.warning(
                "S3O: Public key download from %s returned %s",
                self.url,
                response.status_code,
            )
            return False

        material = response.text.strip()
        try:
            convert_public_key(material)
        except KeyFormatError as e:
            logger.warning("S3O: Ignoring unusable public key from %s: %s", self.url, e)
            return False

        if material != self._material:
            logger.info("S3O: Loaded public key from %s", self.url)
        self.update(material)
        return True
