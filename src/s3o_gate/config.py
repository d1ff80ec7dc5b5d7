"""
Gate configuration.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

# Hosted S3O endpoints
DEFAULT_PROVIDER_URL = "https://s3o.ft.com"
DEFAULT_PUBLIC_KEY_URL = "https://s3o.ft.com/publickey"

# 15 minutes
DEFAULT_COOKIE_MAX_AGE_MS = 900000

DEFAULT_ERROR_PAGE = (
    "<h1>Authentication error.</h1>"
    "<p>For access, please login with your FT account</p>"
)

KEY_UNAVAILABLE_MESSAGE = "Has not yet downloaded public key from S3O"


@dataclass(frozen=True)
class GateConfig:
    """
    Settings shared by the decision engine and middleware.

    Attributes:
        provider_url: Base URL of the S3O provider
        public_key_url: URL serving the provider's base64 DER public key
        cookie_max_age_ms: Session cookie lifetime in milliseconds
        error_page: HTML sent when authentication fails
    """
    provider_url: str = DEFAULT_PROVIDER_URL
    public_key_url: str = DEFAULT_PUBLIC_KEY_URL
    cookie_max_age_ms: int = DEFAULT_COOKIE_MAX_AGE_MS
    error_page: str = DEFAULT_ERROR_PAGE

    @classmethod
    def from_env(cls) -> "GateConfig":
        """
        Build a config from the environment.

        Environment variables:
            S3O_PROVIDER_URL - Override provider URL (default: https://s3o.ft.com)
            S3O_PUBLIC_KEY_URL - Override public key URL
            S3O_COOKIE_MAX_AGE_MS - Session cookie lifetime (default: 900000)
        """
        return cls(
            provider_url=os.getenv("S3O_PROVIDER_URL", DEFAULT_PROVIDER_URL),
            public_key_url=os.getenv("S3O_PUBLIC_KEY_URL", DEFAULT_PUBLIC_KEY_URL),
            cookie_max_age_ms=int(
                os.getenv("S3O_COOKIE_MAX_AGE_MS", str(DEFAULT_COOKIE_MAX_AGE_MS))
            ),
        )
