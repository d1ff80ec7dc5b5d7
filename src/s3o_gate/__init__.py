"""
S3O authentication gate for Python web apps

Redirect users to the S3O single-sign-on provider and verify the signed
username/hostname token it sends back.
"""

from .models import Credential, GateDecision, GateRequest, Outcome, TokenVerification
from .config import GateConfig
from .engine import AuthenticationEngine
from .errors import S3OError, KeyFormatError, KeyUnavailableError
from .keys import PublicKeyFetcher, StaticKeySource, convert_public_key
from .signature import build_message, verify_signature

__version__ = "0.1.0"

__all__ = [
    "AuthenticationEngine",
    "Credential",
    "GateConfig",
    "GateDecision",
    "GateRequest",
    "KeyFormatError",
    "KeyUnavailableError",
    "Outcome",
    "PublicKeyFetcher",
    "S3OError",
    "StaticKeySource",
    "TokenVerification",
    "build_message",
    "convert_public_key",
    "verify_signature",
]

# Middleware imports - optional, require framework dependencies
try:
    from .middleware.asgi import S3OASGIMiddleware
    __all__.append("S3OASGIMiddleware")
except ImportError:
    pass

from .middleware.wsgi import S3OWSGIMiddleware
__all__.append("S3OWSGIMiddleware")
