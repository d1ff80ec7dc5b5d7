"""
S3O authentication decision engine.

Every request is classified into one of three phases, in this order:

1. Provider callback: a POST with a ``username`` query parameter and the
   token in an urlencoded body. Verified users are redirected to the same
   URL minus the credentials.
2. Cookie session: ``s3o_username`` and ``s3o_token`` cookies. Verified
   users continue to the application.
3. Anonymous: redirected to the provider to log in.

A request arriving before the provider's public key is available gets a 500
whatever its phase.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable, Mapping

from .config import GateConfig, KEY_UNAVAILABLE_MESSAGE
from .cookies import CookieManager, TOKEN_COOKIE, USERNAME_COOKIE
from .errors import KeyFormatError, KeyUnavailableError
from .keys import KeyMaterial, KeyMaterialSource, convert_public_key, require_key
from .models import (
    Action,
    Credential,
    GateDecision,
    GateRequest,
    Outcome,
    TokenVerification,
)
from .signature import build_message, verify_signature
from .urls import authorize_url, callback_url, effective_protocol, strip_credentials

logger = logging.getLogger(__name__)

NO_CACHE_HEADERS = {
    "Cache-Control": "private, no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

# Reads the request body and returns the parsed urlencoded fields
FormReader = Callable[[], Mapping[str, str]]
AsyncFormReader = Callable[[], Awaitable[Mapping[str, str]]]


class AuthenticationEngine:
    """
    Decides what to do with a request.

    The engine is framework neutral: adapters build a GateRequest and apply
    the returned GateDecision. It holds no per-request state.

    Args:
        key_source: Callable returning the provider's current base64 DER
            public key, or None if it has not been downloaded yet
        config: Gate settings. Default: GateConfig()
    """

    def __init__(
        self,
        key_source: KeyMaterialSource,
        config: GateConfig | None = None,
    ):
        self.key_source = key_source
        self.config = config or GateConfig()
        self.cookies = CookieManager(self.config.cookie_max_age_ms)

    def authenticate_token(
        self,
        credential: Credential,
        key_material: KeyMaterial | None,
    ) -> TokenVerification:
        """
        Verify a credential and produce the matching cookie changes.

        This is the only place session cookies are set or cleared. No cookies
        are touched when the key is unavailable.
        """
        if not key_material:
            return TokenVerification(
                outcome=Outcome.KEY_UNAVAILABLE,
                username=credential.username,
                error=KEY_UNAVAILABLE_MESSAGE,
            )

        try:
            key = convert_public_key(key_material)
        except KeyFormatError as e:
            logger.warning("S3O: Public key could not be converted: %s", e)
            return TokenVerification(
                outcome=Outcome.MALFORMED_KEY,
                username=credential.username,
                error=str(e),
                cookies=self.cookies.clear_session(),
            )

        message = build_message(credential.username, credential.hostname)
        if verify_signature(message, credential.token, key):
            logger.info("S3O: Authentication successful: %s", credential.username)
            return TokenVerification(
                outcome=Outcome.VERIFIED,
                username=credential.username,
                cookies=self.cookies.set_session(credential.username, credential.token),
            )

        logger.info("S3O: Authentication failed: %s", credential.username)
        return TokenVerification(
            outcome=Outcome.INVALID_SIGNATURE,
            username=credential.username,
            error="Invalid signature",
            cookies=self.cookies.clear_session(),
        )

    async def decide(
        self,
        request: GateRequest,
        read_form: AsyncFormReader,
    ) -> GateDecision:
        """
        Decide what to do with a request (async frameworks).

        read_form is only awaited for provider callbacks.
        """
        try:
            key_material = require_key(self.key_source)
        except KeyUnavailableError:
            return self._key_unavailable()

        if self.is_callback(request):
            form = await read_form()
            return self._callback(request, form, key_material)

        return self._session_or_login(request, key_material)

    def decide_sync(
        self,
        request: GateRequest,
        read_form: FormReader,
    ) -> GateDecision:
        """
        Decide what to do with a request (sync frameworks).

        read_form is only called for provider callbacks.
        """
        try:
            key_material = require_key(self.key_source)
        except KeyUnavailableError:
            return self._key_unavailable()

        if self.is_callback(request):
            form = read_form()
            return self._callback(request, form, key_material)

        return self._session_or_login(request, key_material)

    @staticmethod
    def is_callback(request: GateRequest) -> bool:
        """True for the provider's POST back with a username parameter."""
        if request.method.upper() != "POST":
            return False
        return bool(_first(request.query_params, "username"))

    def _callback(
        self,
        request: GateRequest,
        form: Mapping[str, str],
        key_material: KeyMaterial,
    ) -> GateDecision:
        params = request.query_params
        username = _first(params, "username")
        logger.debug("S3O: Found parameter token for s3o_username: %s", username)

        result = self.authenticate_token(
            Credential(username, request.hostname, form.get("token")),
            key_material,
        )
        if not result.verified:
            return self._denied(result)

        location = strip_credentials(request.path, params)
        logger.debug("S3O: Parameters detected in URL and body. Redirecting to base path: %s", location)
        return GateDecision(
            action=Action.REDIRECT,
            status_code=302,
            location=location,
            headers=dict(NO_CACHE_HEADERS),
            cookies=result.cookies,
            username=result.username,
        )

    def _session_or_login(
        self,
        request: GateRequest,
        key_material: KeyMaterial,
    ) -> GateDecision:
        username = request.cookies.get(USERNAME_COOKIE)
        token = request.cookies.get(TOKEN_COOKIE)

        if username and token:
            logger.debug("S3O: Found cookie token for s3o_username: %s", username)
            result = self.authenticate_token(
                Credential(username, request.hostname, token),
                key_material,
            )
            if not result.verified:
                return self._denied(result)
            return GateDecision(
                action=Action.CONTINUE,
                cookies=result.cookies,
                username=result.username,
            )

        return self._login_redirect(request)

    def _login_redirect(self, request: GateRequest) -> GateDecision:
        protocol = effective_protocol(
            request.headers.get("x-forwarded-proto"),
            request.scheme,
        )
        location = authorize_url(
            self.config.provider_url,
            request.hostname,
            callback_url(protocol, request.host, request.original_url),
        )
        logger.debug("S3O: No token/s3o_username found. Redirecting to %s", location)
        return GateDecision(
            action=Action.REDIRECT,
            status_code=302,
            location=location,
            headers=dict(NO_CACHE_HEADERS),
        )

    def _denied(self, result: TokenVerification) -> GateDecision:
        if result.outcome is Outcome.KEY_UNAVAILABLE:
            return self._key_unavailable()
        return GateDecision(
            action=Action.RESPOND,
            status_code=403,
            body=self.config.error_page,
            cookies=result.cookies,
        )

    @staticmethod
    def _key_unavailable() -> GateDecision:
        logger.debug("S3O: Public key not loaded yet")
        return GateDecision(
            action=Action.RESPOND,
            status_code=500,
            body=KEY_UNAVAILABLE_MESSAGE,
        )


def _first(params: list[tuple[str, str]], name: str) -> str | None:
    for key, value in params:
        if key == name:
            return value
    return None
