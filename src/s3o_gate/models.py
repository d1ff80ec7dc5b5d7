"""
Data models for S3O authentication.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from urllib.parse import parse_qsl

from .headers import hostname_from_host


class Outcome(str, enum.Enum):
    """Result of a single token verification."""

    VERIFIED = "verified"
    INVALID_SIGNATURE = "invalid_signature"
    MALFORMED_KEY = "malformed_key"
    KEY_UNAVAILABLE = "key_unavailable"


class Action(str, enum.Enum):
    """What the middleware should do with the request."""

    CONTINUE = "continue"
    REDIRECT = "redirect"
    RESPOND = "respond"


@dataclass(frozen=True)
class Credential:
    """
    Username/hostname/token triple presented by a request.

    Attributes:
        username: Username vouched for by the provider
        hostname: Hostname the token was issued for
        token: Base64 signature over "<username>-<hostname>"
    """
    username: str
    hostname: str
    token: str | None


@dataclass(frozen=True)
class CookieDirective:
    """
    A single cookie to set or clear on the response.

    Attributes:
        name: Cookie name
        value: Cookie value (empty when clearing)
        max_age: Lifetime in seconds (0 when clearing)
        http_only: Whether the cookie is hidden from scripts
        clear: True if the cookie should be expired
    """
    name: str
    value: str = ""
    max_age: int = 0
    http_only: bool = True
    clear: bool = False


@dataclass
class TokenVerification:
    """
    Result of verifying a credential against the provider's public key.

    Attributes:
        outcome: Verification outcome
        username: Username that was checked
        error: Human readable reason on failure
        cookies: Cookie changes produced by the verification
    """
    outcome: Outcome
    username: str | None = None
    error: str | None = None
    cookies: list[CookieDirective] = field(default_factory=list)

    @property
    def verified(self) -> bool:
        return self.outcome is Outcome.VERIFIED


@dataclass
class GateRequest:
    """
    Framework-neutral view of an incoming request.

    Attributes:
        method: HTTP method (GET, POST, etc.)
        scheme: Scheme of the connection as seen by the server
        host: Raw Host header (may include a port)
        path: Request path
        query: Raw query string, without the leading "?"
        headers: Request headers with lowercase names
        cookies: Parsed request cookies
    """
    method: str
    scheme: str
    host: str
    path: str
    query: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    cookies: dict[str, str] = field(default_factory=dict)

    @property
    def hostname(self) -> str:
        return hostname_from_host(self.host)

    @property
    def query_params(self) -> list[tuple[str, str]]:
        return parse_qsl(self.query, keep_blank_values=True)

    @property
    def original_url(self) -> str:
        if self.query:
            return f"{self.path}?{self.query}"
        return self.path


@dataclass
class GateDecision:
    """
    What the middleware must do with a request.

    Attributes:
        action: Continue downstream, redirect, or respond directly
        status_code: Status for redirect/respond actions
        location: Redirect target
        body: Response body for respond actions
        headers: Extra response headers
        cookies: Cookie changes to apply to whichever response is sent
        username: Verified username, when authentication succeeded
    """
    action: Action
    status_code: int = 200
    location: str | None = None
    body: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    cookies: list[CookieDirective] = field(default_factory=list)
    username: str | None = None
