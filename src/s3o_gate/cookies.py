"""
The s3o_username/s3o_token session cookie pair.
"""

from __future__ import annotations

from email.utils import formatdate
from time import time
from urllib.parse import quote

from .config import DEFAULT_COOKIE_MAX_AGE_MS
from .models import CookieDirective

USERNAME_COOKIE = "s3o_username"
TOKEN_COOKIE = "s3o_token"

SESSION_COOKIES = (USERNAME_COOKIE, TOKEN_COOKIE)


class CookieManager:
    """
    Builds cookie changes for the session pair.

    Both cookies are always set or cleared together. Their expiry is the
    only time limit on a session; tokens carry no timestamp.

    Args:
        max_age_ms: Cookie lifetime in milliseconds. Default: 900000 (15 minutes)
    """

    def __init__(self, max_age_ms: int = DEFAULT_COOKIE_MAX_AGE_MS):
        self.max_age_ms = max_age_ms

    @property
    def max_age(self) -> int:
        """Cookie lifetime in seconds."""
        return self.max_age_ms // 1000

    def set_session(self, username: str, token: str) -> list[CookieDirective]:
        return [
            CookieDirective(USERNAME_COOKIE, username, max_age=self.max_age),
            CookieDirective(TOKEN_COOKIE, token, max_age=self.max_age),
        ]

    def clear_session(self) -> list[CookieDirective]:
        return [CookieDirective(name, clear=True) for name in SESSION_COOKIES]


def format_set_cookie(directive: CookieDirective, now: float | None = None) -> str:
    """
    Render a Set-Cookie header value.

    Examples:
        >>> format_set_cookie(CookieDirective("s3o_token", clear=True))
        's3o_token=; Path=/; Expires=Thu, 01 Jan 1970 00:00:00 GMT; Max-Age=0; HttpOnly'
    """
    if directive.clear:
        expires = formatdate(0, usegmt=True)
        value = ""
    else:
        now = time() if now is None else now
        expires = formatdate(now + directive.max_age, usegmt=True)
        value = quote(directive.value, safe="")

    parts = [
        f"{directive.name}={value}",
        "Path=/",
        f"Expires={expires}",
        f"Max-Age={directive.max_age}",
    ]
    if directive.http_only:
        parts.append("HttpOnly")
    return "; ".join(parts)
