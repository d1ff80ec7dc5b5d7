"""
WSGI middleware for S3O authentication (Flask).
"""

from __future__ import annotations

from http import HTTPStatus
from io import BytesIO
from typing import Any, Callable, Iterable
from urllib.parse import quote

from ..config import GateConfig
from ..cookies import format_set_cookie
from ..engine import AuthenticationEngine
from ..headers import ensure_cookies, parse_form_body
from ..keys import KeyMaterialSource
from ..models import Action, GateDecision, GateRequest

# environ key holding already-parsed cookies, if an outer layer provides them
COOKIES_ENVIRON_KEY = "s3o_gate.cookies"
USERNAME_ENVIRON_KEY = "s3o_gate.username"


def _extract_headers(environ: dict[str, Any]) -> dict[str, str]:
    """Extract HTTP headers from WSGI environ."""
    headers: dict[str, str] = {}
    for key, value in environ.items():
        if key.startswith("HTTP_"):
            # HTTP_X_FORWARDED_PROTO -> x-forwarded-proto
            header_name = key[5:].replace("_", "-").lower()
            headers[header_name] = value
        elif key == "CONTENT_TYPE":
            headers["content-type"] = value
        elif key == "CONTENT_LENGTH":
            headers["content-length"] = value
    return headers


def _gate_request(environ: dict[str, Any], headers: dict[str, str]) -> GateRequest:
    """Build the engine's view of a WSGI request."""
    host = headers.get("host") or environ.get("SERVER_NAME", "localhost")
    path = environ.get("SCRIPT_NAME", "") + environ.get("PATH_INFO", "/")

    return GateRequest(
        method=environ.get("REQUEST_METHOD", "GET"),
        scheme=environ.get("wsgi.url_scheme", "http"),
        host=host,
        path=quote(path, safe="/;@&=+$,!~*'()%:", encoding="latin-1", errors="replace"),
        query=environ.get("QUERY_STRING", ""),
        headers=headers,
        cookies=ensure_cookies(environ.get(COOKIES_ENVIRON_KEY), headers.get("cookie")),
    )


def _read_body(environ: dict[str, Any]) -> bytes:
    """Read the request body and rewind it for downstream apps."""
    try:
        length = int(environ.get("CONTENT_LENGTH") or 0)
    except ValueError:
        length = 0
    if length <= 0 or "wsgi.input" not in environ:
        return b""

    body_bytes = environ["wsgi.input"].read(length)
    environ["wsgi.input"] = BytesIO(body_bytes)
    return body_bytes


class S3OWSGIMiddleware:
    """
    WSGI middleware requiring an S3O login for every request.

    Verified requests reach the app with `environ["s3o_gate.username"]` set.
    Everything else is redirected to the provider or refused.

    Args:
        app: WSGI application
        key_source: Callable returning the provider's current public key
            (see PublicKeyFetcher), or None before it is downloaded
        config: Gate settings (default: GateConfig())

    Example (Flask):
        >>> from flask import Flask, request
        >>> from s3o_gate import PublicKeyFetcher
        >>> from s3o_gate.middleware.wsgi import S3OWSGIMiddleware
        >>>
        >>> keys = PublicKeyFetcher()
        >>> keys.refresh_sync()
        >>> app = Flask(__name__)
        >>> app.wsgi_app = S3OWSGIMiddleware(app.wsgi_app, key_source=keys)
        >>>
        >>> @app.route("/")
        >>> def home():
        ...     return {"user": request.environ["s3o_gate.username"]}
    """

    def __init__(
        self,
        app: Callable[..., Iterable[bytes]],
        key_source: KeyMaterialSource,
        config: GateConfig | None = None,
    ):
        self.app = app
        self.engine = AuthenticationEngine(key_source, config)

    def __call__(
        self,
        environ: dict[str, Any],
        start_response: Callable[..., Any],
    ) -> Iterable[bytes]:
        headers = _extract_headers(environ)
        request = _gate_request(environ, headers)

        def read_form() -> dict[str, str]:
            return parse_form_body(_read_body(environ), headers.get("content-type"))

        decision = self.engine.decide_sync(request, read_form)
        set_cookies = [("Set-Cookie", format_set_cookie(c)) for c in decision.cookies]

        if decision.action is not Action.CONTINUE:
            return self._respond(start_response, decision, set_cookies)

        environ[USERNAME_ENVIRON_KEY] = decision.username

        # Refresh the session cookies on the downstream response
        def custom_start_response(
            status: str,
            response_headers: list[tuple[str, str]],
            exc_info: Any = None,
        ) -> Any:
            response_headers.extend(set_cookies)
            return start_response(status, response_headers, exc_info)

        return self.app(environ, custom_start_response)

    def _respond(
        self,
        start_response: Callable[..., Any],
        decision: GateDecision,
        set_cookies: list[tuple[str, str]],
    ) -> Iterable[bytes]:
        """Send a redirect or error page without calling the app."""
        body = decision.body.encode("utf-8")
        response_headers = [
            ("Content-Type", "text/html; charset=utf-8"),
            ("Content-Length", str(len(body))),
        ]
        if decision.location is not None:
            response_headers.append(("Location", decision.location))
        response_headers.extend(decision.headers.items())
        response_headers.extend(set_cookies)

        status = f"{decision.status_code} {HTTPStatus(decision.status_code).phrase}"
        start_response(status, response_headers)
        return [body]
