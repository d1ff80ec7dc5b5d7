"""
ASGI middleware for S3O authentication (FastAPI/Starlette).
"""

from typing import Any, Callable
from urllib.parse import quote, unquote

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import HTMLResponse, RedirectResponse, Response

from ..config import GateConfig
from ..engine import AuthenticationEngine
from ..headers import ensure_cookies, parse_form_body
from ..keys import KeyMaterialSource
from ..models import Action, CookieDirective, GateDecision, GateRequest


def _raw_path(request: Request) -> str:
    """Request path as sent by the client, percent-encoding intact."""
    raw_path = request.scope.get("raw_path")
    if not raw_path:
        return request.url.path

    # Some servers include the query string in raw_path
    return raw_path.split(b"?", 1)[0].decode("latin-1")


def _gate_request(request: Request) -> GateRequest:
    """Build the engine's view of a Starlette request."""
    headers: dict[str, str] = {}
    for key, value in request.headers.items():
        headers[key.lower()] = value

    # Cookie values are percent-encoded on the way out
    cookies = {name: unquote(value) for name, value in request.cookies.items()}

    return GateRequest(
        method=request.method,
        scheme=request.url.scheme,
        host=headers.get("host", request.url.netloc),
        path=_raw_path(request),
        query=request.url.query,
        headers=headers,
        cookies=ensure_cookies(cookies, headers.get("cookie")),
    )


def _apply_cookies(response: Response, cookies: list[CookieDirective]) -> None:
    for cookie in cookies:
        if cookie.clear:
            response.delete_cookie(cookie.name, httponly=cookie.http_only)
        else:
            response.set_cookie(
                cookie.name,
                quote(cookie.value, safe=""),
                max_age=cookie.max_age,
                expires=cookie.max_age,
                httponly=cookie.http_only,
            )


class S3OASGIMiddleware(BaseHTTPMiddleware):
    """
    ASGI middleware requiring an S3O login for every request.

    Verified requests reach the app with `request.state.s3o_username` set.
    Everything else is redirected to the provider or refused.

    Args:
        app: ASGI application
        key_source: Callable returning the provider's current public key
            (see PublicKeyFetcher), or None before it is downloaded
        config: Gate settings (default: GateConfig())

    Example (FastAPI):
        >>> from fastapi import FastAPI, Request
        >>> from s3o_gate import PublicKeyFetcher, S3OASGIMiddleware
        >>>
        >>> keys = PublicKeyFetcher()
        >>> app = FastAPI()
        >>> app.add_middleware(S3OASGIMiddleware, key_source=keys)
        >>>
        >>> @app.get("/")
        >>> async def home(request: Request):
        ...     return {"user": request.state.s3o_username}
    """

    def __init__(
        self,
        app: Any,
        key_source: KeyMaterialSource,
        config: GateConfig | None = None,
    ):
        super().__init__(app)
        self.engine = AuthenticationEngine(key_source, config)

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Any],
    ) -> Response:
        gate_request = _gate_request(request)

        async def read_form() -> dict[str, str]:
            body = await request.body()
            return parse_form_body(body, request.headers.get("content-type"))

        decision = await self.engine.decide(gate_request, read_form)

        if decision.action is Action.CONTINUE:
            request.state.s3o_username = decision.username
            response = await call_next(request)
        else:
            response = self._response(decision)

        _apply_cookies(response, decision.cookies)
        return response

    @staticmethod
    def _response(decision: GateDecision) -> Response:
        if decision.action is Action.REDIRECT:
            return RedirectResponse(
                decision.location,
                status_code=decision.status_code,
                headers=decision.headers,
            )
        return HTMLResponse(
            decision.body,
            status_code=decision.status_code,
            headers=decision.headers,
        )
