"""
Host, Cookie and form-body parsing for incoming requests.
"""

from typing import Mapping
from urllib.parse import parse_qsl, unquote


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def hostname_from_host(host: str | None) -> str:
    """
    Return the hostname part of a Host header value.

    Examples:
        >>> hostname_from_host("example.com:8080")
        'example.com'
        >>> hostname_from_host("[::1]:3000")
        '[::1]'
    """
    if not host:
        return ""

    host = host.strip()
    if host.startswith("["):
        end = host.find("]")
        return host[: end + 1] if end != -1 else host

    return host.split(":", 1)[0]


def parse_cookie_header(header: str | None) -> dict[str, str]:
    """
    Parse a Cookie header into a dict.

    Pairs without "=" are skipped, surrounding quotes are removed and values
    are percent-decoded. If a name repeats, the first value wins.

    Examples:
        >>> parse_cookie_header('s3o_username=jdoe; s3o_token="abc%3D%3D"')
        {'s3o_username': 'jdoe', 's3o_token': 'abc=='}
    """
    cookies: dict[str, str] = {}
    if not header:
        return cookies

    for chunk in header.split(";"):
        if "=" not in chunk:
            continue
        name, value = chunk.split("=", 1)
        name = name.strip()
        if not name or name in cookies:
            continue

        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] == '"':
            value = value[1:-1]
        cookies[name] = unquote(value)

    return cookies


def ensure_cookies(
    existing: Mapping[str, str] | None,
    header: str | None,
) -> dict[str, str]:
    """
    Return request cookies as a dict, parsing the Cookie header only when
    the framework has not already done so.
    """
    if existing is not None:
        return dict(existing)
    return parse_cookie_header(header)


def parse_form_body(body: bytes, content_type: str | None) -> dict[str, str]:
    """
    Parse an urlencoded request body.

    Bodies with any other content type yield an empty dict. Repeated fields
    keep their last value.

    Examples:
        >>> parse_form_body(b"token=abc%2B%3D", "application/x-www-form-urlencoded")
        {'token': 'abc+='}
    """
    if not content_type:
        return {}

    media_type = content_type.split(";", 1)[0].strip().lower()
    if media_type != FORM_CONTENT_TYPE:
        return {}

    text = body.decode("utf-8", errors="replace")
    return dict(parse_qsl(text, keep_blank_values=True))
