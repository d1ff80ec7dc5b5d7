"""
Redirect URLs for the S3O login round trip.
"""

from typing import Iterable
from urllib.parse import quote, urlencode

# Characters left alone by JavaScript's encodeURIComponent
_COMPONENT_SAFE = "-_.!~*'()"

# Query parameters the provider appends to the callback
CREDENTIAL_PARAMS = frozenset({"username", "token"})


def encode_component(value: str, safe: str = "", encoding=None, errors=None) -> str:
    """
    Percent-encode a URL component like encodeURIComponent.

    Examples:
        >>> encode_component("http://example.com/a?b=c")
        'http%3A%2F%2Fexample.com%2Fa%3Fb%3Dc'
    """
    return quote(value, safe=_COMPONENT_SAFE, encoding=encoding, errors=errors)


def effective_protocol(forwarded_proto: str | None, scheme: str) -> str:
    """
    Protocol the browser used, honouring a TLS terminating proxy.

    Examples:
        >>> effective_protocol("https", "http")
        'https'
        >>> effective_protocol(None, "http")
        'http'
    """
    if forwarded_proto == "https":
        return "https"
    return scheme


def callback_url(protocol: str, host: str, original_url: str) -> str:
    """Absolute URL the provider should send the browser back to."""
    return f"{protocol}://{host}{original_url}"


def authorize_url(provider_url: str, hostname: str, callback: str) -> str:
    """
    Provider URL that starts a login.

    Examples:
        >>> authorize_url("https://s3o.ft.com", "example.com", "http://example.com/")
        'https://s3o.ft.com/v2/authenticate?post=true&host=example.com&redirect=http%3A%2F%2Fexample.com%2F'
    """
    return (
        f"{provider_url.rstrip('/')}/v2/authenticate"
        f"?post=true&host={encode_component(hostname)}"
        f"&redirect={encode_component(callback)}"
    )


def strip_credentials(path: str, query_params: Iterable[tuple[str, str]]) -> str:
    """
    Rebuild path and query without the provider's username/token parameters.

    Examples:
        >>> strip_credentials("/docs", [("username", "bob"), ("token", "abc"), ("foo", "bar")])
        '/docs?foo=bar'
    """
    remaining = [
        (name, value)
        for name, value in query_params
        if name not in CREDENTIAL_PARAMS
    ]
    if not remaining:
        return path
    return f"{path}?{urlencode(remaining, quote_via=encode_component)}"
