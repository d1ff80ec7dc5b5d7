"""Tests for Host, Cookie and form body parsing."""

import pytest

from s3o_gate.headers import (
    ensure_cookies,
    hostname_from_host,
    parse_cookie_header,
    parse_form_body,
)


class TestHostnameFromHost:
    """Tests for hostname_from_host function."""

    def test_plain_host(self):
        assert hostname_from_host("example.com") == "example.com"

    def test_strips_port(self):
        assert hostname_from_host("example.com:8080") == "example.com"

    def test_ipv6_with_port(self):
        assert hostname_from_host("[::1]:3000") == "[::1]"

    def test_ipv6_without_port(self):
        assert hostname_from_host("[::1]") == "[::1]"

    @pytest.mark.parametrize("host", [None, ""])
    def test_missing_host(self, host):
        assert hostname_from_host(host) == ""


class TestParseCookieHeader:
    """Tests for parse_cookie_header function."""

    def test_basic_cookies(self):
        result = parse_cookie_header("s3o_username=jdoe; s3o_token=abc")
        assert result == {"s3o_username": "jdoe", "s3o_token": "abc"}

    def test_percent_decoding(self):
        """Values are percent-decoded."""
        result = parse_cookie_header("s3o_token=ab%2Bc%2F%3D%3D")
        assert result["s3o_token"] == "ab+c/=="

    def test_quoted_value(self):
        """Surrounding quotes are removed."""
        result = parse_cookie_header('s3o_token="abc/def=="')
        assert result["s3o_token"] == "abc/def=="

    def test_first_value_wins(self):
        result = parse_cookie_header("a=1; a=2")
        assert result == {"a": "1"}

    def test_skips_malformed_pairs(self):
        result = parse_cookie_header("garbage; a=1;; =x")
        assert result == {"a": "1"}

    def test_value_containing_equals(self):
        result = parse_cookie_header("s3o_token=abc==")
        assert result["s3o_token"] == "abc=="

    @pytest.mark.parametrize("header", [None, ""])
    def test_empty(self, header):
        assert parse_cookie_header(header) == {}


class TestEnsureCookies:
    """Tests for ensure_cookies function."""

    def test_uses_parsed_cookies(self):
        """Already-parsed cookies are kept even if a header is present."""
        result = ensure_cookies({"a": "1"}, "a=2; b=3")
        assert result == {"a": "1"}

    def test_parses_header_when_absent(self):
        result = ensure_cookies(None, "a=2; b=3")
        assert result == {"a": "2", "b": "3"}

    def test_empty_when_nothing(self):
        assert ensure_cookies(None, None) == {}


class TestParseFormBody:
    """Tests for parse_form_body function."""

    def test_urlencoded(self):
        result = parse_form_body(
            b"token=ab%2Bc%3D%3D&other=1",
            "application/x-www-form-urlencoded",
        )
        assert result == {"token": "ab+c==", "other": "1"}

    def test_content_type_with_charset(self):
        result = parse_form_body(
            b"token=abc",
            "application/x-www-form-urlencoded; charset=UTF-8",
        )
        assert result == {"token": "abc"}

    def test_other_content_type_ignored(self):
        assert parse_form_body(b'{"token": "abc"}', "application/json") == {}

    def test_missing_content_type_ignored(self):
        assert parse_form_body(b"token=abc", None) == {}
