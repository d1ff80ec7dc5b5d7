"""Tests for token signature verification."""

import pytest

from s3o_gate import build_message, convert_public_key, verify_signature


def _mutate(value: str) -> str:
    """Change one character."""
    first = "B" if value[0] != "B" else "C"
    return first + value[1:]


class TestBuildMessage:
    """Tests for build_message."""

    def test_joins_with_hyphen(self):
        assert build_message("jdoe", "app.example.com") == "jdoe-app.example.com"

    def test_no_escaping(self):
        """Hyphens are not escaped; these two pairs collide."""
        assert build_message("a-b", "c") == build_message("a", "b-c")


class TestVerifySignature:
    """Tests for verify_signature."""

    @pytest.fixture
    def key(self, key_material):
        return convert_public_key(key_material)

    def test_valid_signature(self, key, sign):
        token = sign("jdoe", "app.example.com")
        assert verify_signature("jdoe-app.example.com", token, key) is True

    @pytest.mark.parametrize("username,hostname", [
        ("jane.doe", "localhost"),
        ("first.last", "internal.example.co.uk"),
        ("ünïcode", "example.com"),
    ])
    def test_valid_pairs(self, key, sign, username, hostname):
        token = sign(username, hostname)
        assert verify_signature(build_message(username, hostname), token, key)

    def test_mutated_username(self, key, sign):
        token = sign("jdoe", "app.example.com")
        assert verify_signature("jdoF-app.example.com", token, key) is False

    def test_mutated_hostname(self, key, sign):
        token = sign("jdoe", "app.example.com")
        assert verify_signature("jdoe-app.example.con", token, key) is False

    def test_mutated_signature(self, key, sign):
        token = sign("jdoe", "app.example.com")
        assert verify_signature("jdoe-app.example.com", _mutate(token), key) is False

    def test_mutated_padding_bits(self, key, sign):
        """Changing the last data character before "==" is rejected."""
        token = sign("jdoe", "app.example.com")
        assert token.endswith("==")
        last = token[-3]
        alphabet = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
        flipped = alphabet[alphabet.index(last) ^ 1]
        mutated = token[:-3] + flipped + "=="
        assert verify_signature("jdoe-app.example.com", mutated, key) is False

    @pytest.mark.parametrize("index", [0, 100, -3])
    def test_any_single_character_mutation(self, key, sign, index):
        token = sign("jdoe", "app.example.com")
        position = index % len(token)
        replacement = "A" if token[position] != "A" else "B"
        mutated = token[:position] + replacement + token[position + 1:]
        assert verify_signature("jdoe-app.example.com", mutated, key) is False

    def test_whitespace_in_signature(self, key, sign):
        token = sign("jdoe", "app.example.com")
        assert verify_signature("jdoe-app.example.com", token[:10] + " " + token[10:], key) is False

    def test_wrong_key(self, key, sign, other_private_key):
        token = sign("jdoe", "app.example.com", key=other_private_key)
        assert verify_signature("jdoe-app.example.com", token, key) is False

    @pytest.mark.parametrize("token", [None, "", "abc", "not base64 at all!", "ü"])
    def test_malformed_signature_returns_false(self, key, token):
        """Malformed signatures return False instead of raising."""
        assert verify_signature("jdoe-app.example.com", token, key) is False
