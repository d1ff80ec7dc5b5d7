"""Tests for GateConfig."""

from s3o_gate import GateConfig


class TestGateConfig:
    """Tests for GateConfig defaults and environment loading."""

    def test_defaults(self):
        config = GateConfig()
        assert config.provider_url == "https://s3o.ft.com"
        assert config.public_key_url == "https://s3o.ft.com/publickey"
        assert config.cookie_max_age_ms == 900000

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("S3O_PROVIDER_URL", "https://sso.internal")
        monkeypatch.setenv("S3O_PUBLIC_KEY_URL", "https://sso.internal/key")
        monkeypatch.setenv("S3O_COOKIE_MAX_AGE_MS", "60000")

        config = GateConfig.from_env()

        assert config.provider_url == "https://sso.internal"
        assert config.public_key_url == "https://sso.internal/key"
        assert config.cookie_max_age_ms == 60000

    def test_from_env_defaults(self, monkeypatch):
        for name in ("S3O_PROVIDER_URL", "S3O_PUBLIC_KEY_URL", "S3O_COOKIE_MAX_AGE_MS"):
            monkeypatch.delenv(name, raising=False)
        assert GateConfig.from_env() == GateConfig()
