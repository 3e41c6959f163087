"""Tests for environment parsing and settings."""

from app.core.config import DEFAULT_ORIGINS, get_settings
from app.utils.env_helper import env_bool, env_choice, env_list, env_none_or_str


class TestEnvHelpers:
    def test_env_bool(self, monkeypatch):
        monkeypatch.setenv("FLAG", " Yes ")
        assert env_bool("FLAG") is True
        monkeypatch.setenv("FLAG", "off")
        assert env_bool("FLAG", default=True) is False
        monkeypatch.setenv("FLAG", "")
        assert env_bool("FLAG", default=True) is True
        monkeypatch.delenv("FLAG")
        assert env_bool("FLAG") is False

    def test_env_none_or_str(self, monkeypatch):
        monkeypatch.setenv("DOMAIN", "None")
        assert env_none_or_str("DOMAIN") is None
        monkeypatch.setenv("DOMAIN", "  ")
        assert env_none_or_str("DOMAIN", "fallback") == "fallback"
        monkeypatch.setenv("DOMAIN", " soulmatch.id ")
        assert env_none_or_str("DOMAIN") == "soulmatch.id"

    def test_env_list(self, monkeypatch):
        monkeypatch.setenv("ORIGINS", "https://a.test, ,https://b.test")
        assert env_list("ORIGINS") == ["https://a.test", "https://b.test"]
        monkeypatch.delenv("ORIGINS")
        assert env_list("ORIGINS", ["x"]) == ["x"]

    def test_env_choice(self, monkeypatch):
        monkeypatch.setenv("MODE", "STRICT")
        assert env_choice("MODE", ("lax", "strict"), "lax") == "strict"
        monkeypatch.setenv("MODE", "sometimes")
        assert env_choice("MODE", ("lax", "strict"), "lax") == "lax"


class TestSettings:
    def test_reads_environment(self):
        settings = get_settings()

        assert settings.supabase_url == "https://soulmatch.test"
        assert settings.jwt_issuer == "https://soulmatch.test/auth/v1"
        assert settings.profile_bucket == "profile-photos"
        assert settings.log_level == "WARNING"

    def test_cached_until_cleared(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("CORS_ORIGINS", "https://soulmatch.id")

        assert get_settings() is first
        assert first.cors_origins == DEFAULT_ORIGINS

        get_settings.cache_clear()
        assert get_settings().cors_origins == ["https://soulmatch.id"]
