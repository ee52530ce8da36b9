"""
Tests for settings loading from the environment.

Covers:
- CORS origins given as a comma-separated list
- Defaults when the variable is unset
- Typed values read from env vars
"""

import pytest

from config import Settings


class TestCorsOrigins:

    def test_comma_separated(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://a.example.com,https://b.example.com")

        settings = Settings(_env_file=None)

        assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]

    def test_whitespace_and_trailing_comma(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", " https://a.example.com , https://b.example.com ,")

        settings = Settings(_env_file=None)

        assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]

    def test_single_origin(self, monkeypatch):
        monkeypatch.setenv("CORS_ORIGINS", "https://app.example.com")

        assert Settings(_env_file=None).cors_origins == ["https://app.example.com"]

    def test_default(self, monkeypatch):
        monkeypatch.delenv("CORS_ORIGINS", raising=False)

        assert Settings(_env_file=None).cors_origins == [
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ]

    def test_list_passed_directly(self):
        settings = Settings(_env_file=None, cors_origins=["https://a.example.com"])
        assert settings.cors_origins == ["https://a.example.com"]


class TestEnvironment:

    @pytest.mark.parametrize("raw,expected", [("true", True), ("false", False), ("1", True)])
    def test_rate_limit_flag(self, monkeypatch, raw, expected):
        monkeypatch.setenv("RATE_LIMIT_ENABLED", raw)
        assert Settings(_env_file=None).rate_limit_enabled is expected

    def test_token_lifetime(self, monkeypatch):
        monkeypatch.setenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15")
        assert Settings(_env_file=None).access_token_expire_minutes == 15
