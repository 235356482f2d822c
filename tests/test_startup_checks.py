"""Tests for startup configuration validation."""
import pytest

from config.settings import settings
from src.startup_checks import validate_settings


@pytest.fixture
def good_settings(monkeypatch):
    monkeypatch.setattr(settings, "SENTRY_ENVIRONMENT", "development")
    monkeypatch.setattr(settings, "REQUIRE_AUTH", True)
    monkeypatch.setattr(settings, "EF_API_KEY", "live-key")
    monkeypatch.setattr(settings, "EF_API_URL", "https://api.example.com/v1/networks/")
    monkeypatch.setattr(settings, "EF_URL_AFFILIATE", "https://api.example.com/v1/affiliates/")
    monkeypatch.setattr(settings, "UPSTREAM_TIMEOUT_SECONDS", 30.0)
    monkeypatch.setattr(settings, "CORS_ORIGINS", ["*"])
    return monkeypatch


def test_clean_config(good_settings):
    assert validate_settings() == []


def test_missing_key_warns(good_settings):
    good_settings.setattr(settings, "EF_API_KEY", "")
    warnings = validate_settings()
    assert len(warnings) == 1
    assert "mock data" in warnings[0]


def test_relative_url_warns(good_settings):
    good_settings.setattr(settings, "EF_URL_AFFILIATE", "api.example.com/affiliates")
    assert any("EF_URL_AFFILIATE" in w for w in validate_settings())


def test_auth_off_warns(good_settings):
    good_settings.setattr(settings, "REQUIRE_AUTH", False)
    assert any("REQUIRE_AUTH" in w for w in validate_settings())


def test_bad_timeout_warns(good_settings):
    good_settings.setattr(settings, "UPSTREAM_TIMEOUT_SECONDS", 0)
    assert any("UPSTREAM_TIMEOUT_SECONDS" in w for w in validate_settings())


def test_production_cors_wildcard_warns(good_settings):
    good_settings.setattr(settings, "SENTRY_ENVIRONMENT", "production")
    good_settings.setattr(settings, "JWT_SECRET", "real-secret")
    assert any("CORS_ORIGINS" in w for w in validate_settings())


def test_production_default_secret_exits(good_settings):
    good_settings.setattr(settings, "SENTRY_ENVIRONMENT", "production")
    good_settings.setattr(settings, "JWT_SECRET", "netdash-dev-secret-change-in-prod")
    with pytest.raises(SystemExit):
        validate_settings()
