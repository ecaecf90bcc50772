"""Tests for settings loading."""
import pytest
from pydantic import ValidationError

from quickres.config import Settings


def test_defaults():
    settings = Settings(_env_file=None)
    assert settings.EMAIL_PROVIDER == "console"
    assert settings.is_production is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("BASE_URL", "https://reserve.example.org")
    monkeypatch.setenv("APP_ENVIRONMENT", "Production")
    settings = Settings(_env_file=None)
    assert settings.BASE_URL == "https://reserve.example.org"
    assert settings.is_production is True


def test_cors_origins_split():
    settings = Settings(_env_file=None, CORS_ORIGINS="https://a.example.com, https://b.example.com,")
    assert settings.cors_origins == ["https://a.example.com", "https://b.example.com"]


def test_settings_are_frozen():
    settings = Settings(_env_file=None)
    with pytest.raises(ValidationError):
        settings.BASE_URL = "http://elsewhere"


def test_docs_served_outside_production(client):
    assert client.get("/docs").status_code == 200
