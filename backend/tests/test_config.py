"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from docrelay.config import Settings


def test_defaults(monkeypatch):
    for name in ("POLL_INTERVAL_SECONDS", "JOB_DEADLINE_SECONDS", "PORT"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.poll_interval_seconds == 1.5
    assert settings.job_deadline_seconds == 720
    assert settings.submit_timeout == 180
    assert settings.port == 3000


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PAPAGO_BASE", "https://example.test/api/")
    monkeypatch.setenv("POLL_INTERVAL_SECONDS", "0.5")

    settings = Settings(_env_file=None)

    assert settings.api_base == "https://example.test/api"
    assert settings.poll_interval_seconds == 0.5


def test_auth_headers(settings):
    assert settings.auth_headers == {
        "X-NCP-APIGW-API-KEY-ID": "test-key-id",
        "X-NCP-APIGW-API-KEY": "test-key-secret",
    }


@pytest.mark.parametrize("missing", ["PAPAGO_BASE", "NCP_KEY_ID", "NCP_KEY"])
def test_missing_required_setting_is_fatal(monkeypatch, missing):
    monkeypatch.delenv(missing, raising=False)

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    assert missing.lower() in str(exc_info.value)


def test_create_app_fails_without_credentials(monkeypatch):
    from docrelay.main import create_app

    monkeypatch.delenv("NCP_KEY", raising=False)

    with pytest.raises(ValidationError):
        create_app()


def test_settings_are_immutable(settings):
    with pytest.raises(ValidationError):
        settings.ncp_key = "changed"
