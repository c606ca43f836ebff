import pytest
from pydantic import ValidationError

from bulksms.core.config import Settings, get_settings
from bulksms.core.exceptions import ConfigurationError


def test_get_settings_defaults():
    """Defaults with nothing configured"""
    settings = get_settings()

    assert settings.SMS_PROVIDER == "bulksms"
    assert settings.BULKSMS_URL is None
    assert settings.BULKSMS_USERNAME == ""
    assert settings.BULKSMS_TIMEOUT == 15.0
    assert settings.LOG_FORMAT == "json"


def test_settings_singleton():
    """get_settings returns the same instance"""
    settings1 = get_settings()
    settings2 = get_settings()

    assert settings1 is settings2


def test_settings_read_from_env(gateway_env, monkeypatch):
    monkeypatch.setenv("BULKSMS_TIMEOUT", "4.5")
    monkeypatch.setenv("SMS_PROVIDER", "  BulkSMS ")
    settings = get_settings()

    assert settings.BULKSMS_URL == "https://gateway.test/api/send"
    assert settings.BULKSMS_USERNAME == "shop"
    assert settings.BULKSMS_PASSWORD == "s3cret-pass"
    assert settings.BULKSMS_TIMEOUT == 4.5
    assert settings.SMS_PROVIDER == "bulksms"


def test_gateway_config_from_settings(gateway_env):
    cfg = get_settings().gateway_config()

    assert cfg.url == "https://gateway.test/api/send"
    assert cfg.username == "shop"
    assert cfg.password == "s3cret-pass"
    assert "s3cret-pass" not in repr(cfg)


def test_gateway_config_is_frozen(gateway_env):
    cfg = get_settings().gateway_config()
    with pytest.raises(ValidationError):
        cfg.url = "https://elsewhere.test"


def test_gateway_config_requires_url():
    with pytest.raises(ConfigurationError) as exc_info:
        Settings().gateway_config()
    assert exc_info.value.code == "bulksms_url_missing"


def test_gateway_config_rejects_non_http_url():
    with pytest.raises(ConfigurationError) as exc_info:
        Settings(BULKSMS_URL="ftp://gateway.test/send").gateway_config()
    assert exc_info.value.code == "bulksms_url_invalid"


def test_gateway_config_allows_empty_credentials():
    cfg = Settings(BULKSMS_URL="http://gateway.test/send").gateway_config()
    assert cfg.username == ""
    assert cfg.password == ""


def test_invalid_log_format_rejected():
    with pytest.raises(ValidationError):
        Settings(LOG_FORMAT="xml")


def test_timeout_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(BULKSMS_TIMEOUT=0)


def test_dump_settings_safe_masks_password(gateway_env):
    dump = get_settings().dump_settings_safe()

    assert dump["BULKSMS_PASSWORD"] == "s3c***ass"
    assert dump["BULKSMS_USERNAME"] == "shop"
    assert dump["BULKSMS_URL"] == "https://gateway.test/api/send"
