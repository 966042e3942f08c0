"""Tests for environment-driven settings."""

import pytest

from dtp_fiscal_mcp.config import DtpSettings


def test_defaults():
    settings = DtpSettings.from_env({})
    assert settings.host == "127.0.0.1"
    assert settings.port == 3010
    assert settings.connect_timeout == 3.0
    assert settings.command_timeout == 10.0
    assert settings.store_name == "N/A"
    assert settings.log_level == "INFO"


def test_reads_environment():
    settings = DtpSettings.from_env(
        {
            "DTP_HOST": "192.168.1.50",
            "DTP_PORT": "9100",
            "DTP_CONNECT_TIMEOUT": "1.5",
            "DTP_COMMAND_TIMEOUT": "30",
            "DTP_STORE_NAME": "Centro",
            "DTP_LOG_LEVEL": "debug",
        }
    )
    assert settings == DtpSettings(
        host="192.168.1.50",
        port=9100,
        connect_timeout=1.5,
        command_timeout=30.0,
        store_name="Centro",
        log_level="DEBUG",
    )


def test_empty_values_use_defaults():
    assert DtpSettings.from_env({"DTP_PORT": ""}).port == 3010


@pytest.mark.parametrize(
    "env",
    [
        {"DTP_PORT": "abc"},
        {"DTP_PORT": "70000"},
        {"DTP_COMMAND_TIMEOUT": "soon"},
        {"DTP_CONNECT_TIMEOUT": "0"},
    ],
)
def test_invalid_values(env):
    with pytest.raises(ValueError):
        DtpSettings.from_env(env)


def test_reads_os_environ(monkeypatch):
    monkeypatch.setenv("DTP_HOST", "printer.local")
    assert DtpSettings.from_env().host == "printer.local"
