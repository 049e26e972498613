"""Tests for smsguard.core.logging."""

import logging

import pytest

from smsguard.core import logging as sms_logging
from smsguard.core.config import Settings


@pytest.fixture
def unconfigured(monkeypatch):
    root = logging.getLogger()
    level = root.level
    monkeypatch.setattr(sms_logging, "_CONFIGURED", False)
    yield
    root.setLevel(level)


def test_setup_logging_follows_given_settings(unconfigured):
    """Level comes from the Settings passed in, not the process-wide ones."""
    sms_logging.setup_logging(Settings(LOG_LEVEL="WARNING", LOG_FORMAT="json"))

    assert logging.getLogger().level == logging.WARNING
    assert sms_logging._CONFIGURED is True


def test_debug_flag_wins_over_level(unconfigured):
    sms_logging.setup_logging(Settings(LOG_LEVEL="ERROR", DEBUG=True))

    assert logging.getLogger().level == logging.DEBUG


def test_setup_logging_is_idempotent(unconfigured):
    sms_logging.setup_logging(Settings(LOG_LEVEL="WARNING"))
    sms_logging.setup_logging(Settings(LOG_LEVEL="ERROR"))

    assert logging.getLogger().level == logging.WARNING


def test_redact_secrets():
    out = sms_logging.redact_secrets({"password": "hunter2hunter2", "mobile": "+100", "nested": [{"token": "x"}]})

    assert out["password"] == "hun***er2"
    assert out["mobile"] == "+100"
    assert out["nested"][0]["token"] == "***"
