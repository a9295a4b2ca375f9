"""
Unit tests for logging configuration and secret redaction.
"""

import logging
import os
import sys

import pytest

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from psprovisioner.config.provider import DEFAULT_RETRY_SLEEP, EnvConfigProvider
from psprovisioner.logging_config import (
    REDACTED,
    SecretRedactionFilter,
    clear_secrets,
    get_logging_config,
    redacting,
    register_secret,
    registered_secrets,
    unregister_secret,
)
from psprovisioner.modules.api import LoggingUi


def make_record(msg, *args):
    return logging.LogRecord("psprovisioner.test", logging.INFO, __file__, 1, msg, args, None)


class TestSecretRedactionFilter:
    """Test SecretRedactionFilter."""

    def setup_method(self):
        clear_secrets()
        self.filter = SecretRedactionFilter()

    def teardown_method(self):
        clear_secrets()

    def test_passes_through_without_secrets(self):
        record = make_record("password is %s", "hunter2")
        assert self.filter.filter(record) is True
        assert record.getMessage() == "password is hunter2"

    def test_masks_secret_in_args(self):
        """Test secrets passed as format args are masked after formatting."""
        register_secret("hunter2")
        record = make_record("password is %s", "hunter2")

        assert self.filter.filter(record) is True
        assert record.getMessage() == f"password is {REDACTED}"

    def test_masks_longest_secret_first(self):
        register_secret("abc")
        register_secret("abcdef")
        record = make_record("value abcdef")

        self.filter.filter(record)

        assert record.getMessage() == f"value {REDACTED}"

    def test_empty_secret_ignored(self):
        register_secret("")
        record = make_record("nothing to hide")

        self.filter.filter(record)

        assert record.getMessage() == "nothing to hide"

    def test_unregistered_secret_is_no_longer_masked(self):
        register_secret("hunter2")
        unregister_secret("hunter2")
        record = make_record("password is %s", "hunter2")

        self.filter.filter(record)

        assert record.getMessage() == "password is hunter2"
        assert registered_secrets() == []

    def test_shared_secret_stays_masked_until_last_release(self):
        register_secret("hunter2")
        register_secret("hunter2")
        unregister_secret("hunter2")

        assert registered_secrets() == ["hunter2"]

        unregister_secret("hunter2")
        assert registered_secrets() == []

    def test_redacting_scopes_secrets_to_block(self):
        with redacting("hunter2", None, ""):
            record = make_record("password is hunter2")
            self.filter.filter(record)
            assert record.getMessage() == f"password is {REDACTED}"

        assert registered_secrets() == []

    def test_redacting_releases_on_error(self):
        with pytest.raises(RuntimeError):
            with redacting("hunter2"):
                raise RuntimeError("boom")

        assert registered_secrets() == []


class TestLoggingUi:
    """Test LoggingUi."""

    def test_say_and_error_are_logged(self, caplog):
        caplog.set_level(logging.INFO, logger="psprovisioner.ui")

        ui = LoggingUi()
        ui.say("Provisioning with Powershell...")
        ui.error("upload failed")

        records = [(r.name, r.levelno, r.getMessage()) for r in caplog.records]
        assert ("psprovisioner.ui", logging.INFO, "Provisioning with Powershell...") in records
        assert ("psprovisioner.ui", logging.ERROR, "upload failed") in records


class TestLoggingConfig:
    """Test get_logging_config()."""

    def test_level_applies_to_package_logger(self):
        config = get_logging_config("DEBUG")
        assert config["loggers"]["psprovisioner"]["level"] == "DEBUG"

    def test_every_handler_redacts(self):
        config = get_logging_config()
        for handler in config["handlers"].values():
            assert "secret_redaction" in handler["filters"]


class TestEnvConfigProvider:
    """Test EnvConfigProvider."""

    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("PSPROV_RETRY_SLEEP", raising=False)

        runtime = EnvConfigProvider().get_runtime_config()

        assert runtime.log_level == "INFO"
        assert runtime.retry_sleep == DEFAULT_RETRY_SLEEP

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("PSPROV_RETRY_SLEEP", "0.5")

        runtime = EnvConfigProvider().get_runtime_config()

        assert runtime.log_level == "DEBUG"
        assert runtime.retry_sleep == 0.5

    def test_bad_retry_sleep(self, monkeypatch):
        monkeypatch.setenv("PSPROV_RETRY_SLEEP", "soon")
        with pytest.raises(ValueError):
            EnvConfigProvider().get_runtime_config()

    def test_http_addr_read_on_each_call(self, monkeypatch):
        provider = EnvConfigProvider()
        monkeypatch.delenv("PSPROV_HTTP_ADDR", raising=False)
        assert provider.get_http_addr() is None

        monkeypatch.setenv("PSPROV_HTTP_ADDR", "10.0.0.5:8080")
        assert provider.get_http_addr() == "10.0.0.5:8080"
