"""
Unit tests for logging configuration.
"""

import logging

import structlog

from src.config.logging import QUIET_LOGGERS, REDACTED, redact_secrets, setup_logging


class TestRedactSecrets:
    """Credentials never reach the rendered log line."""

    def test_top_level_credentials_masked(self):
        event = redact_secrets(None, "info", {"event": "x", "api_key": "secret", "query": "rust"})

        assert event["api_key"] == REDACTED
        assert event["query"] == "rust"

    def test_nested_params_masked(self):
        event = redact_secrets(
            None,
            "info",
            {"event": "x", "params": {"q": "rust", "key": "abc", "cx": "engine"}},
        )

        assert event["params"] == {"q": "rust", "key": REDACTED, "cx": REDACTED}

    def test_header_names_case_insensitive(self):
        event = redact_secrets(None, "info", {"event": "x", "X-Subscription-Token": "t"})
        assert event["X-Subscription-Token"] == REDACTED

    def test_empty_values_left_alone(self):
        event = redact_secrets(None, "info", {"event": "x", "api_key": ""})
        assert event["api_key"] == ""


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_configures_root_and_quiets_http_loggers(self):
        setup_logging(log_level="DEBUG", log_format="json")

        assert logging.getLogger().level == logging.DEBUG
        assert len(logging.getLogger().handlers) == 1
        for name in QUIET_LOGGERS:
            assert logging.getLogger(name).level == logging.ERROR
        assert redact_secrets in structlog.get_config()["processors"]

    def test_text_format(self):
        setup_logging(log_level="INFO", log_format="text")
        assert logging.getLogger().level == logging.INFO
