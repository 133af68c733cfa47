"""Unit tests for logging service."""

import json

import structlog

from src.services.logging_service import configure_logging, get_logger, redact_sensitive


class TestRedactSensitive:
    """Tests for redact_sensitive processor."""

    def test_redacts_password(self):
        event_dict = {"password": "hunter22", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["password"] == "REDACTED"

    def test_redacts_new_password_and_hash(self):
        event_dict = {"new_password": "x", "password_hash": "$2b$...", "event": "test"}
        result = redact_sensitive(None, None, event_dict)
        assert result["new_password"] == "REDACTED"
        assert result["password_hash"] == "REDACTED"

    def test_redacts_tokens_and_otp(self):
        event_dict = {
            "access_token": "eyJ...",
            "refresh_token": "eyJ...",
            "otp": "123456",
            "event": "test",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["access_token"] == "REDACTED"
        assert result["refresh_token"] == "REDACTED"
        assert result["otp"] == "REDACTED"

    def test_redacts_secret_cookie_and_authorization(self):
        event_dict = {
            "jwt_refresh_secret": "k",
            "cookie": "refresh_token=abc",
            "Authorization": "Bearer abc",
        }
        result = redact_sensitive(None, None, event_dict)
        assert result["jwt_refresh_secret"] == "REDACTED"
        assert result["cookie"] == "REDACTED"
        assert result["Authorization"] == "REDACTED"

    def test_keeps_event_name_and_token_type(self):
        event_dict = {"event": "password_reset", "token_type": "refresh"}
        result = redact_sensitive(None, None, event_dict)
        assert result["event"] == "password_reset"
        assert result["token_type"] == "refresh"

    def test_keeps_otp_store_backend(self):
        event_dict = {"event": "application_started", "otp_store_backend": "redis"}
        result = redact_sensitive(None, None, event_dict)
        assert result["otp_store_backend"] == "redis"

    def test_preserves_non_sensitive_fields(self):
        event_dict = {
            "correlation_id": "abc-123",
            "username": "alice@example.com",
            "status_code": 401,
        }
        result = redact_sensitive(None, None, event_dict)
        assert result == {
            "correlation_id": "abc-123",
            "username": "alice@example.com",
            "status_code": 401,
        }


class TestConfigureLogging:
    """Tests for configure_logging function."""

    def test_get_logger_with_name(self):
        configure_logging("DEBUG")
        logger = get_logger("test_module")
        logger.info("test_event", data="value")

    def test_get_logger_without_name(self):
        configure_logging("INFO")
        assert get_logger() is not None

    def test_output_is_redacted_json(self, capsys):
        configure_logging("INFO")
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(correlation_id="corr-1")

        structlog.get_logger().info("otp_stored", username="alice", otp="654321")

        line = capsys.readouterr().out.strip().splitlines()[-1]
        record = json.loads(line)
        assert record["event"] == "otp_stored"
        assert record["otp"] == "REDACTED"
        assert record["correlation_id"] == "corr-1"
        assert record["level"] == "info"
        assert "timestamp" in record
        assert "654321" not in line

        structlog.contextvars.clear_contextvars()
