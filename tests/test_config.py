import logging

from projectdesk.config import Settings
from projectdesk.core.logging import configure_logging, request_id_var
from projectdesk.core.security import collect_security_warnings


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://app@db/projectdesk")
    monkeypatch.setenv("WORKFLOW_ENFORCE_SEQUENCE", "false")
    monkeypatch.setenv("AUDIT_LOG_DEFAULT_LIMIT", "25")

    settings = Settings(_env_file=None)

    assert settings.database_url == "postgresql://app@db/projectdesk"
    assert settings.workflow_enforce_sequence is False
    assert settings.audit_log_default_limit == 25


def test_default_settings_raise_security_warnings(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("JWT_SECRET", raising=False)

    warnings = collect_security_warnings(Settings(_env_file=None))

    assert any("JWT secret" in message for message in warnings)
    assert any("SQLite" in message for message in warnings)


def test_hardened_settings_raise_no_warnings():
    settings = Settings(
        _env_file=None,
        database_url="postgresql://app@db/projectdesk",
        jwt_secret="a-long-random-secret",
        cors_origins=["https://projects.example.com"],
    )

    assert collect_security_warnings(settings) == []


def test_json_logging_carries_request_id():
    configure_logging("DEBUG", "json")
    try:
        handler = next(h for h in logging.getLogger().handlers if h.name == "console")
        assert type(handler.formatter).__name__ == "JsonFormatter"
        assert logging.getLogger().level == logging.DEBUG

        token = request_id_var.set("req-42")
        try:
            record = logging.LogRecord("projectdesk.test", logging.INFO, __file__, 1, "hello", None, None)
            for log_filter in handler.filters:
                log_filter.filter(record)
        finally:
            request_id_var.reset(token)
        assert record.request_id == "req-42"
        assert '"request_id": "req-42"' in handler.format(record)
    finally:
        configure_logging("INFO", "text")
