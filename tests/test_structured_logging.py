"""Tests for structured logging and the event taxonomy.

Covers:
  - log_event emits event_name, key=value pairs and the component
  - setup_logging is idempotent and accepts level names
  - Event members render as their snake_case names
  - post content is never logged, only lengths
"""

import logging
from unittest.mock import patch

import pytest
from backend.app.core.logging import _HANDLER_ATTR, Event, log_event, resolve_level, setup_logging


class TestLogEventFormat:
    def test_log_event_emits_event_name(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "test_event", key="value")
        assert "test_event: key=value" in caplog.text

    def test_log_event_includes_kwargs(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "my_event", foo="bar", count=42)
        assert "foo=bar" in caplog.text
        assert "count=42" in caplog.text

    def test_log_event_without_kwargs(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.component")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "bare_event")
        assert caplog.records[-1].getMessage() == "bare_event"

    def test_log_event_component_in_record(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("backend.app.api.routes.posts")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", "test_event")
        assert any(r.name == "backend.app.api.routes.posts" for r in caplog.records)

    def test_log_event_warning_level(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.warn")
        with caplog.at_level(logging.WARNING):
            log_event(test_logger, "warning", "warn_event", detail="x")
        assert caplog.records[0].levelname == "WARNING"

    def test_unknown_level_falls_back_to_info(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.fallback")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "no_such_level", "fallback_event")
        assert caplog.records[0].levelname == "INFO"


class TestSetupLogging:
    def test_handler_added_once(self) -> None:
        setup_logging()
        setup_logging()
        ours = [h for h in logging.getLogger().handlers if getattr(h, _HANDLER_ATTR, False)]
        assert len(ours) == 1

    def test_level_applied(self) -> None:
        root = logging.getLogger()
        previous = root.level
        try:
            setup_logging(logging.DEBUG)
            assert root.level == logging.DEBUG
        finally:
            root.setLevel(previous)


class TestEventNames:
    def test_event_names_are_snake_case(self) -> None:
        for event in Event:
            assert event.value == event.value.lower()
            assert " " not in event.value

    def test_event_member_renders_as_name(self, caplog: pytest.LogCaptureFixture) -> None:
        test_logger = logging.getLogger("test.events")
        with caplog.at_level(logging.INFO):
            log_event(test_logger, "info", Event.POST_CREATED, id=7)
        assert caplog.records[-1].getMessage() == "post_created: id=7"


class TestResolveLevel:
    def test_names_are_case_insensitive(self) -> None:
        assert resolve_level("debug") == logging.DEBUG
        assert resolve_level("WARNING") == logging.WARNING

    def test_int_passes_through(self) -> None:
        assert resolve_level(logging.ERROR) == logging.ERROR

    def test_unknown_name_falls_back_to_info(self) -> None:
        assert resolve_level("chatty") == logging.INFO


class TestContentNotLogged:
    def test_validation_failure_logs_fields_not_values(self) -> None:
        from backend.app.core.errors import PostValidationError, normalize_validation_error
        from backend.app.services.validation import collect_violations

        _, violations = collect_violations({"title": 12345, "content": "private words"})
        with patch("backend.app.core.errors.logger") as mock_logger:
            normalize_validation_error(PostValidationError(violations))
        call_text = " ".join(str(c) for c in mock_logger.method_calls)
        assert "post_validation_failed" in call_text
        assert "fields=title,price" in call_text
        assert "private words" not in call_text
