"""
Tests for configuration models, error context and the event logger.
"""
import pytest
from pydantic import ValidationError

from error_handling import ErrorSeverity, PageLoadTimeoutError, RecoveryStrategy, UnknownObjectException
from host_provider import HostConfig
from scripter_config import LoggingConfig, ScripterConfig, TimingConfig
from utils.event_logger import EventLogger, EventType, get_event_logger, set_event_logger


class TestTimingConfig:
    def test_defaults_match_polling_schedule(self):
        timing = TimingConfig()
        assert timing.initial_delay == 1.0
        assert timing.poll_interval == 1.0
        assert timing.settle_delay == 0.4
        assert timing.max_rounds == 10
        assert timing.timeout_seconds == 11.0

    def test_rounds_must_be_positive(self):
        with pytest.raises(ValidationError):
            TimingConfig(max_rounds=0)

    def test_delays_cannot_be_negative(self):
        with pytest.raises(ValidationError):
            TimingConfig(poll_interval=-1)


class TestScripterConfig:
    def test_defaults(self):
        config = ScripterConfig()
        assert config.host.host_type == "applescript"
        assert config.host.app_name == "Safari"
        assert config.host.document_index == 1
        assert config.logging.debug_mode is False

    def test_fast_preset(self):
        config = ScripterConfig.fast()
        assert config.timing.poll_interval < TimingConfig().poll_interval
        assert config.timing.max_rounds == 25

    def test_debug_preset(self):
        assert ScripterConfig.debug().logging.debug_mode is True

    def test_nested_override(self):
        config = ScripterConfig(
            host=HostConfig(host_type="playwright", browser_type="chromium"),
            logging=LoggingConfig(max_history=10),
        )
        assert config.host.browser_type == "chromium"
        assert config.logging.max_history == 10

    def test_document_index_is_one_based(self):
        with pytest.raises(ValidationError):
            HostConfig(document_index=0)


class TestErrors:
    def test_context_fields_and_metadata(self):
        error = UnknownObjectException(
            "Unable to locate element",
            locator="element with id of x",
            page_url="https://example.com",
            attempt=2,
        )
        assert error.context.locator == "element with id of x"
        assert error.context.page_url == "https://example.com"
        assert error.context.metadata == {"attempt": 2}
        assert error.context.to_dict()["error_type"] == "UnknownObjectException"

    def test_timeout_aborts(self):
        error = PageLoadTimeoutError("Unable to load page")
        assert error.severity is ErrorSeverity.HIGH
        assert error.recovery_strategy is RecoveryStrategy.ABORT


class TestEventLogger:
    def test_history_is_bounded(self):
        logger = EventLogger(max_history=2)
        for i in range(3):
            logger.system_info(f"event {i}")
        assert [e.message for e in logger.history] == ["event 1", "event 2"]

    def test_callbacks_receive_events(self):
        logger = EventLogger()
        seen = []
        logger.register_callback(seen.append)
        logger.page_load_complete(2, "https://example.com")
        logger.unregister_callback(seen.append)
        logger.page_load_timeout(10)
        assert len(seen) == 1
        assert seen[0].event_type is EventType.PAGE_LOAD_COMPLETE
        assert seen[0].details["rounds"] == 2

    def test_failing_callback_does_not_raise(self):
        logger = EventLogger()

        def broken(event):
            raise RuntimeError("callback failed")

        logger.register_callback(broken)
        logger.script_sentinel("ELEMENT_NOT_FOUND", "element with id of x")
        assert logger.history[-1].level == "WARNING"

    def test_global_logger_can_be_replaced(self):
        previous = get_event_logger()
        replacement = EventLogger()
        try:
            set_event_logger(replacement)
            assert get_event_logger() is replacement
        finally:
            set_event_logger(previous)
