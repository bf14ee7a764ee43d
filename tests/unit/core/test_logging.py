"""Tests for partsampler logging module."""

import logging

import pytest

from partsampler.core.logging import (
    ConsoleFormatter,
    LogContext,
    configure_logging,
    get_config,
    get_current_state,
    get_logger,
    inject_context,
    is_configured,
    reset_logging,
)


@pytest.fixture(autouse=True)
def clean_logging():
    reset_logging()
    yield
    reset_logging()

def make_record(message="hello"):
    return logging.LogRecord("partsampler.test", logging.INFO, __file__, 1, message, None, None)

class TestGetLogger:
    """Test logger naming."""

    def test_module_logger_is_child_of_root(self) -> None:
        assert get_logger("partsampler.sampling.uniform").name == "partsampler.sampling.uniform"

    def test_foreign_name_is_prefixed(self) -> None:
        assert get_logger("my_script").name == "partsampler.my_script"

class TestConfigureLogging:
    """Test logging configuration."""

    def test_not_configured_by_default(self) -> None:
        assert not is_configured()
        assert get_config() is None

    @pytest.mark.parametrize("verbose, level", [(0, logging.WARNING), (1, logging.INFO), (2, logging.DEBUG), (5, logging.DEBUG)])
    def test_levels(self, verbose, level) -> None:
        config = configure_logging(verbose=verbose)
        assert is_configured()
        assert config.level == level
        assert logging.getLogger("partsampler").level == level

    def test_log_file(self, tmp_path) -> None:
        """File output carries the operation id of the current context."""
        log_file = tmp_path / "logs" / "sampling.log"
        configure_logging(verbose=1, log_file=log_file)
        logger = get_logger("partsampler.test")
        with LogContext("stratified", seed=1, operation_id="S-TEST"):
            logger.info("inside")
        logger.info("outside")

        content = log_file.read_text(encoding="utf-8")
        assert "S-TEST inside" in content
        assert "- outside" in content

    def test_reset_removes_handlers(self) -> None:
        configure_logging(verbose=1)
        assert logging.getLogger("partsampler").handlers
        reset_logging()
        assert not logging.getLogger("partsampler").handlers
        assert logging.getLogger("partsampler").propagate
        assert not is_configured()

    def test_reconfigure_replaces_handlers(self) -> None:
        configure_logging(verbose=1)
        configure_logging(verbose=2)
        assert len(logging.getLogger("partsampler").handlers) == 1

class TestLogContext:
    """Test operation context tracking."""

    def test_no_context(self) -> None:
        assert get_current_state() is None
        record = inject_context(make_record())
        assert not hasattr(record, "operation_id")

    def test_nested_operations_share_id(self) -> None:
        with LogContext("stratified", seed=3) as outer:
            with LogContext("replicate", seed=3) as inner:
                assert inner.operation_id == outer.operation_id
                assert inner.path == ["stratified", "replicate"]
            assert get_current_state() is outer
        assert get_current_state() is None

    def test_attempt_injected(self) -> None:
        with LogContext("uniform", seed=10):
            with LogContext.attempt(2, seed=12) as attempt:
                record = inject_context(make_record())
                assert attempt.number == 2
            assert get_current_state().attempt is None
        assert record.operation == "uniform"
        assert record.attempt == 2
        assert record.attempt_seed == 12

    def test_attempt_without_operation(self) -> None:
        with LogContext.attempt(1) as attempt:
            assert attempt.number == 1

    def test_console_prefix(self) -> None:
        formatter = ConsoleFormatter()
        with LogContext("stratified"):
            with LogContext.attempt(3):
                record = inject_context(make_record("retrying"))
        assert formatter.format(record) == "INFO    [stratified #3] retrying"
        assert formatter.format(make_record("plain")) == "INFO    plain"
