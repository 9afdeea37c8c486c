import logging
import pytest
from unittest.mock import MagicMock
from src.common.logging import log_execution_time, set_level, setup_logger

def test_set_level_applies_to_new_and_existing_loggers():
    existing = setup_logger("src.tests.existing")
    set_level("debug")
    try:
        assert existing.level == logging.DEBUG
        assert setup_logger("src.tests.created_later").level == logging.DEBUG
    finally:
        set_level("INFO")
    assert existing.level == logging.INFO

def test_unknown_level_falls_back_to_info():
    logger = setup_logger("src.tests.unknown_level")
    set_level("chatty")
    assert logger.level == logging.INFO

def test_slow_call_warns():
    logger = MagicMock()

    @log_execution_time(logger, slow_seconds=-1)
    def work():
        return 42

    assert work() == 42
    logger.warning.assert_called_once()
    assert "work took" in logger.warning.call_args[0][0]

def test_failure_is_logged_and_reraised():
    logger = MagicMock()

    @log_execution_time(logger)
    def broken():
        raise ValueError("bad slot")

    with pytest.raises(ValueError):
        broken()
    assert "broken failed: bad slot" in logger.error.call_args[0][0]

@pytest.mark.asyncio
async def test_async_callables_are_awaited():
    logger = MagicMock()

    @log_execution_time(logger)
    async def fetch():
        return "ok"

    assert await fetch() == "ok"
    logger.debug.assert_called_once()
