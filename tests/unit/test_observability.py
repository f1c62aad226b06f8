"""Unit tests for the tracing decorator and logging setup."""

import logging
import os
from unittest.mock import patch

import pytest
from pythonjsonlogger import jsonlogger

from marketplace_client.observability import configure_logging, traced


@pytest.mark.unit
class TestTraced:
    """Tests for the traced decorator."""

    def test_sync_function_result_passthrough(self) -> None:
        """Test that a wrapped function returns its result."""

        @traced("test.add")
        def add(a: int, b: int) -> int:
            return a + b

        assert add(2, 3) == 5
        assert add.__name__ == "add"

    @pytest.mark.asyncio
    async def test_async_function_result_passthrough(self) -> None:
        """Test that a wrapped coroutine function stays awaitable."""

        @traced()
        async def double(value: int) -> int:
            return value * 2

        assert await double(4) == 8

    @pytest.mark.asyncio
    async def test_exceptions_propagate(self) -> None:
        """Test that errors are re-raised unchanged."""

        @traced("test.fail")
        async def fail() -> None:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await fail()


@pytest.mark.unit
class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_installs_json_formatter(self) -> None:
        """Test that the root logger gets a single JSON handler."""
        root = logging.getLogger()
        saved_handlers = root.handlers[:]
        saved_level = root.level

        try:
            with patch.dict(os.environ, {"LOG_LEVEL": "WARNING"}):
                configure_logging()

            assert root.level == logging.WARNING
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, jsonlogger.JsonFormatter)
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)
