"""Shared fixtures.

The module-level API mutates ``default_pipeline``; every test starts and ends
with it restored to the built-in defaults.
"""

from typing import Any

import pytest
from loguru import logger

from metrika import Pipeline, default_pipeline


class RecordingLogger:
    """Structured logger double that keeps the raw (level, template, args) calls."""

    def __init__(self) -> None:
        self.calls: list[tuple[Any, str, tuple[Any, ...]]] = []

    def log(self, level: Any, message: str, *args: Any, **kwargs: Any) -> None:
        self.calls.append((level, message, args))


@pytest.fixture(autouse=True)
def _reset_default_pipeline():
    default_pipeline.reset()
    yield
    default_pipeline.reset()


@pytest.fixture
def pipeline() -> Pipeline:
    return Pipeline()


@pytest.fixture
def recording_logger() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def loguru_records():
    """Capture loguru records at INFO and above."""
    records: list[dict[str, Any]] = []
    handler_id = logger.add(lambda message: records.append(message.record), level="INFO")
    yield records
    logger.remove(handler_id)
