"""Shared pytest fixtures."""

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def reset_logging():
    """Drop sinks added during a test; they may point at closed capture streams."""
    yield
    logger.remove()
