import sys

import pytest
from loguru import logger


@pytest.fixture(autouse=True)
def _reset_loguru():
    """CLI callbacks reconfigure loguru; restore a plain stderr sink after each test."""
    yield
    logger.remove()
    logger.add(sys.stderr, level="WARNING")
    logger.enable("meshmetrics")


@pytest.fixture
def log_messages():
    """Collect loguru records at WARNING and above."""
    messages: list[str] = []
    handler_id = logger.add(lambda m: messages.append(m.record["message"]), level="WARNING")
    yield messages
    logger.remove(handler_id)


@pytest.fixture
def metrics_dir(tmp_path):
    return tmp_path / "metrics"
