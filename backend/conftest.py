"""Root conftest: test environment and structlog wiring shared by every test package."""

from pathlib import Path

import pytest
import structlog
from dotenv import load_dotenv

from shared.logging import configure_structlog

load_dotenv(Path(__file__).resolve().parent.parent / ".env.tests")

# stdlib routing lets caplog see structlog events
configure_structlog()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Request context (game_id, player_id) must not leak between tests."""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
