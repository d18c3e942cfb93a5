import os

import pytest

# Set test environment variables BEFORE any app imports
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("APP_NAME", "EXPLORABOT")
os.environ.setdefault("RATE_LIMIT_PER_MINUTE", "1000")

from explorabot.middleware.limits import limiter  # noqa: E402
from explorabot.services.metrics_service import metrics  # noqa: E402
from explorabot.services.session_service import sessions  # noqa: E402


@pytest.fixture(autouse=True)
def clean_state():
    sessions.clear()
    metrics.reset()
    limiter.reset()
    yield
    sessions.clear()


class LastChoice:
    """Deterministic stand-in for random.Random: always picks the last candidate."""

    def choice(self, seq):
        return seq[-1]


@pytest.fixture
def last_choice():
    return LastChoice()
