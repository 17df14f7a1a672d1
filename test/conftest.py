"""
Test Configuration and Fixtures

This module provides:
- Test log directory (set before application modules configure loguru)
- In-memory local storage (no file writes from tests)
- Manual clock and fake scheduler fixtures for timer-driven code
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru file sink read these at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    # Never talk to a real backend from tests
    os.environ['API_BASE_URL'] = 'http://booking-api.test/api'
    os.environ['DEPLOY_ENV'] = 'test'


_early_setup_test_environment()

import pytest  # noqa: E402

from src.platform.state.local_storage import LocalStorage  # noqa: E402
from src.service.shared_kernel.driven_adapter.user_notifier_impl import (  # noqa: E402
    InMemoryUserNotifier,
)
from test.unit_helpers import FakeScheduler, ManualClock  # noqa: E402


@pytest.fixture
def manual_clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def fake_scheduler(manual_clock: ManualClock) -> FakeScheduler:
    return FakeScheduler(clock=manual_clock)


@pytest.fixture
def storage() -> LocalStorage:
    return LocalStorage()


@pytest.fixture
def notifier() -> InMemoryUserNotifier:
    return InMemoryUserNotifier()
