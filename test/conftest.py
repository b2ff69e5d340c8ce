"""
Test Configuration and Fixtures

This module provides:
- Environment setup that must happen before application modules are imported
- Fast retry settings so transient-failure tests do not sleep
- Marker registration (unit / api)

Architecture:
- Unit tests (test/**/unit/): in-memory fakes for every port, no Postgres or Kvrocks
- API tests (test/**/api/): TestClient over the real app with container overrides
"""

# =============================================================================
# CRITICAL: Environment setup MUST happen before any other imports
# Settings and the loguru sinks read these at import time
# =============================================================================
import os
from pathlib import Path


def _early_setup_test_environment() -> None:
    """Set test environment variables before any module imports."""
    os.environ['POSTGRES_DB'] = 'ticket_core_test_db'
    os.environ['KVROCKS_KEY_PREFIX'] = 'test_'

    # Create test log directory
    test_log_dir = Path(__file__).parent / 'test_log'
    test_log_dir.mkdir(exist_ok=True)
    os.environ['TEST_LOG_DIR'] = str(test_log_dir)

    os.environ['SECRET_KEY'] = 'test_jwt_secret'
    os.environ['QR_SECRET'] = 'test_qr_secret'
    os.environ['STRIPE_SECRET_KEY'] = 'sk_test_unit'

    # No real sleeping between retries
    os.environ['TRANSIENT_RETRY_BASE_DELAY'] = '0'
    os.environ['TRANSIENT_RETRY_MAX_DELAY'] = '0'


# Call immediately to set env vars before any imports
_early_setup_test_environment()

from collections.abc import Generator  # noqa: E402

import pytest  # noqa: E402

from src.platform.config.core_setting import settings  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line('markers', 'unit: pure unit test, no infrastructure')
    config.addinivalue_line('markers', 'api: HTTP test through the FastAPI app')


@pytest.fixture(autouse=True)
def fast_retries(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Guard against a developer .env overriding the retry delays"""
    monkeypatch.setattr(settings, 'TRANSIENT_RETRY_BASE_DELAY', 0.0)
    monkeypatch.setattr(settings, 'TRANSIENT_RETRY_MAX_DELAY', 0.0)
    yield


# =============================================================================
# Load service fixtures
# =============================================================================
from test.fixture_loader import *  # noqa: E402, F401, F403
