"""
Pytest configuration and shared fixtures for E2E harness unit tests.

Driver handles are replaced by mocks so no browser is needed.
"""

import os
import uuid
from unittest.mock import AsyncMock, MagicMock

import pytest

from e2e_harness.core.config import Config
from e2e_harness.core.logging_config import HarnessLogger
from e2e_harness.execution.artifacts import ArtifactManager
from e2e_harness.reporting.allure_reporter import AllureReporter
from e2e_harness.reporting.reporter import TestReporter

HARNESS_ENV_KEYS = [
    "ENV",
    "environment",
    "TEST_ENV",
    "BASE_URL",
    "TIMEOUTS_DEFAULT",
    "TIMEOUTS_SHORT",
    "TIMEOUTS_LONG",
    "RETRIES",
    "HEADLESS",
    "SLOWMO",
    "VIEWPORT_WIDTH",
    "VIEWPORT_HEIGHT",
    "BROWSER",
    "CI",
    "HARNESS_LOG_LEVEL",
    "HARNESS_LOG_FORMAT",
    "HARNESS_LOG_CONSOLE",
    "HARNESS_LOG_RETENTION_DAYS",
]


@pytest.fixture(autouse=True)
def clean_harness_env(monkeypatch):
    """Run every test without harness variables from the outer environment."""
    saved = dict(os.environ)
    for key in HARNESS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    yield
    HarnessLogger.reset_instance()
    # Environment files loaded by a test write os.environ directly
    os.environ.clear()
    os.environ.update(saved)


@pytest.fixture
def temp_config(tmp_path):
    """Create a configuration rooted in a temporary directory."""
    return Config(
        project_root=tmp_path,
        base_url="https://example.test",
        log_level="DEBUG",
    )


@pytest.fixture
def harness_logger(temp_config):
    """Real logger writing to the temporary logs directory."""
    logger = HarnessLogger(temp_config, name=f"e2e_harness.test_{uuid.uuid4().hex[:8]}")
    yield logger
    logger.close()


@pytest.fixture
def mock_logger():
    return MagicMock(spec=HarnessLogger)


@pytest.fixture
def mock_allure():
    return MagicMock(spec=AllureReporter)


@pytest.fixture
def test_reporter(mock_logger, mock_allure):
    return TestReporter(mock_logger, mock_allure)


@pytest.fixture
def artifact_manager(temp_config, mock_logger):
    return ArtifactManager(temp_config, mock_logger)


@pytest.fixture
def mock_locator():
    """Locator whose driver calls are all awaitable."""
    locator = AsyncMock()
    locator.text_content.return_value = "text"
    locator.inner_html.return_value = "<b>inner</b>"
    locator.input_value.return_value = "value"
    locator.select_option.return_value = ["opt"]
    return locator


@pytest.fixture
def mock_page(mock_locator):
    """Page with synchronous and asynchronous members split the way the driver splits them."""
    page = MagicMock()
    page.locator.return_value = mock_locator
    page.url = "https://duckduckgo.com/?q=Selenium&ia=web"
    page.viewport_size = {"width": 1280, "height": 720}
    page.is_closed.return_value = False

    for name in [
        "goto",
        "reload",
        "go_back",
        "go_forward",
        "title",
        "content",
        "screenshot",
        "set_viewport_size",
        "close",
        "evaluate",
        "wait_for_load_state",
        "set_content",
    ]:
        setattr(page, name, AsyncMock())

    page.title.return_value = "DuckDuckGo - Privacy, simplified."
    page.screenshot.return_value = b"\x89PNG fake"
    page.keyboard.press = AsyncMock()
    page.mouse.move = AsyncMock()
    return page


@pytest.fixture
def mock_context():
    context = MagicMock()
    context.clear_cookies = AsyncMock()
    context.close = AsyncMock()
    return context
