"""
Per-test lifecycle coordination.

Sequences setup, outcome classification, failure capture and teardown for a
single test. Driver handles, logger and reporter are passed in explicitly.
Failures inside teardown are logged and never replace the test's own result.
"""

from pathlib import Path
from typing import Optional

import pytest
from playwright.async_api import Browser, BrowserContext, Page
from playwright.async_api import Error as PlaywrightError
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from ..core.config import Config
from ..core.exceptions import TIMEOUT_TAG, ActionTimeoutError, HarnessError
from ..core.logging_config import HarnessLogger
from ..reporting.models import TestRecord, TestStatus
from ..reporting.reporter import TestReporter
from .artifacts import ArtifactManager

# Storage access throws on opaque origins such as about:blank
CLEAR_STORAGE_SCRIPT = """() => {
    try { window.localStorage.clear(); } catch (e) {}
    try { window.sessionStorage.clear(); } catch (e) {}
}"""

FAILURE_TYPES = (AssertionError, ActionTimeoutError, PlaywrightTimeoutError)

TEARDOWN_ERRORS = (PlaywrightError, HarnessError, OSError)


def classify_outcome(error: Optional[BaseException], skipped: bool = False) -> TestStatus:
    """
    Map a test body outcome to its terminal status.

    Assertion failures and timeouts are FAILED, skips are SKIPPED and any
    other exception is BROKEN.
    """
    if skipped or isinstance(error, pytest.skip.Exception):
        return TestStatus.SKIPPED
    if error is None:
        return TestStatus.PASSED
    if isinstance(error, FAILURE_TYPES) or isinstance(error, pytest.fail.Exception):
        return TestStatus.FAILED
    return TestStatus.BROKEN


def failure_message(error: BaseException) -> str:
    """Error message for the test record; driver timeouts are tagged."""
    message = str(error) or type(error).__name__
    if isinstance(error, PlaywrightTimeoutError) and not message.startswith(TIMEOUT_TAG):
        message = f"{TIMEOUT_TAG} {message}"
    return message


class TestLifecycle:
    """
    Coordinates one test from setup to teardown.

    Setup applies timeouts and viewport, clears browser state and opens the
    test record. Teardown classifies the outcome, captures a screenshot and
    the error on failure, clears browser state again and closes the record.
    """

    __test__ = False

    def __init__(
        self,
        config: Config,
        logger: HarnessLogger,
        reporter: TestReporter,
        artifacts: ArtifactManager,
        page: Optional[Page] = None,
        context: Optional[BrowserContext] = None,
        browser: Optional[Browser] = None,
    ):
        self.config = config
        self.logger = logger
        self.reporter = reporter
        self.artifacts = artifacts
        self.page = page
        self.context = context
        self.browser = browser
        self.test_name: Optional[str] = None
        self.screenshot_path: Optional[Path] = None

    async def setup(self, test_id: str, test_name: str, suite_name: str) -> TestRecord:
        """Prepare the page and open the test record."""
        self.test_name = test_name
        self.screenshot_path = None
        self.logger.bind_test(test_name)

        if self.page is not None:
            self.page.set_default_timeout(self.config.timeout_default)
            self.page.set_default_navigation_timeout(self.config.timeout_long)
            await self.page.set_viewport_size(self.config.viewport)

        await self.clear_cookies_and_storage()

        record = self.reporter.start_test(test_id, test_name, suite_name)
        self.logger.info(f"Starting test: {test_name}")
        self.reporter.add_step(f"Test started: {test_name}")
        self.reporter.add_environment_info(self.config.environment)
        if self.browser is not None:
            self.reporter.add_browser_info(
                self.browser.browser_type.name, self.browser.version
            )
        return record

    async def teardown(
        self, error: Optional[BaseException] = None, skipped: bool = False
    ) -> Optional[TestRecord]:
        """
        Finish the test and close its record.

        Returns:
            The closed record, or None if no record was open
        """
        name = self.test_name or "unknown"
        status = classify_outcome(error, skipped)
        message = failure_message(error) if error is not None else None

        if status is TestStatus.PASSED:
            self.logger.log_pass(f"Test passed: {name}")
            self.reporter.add_step(f"Test passed: {name}")
        elif status is TestStatus.SKIPPED:
            self.logger.info(f"Test skipped: {name}", {"reason": message})
            self.reporter.add_step(f"Test skipped: {name}", message, status="skipped")
        else:
            await self.handle_failure(error, status)

        await self.clear_cookies_and_storage()

        record = self.reporter.end_test(
            status, message if status is not TestStatus.PASSED else None
        )
        self.logger.unbind_test()
        return record

    async def handle_failure(
        self, error: BaseException, status: TestStatus = TestStatus.FAILED
    ) -> None:
        """Log the failure, capture a full-page screenshot and attach the error."""
        name = self.test_name or "unknown"
        message = failure_message(error)
        self.logger.log_fail(
            f"Test {status.value.lower()}: {name}",
            {"error_type": type(error).__name__, "error": message},
        )
        self.reporter.add_step(f"Test failed: {name}", message, status="failed")

        self.screenshot_path = await self.take_screenshot(name)

        try:
            self.reporter.add_error_details(error)
        except HarnessError as e:
            self.logger.error(f"Failed to attach error details: {e}")

    async def take_screenshot(self, name: str) -> Optional[Path]:
        """
        Save a full-page screenshot and attach it to the open record.

        Returns:
            Screenshot path, or None if it could not be captured
        """
        if self.page is None:
            self.logger.warn("No page available for screenshot")
            return None
        try:
            path = self.artifacts.screenshot_path(name)
            await self.page.screenshot(path=str(path), full_page=True)
        except TEARDOWN_ERRORS as e:
            self.logger.error(f"Failed to capture screenshot: {e}")
            return None

        self.reporter.add_screenshot(f"Screenshot - {path.stem}", path)
        self.logger.info(f"Screenshot taken: {path}")
        return path

    async def clear_cookies_and_storage(self) -> bool:
        """Clear cookies and local/session storage; failures are logged."""
        try:
            if self.context is not None:
                await self.context.clear_cookies()
            if self.page is not None and not self.page.is_closed():
                await self.page.evaluate(CLEAR_STORAGE_SCRIPT)
        except TEARDOWN_ERRORS as e:
            self.logger.warn(f"Failed to clear cookies and storage: {e}")
            return False
        self.logger.debug("Cookies and storage cleared")
        return True

    async def close(self) -> None:
        """Close page, context and browser in that order, logging failures."""
        for label in ("page", "context", "browser"):
            handle = getattr(self, label)
            if handle is None:
                continue
            try:
                await handle.close()
                self.logger.debug(f"{label.capitalize()} closed")
            except TEARDOWN_ERRORS as e:
                self.logger.warn(f"Failed to close {label}: {e}")
            setattr(self, label, None)
