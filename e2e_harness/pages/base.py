"""
Base page object.

Holds the page handle and the shared navigation, inspection and screenshot
helpers. Subclasses expose domain verbs only and reach the driver through
these helpers.
"""

from enum import Enum
from typing import Any, Dict, Optional

from playwright.async_api import Browser, BrowserContext, Locator, Page

from ..actions.options import ActionOptions
from ..core.config import Config
from ..core.logging_config import HarnessLogger
from ..reporting.allure_reporter import AllureReporter
from ..reporting.models import MimeType


class PageState(Enum):
    """Lifecycle of a page object."""

    UNOPENED = "unopened"
    LOADED = "loaded"
    POPULATED = "populated"
    CLOSED = "closed"


class PageClosedError(RuntimeError):
    """Raised when a closed page object is used."""


class BasePage:
    """Common helpers for page objects."""

    def __init__(
        self,
        page: Page,
        config: Optional[Config] = None,
        logger: Optional[HarnessLogger] = None,
        reporter: Optional[Any] = None,
        context: Optional[BrowserContext] = None,
        browser: Optional[Browser] = None,
    ):
        self._page = page
        self._context = context
        self._browser = browser
        self.config = config if config is not None else Config()
        self.logger = logger or HarnessLogger.get_instance()
        # TestReporter when a test record is open, allure directly otherwise
        self.reporter = reporter or AllureReporter(self.logger)
        self._state = PageState.UNOPENED

    @property
    def state(self) -> PageState:
        return self._state

    @property
    def timeout(self) -> int:
        return self.config.timeout_default

    def _ensure_open(self) -> None:
        if self._state is PageState.CLOSED:
            raise PageClosedError(f"{type(self).__name__} is closed")

    def _mark_populated(self) -> None:
        if self._state in (PageState.UNOPENED, PageState.LOADED):
            self._state = PageState.POPULATED

    def _action_options(self, **overrides: Any) -> ActionOptions:
        options = ActionOptions(
            page=self._page,
            timeout=self.timeout,
            logger=self.logger,
            reporter=self.reporter,
        )
        return options.merge(**overrides) if overrides else options

    def log_step(self, message: str) -> None:
        self.logger.info(f"STEP: {message}")
        self.reporter.add_step(message)

    def add_attachment(
        self, name: str, content: Any, mime_type: str = MimeType.TEXT
    ) -> None:
        self.reporter.add_attachment(name, content, mime_type)

    # Navigation

    async def navigate_to(self, url: str) -> None:
        self._ensure_open()
        self.logger.info(f"Navigate to: {url}")
        self.reporter.add_step(f"Navigate to: {url}")
        await self._page.goto(url, wait_until="load", timeout=self.timeout)
        self._state = PageState.LOADED

    async def reload_page(self) -> None:
        self._ensure_open()
        self.logger.info("Reload page")
        await self._page.reload(wait_until="load", timeout=self.timeout)

    async def go_back(self) -> None:
        self._ensure_open()
        self.logger.info("Go back")
        await self._page.go_back(timeout=self.timeout)

    async def go_forward(self) -> None:
        self._ensure_open()
        self.logger.info("Go forward")
        await self._page.go_forward(timeout=self.timeout)

    # Page info

    async def get_page_title(self) -> str:
        title = await self._page.title()
        self.logger.info(f"Page title: {title}")
        return title

    def get_current_url(self) -> str:
        url = self._page.url
        self.logger.info(f"Current URL: {url}")
        return url

    async def get_page_content(self) -> str:
        content = await self._page.content()
        self.logger.info("Get page content")
        return content

    # Screenshots and browser control

    async def take_screenshot(self, name: str = "screenshot") -> bytes:
        """Capture a full-page screenshot and attach it to the report."""
        self._ensure_open()
        self.logger.info(f"Take screenshot: {name}")
        self.reporter.add_step(f"Take screenshot: {name}")
        screenshot = await self._page.screenshot(full_page=True)
        self.add_attachment(name, screenshot, MimeType.PNG)
        return screenshot

    async def set_viewport_size(self, width: int, height: int) -> None:
        self.logger.info(f"Set viewport: {width}x{height}")
        await self._page.set_viewport_size({"width": width, "height": height})

    def get_viewport_size(self) -> Optional[Dict[str, int]]:
        return self._page.viewport_size

    async def close_page(self) -> None:
        if self._state is PageState.CLOSED:
            return
        self.logger.info("Close page")
        await self._page.close()
        self._state = PageState.CLOSED

    # Utility

    def get_locator(self, selector: str) -> Locator:
        return self._page.locator(selector)

    async def execute_script(self, script: str, arg: Any = None) -> Any:
        self.logger.info("Execute script")
        return await self._page.evaluate(script, arg)
