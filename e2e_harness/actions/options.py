"""
Explicit options for action utilities.
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional, Protocol, runtime_checkable

from playwright.async_api import Page

from ..core.logging_config import HarnessLogger

DEFAULT_ACTION_TIMEOUT = 30000


@runtime_checkable
class StepRecorder(Protocol):
    """Anything that records named report steps, such as TestReporter."""

    def add_step(self, step_name: str, step_details: Optional[str] = None) -> Any:
        ...


@dataclass
class ActionOptions:
    """
    Options recognized by every action utility.

    Attributes:
        page: Page used to resolve selector strings and for page-level actions
        timeout: Visibility and action bound in milliseconds
        logger: Logger receiving one line per action
        reporter: Reporter receiving one step per action
        force: Skip actionability checks on pointer actions
        no_wait_after: Do not wait for navigations triggered by the action
        delay: Delay between key presses or mouse down/up, in milliseconds
        additional_text: Text typed after filling, for ``fill_and_type``
    """

    page: Optional[Page] = None
    timeout: Optional[float] = None
    logger: Optional[HarnessLogger] = None
    reporter: Optional[StepRecorder] = None
    force: bool = False
    no_wait_after: bool = False
    delay: Optional[float] = None
    additional_text: str = ""

    @property
    def effective_timeout(self) -> float:
        return self.timeout if self.timeout is not None else DEFAULT_ACTION_TIMEOUT

    def require_page(self, operation: str) -> Page:
        if self.page is None:
            raise ValueError(f"Page is required for {operation} operations")
        return self.page

    def pointer_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments accepted by click-like locator methods."""
        kwargs: Dict[str, Any] = {
            "timeout": self.effective_timeout,
            "force": self.force,
            "no_wait_after": self.no_wait_after,
        }
        if self.delay is not None:
            kwargs["delay"] = self.delay
        return kwargs

    def merge(self, **changes: Any) -> "ActionOptions":
        """Return a copy with the given fields replaced."""
        return replace(self, **changes)
