"""DuckDuckGo search page object."""

import re
from typing import List
from urllib.parse import quote

from playwright.async_api import Locator, expect

from ..actions import utils as actions
from .base import BasePage

HOME_URL = "https://duckduckgo.com/"

SEARCH_INPUT_NAME = "Search with DuckDuckGo"
RESULTS_CONTAINER = '#links, [data-testid="main"], main'
RESULT_ITEMS = '[data-testid="result"], article[data-testid="result"], #links .result'
RESULT_TITLE = 'h2, [data-testid="result-title"], a[data-testid="result-title-a"]'
RESULT_SNIPPET = (
    '[data-testid="result-snippet"], [data-testid="result-extras"], .result__snippet'
)


def encode_query(term: str) -> str:
    """Percent-encode a query term the way ``encodeURIComponent`` does."""
    return quote(term, safe="-_.!~*'()")


class DuckDuckGoPage(BasePage):
    """Search home and results page."""

    home_url = HOME_URL

    async def open_home(self) -> None:
        self.log_step("Open DuckDuckGo home")
        await self.navigate_to(self.home_url)
        await self._page.wait_for_load_state("networkidle", timeout=self.timeout)

    async def assert_title_contains_duckduckgo(self) -> None:
        self.log_step("Assert page title contains DuckDuckGo")
        await expect(self._page).to_have_title(
            re.compile("DuckDuckGo", re.IGNORECASE), timeout=self.timeout
        )

    def search_input(self) -> Locator:
        return self._page.get_by_role("combobox", name=SEARCH_INPUT_NAME)

    async def assert_search_input_default_state(self) -> None:
        self.log_step("Assert search input is visible, enabled, and empty by default")
        search = self.search_input()
        await search.wait_for(state="visible", timeout=self.timeout)
        await expect(search).to_be_enabled()
        await expect(search).to_have_value("")

    async def fill_search(self, text: str) -> None:
        self.log_step(f"Fill search input: {text}")
        search = self.search_input()
        await actions.fill(search, text, self._action_options())
        self._mark_populated()
        await expect(search).to_have_value(text)

    async def assert_search_value(self, expected: str) -> None:
        self.log_step(f"Assert search input value equals: {expected}")
        await expect(self.search_input()).to_have_value(expected)

    async def clear_search(self) -> None:
        self.log_step("Clear search input")
        search = self.search_input()
        await actions.clear(search, self._action_options())
        self._mark_populated()
        await expect(search).to_have_value("")

    async def submit_search_with_enter(self) -> None:
        self.log_step("Submit search with ENTER")
        search = self.search_input()
        await search.wait_for(state="visible", timeout=self.timeout)
        await search.press("Enter", timeout=self.timeout)
        await self._page.wait_for_load_state("networkidle", timeout=self.timeout)
        self._mark_populated()

    async def assert_url_has_query(self, expected_query: str) -> None:
        """Poll the URL until it contains the encoded query term."""
        self.log_step(f"Assert URL contains query for: {expected_query}")
        encoded = encode_query(expected_query)
        await expect(self._page).to_have_url(
            re.compile(re.escape(encoded)), timeout=self.timeout
        )

    def results_container(self) -> Locator:
        return self._page.locator(RESULTS_CONTAINER)

    def result_items(self) -> Locator:
        return self._page.locator(RESULT_ITEMS)

    async def wait_for_results(self) -> None:
        self.log_step("Wait for results container and at least one result item")
        await self.results_container().first.wait_for(
            state="visible", timeout=self.timeout
        )
        items = self.result_items()
        await items.first.wait_for(state="visible", timeout=self.timeout)
        count = await items.count()
        if count < 1:
            raise AssertionError("Expected at least one search result")

    def _first_result(self) -> Locator:
        return self.result_items().first

    async def first_result_title_text(self) -> str:
        self.log_step("Read first result title text")
        title = self._first_result().locator(RESULT_TITLE).first
        await title.wait_for(state="visible", timeout=self.timeout)
        return (await title.inner_text()).strip()

    async def first_result_snippet_text(self) -> str:
        self.log_step("Read first result snippet text")
        snippet = self._first_result().locator(RESULT_SNIPPET).first
        await snippet.wait_for(state="visible", timeout=self.timeout)
        return (await snippet.inner_text()).strip()

    async def assert_first_result_mentions(self, term: str) -> None:
        """Case-insensitive check that the first result's title or snippet has ``term``."""
        self.log_step(f"Assert first result mentions term (case-insensitive): {term}")
        title_text = await self.first_result_title_text()
        snippet_text = await self.first_result_snippet_text()

        if not title_text:
            raise AssertionError("First result title is empty")
        if not snippet_text:
            raise AssertionError("First result snippet is empty")

        combined = f"{title_text}\n{snippet_text}".lower()
        if term.lower() not in combined:
            raise AssertionError(
                f"First result does not mention '{term}': {combined[:200]!r}"
            )

    async def assert_query_persists_in_input(self, expected: str) -> None:
        self.log_step(f"Assert query persists in search input: {expected}")
        search = self.search_input()
        await search.wait_for(state="visible", timeout=self.timeout)
        await expect(search).to_have_value(expected)

    async def clear_and_search(self, text: str) -> None:
        self.log_step(f"Clear search input and search for: {text}")
        await self.clear_search()
        await self.fill_search(text)
        await self.submit_search_with_enter()
        await self.wait_for_results()
        await self.assert_query_persists_in_input(text)

    async def all_result_texts(self) -> List[str]:
        return await self.result_items().all_inner_texts()
