"""Page objects."""

from .base import BasePage, PageClosedError, PageState
from .duckduckgo import DuckDuckGoPage

__all__ = ["BasePage", "PageClosedError", "PageState", "DuckDuckGoPage"]
