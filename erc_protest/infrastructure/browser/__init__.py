"""Headless browser infrastructure (Playwright)."""
from .navigation import DEFAULT_NAVIGATION_STRATEGIES, NavigationStrategy, navigate_with_fallback
from .page_fetcher import PageFetcher
from .session import BrowserSession

__all__ = [
    "BrowserSession",
    "DEFAULT_NAVIGATION_STRATEGIES",
    "NavigationStrategy",
    "PageFetcher",
    "navigate_with_fallback",
]
