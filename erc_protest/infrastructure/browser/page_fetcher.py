"""Page fetcher - loads a conversation page and captures its rendered markup."""
import asyncio
import logging
from typing import Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ...domain.entities import PageSnapshot
from ...domain.errors import NavigationError
from .navigation import DEFAULT_NAVIGATION_STRATEGIES, NavigationStrategy, navigate_with_fallback
from .session import FETCH_BLOCKED_RESOURCES, BrowserSession

logger = logging.getLogger(__name__)


class PageFetcher:
    """Fetches one URL per call in its own browser, never reusing sessions."""

    def __init__(
        self,
        session: BrowserSession,
        settle_seconds: float = 5.0,
        strategies: Sequence[NavigationStrategy] = DEFAULT_NAVIGATION_STRATEGIES,
        blocked_resource_types: Sequence[str] = FETCH_BLOCKED_RESOURCES,
        capture_screenshot: bool = True,
    ):
        self.session = session
        self.settle_seconds = settle_seconds
        self.strategies = tuple(strategies)
        self.blocked_resource_types = tuple(blocked_resource_types)
        self.capture_screenshot = capture_screenshot

    async def fetch(self, url: str) -> PageSnapshot:
        """
        Navigate to ``url`` and snapshot the page once client-side rendering settles.

        Raises:
            NavigationError: If navigation fails under every strategy or the browser errors
        """
        logger.info("Fetching page: %s", url)
        try:
            async with self.session.open() as browser:
                async with self.session.isolated_page(browser, self.blocked_resource_types) as page:
                    await navigate_with_fallback(page, url, self.strategies)
                    # Load events fire before the conversation has mounted
                    if self.settle_seconds > 0:
                        await asyncio.sleep(self.settle_seconds)
                    html = await page.content()
                    logger.info("Raw HTML captured (%d chars)", len(html))
                    screenshot = await self._screenshot(page)
                    return PageSnapshot(html=html, url=url, screenshot_bytes=screenshot)
        except NavigationError:
            raise
        except PlaywrightError as exc:
            logger.error("Browser error while fetching %s: %s", url, exc)
            raise NavigationError(f"Browser error while fetching {url}: {exc}") from exc

    async def _screenshot(self, page: Page) -> Optional[bytes]:
        if not self.capture_screenshot:
            return None
        try:
            return await page.screenshot(full_page=True)
        except PlaywrightError as exc:
            logger.warning("Screenshot error: %s", exc)
            return None
