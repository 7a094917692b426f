"""Browser session - scoped acquisition of Playwright browsers and isolated pages."""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable, Sequence

from playwright.async_api import Browser, Page, Route, async_playwright

logger = logging.getLogger(__name__)

DEFAULT_LAUNCH_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
)

# Conversation pages only need markup and scripts
FETCH_BLOCKED_RESOURCES = ("image", "font", "media", "stylesheet")
# Citation pages keep their stylesheets so the PDF rendering stays readable
ATTACHMENT_BLOCKED_RESOURCES = ("image", "font", "media")


async def block_resource_types(page: Page, resource_types: Iterable[str]) -> None:
    """Abort requests of the given resource types; documents and scripts always pass."""
    blocked = frozenset(resource_types) - {"document", "script"}

    async def _handle(route: Route) -> None:
        if route.request.resource_type in blocked:
            await route.abort()
        else:
            await route.continue_()

    await page.route("**/*", _handle)


class BrowserSession:
    """
    Launches headless Chromium and hands out isolated pages.

    ``open()`` owns one browser process; ``isolated_page()`` owns one fresh
    browser context. Both release their resource on every exit path.
    """

    def __init__(self, headless: bool = True, launch_args: Sequence[str] = DEFAULT_LAUNCH_ARGS):
        self.headless = headless
        self.launch_args = tuple(launch_args)

    @asynccontextmanager
    async def open(self) -> AsyncIterator[Browser]:
        async with async_playwright() as playwright:
            browser = await playwright.chromium.launch(headless=self.headless, args=list(self.launch_args))
            logger.info("Browser launched (headless=%s)", self.headless)
            try:
                yield browser
            finally:
                await browser.close()
                logger.info("Browser closed")

    @asynccontextmanager
    async def isolated_page(
        self,
        browser: Browser,
        blocked_resource_types: Iterable[str] = (),
    ) -> AsyncIterator[Page]:
        context = await browser.new_context()
        try:
            page = await context.new_page()
            await block_resource_types(page, blocked_resource_types)
            yield page
        finally:
            await context.close()
