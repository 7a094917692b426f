"""Navigation policy - escalating wait strategies for unstable pages."""
import logging
from dataclasses import dataclass
from typing import Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page

from ...domain.errors import NavigationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NavigationStrategy:
    """One navigation attempt: the load signal to wait for and its timeout."""
    wait_until: str
    timeout_ms: int


# Network idle first, then DOM content loaded, then any response at all
DEFAULT_NAVIGATION_STRATEGIES = (
    NavigationStrategy("networkidle", 60_000),
    NavigationStrategy("domcontentloaded", 75_000),
    NavigationStrategy("commit", 90_000),
)


async def navigate_with_fallback(
    page: Page,
    url: str,
    strategies: Sequence[NavigationStrategy] = DEFAULT_NAVIGATION_STRATEGIES,
) -> NavigationStrategy:
    """
    Navigate to ``url`` trying each strategy in order until one succeeds.

    Args:
        page: Page to navigate
        url: Target URL, identical for every attempt
        strategies: Ordered attempts with increasing timeouts

    Returns:
        The strategy that completed navigation

    Raises:
        NavigationError: If every strategy failed
    """
    last_error = None
    for attempt, strategy in enumerate(strategies, start=1):
        try:
            await page.goto(url, wait_until=strategy.wait_until, timeout=strategy.timeout_ms)
            logger.info("Navigation complete (%s) on attempt %d: %s", strategy.wait_until, attempt, url)
            return strategy
        except PlaywrightError as exc:
            last_error = exc
            logger.warning(
                "Navigation attempt %d (%s, %dms) failed for %s: %s",
                attempt,
                strategy.wait_until,
                strategy.timeout_ms,
                url,
                exc,
            )
    raise NavigationError(f"All {len(strategies)} navigation strategies failed for {url}: {last_error}")
