import logging
from typing import Optional

from playwright.async_api import Page

from .constants import ACTION_TIMEOUT, NAVIGATION_TIMEOUT
from .models import ElementDescriptor

logger = logging.getLogger(__name__)


async def navigate(page: Page, url: str, settle_ms: int = 0) -> None:
    """Navigate and wait for the page to settle. Errors propagate."""
    await page.goto(url, wait_until='load', timeout=NAVIGATION_TIMEOUT)
    if settle_ms:
        await page.wait_for_timeout(settle_ms)
    logger.info(f"Navigated to {url}")


async def fill_first(page: Page, descriptor: Optional[ElementDescriptor], value: str) -> bool:
    """Fill using the first selector candidate. Returns False if the element was not captured."""
    if descriptor is None or not descriptor.found:
        return False
    selector = descriptor.primary_selector
    await page.fill(selector, value, timeout=ACTION_TIMEOUT)
    logger.info(f"Filled field using: {selector}")
    return True


async def click_first(page: Page, descriptor: Optional[ElementDescriptor], settle_ms: int = 0) -> bool:
    """Click using the first selector candidate. Returns False if the element was not captured."""
    if descriptor is None or not descriptor.found:
        return False
    selector = descriptor.primary_selector
    await page.click(selector, timeout=ACTION_TIMEOUT)
    logger.info(f"Clicked using: {selector}")
    if settle_ms:
        await page.wait_for_timeout(settle_ms)
    return True
