"""
Screen crawl orchestrator.

Drives one browser page through the login, authenticated and forgot-password
screens, capturing each into a ScreenRegistry. Every screen step is isolated:
a Playwright failure yields an empty capture for that screen and the crawl
moves on to the next state.
"""
import logging
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from playwright.async_api import Browser, Error as PlaywrightError, Page, async_playwright

from .constants import (
    AUTHENTICATED_SCREEN, CLICK_SETTLE_WAIT, FORGOT_PASSWORD_SCREEN, LAUNCH_ARGS, LOGIN_SCREEN,
    LOGIN_SETTLE_WAIT, RADIO_SETTLE_WAIT, RENAVIGATE_SETTLE_WAIT, SLOW_MO, SUBMIT_SETTLE_WAIT,
    SUCCESS_SCREEN, VIDEO_DIR, VIEWPORT,
)
from .interactions import click_first, fill_first, navigate
from .models import CapturedScreen, Scenario, ScreenRegistry, needs_password_reset
from .snapshots import capture_screen, dump_capture, take_screenshot
from .utils import is_login_url, login_url

logger = logging.getLogger(__name__)


class CrawlState(Enum):
    LOGIN = 'login'
    AUTHENTICATED = 'authenticated'
    FORGOT_PASSWORD = 'forgot-password'
    SUCCESS = 'success'
    DONE = 'done'


class ScreenCrawler:
    """Single-session crawler; use as an async context manager."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        self.playwright = None
        self.browser: Optional[Browser] = None
        self.registry = ScreenRegistry()
        self.needs_reset = False

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.cleanup()

    async def initialize(self):
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(
            headless=self.config.get('headless', False),
            slow_mo=SLOW_MO,
            args=LAUNCH_ARGS,
        )

    async def cleanup(self):
        if self.browser:
            await self.browser.close()
            self.browser = None
        if self.playwright:
            await self.playwright.stop()
            self.playwright = None

    def _context_options(self) -> Dict[str, Any]:
        options: Dict[str, Any] = {'viewport': VIEWPORT}
        if self.config.get('record_video'):
            options['record_video_dir'] = VIDEO_DIR
        return options

    async def run(self, scenarios: Sequence[Scenario]) -> ScreenRegistry:
        """Crawl the screens the scenarios need and return the frozen registry."""
        self.needs_reset = needs_password_reset(scenarios)
        context = await self.browser.new_context(**self._context_options())
        try:
            page = await context.new_page()
            state = CrawlState.LOGIN
            while state is not CrawlState.DONE:
                logger.info(f"Crawl state: {state.value}")
                state = await self._advance(state, page)
        except PlaywrightError as e:
            logger.error(f"Error during screen crawling: {e}")
        finally:
            await context.close()

        self.registry.freeze()
        logger.info(f"Crawl completed, captured screens: {list(self.registry)}")
        return self.registry

    async def _advance(self, state: CrawlState, page: Page) -> CrawlState:
        if state is CrawlState.LOGIN:
            login = await self._guarded(LOGIN_SCREEN, self._crawl_login(page))
            if login is not None and not login.is_empty:
                return CrawlState.AUTHENTICATED
            return self._after_authenticated()
        if state is CrawlState.AUTHENTICATED:
            await self._guarded(AUTHENTICATED_SCREEN, self._crawl_authenticated(page))
            return self._after_authenticated()
        if state is CrawlState.FORGOT_PASSWORD:
            forgot = await self._guarded(FORGOT_PASSWORD_SCREEN, self._crawl_forgot_password(page))
            if forgot is not None and self._can_submit_forgot_email(forgot):
                return CrawlState.SUCCESS
            return CrawlState.DONE
        if state is CrawlState.SUCCESS:
            await self._guarded(SUCCESS_SCREEN, self._crawl_success(page))
        return CrawlState.DONE

    def _after_authenticated(self) -> CrawlState:
        return CrawlState.FORGOT_PASSWORD if self.needs_reset else CrawlState.DONE

    @staticmethod
    def _can_submit_forgot_email(forgot: CapturedScreen) -> bool:
        radio = forgot.role('forgotEmailRadio')
        next_button = forgot.role('nextButton')
        return (
            radio is not None and radio.found
            and next_button is not None and next_button.found
            and not next_button.disabled
        )

    async def _guarded(self, screen_id: str, step) -> Optional[CapturedScreen]:
        """Run one screen step; a Playwright failure registers an empty capture."""
        try:
            screen = await step
        except PlaywrightError as e:
            logger.warning(f"Could not crawl '{screen_id}' screen: {e}")
            screen = CapturedScreen.empty(screen_id)
        if screen is None:
            return None
        self.registry.add(screen)
        self._persist(screen)
        return screen

    def _persist(self, screen: CapturedScreen) -> None:
        if screen.is_empty:
            return
        try:
            path = dump_capture(screen, self.config['screenshot_dir'])
            logger.debug(f"Capture written to {path}")
        except OSError as e:
            logger.warning(f"Could not write capture for '{screen.screen_id}': {e}")

    def _screenshot_path(self, screen_id: str) -> Path:
        return Path(self.config['screenshot_dir']) / f"{screen_id}-screen.png"

    async def _crawl_login(self, page: Page) -> CapturedScreen:
        logger.info("Crawling login screen...")
        await navigate(page, login_url(self.config), settle_ms=LOGIN_SETTLE_WAIT)
        await take_screenshot(page, self._screenshot_path(LOGIN_SCREEN))
        return await capture_screen(page, LOGIN_SCREEN)

    async def _crawl_authenticated(self, page: Page) -> Optional[CapturedScreen]:
        logger.info("Attempting to crawl authenticated screens...")
        login = self.registry.screen(LOGIN_SCREEN)
        await fill_first(page, login.role('emailInput'), self.config.get('test_email', ''))
        await fill_first(page, login.role('passwordInput'), self.config.get('test_password', ''))
        if not await click_first(page, login.role('signInButton'), settle_ms=SUBMIT_SETTLE_WAIT):
            logger.warning("No sign in button captured, staying on login screen")
            return None
        if is_login_url(self.config, page.url):
            logger.warning(f"Login did not leave the login page ({page.url})")
            return None

        logger.info("Login successful, capturing authenticated screen")
        await take_screenshot(page, self._screenshot_path(AUTHENTICATED_SCREEN))
        return await capture_screen(page, AUTHENTICATED_SCREEN)

    async def _crawl_forgot_password(self, page: Page) -> Optional[CapturedScreen]:
        logger.info("Crawling forgot password screens...")
        await navigate(page, login_url(self.config), settle_ms=RENAVIGATE_SETTLE_WAIT)
        login = self.registry.screen(LOGIN_SCREEN)
        if not await click_first(page, login.role('forgotPasswordLink'), settle_ms=CLICK_SETTLE_WAIT):
            logger.warning("No forgot password link captured")
            return None
        await take_screenshot(page, self._screenshot_path(FORGOT_PASSWORD_SCREEN))
        return await capture_screen(page, FORGOT_PASSWORD_SCREEN)

    async def _crawl_success(self, page: Page) -> CapturedScreen:
        forgot = self.registry.screen(FORGOT_PASSWORD_SCREEN)
        await click_first(page, forgot.role('forgotEmailRadio'), settle_ms=RADIO_SETTLE_WAIT)
        await click_first(page, forgot.role('nextButton'), settle_ms=CLICK_SETTLE_WAIT)
        await take_screenshot(page, self._screenshot_path(SUCCESS_SCREEN))
        return await capture_screen(page, SUCCESS_SCREEN)


async def crawl_screens(scenarios: Sequence[Scenario], config: Dict[str, Any]) -> ScreenRegistry:
    async with ScreenCrawler(config) as crawler:
        return await crawler.run(scenarios)
