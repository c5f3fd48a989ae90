"""
Screen crawl orchestrator tests
"""
import pytest
from unittest.mock import AsyncMock, patch
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from playwright.async_api import Error as PlaywrightError

from stepcrawler.constants import (
    ACTION_TIMEOUT, AUTHENTICATED_SCREEN, FORGOT_PASSWORD_SCREEN, LOGIN_SCREEN, SUCCESS_SCREEN,
)
from stepcrawler.crawler import CrawlState, ScreenCrawler, crawl_screens
from stepcrawler.models import Scenario, Step
from stepcrawler.snapshots import build_screen


LOGIN_RAW = {
    'inputs': [
        {'tag': 'input', 'id': 'email', 'type': 'email'},
        {'tag': 'input', 'id': 'password', 'type': 'password'},
    ],
    'buttons': [{'tag': 'button', 'id': 'sign-in', 'type': 'submit', 'text': 'Sign In'}],
    'links': [{'tag': 'a', 'id': 'forgot', 'text': 'Forgot email or password?'}],
}
AUTHENTICATED_RAW = {
    'links': [{'tag': 'a', 'text': 'Transactions', 'href': 'http://app.test/transactions'}],
}
FORGOT_RAW = {
    'radios': [{'tag': 'input', 'id': 'email-radio', 'type': 'radio', 'labelText': 'I forgot my email address'}],
    'buttons': [{'tag': 'button', 'id': 'next', 'type': 'submit', 'text': 'Next'}],
}
SUCCESS_RAW = {
    'texts': [{'tag': 'p', 'text': "We've got you covered"}],
}

LOGIN_SCENARIOS = [Scenario('Successful login', (Step('Given', 'the user navigates to the application login page'),))]
RESET_SCENARIOS = LOGIN_SCENARIOS + [Scenario('Reset forgotten email', (Step('When', 'the user clicks the Next button'),))]


@pytest.fixture
def config(tmp_path):
    return {
        'base_url': 'http://app.test',
        'login_path': '/sign-in',
        'test_email': 'qa@app.test',
        'test_password': 'secret',
        'headless': True,
        'record_video': False,
        'screenshot_dir': str(tmp_path / 'screenshots'),
    }


@pytest.fixture
def browser():
    """Mocked browser, context and page"""
    browser = AsyncMock()
    context = AsyncMock()
    page = AsyncMock()
    page.url = 'http://app.test/transactions'
    browser.new_context.return_value = context
    context.new_page.return_value = page
    return browser


def fake_capture(results):
    async def capture(page, screen_id):
        result = results[screen_id]
        if isinstance(result, Exception):
            raise result
        return build_screen(screen_id, result)
    return capture


def _crawler(config, browser):
    crawler = ScreenCrawler(config)
    crawler.browser = browser
    return crawler


def _page(browser):
    return browser.new_context.return_value.new_page.return_value


class TestScreenCrawlerRun:
    """ScreenCrawler.run state machine tests"""

    @pytest.mark.asyncio
    async def test_login_and_authenticated(self, config, browser):
        """Login succeeds: login and authenticated screens captured, no reset crawl"""
        results = {LOGIN_SCREEN: LOGIN_RAW, AUTHENTICATED_SCREEN: AUTHENTICATED_RAW}
        with patch('stepcrawler.crawler.capture_screen', side_effect=fake_capture(results)), \
                patch('stepcrawler.crawler.take_screenshot', new=AsyncMock(return_value=True)):
            registry = await _crawler(config, browser).run(LOGIN_SCENARIOS)

        page = _page(browser)
        assert list(registry) == [LOGIN_SCREEN, AUTHENTICATED_SCREEN]
        assert registry.frozen
        page.goto.assert_awaited_once_with('http://app.test/sign-in', wait_until='load', timeout=15000)
        page.fill.assert_any_await('#email', 'qa@app.test', timeout=ACTION_TIMEOUT)
        page.fill.assert_any_await('#password', 'secret', timeout=ACTION_TIMEOUT)
        page.click.assert_awaited_once_with('#sign-in', timeout=ACTION_TIMEOUT)
        browser.new_context.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_capture_persisted_as_yaml(self, config, browser, tmp_path):
        """Non-empty captures are dumped next to the screenshots"""
        results = {LOGIN_SCREEN: LOGIN_RAW, AUTHENTICATED_SCREEN: AUTHENTICATED_RAW}
        with patch('stepcrawler.crawler.capture_screen', side_effect=fake_capture(results)), \
                patch('stepcrawler.crawler.take_screenshot', new=AsyncMock(return_value=True)):
            await _crawler(config, browser).run(LOGIN_SCENARIOS)

        assert (tmp_path / 'screenshots' / 'login-screen.yaml').is_file()
        assert (tmp_path / 'screenshots' / 'authenticated-screen.yaml').is_file()

    @pytest.mark.asyncio
    async def test_login_rejected_stays_on_login(self, config, browser):
        """Still on the login path after submit: no authenticated capture, no retry"""
        _page(browser).url = 'http://app.test/sign-in?error=1'
        results = {LOGIN_SCREEN: LOGIN_RAW}
        with patch('stepcrawler.crawler.capture_screen', side_effect=fake_capture(results)), \
                patch('stepcrawler.crawler.take_screenshot', new=AsyncMock(return_value=True)):
            registry = await _crawler(config, browser).run(LOGIN_SCENARIOS)

        assert list(registry) == [LOGIN_SCREEN]
        assert _page(browser).click.await_count == 1

    @pytest.mark.asyncio
    async def test_authenticated_failure_still_crawls_forgot_password(self, config, browser):
        """Authenticated capture failure does not stop the forgot password flow"""
        results = {
            LOGIN_SCREEN: LOGIN_RAW,
            AUTHENTICATED_SCREEN: PlaywrightError('Target closed'),
            FORGOT_PASSWORD_SCREEN: FORGOT_RAW,
            SUCCESS_SCREEN: SUCCESS_RAW,
        }
        with patch('stepcrawler.crawler.capture_screen', side_effect=fake_capture(results)), \
                patch('stepcrawler.crawler.take_screenshot', new=AsyncMock(return_value=True)):
            registry = await _crawler(config, browser).run(RESET_SCENARIOS)

        page = _page(browser)
        assert list(registry) == [LOGIN_SCREEN, AUTHENTICATED_SCREEN, FORGOT_PASSWORD_SCREEN, SUCCESS_SCREEN]
        assert registry[AUTHENTICATED_SCREEN].is_empty
        assert page.goto.await_count == 2
        clicked = [call.args[0] for call in page.click.await_args_list]
        assert clicked == ['#sign-in', '#forgot', '#email-radio', '#next']
        assert registry[SUCCESS_SCREEN].first_selector('successMessage') is not None

    @pytest.mark.asyncio
    async def test_disabled_next_skips_success(self, config, browser):
        """Disabled next control ends the crawl after the forgot password capture"""
        forgot = {
            'radios': FORGOT_RAW['radios'],
            'buttons': [{'tag': 'button', 'id': 'next', 'text': 'Next', 'disabled': True}],
        }
        results = {LOGIN_SCREEN: LOGIN_RAW, AUTHENTICATED_SCREEN: AUTHENTICATED_RAW, FORGOT_PASSWORD_SCREEN: forgot}
        with patch('stepcrawler.crawler.capture_screen', side_effect=fake_capture(results)), \
                patch('stepcrawler.crawler.take_screenshot', new=AsyncMock(return_value=True)):
            registry = await _crawler(config, browser).run(RESET_SCENARIOS)

        assert SUCCESS_SCREEN not in registry
        assert FORGOT_PASSWORD_SCREEN in registry

    @pytest.mark.asyncio
    async def test_login_navigation_failure(self, config, browser):
        """Unreachable login page yields an empty login capture and the crawl ends cleanly"""
        _page(browser).goto.side_effect = PlaywrightError('net::ERR_CONNECTION_REFUSED')
        with patch('stepcrawler.crawler.capture_screen', new=AsyncMock()) as capture:
            registry = await _crawler(config, browser).run(RESET_SCENARIOS)

        capture.assert_not_awaited()
        assert list(registry) == [LOGIN_SCREEN, FORGOT_PASSWORD_SCREEN]
        assert all(screen.is_empty for screen in registry.values())
        browser.new_context.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_context_closed_when_page_creation_fails(self, config, browser):
        """Context is released on every exit path"""
        browser.new_context.return_value.new_page.side_effect = PlaywrightError('Browser closed')

        registry = await _crawler(config, browser).run(LOGIN_SCENARIOS)

        assert len(registry) == 0
        assert registry.frozen
        browser.new_context.return_value.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_record_video_option(self, config, browser):
        """RECORD_VIDEO adds a video directory to the context"""
        config['record_video'] = True
        browser.new_context.return_value.new_page.side_effect = PlaywrightError('stop early')

        await _crawler(config, browser).run(LOGIN_SCENARIOS)

        options = browser.new_context.await_args.kwargs
        assert options['record_video_dir'] == 'reports/videos/'
        assert options['viewport'] == {'width': 1920, 'height': 1080}


class TestCrawlerLifecycle:
    """Browser lifecycle tests"""

    @pytest.mark.asyncio
    async def test_crawl_screens_releases_browser(self, config, browser):
        """crawl_screens launches and closes the browser around the run"""
        with patch('stepcrawler.crawler.async_playwright') as mock_playwright:
            playwright = AsyncMock()
            mock_playwright.return_value.start = AsyncMock(return_value=playwright)
            playwright.chromium.launch.return_value = browser
            browser.new_context.return_value.new_page.side_effect = PlaywrightError('stop early')

            registry = await crawl_screens(LOGIN_SCENARIOS, config)

        assert registry.frozen
        launch_kwargs = playwright.chromium.launch.await_args.kwargs
        assert launch_kwargs['headless'] is True
        assert '--start-maximized' in launch_kwargs['args']
        browser.close.assert_awaited_once()
        playwright.stop.assert_awaited_once()

    def test_crawl_states(self):
        """All screens plus a terminal state"""
        assert [state.value for state in CrawlState] == [
            'login', 'authenticated', 'forgot-password', 'success', 'done',
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
