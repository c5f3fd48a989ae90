"""
Feature scanning and CLI tests
"""
import pytest
from unittest.mock import AsyncMock, patch
import sys
import os

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from playwright.async_api import Error as PlaywrightError

from stepcrawler.constants import LOGIN_SCREEN
from stepcrawler.main import build_parser, main
from stepcrawler.models import ScreenRegistry
from stepcrawler.scanner import NoScenariosError, generate_for_feature, scan_features
from stepcrawler.snapshots import build_screen


LOGIN_FEATURE = """Feature: Login

  Scenario: Successful login
    Given the user navigates to the application login page
    When the user fills in email address and password
"""

CONFIG = {
    'base_url': 'http://app.test',
    'login_path': '/sign-in',
    'test_email': '',
    'test_password': '',
    'headless': True,
    'record_video': False,
    'screenshot_dir': 'screenshots',
}


def _captured_registry():
    registry = ScreenRegistry()
    registry.add(build_screen(LOGIN_SCREEN, {'inputs': [{'tag': 'input', 'id': 'login-email', 'type': 'email'}]}))
    return registry.freeze()


@pytest.fixture
def features_dir(tmp_path):
    directory = tmp_path / 'features'
    directory.mkdir()
    (directory / 'login.feature').write_text(LOGIN_FEATURE, encoding='utf-8')
    (directory / 'empty.feature').write_text('Feature: Nothing yet\n', encoding='utf-8')
    (directory / 'notes.txt').write_text('not a feature', encoding='utf-8')
    return directory


class TestGenerateForFeature:
    """generate_for_feature tests"""

    @pytest.mark.asyncio
    async def test_writes_module_with_captured_selectors(self, features_dir, tmp_path):
        """Crawl results flow into the written module"""
        with patch('stepcrawler.scanner.crawl_screens', new=AsyncMock(return_value=_captured_registry())) as crawl:
            path = await generate_for_feature(features_dir / 'login.feature', tmp_path / 'out', CONFIG)

        assert path == tmp_path / 'out' / 'login' / 'login_steps.py'
        content = path.read_text(encoding='utf-8')
        assert "'#login-email'" in content
        scenarios = crawl.await_args.args[0]
        assert [s.name for s in scenarios] == ['Successful login']

    @pytest.mark.asyncio
    async def test_browser_failure_still_generates(self, features_dir, tmp_path):
        """A browser that cannot start leaves generic selectors only"""
        failing = AsyncMock(side_effect=PlaywrightError('Executable doesn\'t exist'))
        with patch('stepcrawler.scanner.crawl_screens', new=failing):
            path = await generate_for_feature(features_dir / 'login.feature', tmp_path / 'out', CONFIG)

        content = path.read_text(encoding='utf-8')
        assert "@Given('the user navigates to the application login page')" in content
        assert "'#login-email'" not in content

    @pytest.mark.asyncio
    async def test_no_scenarios(self, features_dir, tmp_path):
        """Zero scenarios is a setup fault and nothing is crawled"""
        with patch('stepcrawler.scanner.crawl_screens', new=AsyncMock()) as crawl:
            with pytest.raises(NoScenariosError):
                await generate_for_feature(features_dir / 'empty.feature', tmp_path / 'out', CONFIG)

        crawl.assert_not_awaited()
        assert not (tmp_path / 'out').exists()

    @pytest.mark.asyncio
    async def test_missing_feature(self, tmp_path):
        """Missing feature file propagates"""
        with pytest.raises(FileNotFoundError):
            await generate_for_feature(tmp_path / 'missing.feature', tmp_path / 'out', CONFIG)


class TestScanFeatures:
    """scan_features tests"""

    @pytest.mark.asyncio
    async def test_skips_faulty_features(self, features_dir, tmp_path):
        """Faulty features are skipped and the rest are generated"""
        with patch('stepcrawler.scanner.crawl_screens', new=AsyncMock(return_value=ScreenRegistry().freeze())):
            generated = await scan_features(features_dir, tmp_path / 'out', CONFIG)

        assert generated == [tmp_path / 'out' / 'login' / 'login_steps.py']
        assert not (tmp_path / 'out' / 'empty').exists()

    @pytest.mark.asyncio
    async def test_missing_directory(self, tmp_path):
        """Missing features directory is an error"""
        with pytest.raises(FileNotFoundError):
            await scan_features(tmp_path / 'nope', tmp_path / 'out', CONFIG)


class TestMain:
    """Command line tests"""

    def test_parser_defaults(self):
        """Defaults match the documented layout"""
        args = build_parser().parse_args([])

        assert args.features_dir == 'features'
        assert args.output_dir == 'generated'
        assert not args.headful and not args.align

    @pytest.mark.asyncio
    async def test_single_feature_with_align(self, features_dir, tmp_path):
        """Single feature run generates and reconciles its module"""
        out = tmp_path / 'out'
        registry = ScreenRegistry().freeze()
        with patch('stepcrawler.scanner.crawl_screens', new=AsyncMock(return_value=registry)) as crawl, \
                patch('stepcrawler.main.reconcile_module', return_value=False) as reconcile:
            generated = await main([
                '--feature', str(features_dir / 'login.feature'), '--output-dir', str(out),
                '--url', 'http://other.test/', '--headful', '--align',
            ])

        assert generated == [out / 'login' / 'login_steps.py']
        config = crawl.await_args.args[1]
        assert config['base_url'] == 'http://other.test'
        assert config['headless'] is False
        reconcile.assert_called_once_with(out / 'login' / 'login_steps.py', features_dir / 'login.feature')

    @pytest.mark.asyncio
    async def test_single_feature_setup_fault(self, features_dir, tmp_path):
        """A feature without scenarios yields no output instead of raising"""
        generated = await main(['--feature', str(features_dir / 'empty.feature'), '--output-dir', str(tmp_path)])

        assert generated == []

    @pytest.mark.asyncio
    async def test_directory_scan(self, features_dir, tmp_path):
        """Directory mode processes every feature file"""
        with patch('stepcrawler.scanner.crawl_screens', new=AsyncMock(return_value=ScreenRegistry().freeze())):
            generated = await main(['--features-dir', str(features_dir), '--output-dir', str(tmp_path / 'out')])

        assert generated == [tmp_path / 'out' / 'login' / 'login_steps.py']


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
