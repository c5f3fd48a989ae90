"""
Engine configuration.

Values come from environment-style key/value lookup so the same settings drive
both the crawl and the generated step modules.
"""
import os
from typing import Any, Dict, Mapping, Optional

from .constants import DEFAULT_BASE_URL, DEFAULT_LOGIN_PATH, DEFAULT_SCREENSHOT_DIR


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() == "true"


def load_config(environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Build the config dict from ``environ`` (defaults to ``os.environ``)."""
    env = os.environ if environ is None else environ
    return {
        'base_url': (env.get('BASE_URL') or DEFAULT_BASE_URL).rstrip('/'),
        'login_path': env.get('LOGIN_PATH') or DEFAULT_LOGIN_PATH,
        'test_email': env.get('TEST_EMAIL', ''),
        'test_password': env.get('TEST_PASSWORD', ''),
        'headless': _flag(env.get('HEADLESS')),
        'record_video': _flag(env.get('RECORD_VIDEO')),
        'screenshot_dir': env.get('SCREENSHOT_PATH') or DEFAULT_SCREENSHOT_DIR,
    }
