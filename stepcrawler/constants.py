import logging

logger = logging.getLogger(__name__)

# Defaults (overridden by environment, see config.py)
DEFAULT_BASE_URL = "http://localhost:3000"
DEFAULT_LOGIN_PATH = "/sign-in"
DEFAULT_SCREENSHOT_DIR = "screenshots"
DEFAULT_OUTPUT_DIR = "generated"
DEFAULT_FEATURES_DIR = "features"
VIDEO_DIR = "reports/videos/"

# Screen ids
LOGIN_SCREEN = "login"
AUTHENTICATED_SCREEN = "authenticated"
FORGOT_PASSWORD_SCREEN = "forgot-password"
SUCCESS_SCREEN = "success"

# Browser
VIEWPORT = {"width": 1920, "height": 1080}
SLOW_MO = 100
LAUNCH_ARGS = [
    "--start-maximized",
    "--disable-web-security",
    "--disable-dev-shm-usage",
]

# Timeouts (ms)
NAVIGATION_TIMEOUT = 15000
ACTION_TIMEOUT = 10000
SCREENSHOT_TIMEOUT = 10000
SELECTOR_TIMEOUT = 5000
LONG_SELECTOR_TIMEOUT = 10000
VERIFY_TIMEOUT = 15000

# Settle waits (ms)
LOGIN_SETTLE_WAIT = 3000
RENAVIGATE_SETTLE_WAIT = 2000
SUBMIT_SETTLE_WAIT = 5000
CLICK_SETTLE_WAIT = 3000
RADIO_SETTLE_WAIT = 1000
DEFAULT_STEP_WAIT = 1000

SUCCESS_MESSAGE = "We've got you covered"

# Text candidates longer than this are containers, not status text
MAX_STATUS_TEXT_LENGTH = 300
MAX_STATUS_ELEMENTS = 400
