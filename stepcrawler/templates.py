"""
Implementation templates for generated behave steps.

Every template is a pure function ``(step, registry) -> str`` returning the
full source of one step definition. Selector-driven templates put the
captured selector for their role in front of a few generic selectors and
emit a fallback loop that raises when every selector fails.
"""
from typing import Iterable, List, Optional, Sequence

from .constants import (
    AUTHENTICATED_SCREEN, CLICK_SETTLE_WAIT, DEFAULT_STEP_WAIT, FORGOT_PASSWORD_SCREEN,
    LOGIN_SCREEN, LOGIN_SETTLE_WAIT, LONG_SELECTOR_TIMEOUT, NAVIGATION_TIMEOUT,
    RENAVIGATE_SETTLE_WAIT, SELECTOR_TIMEOUT, SUBMIT_SETTLE_WAIT, SUCCESS_MESSAGE,
    SUCCESS_SCREEN, VERIFY_TIMEOUT, VIEWPORT,
)
from .models import ScreenRegistry, Step
from .selector_ranker import escape_selector_text

INDENT = '    '

EMAIL_SELECTORS = ('input[type="email"]', '#email', '[name="email"]')
PASSWORD_SELECTORS = ('input[type="password"]', '#password', '[name="password"]')
SIGN_IN_SELECTORS = ('button:has-text("Sign In")', 'button[type="submit"]', 'input[type="submit"]')
TRANSACTIONS_SELECTORS = ('a:has-text("Transactions")', 'a:has-text("Transaction")', '[href*="transaction"]')
AVATAR_SELECTORS = ('[data-test-id="user-avatar"]', '[data-testid*="avatar"]', '.avatar')
SIGN_OUT_SELECTORS = (
    '[role="menuitem"]:has-text("Sign Out")', 'button:has-text("Sign Out")', 'a:has-text("Sign Out")',
)
FORGOT_LINK_SELECTORS = (
    'a:has-text("Forgot email or password?")', 'a:has-text("Forgot password")', 'a:has-text("Forgot")',
)
FORGOT_EMAIL_RADIO_SELECTORS = (
    'label:has-text("I forgot my email address")', '[value*="email"]', 'input[type="radio"] + label:has-text("email")',
)
NEXT_SELECTORS = ('button:has-text("Next")', 'button[type="submit"]', 'input[type="submit"]')
SUCCESS_MESSAGE_SELECTORS = (
    f'text="{SUCCESS_MESSAGE}"', f':text("{SUCCESS_MESSAGE}")', '[class*="message"]:has-text("covered")',
)


def py_literal(text: str) -> str:
    return "'" + escape_selector_text(text) + "'"


def behave_pattern(text: str) -> str:
    """Step text as a literal behave (parse) pattern."""
    return text.replace('{', '{{').replace('}', '}}')


def render_registration(step: Step) -> str:
    return f"@{step.keyword}({py_literal(behave_pattern(step.text))})"


def fallback_selectors(captured: Optional[str], generic: Iterable[str]) -> List[str]:
    selectors = [captured] if captured else []
    selectors.extend(generic)
    return list(dict.fromkeys(selectors))


def render_step(step: Step, body: Sequence[str]) -> str:
    lines = [render_registration(step), 'def step_impl(context):', INDENT + 'page = context.page']
    lines.extend(INDENT + line if line else '' for line in body)
    return '\n'.join(lines)


def render_chain(
    name: str,
    selectors: Sequence[str],
    action: str,
    description: str,
    failure: str,
    timeout: int = SELECTOR_TIMEOUT,
) -> List[str]:
    """Sequential fallback loop over ``selectors``; ``action`` acts on ``selector``."""
    return [
        f"{name} = [{', '.join(py_literal(s) for s in selectors)}]",
        f"for selector in {name}:",
        "    try:",
        f"        page.wait_for_selector(selector, timeout={timeout})",
        f"        {action}",
        f"        logger.info({py_literal(description + ' using: %s')}, selector)",
        "        break",
        "    except (PlaywrightError, AssertionError):",
        "        continue",
        "else:",
        f"    raise AssertionError({py_literal(failure)})",
    ]


def _click(name, selectors, description, failure, timeout=SELECTOR_TIMEOUT):
    return render_chain(name, selectors, 'page.click(selector)', description, failure, timeout)


def _fill(name, selectors, value, description, failure, timeout=SELECTOR_TIMEOUT):
    return render_chain(name, selectors, f'page.fill(selector, {value})', description, failure, timeout)


def _visible(name, selectors, description, failure, timeout=LONG_SELECTOR_TIMEOUT):
    action = 'expect(page.locator(selector).first).to_be_visible()'
    return render_chain(name, selectors, action, description, failure, timeout)


def _wait(ms: int) -> str:
    return f"page.wait_for_timeout({ms})"


def _login_chains(registry: ScreenRegistry) -> List[str]:
    login = registry.screen(LOGIN_SCREEN)
    email = fallback_selectors(login.first_selector('emailInput'), EMAIL_SELECTORS)
    password = fallback_selectors(login.first_selector('passwordInput'), PASSWORD_SELECTORS)
    return (
        _fill('email_selectors', email, 'TEST_EMAIL', 'Filled email', 'Could not fill email field')
        + _fill('password_selectors', password, 'TEST_PASSWORD', 'Filled password',
                'Could not fill password field')
    )


def _sign_in_selectors(registry: ScreenRegistry) -> List[str]:
    return fallback_selectors(registry.screen(LOGIN_SCREEN).first_selector('signInButton'), SIGN_IN_SELECTORS)


def _avatar_selectors(registry: ScreenRegistry) -> List[str]:
    captured = (
        registry.screen(AUTHENTICATED_SCREEN).first_selector('userAvatar')
        or registry.screen(LOGIN_SCREEN).first_selector('userAvatar')
    )
    return fallback_selectors(captured, AVATAR_SELECTORS)


def navigate_login(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, [
        f"page.goto(BASE_URL + LOGIN_PATH, wait_until='load', timeout={NAVIGATION_TIMEOUT})",
        _wait(LOGIN_SETTLE_WAIT),
        "logger.info('Navigated to login page')",
    ])


def fill_credentials(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, ["logger.info('Filling login credentials')"] + _login_chains(registry))


def click_sign_in(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, _click(
        'sign_in_selectors', _sign_in_selectors(registry), 'Clicked sign in', 'Could not find Sign In button',
    ) + [_wait(SUBMIT_SETTLE_WAIT)])


def verify_transactions_link(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(AUTHENTICATED_SCREEN).first_selector('transactionsLink'), TRANSACTIONS_SELECTORS,
    )
    return render_step(step, [_wait(CLICK_SETTLE_WAIT)] + _visible(
        'transaction_selectors', selectors, 'Found Transactions link', 'Transactions link not found',
    ))


def login_as_user(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, [
        f"page.goto(BASE_URL + LOGIN_PATH, wait_until='load', timeout={NAVIGATION_TIMEOUT})",
        _wait(RENAVIGATE_SETTLE_WAIT),
    ] + _login_chains(registry) + _click(
        'sign_in_selectors', _sign_in_selectors(registry), 'Clicked sign in', 'Could not find Sign In button',
    ) + [_wait(SUBMIT_SETTLE_WAIT), "logger.info('User logged in')"])


def maximize_screen(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, [
        f"page.set_viewport_size({{'width': {VIEWPORT['width']}, 'height': {VIEWPORT['height']}}})",
        "logger.info('Screen maximized')",
    ])


def click_user_avatar(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, _click(
        'avatar_selectors', _avatar_selectors(registry), 'Clicked user avatar', 'User avatar not found',
        timeout=LONG_SELECTOR_TIMEOUT,
    ) + [_wait(RENAVIGATE_SETTLE_WAIT)])


def click_sign_out(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(AUTHENTICATED_SCREEN).first_selector('signOutLink'), SIGN_OUT_SELECTORS,
    )
    return render_step(step, _click(
        'sign_out_selectors', selectors, 'Clicked sign out', 'Sign Out control not found',
        timeout=LONG_SELECTOR_TIMEOUT,
    ) + [_wait(CLICK_SETTLE_WAIT)])


def verify_logged_out(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, [
        f"page.wait_for_url(lambda url: LOGIN_PATH in url, timeout={VERIFY_TIMEOUT})",
    ] + _visible(
        'sign_in_selectors', _sign_in_selectors(registry), 'Found Sign In button',
        'Sign In button not found after logout',
    ))


def click_forgot_link(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(LOGIN_SCREEN).first_selector('forgotPasswordLink'), FORGOT_LINK_SELECTORS,
    )
    return render_step(step, _click(
        'forgot_selectors', selectors, 'Clicked forgot password link', 'Forgot password link not found',
        timeout=LONG_SELECTOR_TIMEOUT,
    ) + [_wait(CLICK_SETTLE_WAIT)])


def select_forgot_email_radio(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(FORGOT_PASSWORD_SCREEN).first_selector('forgotEmailRadio'), FORGOT_EMAIL_RADIO_SELECTORS,
    )
    return render_step(step, _click(
        'radio_selectors', selectors, 'Clicked forgot email radio', 'Forgot email radio button not found',
        timeout=LONG_SELECTOR_TIMEOUT,
    ))


def click_next(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(FORGOT_PASSWORD_SCREEN).first_selector('nextButton'), NEXT_SELECTORS,
    )
    return render_step(step, _click(
        'next_selectors', selectors, 'Clicked Next button', 'Next button not found',
        timeout=LONG_SELECTOR_TIMEOUT,
    ) + [_wait(CLICK_SETTLE_WAIT)])


def verify_success_message(step: Step, registry: ScreenRegistry) -> str:
    selectors = fallback_selectors(
        registry.screen(SUCCESS_SCREEN).first_selector('successMessage'), SUCCESS_MESSAGE_SELECTORS,
    )
    return render_step(step, _visible(
        'message_selectors', selectors, 'Found success message', 'Success message not found',
        timeout=VERIFY_TIMEOUT,
    ))


def default_step(step: Step, registry: ScreenRegistry) -> str:
    return render_step(step, [
        f"logger.warning('No generated implementation for: %s', {py_literal(step.text)})",
        _wait(DEFAULT_STEP_WAIT),
    ])
