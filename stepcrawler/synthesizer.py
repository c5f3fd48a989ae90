"""
Step synthesis.

Step text is matched against an ordered catalog of intent patterns; the first
pattern whose substrings all occur in the text renders the implementation.
Unmatched steps get a logging placeholder so generation never fails.
"""
import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from . import templates
from .models import Feature, Scenario, ScreenRegistry, Step, StepImplementation

logger = logging.getLogger(__name__)

Template = Callable[[Step, ScreenRegistry], str]

DEFAULT_PATTERN = 'default'


@dataclass(frozen=True)
class IntentPattern:
    name: str
    substrings: Tuple[str, ...]
    template: Template

    def matches(self, text: str) -> bool:
        return all(substring in text for substring in self.substrings)


# Priority order; first match wins.
INTENT_PATTERNS: List[IntentPattern] = [
    IntentPattern('navigate_login', ('navigates to the application login page',), templates.navigate_login),
    IntentPattern('fill_credentials', ('fills in email address and password',), templates.fill_credentials),
    IntentPattern('click_sign_in', ('clicks on the "Sign In" button',), templates.click_sign_in),
    IntentPattern(
        'verify_transactions_link',
        ('Transactions page orders screen', 'Transactions', 'link'),
        templates.verify_transactions_link,
    ),
    IntentPattern('login_as_user', ('logged in and on the Transactions page',), templates.login_as_user),
    IntentPattern('maximize_screen', ('maximizes the screen',), templates.maximize_screen),
    IntentPattern('click_user_avatar', ('clicks on the "user-avatar"',), templates.click_user_avatar),
    IntentPattern('click_sign_out', ('clicks on the "Sign Out" button',), templates.click_sign_out),
    IntentPattern(
        'verify_logged_out', ('logged out and redirected to the login page',), templates.verify_logged_out,
    ),
    IntentPattern('click_forgot_link', ('Forgot email or password',), templates.click_forgot_link),
    IntentPattern(
        'select_forgot_email_radio',
        ('I forgot my email address', 'radio'),
        templates.select_forgot_email_radio,
    ),
    IntentPattern('click_next', ('Next button',), templates.click_next),
    IntentPattern('verify_success_message', ("We've got you covered",), templates.verify_success_message),
]


def match_pattern(text: str, patterns: Optional[List[IntentPattern]] = None) -> Optional[IntentPattern]:
    for pattern in INTENT_PATTERNS if patterns is None else patterns:
        if pattern.matches(text):
            return pattern
    return None


def synthesize_step(step: Step, registry: ScreenRegistry) -> StepImplementation:
    pattern = match_pattern(step.text)
    if pattern is None:
        logger.info(f"No intent pattern for step '{step.keyword} {step.text}', using default")
        return StepImplementation(DEFAULT_PATTERN, templates.default_step(step, registry))
    logger.debug(f"Step '{step.text}' matched {pattern.name}")
    return StepImplementation(pattern.name, pattern.template(step, registry))


def synthesize_feature(
    feature: Feature, registry: ScreenRegistry
) -> List[Tuple[Scenario, List[StepImplementation]]]:
    return [
        (scenario, [synthesize_step(step, registry) for step in scenario.steps])
        for scenario in feature.scenarios
    ]
