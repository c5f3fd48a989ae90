"""
Role classification for captured elements.

Each screen has an ordered table of rules. Rules are evaluated top to bottom;
a rule claims the first element of its kind (in DOM order) that satisfies its
predicate and has not been claimed yet. A role filled by an earlier rule is
never overwritten, so the table order is the signal precedence.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Sequence

from .constants import (
    AUTHENTICATED_SCREEN, FORGOT_PASSWORD_SCREEN, LOGIN_SCREEN, SUCCESS_MESSAGE, SUCCESS_SCREEN,
)
from .models import ElementDescriptor, ElementKind

logger = logging.getLogger(__name__)

Predicate = Callable[[ElementDescriptor], bool]


@dataclass(frozen=True)
class ClassificationRule:
    role: str
    kind: ElementKind
    predicate: Predicate
    signal: str


def _value(descriptor: ElementDescriptor, name: str) -> str:
    value = descriptor.attributes.get(name)
    return value.lower() if isinstance(value, str) else ''


def attr_equals(name: str, expected: str) -> Predicate:
    return lambda d: _value(d, name) == expected


def attr_contains(name: str, *needles: str) -> Predicate:
    return lambda d: any(needle in _value(d, name) for needle in needles)


def marker_contains(*needles: str) -> Predicate:
    """Match against the CSS class or the test id."""
    return lambda d: any(
        needle in _value(d, 'class_name') or needle in _value(d, 'data_testid')
        for needle in needles
    )


LOGIN_RULES = [
    ClassificationRule('emailInput', ElementKind.INPUT, attr_equals('type', 'email'), 'type=email'),
    ClassificationRule('emailInput', ElementKind.INPUT, attr_equals('name', 'email'), 'name=email'),
    ClassificationRule('emailInput', ElementKind.INPUT, attr_equals('id', 'email'), 'id=email'),
    ClassificationRule('emailInput', ElementKind.INPUT, attr_contains('placeholder', 'email'), 'placeholder~email'),
    ClassificationRule('passwordInput', ElementKind.INPUT, attr_equals('type', 'password'), 'type=password'),
    ClassificationRule('signInButton', ElementKind.BUTTON, attr_contains('text', 'sign in'), 'text~sign in'),
    ClassificationRule('forgotPasswordLink', ElementKind.LINK, attr_contains('text', 'forgot'), 'text~forgot'),
    ClassificationRule('userAvatar', ElementKind.TEXT, marker_contains('avatar'), 'marker~avatar'),
]

AUTHENTICATED_RULES = [
    ClassificationRule('transactionsLink', ElementKind.LINK, attr_contains('text', 'transaction'), 'text~transaction'),
    ClassificationRule('transactionsLink', ElementKind.BUTTON, attr_contains('text', 'transaction'), 'text~transaction'),
    ClassificationRule('userAvatar', ElementKind.TEXT, marker_contains('avatar'), 'marker~avatar'),
    ClassificationRule('userAvatar', ElementKind.TEXT, marker_contains('user'), 'marker~user'),
    ClassificationRule('signOutLink', ElementKind.LINK, attr_contains('text', 'sign out', 'logout'), 'text~sign out'),
    ClassificationRule('signOutLink', ElementKind.BUTTON, attr_contains('text', 'sign out', 'logout'), 'text~sign out'),
]

FORGOT_PASSWORD_RULES = [
    ClassificationRule('forgotEmailRadio', ElementKind.RADIO, attr_contains('label', 'email address'), 'label~email address'),
    ClassificationRule('nextButton', ElementKind.BUTTON, attr_contains('text', 'next'), 'text~next'),
    ClassificationRule('nextButton', ElementKind.BUTTON, attr_equals('type', 'submit'), 'type=submit'),
]

SUCCESS_RULES = [
    ClassificationRule('successMessage', ElementKind.TEXT, attr_contains('text', SUCCESS_MESSAGE.lower()), 'text~success'),
]

SCREEN_RULES: Dict[str, List[ClassificationRule]] = {
    LOGIN_SCREEN: LOGIN_RULES,
    AUTHENTICATED_SCREEN: AUTHENTICATED_RULES,
    FORGOT_PASSWORD_SCREEN: FORGOT_PASSWORD_RULES,
    SUCCESS_SCREEN: SUCCESS_RULES,
}

# Unfiltered lists kept on every capture
COLLECTION_ROLES = {
    ElementKind.INPUT: 'inputs',
    ElementKind.BUTTON: 'buttons',
    ElementKind.LINK: 'links',
    ElementKind.RADIO: 'radioButtons',
}


def classify(
    elements: Mapping[ElementKind, Sequence[ElementDescriptor]],
    rules: Sequence[ClassificationRule],
) -> Dict[str, ElementDescriptor]:
    roles: Dict[str, ElementDescriptor] = {}
    claimed = set()
    for rule in rules:
        if rule.role in roles:
            continue
        for index, descriptor in enumerate(elements.get(rule.kind, ())):
            key = (rule.kind, index)
            if key in claimed:
                continue
            if rule.predicate(descriptor):
                roles[rule.role] = descriptor
                claimed.add(key)
                logger.debug(f"{rule.role} <- {rule.kind.value}[{index}] ({rule.signal})")
                break
    return roles
