"""
Selector ranking.

Turns the raw attributes of a captured element into selector candidates,
most stable first:

    id -> name -> type -> placeholder -> data-testid -> text -> href/class -> aria-label
"""
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .models import ElementDescriptor, ElementKind

_ESCAPES = (
    ('\\', '\\\\'),
    ('"', '\\"'),
    ("'", "\\'"),
    ('\n', '\\n'),
    ('\r', '\\r'),
    ('\t', '\\t'),
)

_CSS_IDENT = re.compile(r'^-?[A-Za-z_][A-Za-z0-9_-]*$')
_WHITESPACE = re.compile(r'\s+')

# textContent-derived values; :has-text matches them with whitespace normalized
_FREE_TEXT = ('text', 'label')

# Raw record keys (as returned by the in-page extraction) -> attribute names
_RAW_KEYS = {
    'tag': 'tag',
    'id': 'id',
    'name': 'name',
    'type': 'type',
    'placeholder': 'placeholder',
    'dataTestId': 'data_testid',
    'text': 'text',
    'labelText': 'label',
    'href': 'href',
    'className': 'class_name',
    'ariaLabel': 'aria_label',
    'value': 'value',
    'disabled': 'disabled',
}

_DEFAULT_TAGS = {
    ElementKind.INPUT: 'input',
    ElementKind.BUTTON: 'button',
    ElementKind.LINK: 'a',
    ElementKind.RADIO: 'input',
    ElementKind.TEXT: 'div',
}


def escape_selector_text(text: str) -> str:
    """Escape quotes, backslashes and control whitespace for quoted selector text."""
    # backslash must go first so later escapes are not doubled
    for raw, escaped in _ESCAPES:
        text = text.replace(raw, escaped)
    return text


def _quoted(value: str) -> str:
    return f'"{escape_selector_text(value)}"'


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _href_fragment(href: str) -> Optional[str]:
    fragment = href.split('?')[0].split('#')[0].rstrip('/').split('/')[-1]
    if not fragment or fragment.endswith(':'):
        return None
    return fragment


def _first_class(class_name: str) -> Optional[str]:
    for name in class_name.split():
        if _CSS_IDENT.match(name):
            return name
    return None


def rank_selectors(kind: ElementKind, attributes: Mapping[str, Any]) -> Tuple[str, ...]:
    tag = attributes.get('tag') or _DEFAULT_TAGS[kind]
    candidates: List[str] = []

    element_id = attributes.get('id')
    if _present(element_id):
        candidates.append(f'#{element_id}' if _CSS_IDENT.match(element_id) else f'[id={_quoted(element_id)}]')
    if _present(attributes.get('name')):
        candidates.append(f'[name={_quoted(attributes["name"])}]')
    if _present(attributes.get('type')):
        candidates.append(f'{tag}[type={_quoted(attributes["type"])}]')
    if _present(attributes.get('placeholder')):
        candidates.append(f'[placeholder={_quoted(attributes["placeholder"])}]')
    if _present(attributes.get('data_testid')):
        candidates.append(f'[data-testid={_quoted(attributes["data_testid"])}]')

    if kind == ElementKind.RADIO:
        if _present(attributes.get('label')):
            candidates.append(f'label:has-text({_quoted(attributes["label"])})')
    elif kind != ElementKind.INPUT and _present(attributes.get('text')):
        candidates.append(f'{tag}:has-text({_quoted(attributes["text"])})')

    if _present(attributes.get('href')):
        fragment = _href_fragment(attributes['href'])
        if fragment:
            candidates.append(f'a[href*={_quoted(fragment)}]')
    if _present(attributes.get('class_name')):
        class_prefix = _first_class(attributes['class_name'])
        if class_prefix:
            candidates.append(f'.{class_prefix}')
    if _present(attributes.get('aria_label')):
        candidates.append(f'[aria-label={_quoted(attributes["aria_label"])}]')

    return tuple(dict.fromkeys(candidates))


def normalize_attributes(raw: Mapping[str, Any]) -> Dict[str, Any]:
    attributes = {}
    for raw_key, name in _RAW_KEYS.items():
        value = raw.get(raw_key)
        if name == 'disabled':
            if value:
                attributes[name] = True
        elif name in _FREE_TEXT and isinstance(value, str) and _present(value):
            attributes[name] = _WHITESPACE.sub(' ', value.strip())
        elif _present(value):
            attributes[name] = value.strip() if isinstance(value, str) else value
    return attributes


def build_descriptor(kind: ElementKind, raw: Mapping[str, Any]) -> ElementDescriptor:
    attributes = normalize_attributes(raw)
    return ElementDescriptor(kind, attributes, rank_selectors(kind, attributes))
