import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Union

import yaml
from playwright.async_api import Error as PlaywrightError, Page

from .classifier import COLLECTION_ROLES, SCREEN_RULES, classify
from .constants import MAX_STATUS_ELEMENTS, MAX_STATUS_TEXT_LENGTH, SCREENSHOT_TIMEOUT
from .models import CapturedScreen, ElementDescriptor, ElementKind
from .selector_ranker import build_descriptor

logger = logging.getLogger(__name__)

# Single extraction pass; returns raw attribute records grouped by element kind.
EXTRACT_ELEMENTS_SCRIPT = """
({ maxTextLength, maxTextElements }) => {
  const text = (el) => (el.textContent || '').trim() || null;
  const testId = (el) => el.getAttribute('data-testid') || el.getAttribute('data-test-id') || null;
  const className = (el) => (typeof el.className === 'string' && el.className.trim()) ? el.className.trim() : null;
  const labelFor = (el) => {
    let label = null;
    if (el.id) {
      label = Array.from(document.querySelectorAll('label')).find(l => l.htmlFor === el.id) || null;
    }
    if (!label) label = el.closest('label');
    return label ? text(label) : null;
  };
  const base = (el) => ({
    tag: el.tagName.toLowerCase(),
    id: el.id || null,
    className: className(el),
    dataTestId: testId(el),
    ariaLabel: el.getAttribute('aria-label') || null,
    disabled: el.hasAttribute('disabled'),
  });

  const allInputs = Array.from(document.querySelectorAll('input'));
  const inputs = allInputs.filter(el => el.type !== 'radio').map(el => ({
    ...base(el),
    name: el.name || null,
    type: el.type || null,
    placeholder: el.placeholder || null,
    value: el.value || null,
  }));
  const radios = allInputs.filter(el => el.type === 'radio').map(el => ({
    ...base(el),
    name: el.name || null,
    type: 'radio',
    value: el.value || null,
    labelText: labelFor(el),
  }));
  const buttons = Array.from(document.querySelectorAll('button, input[type="submit"]')).map(el => ({
    ...base(el),
    type: el.getAttribute('type') || null,
    text: text(el) || (el.tagName === 'INPUT' ? el.value || null : null),
  }));
  const links = Array.from(document.querySelectorAll('a')).map(el => ({
    ...base(el),
    text: text(el),
    href: el.href || null,
  }));

  const markerSelector = '[data-testid*="avatar"], [data-test-id*="avatar"], .avatar, [class*="avatar"], [class*="user"]';
  const texts = [];
  for (const el of document.querySelectorAll(markerSelector + ', p, h1, h2, h3, span, div, [class*="message"]')) {
    if (texts.length >= maxTextElements) break;
    const value = text(el);
    const marked = el.matches(markerSelector);
    if (!marked && (!value || value.length > maxTextLength)) continue;
    texts.push({ ...base(el), text: value && value.length <= maxTextLength ? value : null });
  }

  return { inputs, radios, buttons, links, texts };
}
"""

_RAW_GROUPS = {
    'inputs': ElementKind.INPUT,
    'radios': ElementKind.RADIO,
    'buttons': ElementKind.BUTTON,
    'links': ElementKind.LINK,
    'texts': ElementKind.TEXT,
}


def build_screen(screen_id: str, raw: Mapping[str, Any]) -> CapturedScreen:
    """Rank and classify the raw extraction result of one screen."""
    by_kind: Dict[ElementKind, List[ElementDescriptor]] = {}
    for group, kind in _RAW_GROUPS.items():
        by_kind[kind] = [build_descriptor(kind, record) for record in raw.get(group) or []]

    elements: Dict[str, Any] = dict(classify(by_kind, SCREEN_RULES.get(screen_id, [])))
    for kind, role in COLLECTION_ROLES.items():
        if by_kind[kind]:
            elements[role] = by_kind[kind]
    return CapturedScreen(screen_id, elements)


async def capture_screen(page: Page, screen_id: str) -> CapturedScreen:
    raw = await page.evaluate(EXTRACT_ELEMENTS_SCRIPT, {
        'maxTextLength': MAX_STATUS_TEXT_LENGTH,
        'maxTextElements': MAX_STATUS_ELEMENTS,
    })
    screen = build_screen(screen_id, raw or {})
    roles = [name for name, value in screen.elements.items() if isinstance(value, ElementDescriptor)]
    logger.info(f"Captured '{screen_id}' screen: roles={roles}")
    return screen


async def take_screenshot(page: Page, path: Union[str, Path]) -> bool:
    """Best-effort full page screenshot."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        await page.screenshot(path=str(path), full_page=True, timeout=SCREENSHOT_TIMEOUT)
    except (PlaywrightError, OSError) as e:
        logger.warning(f"Could not capture screenshot {path}: {e}")
        return False
    logger.info(f"Screenshot captured: {path}")
    return True


def dump_capture(screen: CapturedScreen, directory: Union[str, Path]) -> Path:
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / f"{screen.screen_id}-screen.yaml"
    path.write_text(
        yaml.dump(screen.to_dict(), allow_unicode=True, default_flow_style=False, sort_keys=False),
        encoding='utf-8',
    )
    return path
