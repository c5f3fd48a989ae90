from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

STEP_KEYWORDS = ('Given', 'When', 'Then', 'And', 'But')

# behave decorator each keyword is registered with
STEP_TYPES = {'Given': 'given', 'When': 'when', 'Then': 'then', 'And': 'step', 'But': 'step'}


@dataclass(frozen=True)
class Step:
    keyword: str  # Given, When, Then, And, But (kept literal)
    text: str

    @property
    def step_type(self) -> str:
        return STEP_TYPES[self.keyword]


@dataclass(frozen=True)
class Scenario:
    name: str
    steps: Tuple[Step, ...] = ()


@dataclass(frozen=True)
class Feature:
    name: str
    scenarios: Tuple[Scenario, ...] = ()

    def needs_password_reset(self) -> bool:
        return needs_password_reset(self.scenarios)


def needs_password_reset(scenarios) -> bool:
    for scenario in scenarios:
        name = scenario.name.lower()
        if 'reset' in name or 'forgot' in name:
            return True
    return False


class ElementKind(str, Enum):
    INPUT = 'input'
    BUTTON = 'button'
    LINK = 'link'
    RADIO = 'radio'
    TEXT = 'text'


@dataclass(frozen=True)
class ElementDescriptor:
    kind: ElementKind
    attributes: Dict[str, Any] = field(default_factory=dict)
    selector_candidates: Tuple[str, ...] = ()

    @property
    def found(self) -> bool:
        return bool(self.selector_candidates)

    @property
    def primary_selector(self) -> Optional[str]:
        return self.selector_candidates[0] if self.selector_candidates else None

    @property
    def disabled(self) -> bool:
        return bool(self.attributes.get('disabled'))

    def to_dict(self) -> Dict[str, Any]:
        return {
            'kind': self.kind.value,
            'attributes': dict(self.attributes),
            'selectors': list(self.selector_candidates),
        }


RoleValue = Union[ElementDescriptor, List[ElementDescriptor]]


@dataclass(frozen=True)
class CapturedScreen:
    screen_id: str
    elements: Dict[str, RoleValue] = field(default_factory=dict)

    @classmethod
    def empty(cls, screen_id: str) -> 'CapturedScreen':
        return cls(screen_id, {})

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def role(self, name: str) -> Optional[ElementDescriptor]:
        value = self.elements.get(name)
        if isinstance(value, ElementDescriptor):
            return value
        return None

    def first_selector(self, name: str) -> Optional[str]:
        descriptor = self.role(name)
        return descriptor.primary_selector if descriptor else None

    def to_dict(self) -> Dict[str, Any]:
        elements = {}
        for name, value in self.elements.items():
            if isinstance(value, list):
                elements[name] = [item.to_dict() for item in value]
            else:
                elements[name] = value.to_dict()
        return {'screen_id': self.screen_id, 'elements': elements}


class ScreenRegistry(Mapping):
    """Append-only screen_id -> CapturedScreen map for one crawl run."""

    def __init__(self):
        self._screens: Dict[str, CapturedScreen] = {}
        self._frozen = False

    def add(self, screen: CapturedScreen) -> None:
        if self._frozen:
            raise RuntimeError(f"Registry is frozen, cannot add screen '{screen.screen_id}'")
        if screen.screen_id in self._screens:
            raise ValueError(f"Screen '{screen.screen_id}' already captured")
        self._screens[screen.screen_id] = screen

    def freeze(self) -> 'ScreenRegistry':
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def screen(self, screen_id: str) -> CapturedScreen:
        return self._screens.get(screen_id) or CapturedScreen.empty(screen_id)

    def __getitem__(self, screen_id: str) -> CapturedScreen:
        return self._screens[screen_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._screens)

    def __len__(self) -> int:
        return len(self._screens)


@dataclass(frozen=True)
class StepImplementation:
    matched_pattern: str
    generated_body: str
