"""
Gherkin-like feature document parser.

Only three line classes matter: ``Feature:``, ``Scenario:`` and steps starting
with one of the step keywords. Everything else (tags, comments, descriptions)
is skipped.
"""
import logging
import re
from pathlib import Path
from typing import List, Optional, Union

from .models import STEP_KEYWORDS, Feature, Scenario, Step

logger = logging.getLogger(__name__)

FEATURE_PREFIX = 'Feature:'
SCENARIO_PREFIX = 'Scenario:'
STEP_PATTERN = re.compile(r'^(%s)\s+(.+)$' % '|'.join(STEP_KEYWORDS))


def parse_feature(content: str) -> Feature:
    name = ''
    scenarios: List[Scenario] = []
    current_name: Optional[str] = None
    current_steps: List[Step] = []

    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        if line.startswith(FEATURE_PREFIX):
            name = line[len(FEATURE_PREFIX):].strip()
        elif line.startswith(SCENARIO_PREFIX):
            if current_name is not None:
                scenarios.append(Scenario(current_name, tuple(current_steps)))
            current_name = line[len(SCENARIO_PREFIX):].strip()
            current_steps = []
        else:
            match = STEP_PATTERN.match(line)
            if match and current_name is not None:
                current_steps.append(Step(match.group(1), match.group(2).strip()))

    if current_name is not None:
        scenarios.append(Scenario(current_name, tuple(current_steps)))

    if not scenarios:
        logger.warning(f"No scenarios found in feature '{name or 'Unnamed feature'}'")

    return Feature(name, tuple(scenarios))


def parse_feature_file(path: Union[str, Path]) -> Feature:
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Feature file not found: {path}")
    logger.info(f"Reading feature file: {path}")
    return parse_feature(path.read_text(encoding='utf-8'))
