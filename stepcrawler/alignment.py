"""
Reconcile a previously generated step module with its feature file.

Removes load-state waits that make generated steps hang on chatty pages, and
rewrites registrations whose step text no longer exists in the feature.
"""
import logging
import re
from pathlib import Path
from typing import List, Tuple, Union

from behave.parser import parse_file

from .models import STEP_TYPES, Step
from .templates import behave_pattern, py_literal, render_registration

logger = logging.getLogger(__name__)

LOAD_STATE_CALL = re.compile(r'^[ \t]*(?:await\s+)?page\.wait_for_load_state\([^)]*\)[ \t]*\n', re.MULTILINE)
WAIT_UNTIL_ARG = re.compile(r",\s*wait_until\s*=\s*['\"](?:networkidle|domcontentloaded)['\"]")
REGISTRATION = re.compile(r"^@(Given|When|Then|And|But)\(('(?:[^'\\]|\\.)*')\)", re.MULTILINE)

# (behave step type, escaped pattern literal) identifies a step definition
RegistrationKey = Tuple[str, str]


def registration_key(step: Step) -> RegistrationKey:
    return step.step_type, py_literal(behave_pattern(step.text))


def strip_load_state_waits(source: str) -> str:
    stripped = WAIT_UNTIL_ARG.sub('', LOAD_STATE_CALL.sub('', source))
    if stripped != source:
        logger.info("Removed load-state waits from generated module")
    return stripped


def feature_steps(feature_path: Union[str, Path]) -> List[Step]:
    feature = parse_file(str(feature_path))
    if feature is None:
        return []
    steps = []
    for scenario in feature.scenarios:
        for step in scenario.steps:
            steps.append(Step(step.keyword.strip(), step.name.strip()))
    return steps


def align_with_feature(source: str, feature_path: Union[str, Path]) -> Tuple[str, bool]:
    steps = feature_steps(feature_path)
    wanted = {registration_key(step) for step in steps}
    present = set()
    stale: List[Tuple[RegistrationKey, str]] = []
    for match in REGISTRATION.finditer(source):
        key = (STEP_TYPES[match.group(1)], match.group(2))
        present.add(key)
        # registrations no feature step resolves to, in module order
        if key not in wanted:
            stale.append((key, match.group(0)))

    modified = False
    for step in steps:
        key = registration_key(step)
        if key in present or not stale:
            continue
        logger.warning(f"Step '{step.keyword} {step.text}' not found in module, attempting to fix")
        same_type = [candidate for candidate in stale if candidate[0][0] == key[0]]
        replaced = (same_type or stale)[0]
        stale.remove(replaced)
        source = source.replace(replaced[1], render_registration(step), 1)
        present.add(key)
        modified = True
        logger.info(f"Fixed step: {step.keyword} {step.text}")
    return source, modified


def reconcile_module(module_path: Union[str, Path], feature_path: Union[str, Path]) -> bool:
    """Strip load-state waits and align step text; rewrite the module only on change."""
    module_path = Path(module_path)
    original = module_path.read_text(encoding='utf-8')
    aligned, _ = align_with_feature(strip_load_state_waits(original), feature_path)
    if aligned == original:
        logger.info("Module already aligned with feature file")
        return False
    module_path.write_text(aligned, encoding='utf-8')
    logger.info(f"Module updated to match feature file: {module_path}")
    return True
