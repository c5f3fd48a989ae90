"""
Output assembly: one generated behave step module per feature.
"""
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Sequence, Tuple, Union

from .models import Feature, Scenario, StepImplementation

logger = logging.getLogger(__name__)

PREAMBLE = '''"""Generated step definitions with selectors captured from the live application."""
import logging
import os

from behave import given, when, then, step
from playwright.sync_api import Error as PlaywrightError, expect

logger = logging.getLogger(__name__)

Given, When, Then, And, But = given, when, then, step, step

BASE_URL = os.environ.get('BASE_URL', '').rstrip('/')
LOGIN_PATH = os.environ.get('LOGIN_PATH', '/sign-in')

# Test data from environment variables
TEST_EMAIL = os.environ.get('TEST_EMAIL', '')
TEST_PASSWORD = os.environ.get('TEST_PASSWORD', '')
'''


def assemble_module(
    feature: Feature, implementations: Sequence[Tuple[Scenario, Sequence[StepImplementation]]]
) -> str:
    parts: List[str] = [PREAMBLE]
    registered = set()
    for scenario, step_impls in implementations:
        parts.append(f"\n# Scenario: {scenario.name}\n")
        for step, impl in zip(scenario.steps, step_impls):
            key = (step.step_type, step.text)
            if key in registered:
                # behave rejects a second definition of the same text for one step type
                parts.append(f"# Reuses definition above: {step.keyword} {step.text}\n")
                continue
            registered.add(key)
            parts.append(f"\n{impl.generated_body}\n\n")
    logger.info(f"Assembled {len(registered)} step definitions for feature '{feature.name}'")
    return ''.join(parts)


def output_path_for(feature_path: Union[str, Path], output_dir: Union[str, Path]) -> Path:
    base = Path(feature_path).stem
    return Path(output_dir) / base / f"{base}_steps.py"


def write_module(path: Union[str, Path], content: str) -> Path:
    """Write ``content`` in one replace so readers never see a partial module."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.tmp')
    try:
        with os.fdopen(fd, 'w', encoding='utf-8') as handle:
            handle.write(content)
        os.replace(tmp_name, path)
    except OSError:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    logger.info(f"Generated step module: {path}")
    return path
