"""
Per-feature engine: parse -> crawl -> synthesize -> assemble -> write.
"""
import logging
from pathlib import Path
from typing import Any, Dict, List, Union

from playwright.async_api import Error as PlaywrightError

from .assembler import assemble_module, output_path_for, write_module
from .crawler import crawl_screens
from .feature_parser import parse_feature_file
from .models import ScreenRegistry
from .synthesizer import synthesize_feature

logger = logging.getLogger(__name__)


class NoScenariosError(ValueError):
    """Feature document contains no scenarios."""


async def generate_for_feature(
    feature_path: Union[str, Path], output_dir: Union[str, Path], config: Dict[str, Any]
) -> Path:
    feature = parse_feature_file(feature_path)
    logger.info(f"Feature: {feature.name or 'Unnamed feature'}")
    if not feature.scenarios:
        raise NoScenariosError(f"No scenarios found in feature file: {feature_path}")

    try:
        registry = await crawl_screens(feature.scenarios, config)
    except PlaywrightError as e:
        # browser could not be started; generate from generic selectors only
        logger.error(f"Crawl failed, generating without captured selectors: {e}")
        registry = ScreenRegistry().freeze()

    logger.info("Generating step definitions from captured elements...")
    content = assemble_module(feature, synthesize_feature(feature, registry))
    return write_module(output_path_for(feature_path, output_dir), content)


async def scan_features(
    features_dir: Union[str, Path], output_dir: Union[str, Path], config: Dict[str, Any]
) -> List[Path]:
    features_dir = Path(features_dir)
    if not features_dir.is_dir():
        raise FileNotFoundError(f"Features directory not found: {features_dir}")

    feature_files = sorted(features_dir.glob('*.feature'))
    logger.info(f"Found {len(feature_files)} feature files: {', '.join(f.name for f in feature_files)}")

    generated = []
    for feature_file in feature_files:
        logger.info(f"Processing feature file: {feature_file.name}")
        try:
            generated.append(await generate_for_feature(feature_file, output_dir, config))
        except (FileNotFoundError, NoScenariosError) as e:
            logger.error(f"Skipping {feature_file.name}: {e}")
    logger.info(f"Processed {len(generated)}/{len(feature_files)} feature files")
    return generated
