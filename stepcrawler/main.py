import argparse
import asyncio
import logging
from pathlib import Path

from .alignment import reconcile_module
from .assembler import output_path_for
from .config import load_config
from .constants import DEFAULT_FEATURES_DIR, DEFAULT_OUTPUT_DIR
from .scanner import NoScenariosError, generate_for_feature, scan_features

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Crawl the application and generate behave steps from feature files')
    parser.add_argument('--features-dir', default=DEFAULT_FEATURES_DIR, help='Directory of .feature files')
    parser.add_argument('--feature', help='Process a single feature file instead of the whole directory')
    parser.add_argument('--output-dir', default=DEFAULT_OUTPUT_DIR, help='Where generated step modules go')
    parser.add_argument('--url', help='Base URL (overrides BASE_URL)')
    parser.add_argument('--headful', action='store_true', help='Show browser')
    parser.add_argument('--align', action='store_true', help='Reconcile generated modules with their feature files')
    parser.add_argument('--debug', action='store_true', help='Debug logging')
    return parser


async def main(argv=None):
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format='%(asctime)s %(levelname)-5s %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )

    config = load_config()
    if args.url:
        config['base_url'] = args.url.rstrip('/')
    if args.headful:
        config['headless'] = False

    if args.feature:
        feature_files = [Path(args.feature)]
        try:
            generated = [await generate_for_feature(args.feature, args.output_dir, config)]
        except (FileNotFoundError, NoScenariosError) as e:
            logger.error(f"Could not process {args.feature}: {e}")
            return []
    else:
        feature_files = sorted(Path(args.features_dir).glob('*.feature'))
        generated = await scan_features(args.features_dir, args.output_dir, config)

    if args.align:
        for feature_file in feature_files:
            module_path = output_path_for(feature_file, args.output_dir)
            if module_path in generated:
                reconcile_module(module_path, feature_file)

    logger.info(f"Generated {len(generated)} step module(s)")
    return generated


def run():
    asyncio.run(main())


if __name__ == '__main__':
    run()
