#!/usr/bin/env python3
"""
Command-line interface for AssertImage.
Compares an expected image with an actual image and reports the difference.

Exit codes:
    0 - difference is within the tolerance
    1 - the images could not be compared
    2 - difference exceeds the tolerance
"""

import argparse
import logging
import sys
import time

from tabulate import tabulate

from .core import (
    AssertImageConfig,
    get_image_difference,
    source_identifier,
    VERSION
)

logger = logging.getLogger(__name__)


class AssertImageCLI:
    """Command-line interface for AssertImage"""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog='assertimage',
            description='AssertImage - Pixel-level image comparison',
            formatter_class=argparse.RawDescriptionHelpFormatter
        )
        parser.add_argument('--version', action='version', version=f'AssertImage v{VERSION}')

        subparsers = parser.add_subparsers(dest='command', help='Available commands')

        # Compare two images
        diff_parser = subparsers.add_parser('diff', help='Compute the difference between two images')
        diff_parser.add_argument('expected', help='Path to the reference image')
        diff_parser.add_argument('actual', help='Path to the generated image')
        diff_parser.add_argument('--delta', type=float, help='Accepted difference, between 0 and 1')
        diff_parser.add_argument('--message', help='Message shown when the images differ')
        diff_parser.add_argument('--config', help='Path to configuration file')
        diff_parser.add_argument('--verbose', action='store_true', help='Enable verbose logging')

        # Config command
        config_parser = subparsers.add_parser('config', help='Generate default configuration file')
        config_parser.add_argument('--out', required=True, help='Output path for configuration file')

        return parser

    def run(self, args=None) -> int:
        args = self.parser.parse_args(args)

        if not args.command:
            self.parser.print_help()
            return 1

        if getattr(args, 'verbose', False):
            logging.getLogger().setLevel(logging.DEBUG)

        try:
            if args.command == 'diff':
                return self._diff_images(args)
            elif args.command == 'config':
                return self._generate_config(args)
        except Exception as e:
            logger.error(f"Error: {e}")
            return 1
        return 1

    def _diff_images(self, args) -> int:
        if args.config:
            config = AssertImageConfig.from_json(args.config)
        else:
            config = AssertImageConfig()
        delta = config.delta if args.delta is None else args.delta
        message = args.message if args.message is not None else config.message

        logger.info(f"Comparing {args.expected} with {args.actual}")
        start_time = time.time()
        difference = get_image_difference(args.expected, args.actual)
        elapsed = time.time() - start_time

        within = difference <= delta
        rows = [[
            source_identifier(args.expected),
            source_identifier(args.actual),
            f"{difference * 100:.2f}%",
            f"{delta * 100:.2f}%",
            "✅ PASS" if within else "❌ FAIL"
        ]]
        headers = ["Expected", "Actual", "Difference", "Delta", "Status"]
        print(tabulate(rows, headers=headers, tablefmt="grid"))
        logger.info(f"Comparison completed in {elapsed:.2f}s")

        if not within:
            if message:
                logger.warning(message)
            return 2
        return 0

    def _generate_config(self, args) -> int:
        config = AssertImageConfig()
        config.to_json(args.out)
        logger.info(f"Default configuration saved to {args.out}")
        return 0


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    cli = AssertImageCLI()
    sys.exit(cli.run())


if __name__ == '__main__':
    main()
