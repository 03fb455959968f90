"""
Main entry point for factorstats.

Reads a CSV dataset, computes the configured descriptive matrices and
writes them as JSON.
"""

import argparse
import logging
import sys
from typing import List, Optional

import pandas as pd

from factorstats.analysis import FactorDescriptives
from factorstats.components.config import Config, load_config_file
from factorstats.math.stats import VARIANCE_METHODS

ALL_STAGES = ('univariate', 'coefficient', 'covariance', 'determinant', 'inverse', 'anti-image')


def setup_logging(level: str = 'INFO') -> None:
    """
    Set up logging.

    Args:
        level: Logging level
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command line arguments.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(description='Factor analysis descriptive matrices')

    parser.add_argument(
        'data',
        help='Path to a CSV dataset'
    )

    parser.add_argument(
        '--config',
        help='Path to configuration file (JSON or YAML)'
    )

    parser.add_argument(
        '--variables',
        help='Comma-separated variables to analyse'
    )

    parser.add_argument(
        '--significance',
        action='store_true',
        help='Compute one-tailed p-values for correlations'
    )

    parser.add_argument(
        '--variance-method',
        choices=VARIANCE_METHODS,
        help='Variance formula for descriptive statistics'
    )

    parser.add_argument(
        '--output',
        help='Write JSON here instead of stdout'
    )

    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        help='Logging level (defaults to the logging.level setting)'
    )

    return parser.parse_args(argv)


def build_overrides(args: argparse.Namespace) -> dict:
    """
    Combine the configuration file and command line flags into overrides.

    Every stage is switched on unless the configuration file sets it.

    Args:
        args: Parsed arguments

    Returns:
        Configuration overrides
    """
    file_config = load_config_file(args.config) if args.config else {}
    file_descriptives = file_config.get('descriptives', {})

    overrides = dict(file_config)
    overrides['descriptives'] = {stage: True for stage in ALL_STAGES}
    overrides['descriptives'].update(file_descriptives)

    if args.variables:
        overrides['variables'] = args.variables

    if args.significance:
        overrides['descriptives']['significance'] = True

    if args.variance_method:
        overrides['variance-method'] = args.variance_method

    return overrides


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point.

    Args:
        argv: Argument list (defaults to sys.argv)

    Returns:
        Process exit code: 0 on success, 1 if any stage failed
    """
    args = parse_args(argv)
    config = Config(build_overrides(args))
    setup_logging(args.log_level or config.get('logging.level'))

    frame = pd.read_csv(args.data)
    result = FactorDescriptives(config).run(frame)

    output = result.model_dump_json(indent=2)
    if args.output:
        with open(args.output, 'w') as f:
            f.write(output)
    else:
        print(output)

    return 1 if result.errors else 0


if __name__ == '__main__':
    sys.exit(main())
