#!/usr/bin/env python
"""
Command-line interface for Railway Data Extractor

Usage:
    python cli.py                          # all phases, all countries
    python cli.py railways turkey iran     # railways only
    python cli.py stations --stations-policy extended bulgaria
"""

import os
import sys
import argparse

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from loguru import logger
from rail_extractor.config import (
    RAILWAY_POLICIES, STATION_POLICIES, get_config, load_env_overrides, validate_config
)
from rail_extractor.countries import COUNTRIES, split_known
from rail_extractor.pipeline import MODES, ExtractionPipeline


def setup_logging(verbose: bool = False):
    """Configure logging"""
    logger.remove()
    level = "DEBUG" if verbose else "INFO"
    logger.add(
        sys.stderr,
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{message}</cyan>",
        level=level
    )


def parse_targets(targets):
    """Split positional arguments into (mode, country keys)"""
    if targets and targets[0] in MODES:
        return targets[0], list(targets[1:])
    return "all", list(targets)


def cmd_list(args):
    """Print the configured countries"""
    for key, country in COUNTRIES.items():
        bbox = ", ".join(f"{v:.2f}" for v in country.bbox.as_list())
        print(f"{key:<14} {country.code}  {country.size:<7} [{bbox}]  {country.name}")
    return 0


def cmd_extract(args):
    """Extract railways and/or stations for the requested countries"""
    config = load_env_overrides(get_config(), args.env_file)
    if args.output_dir:
        config.output_dir = args.output_dir
    if args.cache_dir:
        config.cache_dir = args.cache_dir
    if args.delay is not None:
        config.delay_s = args.delay
    if args.stations_policy:
        config.stations_policy = args.stations_policy
    if args.railway_policy:
        config.railway_policy = args.railway_policy
    validate_config(config)

    mode, requested = parse_targets(args.targets)
    keys, unknown = split_known(requested)
    if unknown:
        logger.warning(f"⚠ Unknown countries: {', '.join(unknown)}")
    if requested and not keys:
        logger.error(f"No known countries requested. Available: {', '.join(COUNTRIES)}")
        return 1

    pipeline = ExtractionPipeline(config=config)
    pipeline.run(mode, keys or None)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Railway Data Extractor CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Extract everything:
    python cli.py

  Railways for two countries:
    python cli.py railways turkey iran

  Stations including halts and station buildings:
    python cli.py stations --stations-policy extended bulgaria

  List configured countries:
    python cli.py --list
        """
    )
    parser.add_argument("targets", nargs="*", metavar="[MODE] COUNTRY",
                        help=f"Optional mode ({'|'.join(MODES)}, default all) followed by country keys")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose output")
    parser.add_argument("--output-dir", "-o", help="Output directory (default: data)")
    parser.add_argument("--cache-dir", help="Cache raw Overpass responses in this directory")
    parser.add_argument("--delay", type=float, help="Delay between queries in seconds")
    parser.add_argument("--stations-policy", choices=STATION_POLICIES, help="Which stations to extract")
    parser.add_argument("--railway-policy", choices=RAILWAY_POLICIES, help="Which railway types to extract")
    parser.add_argument("--env-file", help="Load settings from this .env file")
    parser.add_argument("--list", action="store_true", help="List configured countries and exit")

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.list:
        return cmd_list(args)

    try:
        return cmd_extract(args)
    except Exception as e:
        logger.exception(f"Extraction failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
