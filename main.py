"""
Dry Spot Finder: command-line entry point

Finds the point within a radius of a place that is most likely to stay dry
today. Samples the place itself plus eight compass points, fetches a
day-one forecast for each, and reports the driest one.

Usage:
    python main.py "Berlin" --radius 10
    python main.py "Freiburg im Breisgau" --radius 25 --source open-meteo -v
"""

import argparse
import asyncio
import logging
import os
import sys
from dataclasses import replace

from colorama import Fore, Style, just_fix_windows_console

from dry_spot.config import FORECAST_SOURCES, Settings
from dry_spot.errors import FetchError, InvalidInput, NoSiteFound, NotFound
from dry_spot.report import NO_SITE_MESSAGE, render_outcomes, render_result
from dry_spot.search import DrySpotFinder
from dry_spot.transport import HttpJsonFetcher

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_INVALID_INPUT = 2
EXIT_NOT_FOUND = 3
EXIT_NO_SITE = 4


def parse_args(argv=None):
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description='Dry Spot Finder - where nearby is it most likely to stay dry today?'
    )
    parser.add_argument('place', help='Place name to search around, e.g. "Berlin"')
    parser.add_argument('-r', '--radius', default='10',
                        help='Search radius in km (default: 10)')
    parser.add_argument('--source', choices=FORECAST_SOURCES,
                        help='Forecast source (default: DRY_SPOT_FORECAST_SOURCE or wttr)')
    parser.add_argument('--window', type=int,
                        help='Forecast records that make up day one (default: per source)')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='List every sampled point')
    return parser.parse_args(argv)


def setup_logging(level: str):
    """Log to logs/dry_spot.log and stdout."""
    os.makedirs("logs", exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler("logs/dry_spot.log", mode='a', encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )


def print_error(message: str):
    print(f"{Fore.RED}[ERROR]{Style.RESET_ALL} {message}")


async def run(args, settings: Settings) -> int:
    async with HttpJsonFetcher(settings) as fetch_json:
        finder = DrySpotFinder.from_settings(settings, fetch_json)
        try:
            result = await finder.find_best_site(args.place, args.radius)
        except InvalidInput as e:
            print_error(str(e))
            return EXIT_INVALID_INPUT
        except NotFound as e:
            print_error(str(e))
            return EXIT_NOT_FOUND
        except NoSiteFound as e:
            print_error(str(e))
            print(NO_SITE_MESSAGE)
            if args.verbose:
                for line in render_outcomes(e.outcomes):
                    print(line)
            return EXIT_NO_SITE
        except FetchError as e:
            print_error(f"Location lookup failed: {e}")
            return EXIT_ERROR

    print()
    lines = render_result(result.best, result.place, result.radius_km, result.origin)
    print(f"{Fore.GREEN}{Style.BRIGHT}{lines[0]}{Style.RESET_ALL}")
    for line in lines[1:]:
        print(line)

    if args.verbose:
        print()
        print(f"{Fore.CYAN}Sampled points ({len(result.evaluations)}/{len(result.outcomes)} usable){Style.RESET_ALL}")
        for line in render_outcomes(result.outcomes):
            print(line)
    elif result.failures:
        print(f"{Fore.YELLOW}  ({len(result.failures)} of {len(result.outcomes)} points had no usable forecast){Style.RESET_ALL}")

    return EXIT_OK


def main(argv=None) -> int:
    just_fix_windows_console()
    args = parse_args(argv)

    try:
        settings = Settings.from_env()
        if args.source:
            settings = replace(settings, forecast_source=args.source)
        if args.window is not None:
            if args.window < 1:
                raise InvalidInput(f"--window must be at least 1, got {args.window}")
            settings = replace(settings, forecast_window=args.window)
    except InvalidInput as e:
        print_error(str(e))
        return EXIT_INVALID_INPUT

    setup_logging(settings.log_level)
    logger.info("=" * 60)
    logger.info(f"Dry Spot Finder - {args.place!r}, radius {args.radius} km, source {settings.forecast_source}")
    logger.info("=" * 60)

    try:
        return asyncio.run(run(args, settings))
    except KeyboardInterrupt:
        print_error("Interrupted")
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
