"""CLI entry point: fetch the USD exchange rate and write it to a file.

Usage:
    EXCHANGE_RATE_API_URL=https://... python -m scripts.fetch_rate [--output exchange_rate.txt] [--timeout 0.3] [--mock]
"""

import argparse
import logging
import sys

from fxrate.config import ClientSettings
from fxrate.errors import ConfigError, FetchError, FileSinkError
from fxrate.fetcher import FLAT_BID_PATH, RateFetcher, StaticRateSource
from fxrate.file_sink import format_rate_line, write_rate_file

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Fetch the USD exchange rate and save it")
    parser.add_argument("--url", help="Exchange rate API URL (default: $EXCHANGE_RATE_API_URL)")
    parser.add_argument("--output", dest="output_path", help="File to write the rate to")
    parser.add_argument("--timeout", dest="fetch_timeout", type=float, help="Fetch timeout in seconds")
    parser.add_argument("--mock", action="store_true", help="Use a fixed rate instead of the API")
    args = parser.parse_args(argv)

    try:
        settings = ClientSettings.from_env(
            require_url=not args.mock,
            api_url=args.url,
            output_path=args.output_path,
            fetch_timeout=args.fetch_timeout,
        )
    except ConfigError as e:
        logger.error("%s. Use --url or --mock.", e)
        sys.exit(1)

    if args.mock:
        source = StaticRateSource()
    else:
        source = RateFetcher(settings.api_url, FLAT_BID_PATH)

    try:
        reading = source.fetch(settings.fetch_timeout)
    except FetchError as e:
        logger.error("error fetching dollar exchange rate: %s", e)
        sys.exit(1)
    finally:
        source.close()

    print(format_rate_line(reading))

    try:
        write_rate_file(settings.output_path, reading)
    except FileSinkError as e:
        logger.error("%s", e)


if __name__ == "__main__":
    main()
