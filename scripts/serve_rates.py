"""Server entry point: serve GET /exchange-rate and store every reading.

Usage:
    EXTERNAL_API_URL=https://... python -m scripts.serve_rates [--host 127.0.0.1] [--port 8080] [--db-path ./database.db]
"""

import argparse
import logging
import sys

from fxrate.config import ServerSettings
from fxrate.errors import ConfigError, StoreOpenError
from fxrate.server import serve

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Serve and store the USD exchange rate")
    parser.add_argument("--url", help="External API URL (default: $EXTERNAL_API_URL)")
    parser.add_argument("--host", help="Address to listen on")
    parser.add_argument("--port", type=int, help="Port to listen on")
    parser.add_argument("--db-path", help="SQLite database file")
    parser.add_argument("--pool-size", type=int, help="Database connections to keep open")
    args = parser.parse_args(argv)

    try:
        settings = ServerSettings.from_env(
            api_url=args.url,
            host=args.host,
            port=args.port,
            db_path=args.db_path,
            pool_size=args.pool_size,
        )
    except ConfigError as e:
        logger.error("%s", e)
        sys.exit(1)

    try:
        serve(settings)
    except StoreOpenError as e:
        logger.error("%s", e)
        sys.exit(1)
    except OSError as e:
        # werkzeug exits on its own for EADDRINUSE; this covers the rest.
        logger.error("Cannot listen on %s:%d: %s", settings.host, settings.port, e)
        sys.exit(1)


if __name__ == "__main__":
    main()
