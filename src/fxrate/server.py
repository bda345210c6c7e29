"""HTTP responder: fetch the rate, store it, return it as JSON."""

import logging

from flask import Flask, Response, jsonify, request

from fxrate.config import ServerSettings
from fxrate.errors import FetchError, StoreQueryError
from fxrate.fetcher import NESTED_BID_PATH, RateFetcher, RateSource
from fxrate.service import DatabaseService
from fxrate.store import open_store, persist_rate

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "error: endpoint not found"
FETCH_FAILED_MESSAGE = "error fetching exchange rate from external API"
METHOD_NOT_ALLOWED_MESSAGE = "error: method not allowed"


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def create_app(source: RateSource, service: DatabaseService, settings: ServerSettings) -> Flask:
    """Build the Flask app around an already opened source and store.

    The status code is chosen only after the fetch outcome is known; Flask
    buffers the response until the view returns.

    Only GET is routed on the endpoint. Other methods get a plain-text 405
    and never reach the source or the store.
    """
    app = Flask(__name__, static_folder=None)

    @app.get(settings.endpoint)
    def exchange_rate():
        try:
            reading = source.fetch(settings.fetch_timeout)
        except FetchError as e:
            logger.error("%s: %s", FETCH_FAILED_MESSAGE, e)
            return _text(FETCH_FAILED_MESSAGE, 500)

        try:
            persist_rate(service, reading, settings.store_timeout)
        except StoreQueryError as e:
            logger.error("%s", e)

        return jsonify(reading.to_dict())

    @app.errorhandler(404)
    def not_found(_error):
        logger.warning("%s: %s", NOT_FOUND_MESSAGE, request.path)
        return _text(NOT_FOUND_MESSAGE, 404)

    @app.errorhandler(405)
    def method_not_allowed(error):
        logger.warning("%s: %s %s", METHOD_NOT_ALLOWED_MESSAGE, request.method, request.path)
        response = _text(METHOD_NOT_ALLOWED_MESSAGE, 405)
        response.headers["Allow"] = ", ".join(error.valid_methods or [])
        return response

    return app


def serve(settings: ServerSettings) -> None:
    """Open the store, then listen until interrupted.

    Raises StoreOpenError before listening if the database is unusable.
    When the port is already taken werkzeug reports it and exits with status 1
    itself; other bind errors (bad host name, permissions) raise OSError.
    """
    service = open_store(settings.db_path, settings.pool_size)
    fetcher = RateFetcher(settings.api_url, NESTED_BID_PATH)
    try:
        app = create_app(fetcher, service, settings)
        logger.info(
            "Serving %s on %s:%d", settings.endpoint, settings.host, settings.port
        )
        app.run(host=settings.host, port=settings.port, threaded=True)
    finally:
        fetcher.close()
        service.close()
