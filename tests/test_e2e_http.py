"""E2E tests running the fetcher and responder against a real local HTTP server.

Run with: pytest tests/test_e2e_http.py -v -m e2e
"""

import json
import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

from fxrate.config import ServerSettings
from fxrate.errors import TransportError
from fxrate.fetcher import FLAT_BID_PATH, NESTED_BID_PATH, RateFetcher
from fxrate.server import create_app
from fxrate.store import list_rates

pytestmark = pytest.mark.e2e


class RateHandler(BaseHTTPRequestHandler):
    routes = {
        "/flat": (0, {"bid": "5.2513"}),
        "/nested": (0, {"USDBRL": {"code": "USD", "codein": "BRL", "bid": "4.9871"}}),
        "/slow": (0.5, {"bid": "5.2513"}),
    }

    def do_GET(self):
        delay, payload = self.routes.get(self.path, (0, None))
        if payload is None:
            self.send_error(404)
            return
        time.sleep(delay)
        body = json.dumps(payload).encode()
        self.send_response(200)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass


@pytest.fixture(scope="module")
def api_url():
    server = ThreadingHTTPServer(("127.0.0.1", 0), RateHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_address[1]}"
    finally:
        server.shutdown()
        server.server_close()


class TestFetcher:
    def test_flat(self, api_url):
        fetcher = RateFetcher(f"{api_url}/flat", FLAT_BID_PATH)
        try:
            assert fetcher.fetch(timeout=2).bid == "5.2513"
        finally:
            fetcher.close()

    def test_slow_server_times_out(self, api_url):
        fetcher = RateFetcher(f"{api_url}/slow", FLAT_BID_PATH)
        try:
            with pytest.raises(TransportError):
                fetcher.fetch(timeout=0.1)
        finally:
            fetcher.close()

    def test_not_found_status(self, api_url):
        fetcher = RateFetcher(f"{api_url}/missing", FLAT_BID_PATH)
        try:
            with pytest.raises(TransportError, match="404"):
                fetcher.fetch(timeout=2)
        finally:
            fetcher.close()


class TestResponder:
    def test_round_trip(self, api_url, rate_db):
        settings = ServerSettings(api_url=f"{api_url}/nested", fetch_timeout=2, store_timeout=1)
        fetcher = RateFetcher(settings.api_url, NESTED_BID_PATH)
        client = create_app(fetcher, rate_db, settings).test_client()
        try:
            response = client.get("/exchange-rate")
        finally:
            fetcher.close()

        assert response.status_code == 200
        assert response.get_json() == {"bid": "4.9871"}
        assert [r.bid for r in list_rates(rate_db)] == ["4.9871"]
