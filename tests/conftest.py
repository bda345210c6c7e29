"""Shared test fixtures."""

import io
import time

import pytest
import requests
from requests.adapters import BaseAdapter

from fxrate import create_service
from fxrate.store import ensure_rate_schema


@pytest.fixture
def db_service(tmp_path):
    """Provide a fresh SQLite DatabaseService for each test."""
    db_path = tmp_path / "test.db"
    service = create_service(f"sqlite:///{db_path}")
    service.connect()
    yield service
    service.close()


@pytest.fixture
def rate_db(db_service):
    """A DatabaseService with the exchange_rates table already created."""
    ensure_rate_schema(db_service)
    return db_service


class StubAdapter(BaseAdapter):
    """Transport adapter answering every request with a canned response or error."""

    def __init__(
        self,
        body: bytes = b"",
        status: int = 200,
        error: Exception | None = None,
        delay: float = 0,
    ):
        super().__init__()
        self.delay = delay
        self.body = body
        self.status = status
        self.error = error
        self.calls = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        self.calls.append({"request": request, "timeout": timeout, "stream": stream})
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        response = requests.Response()
        response.status_code = self.status
        response.reason = "OK" if self.status < 400 else "Error"
        response.headers["Content-Type"] = "application/json"
        response.raw = self.body if hasattr(self.body, "read") else io.BytesIO(self.body)
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


@pytest.fixture
def stub_session():
    """Return a factory building a requests.Session backed by a StubAdapter."""

    def make(**kwargs):
        adapter = StubAdapter(**kwargs)
        session = requests.Session()
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        return session, adapter

    return make
