"""Exchange rate API client with a per-call deadline and mock support."""

import json
import logging
import socket
import threading
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import suppress

import requests

from fxrate.errors import ConfigError, DecodeError, RequestBuildError, TransportError
from fxrate.models import RateReading

logger = logging.getLogger(__name__)

# Where the bid lives in each API's JSON body.
FLAT_BID_PATH = ("bid",)
NESTED_BID_PATH = ("USDBRL", "bid")

_CHUNK_SIZE = 8192


class RateSource(ABC):
    """Abstract interface for fetching a single exchange rate reading."""

    @abstractmethod
    def fetch(self, timeout: float) -> RateReading:
        """Fetch the current reading.

        Args:
            timeout: Seconds the whole exchange may take, body included.

        Returns:
            The reading, with the bid string copied verbatim from the source.

        Raises:
            FetchError: RequestBuildError, TransportError or DecodeError.
        """

    def close(self) -> None:
        """Release any held client resources."""


class _Exchange:
    """One GET whose connection can be torn down from another thread."""

    def __init__(self, session: requests.Session, request: requests.PreparedRequest, timeout: float):
        self._session = session
        self._request = request
        self._timeout = timeout
        self._lock = threading.Lock()
        self._response: requests.Response | None = None
        self._aborted = False

    def run(self) -> bytes:
        with self._lock:
            if self._aborted:
                raise TransportError("request abandoned before it was sent")
        response = self._session.send(self._request, timeout=self._timeout, stream=True)
        with self._lock:
            self._response = response
            aborted = self._aborted
        with response:
            if aborted:
                raise TransportError("request abandoned after headers")
            response.raise_for_status()
            return b"".join(response.iter_content(chunk_size=_CHUNK_SIZE))

    def abort(self) -> None:
        with self._lock:
            self._aborted = True
            response = self._response
        if response is None:
            return
        # shutdown() wakes a recv() blocked in the worker; close() alone does not.
        sock = getattr(getattr(response.raw, "connection", None), "sock", None)
        if sock is not None:
            with suppress(OSError):
                sock.shutdown(socket.SHUT_RDWR)
        response.close()


class RateFetcher(RateSource):
    """HTTP client for one exchange rate endpoint.

    Holds one requests.Session for its lifetime so connections are pooled
    across calls. Makes a single attempt per fetch; nothing is retried.

    Each exchange runs on a worker thread so the caller waits at most
    ``timeout`` seconds however slowly the server sends headers or body.
    On expiry the connection is shut down and the worker unwinds on its own.
    """

    def __init__(
        self,
        url: str,
        field_path: tuple[str, ...] = FLAT_BID_PATH,
        session: requests.Session | None = None,
        max_workers: int = 8,
    ):
        if not url:
            raise ConfigError("exchange rate API URL is empty")
        self._url = url
        self._field_path = field_path
        self._session = session or requests.Session()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="fxrate-fetch")

    def fetch(self, timeout: float) -> RateReading:
        try:
            request = self._session.prepare_request(requests.Request("GET", self._url))
        except (requests.exceptions.MissingSchema, requests.exceptions.InvalidURL) as e:
            raise RequestBuildError(str(e)) from e

        exchange = _Exchange(self._session, request, timeout)
        future = self._executor.submit(exchange.run)
        try:
            body = future.result(timeout=timeout)
        except FutureTimeoutError:
            exchange.abort()
            raise TransportError(f"no complete response within {timeout}s") from None
        except requests.exceptions.InvalidSchema as e:
            raise RequestBuildError(str(e)) from e
        except requests.RequestException as e:
            raise TransportError(str(e)) from e

        reading = RateReading(self._extract_bid(body))
        logger.debug("Fetched bid %s from %s", reading.bid, self._url)
        return reading

    def _extract_bid(self, body: bytes) -> str:
        try:
            value = json.loads(body)
        except ValueError as e:
            raise DecodeError(str(e)) from e

        for key in self._field_path:
            if not isinstance(value, dict):
                raise DecodeError(f"expected an object before {key!r}, got {type(value).__name__}")
            if key not in value:
                raise DecodeError(f"missing field {'.'.join(self._field_path)!r}")
            value = value[key]

        if not isinstance(value, str):
            raise DecodeError(
                f"field {'.'.join(self._field_path)!r} must be a string, got {type(value).__name__}"
            )
        return value

    def close(self) -> None:
        self._executor.shutdown(wait=False, cancel_futures=True)
        self._session.close()


class StaticRateSource(RateSource):
    """Mock source returning a fixed reading, for tests and --mock runs."""

    MOCK_BID = "5.25"

    def __init__(self, bid: str = MOCK_BID):
        self._reading = RateReading(bid)

    def fetch(self, timeout: float) -> RateReading:
        return self._reading
