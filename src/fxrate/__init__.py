"""Fetch a USD exchange rate and persist it to a file or a SQLite table."""

from fxrate.errors import (
    ConfigError,
    DecodeError,
    ExchangeRateError,
    FetchError,
    FileCreateError,
    FileWriteError,
    RequestBuildError,
    StoreOpenError,
    StoreQueryError,
    TransportError,
)
from fxrate.fetcher import FLAT_BID_PATH, NESTED_BID_PATH, RateFetcher, RateSource, StaticRateSource
from fxrate.models import PersistedRate, RateReading
from fxrate.service import DatabaseService
from fxrate.sqlite_service import SQLiteDatabaseService


def create_service(db_url: str, pool_size: int = 4) -> DatabaseService:
    """Create a DatabaseService from a connection URL.

    Supported schemes:
    - sqlite:///path/to/db  or  sqlite:///:memory:
    """
    if db_url.startswith("sqlite"):
        # Extract path: sqlite:///foo.db -> foo.db, sqlite:///:memory: -> :memory:
        path = db_url.split(":///", 1)[1] if ":///" in db_url else ":memory:"
        return SQLiteDatabaseService(path, pool_size)
    raise ValueError(f"Unsupported database URL scheme: {db_url}")


__all__ = [
    "ConfigError",
    "DatabaseService",
    "DecodeError",
    "ExchangeRateError",
    "FLAT_BID_PATH",
    "FetchError",
    "FileCreateError",
    "FileWriteError",
    "NESTED_BID_PATH",
    "PersistedRate",
    "RateFetcher",
    "RateReading",
    "RateSource",
    "RequestBuildError",
    "SQLiteDatabaseService",
    "StaticRateSource",
    "StoreOpenError",
    "StoreQueryError",
    "TransportError",
    "create_service",
]
