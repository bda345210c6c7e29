"""Exchange rate persistence and schema."""

import logging
import sqlite3

from fxrate.errors import StoreOpenError, StoreQueryError
from fxrate.models import PersistedRate, RateReading
from fxrate.service import DatabaseService
from fxrate.sqlite_service import SQLiteDatabaseService

logger = logging.getLogger(__name__)

EXCHANGE_RATES_DDL = """
CREATE TABLE IF NOT EXISTS exchange_rates (
    id          INTEGER     PRIMARY KEY AUTOINCREMENT,
    bid         TEXT        NOT NULL,
    created_at  TIMESTAMP   NOT NULL DEFAULT CURRENT_TIMESTAMP,
    updated_at  TIMESTAMP   NOT NULL DEFAULT CURRENT_TIMESTAMP,
    deleted_at  TIMESTAMP
);
CREATE INDEX IF NOT EXISTS idx_exchange_rates_deleted_at ON exchange_rates(deleted_at);
"""

RATES_TABLE = "exchange_rates"
RATES_COLUMNS = ["bid"]

DEFAULT_DB_PATH = "./database.db"


def ensure_rate_schema(service: DatabaseService) -> None:
    """Create the exchange_rates table if it doesn't exist."""
    service.execute_ddl(EXCHANGE_RATES_DDL)


def open_store(db_path: str = DEFAULT_DB_PATH, pool_size: int = 4) -> DatabaseService:
    """Connect to the database and migrate it.

    Meant to run once at startup. Any failure here is fatal for the caller,
    so it surfaces as StoreOpenError with the pool already released.
    """
    service = SQLiteDatabaseService(db_path, pool_size)
    try:
        service.connect()
        ensure_rate_schema(service)
    except (sqlite3.Error, OSError) as e:
        service.close()
        raise StoreOpenError(f"{db_path}: {e}") from e
    logger.info("Opened rate store at %s", db_path)
    return service


def _to_persisted(row: dict) -> PersistedRate:
    return PersistedRate(
        id=row["id"],
        bid=row["bid"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        deleted_at=row["deleted_at"],
    )


def persist_rate(
    service: DatabaseService, reading: RateReading, timeout: float | None = None
) -> PersistedRate:
    """Insert one reading as a new row.

    The insert and the read-back share a single ``timeout`` budget. Every
    failure, the deadline included, is reported as StoreQueryError.
    """
    try:
        with service.transaction(timeout=timeout):
            row_id = service.insert(RATES_TABLE, RATES_COLUMNS, (reading.bid,))
            rows = service.execute(f"SELECT * FROM {RATES_TABLE} WHERE id = ?", (row_id,))
    except (sqlite3.Error, TimeoutError) as e:
        raise StoreQueryError(str(e)) from e
    persisted = _to_persisted(rows[0])
    logger.info("Stored exchange rate %s as row %d", persisted.bid, persisted.id)
    return persisted


def list_rates(service: DatabaseService) -> list[PersistedRate]:
    """Return every stored, non-deleted reading, oldest first."""
    try:
        with service.transaction():
            rows = service.execute(
                f"SELECT * FROM {RATES_TABLE} WHERE deleted_at IS NULL ORDER BY id"
            )
    except (sqlite3.Error, TimeoutError) as e:
        raise StoreQueryError(str(e)) from e
    return [_to_persisted(row) for row in rows]
