"""SQLite implementation of DatabaseService."""

import sqlite3
import threading
import time
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Iterator

from fxrate.service import DatabaseService
from fxrate.types import Params, Row

# Progress handler granularity, in SQLite virtual machine instructions.
_PROGRESS_STEPS = 100
_DEFAULT_BUSY_TIMEOUT_MS = 5000


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.
    """

    def __init__(self, db_path: str, pool_size: int = 4):
        self._db_path = db_path
        self._pool_size = pool_size
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self, timeout: float = 30) -> sqlite3.Connection:
        try:
            return self._pool.get(timeout=timeout)
        except Empty:
            raise TimeoutError(f"No database connection available within {timeout}s") from None

    def _release(self, conn: sqlite3.Connection) -> None:
        self._pool.put(conn)

    def _get_conn(self) -> sqlite3.Connection:
        """Get the connection bound to the current transaction."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[None]:
        deadline = None if timeout is None else time.monotonic() + timeout
        conn = self._acquire() if timeout is None else self._acquire(timeout)
        self._local.conn = conn
        try:
            if deadline is not None:
                remaining_ms = max(int((deadline - time.monotonic()) * 1000), 0)
                conn.execute(f"PRAGMA busy_timeout = {remaining_ms}")
                # A non-zero return aborts the running statement with "interrupted".
                conn.set_progress_handler(
                    lambda: int(time.monotonic() > deadline), _PROGRESS_STEPS
                )
            yield
            conn.commit()
        except Exception:
            conn.set_progress_handler(None, _PROGRESS_STEPS)
            conn.rollback()
            raise
        finally:
            if timeout is not None:
                conn.set_progress_handler(None, _PROGRESS_STEPS)
                conn.execute(f"PRAGMA busy_timeout = {_DEFAULT_BUSY_TIMEOUT_MS}")
            self._local.conn = None
            self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            conn.executescript(sql)
            conn.commit()
        finally:
            self._release(conn)

    def insert(self, table: str, columns: list[str], row: tuple) -> int:
        conn = self._get_conn()
        cols = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        cursor = conn.execute(f"INSERT INTO {table} ({cols}) VALUES ({placeholders})", row)
        return cursor.lastrowid
