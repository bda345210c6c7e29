"""Abstract DatabaseService interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator

from fxrate.types import Params, Row


class DatabaseService(ABC):
    """Storage collaborator used by the rate store.

    Design principles:
    - Stateless: no mutable state beyond the connection pool
    - Thread-safe: each transaction() acquires its own connection
    - Time-bounded: a transaction may carry its own deadline
    """

    @abstractmethod
    def connect(self) -> None:
        """Initialize the connection pool."""

    @abstractmethod
    def close(self) -> None:
        """Close all connections and release resources."""

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[Row]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    @contextmanager
    def transaction(self, timeout: float | None = None) -> Iterator[None]:
        """Context manager: acquires a connection, commits on success, rolls back on error.

        With ``timeout`` set, waiting for a connection and every statement run
        inside the block share that many seconds; running past it raises.
        """

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (CREATE TABLE, CREATE INDEX, etc.)."""

    @abstractmethod
    def insert(self, table: str, columns: list[str], row: tuple) -> int:
        """Insert one row and return its generated primary key."""
