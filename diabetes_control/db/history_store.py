"""
History store used by the submission flow.

``HistoryStore`` is the two-operation contract the core relies on:

    append(entry) -> full updated history (oldest first)
    read_all()    -> full history (oldest first)

``SQLiteHistoryStore`` implements it over a SQLite file.  It is an ordinary
object owned by the caller: construct it (usually via ``from_config``), pass
it to ``SubmissionService``, and let it go.  The schema is created lazily on
first use; there is no teardown step.

Each operation opens its own short-lived connection, so a ``":memory:"``
path would not persist between calls; use a file path (``tmp_path`` in
tests).
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from diabetes_control.db.connection import get_connection
from diabetes_control.db.repositories.history_repo import HistoryRepository
from diabetes_control.db.schema import apply_schema
from diabetes_control.models.history import HistoryEntry

if TYPE_CHECKING:
    from diabetes_control.config import HistoryConfig

logger = logging.getLogger(__name__)


class HistoryStore(ABC):
    """Append-only, insertion-ordered log of history entries."""

    @abstractmethod
    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        """Persist ``entry`` and return the updated history, oldest first."""

    @abstractmethod
    def read_all(self) -> list[HistoryEntry]:
        """Return the full history, oldest first."""


class SQLiteHistoryStore(HistoryStore):
    """``HistoryStore`` backed by the ``history_entries`` SQLite table.

    Attributes:
        db_path: Path to the SQLite database file.
        wal_mode: Passed through to ``get_connection()``.
        busy_timeout_ms: Passed through to ``get_connection()``.
    """

    def __init__(
        self,
        db_path: str,
        wal_mode: bool = True,
        busy_timeout_ms: int = 5000,
    ) -> None:
        self.db_path = db_path
        self.wal_mode = wal_mode
        self.busy_timeout_ms = busy_timeout_ms
        self._schema_ready = False

    @classmethod
    def from_config(cls, config: "HistoryConfig") -> "SQLiteHistoryStore":
        return cls(
            db_path=config.db_path,
            wal_mode=config.wal_mode,
            busy_timeout_ms=config.busy_timeout_ms,
        )

    def append(self, entry: HistoryEntry) -> list[HistoryEntry]:
        with self._connect() as conn:
            return HistoryRepository(conn).append(entry)

    def read_all(self) -> list[HistoryEntry]:
        with self._connect() as conn:
            return HistoryRepository(conn).read_all()

    def initialize(self) -> None:
        """Create the history schema if needed.  Idempotent."""
        with get_connection(
            self.db_path,
            wal_mode=self.wal_mode,
            busy_timeout_ms=self.busy_timeout_ms,
        ) as conn:
            apply_schema(conn)
        self._schema_ready = True
        logger.debug("History schema ready at %s", self.db_path)

    def _connect(self):
        if not self._schema_ready:
            self.initialize()
        return get_connection(
            self.db_path,
            wal_mode=self.wal_mode,
            busy_timeout_ms=self.busy_timeout_ms,
        )
