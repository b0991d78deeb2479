"""SQLite connection management for the exam results database."""

import logging
import sqlite3
from datetime import date
from pathlib import Path
from typing import Optional, Set, Tuple

from .transaction import SQLiteTransaction

logger = logging.getLogger(__name__)


class ResultsDatabase:
    """
    Owns the SQLite connection and hands out one transaction at a time.

    The connection runs in manual transaction mode (isolation_level=None), so
    every transaction is an explicit BEGIN issued by SQLiteTransaction.begin().
    """

    def __init__(self, db_path: str):
        self.db_path = Path(db_path) if db_path != ":memory:" else db_path
        self.conn: Optional[sqlite3.Connection] = None

    def connect(self) -> None:
        if isinstance(self.db_path, Path) and not self.db_path.exists():
            raise FileNotFoundError(f"Database not found: {self.db_path}")

        self.conn = sqlite3.connect(str(self.db_path), isolation_level=None)
        self.conn.execute("PRAGMA foreign_keys = ON")
        logger.info(f"Connected to database: {self.db_path}")

    def create_schema(self, schema_path: str) -> None:
        """Apply a DDL script, e.g. data/schema.sql, to the connected database."""
        self._ensure_connected()
        with open(schema_path, 'r') as f:
            self.conn.executescript(f.read())

    def begin_transaction(self, user_id: int, transaction_date: Optional[date] = None) -> SQLiteTransaction:
        self._ensure_connected()
        return SQLiteTransaction.begin(self.conn, user_id, transaction_date)

    def exam_event_exists(self, exam_event_id: int) -> bool:
        self._ensure_connected()
        cursor = self.conn.execute(
            "SELECT 1 FROM exam_events WHERE exam_event_id = ?", (exam_event_id,)
        )
        return cursor.fetchone() is not None

    def get_results(self, transaction_id: int) -> Set[Tuple[int, int, int, int]]:
        """
        Get the committed grade rows of one transaction.

        Returns a set since row order within a submission is not defined.
        """
        self._ensure_connected()
        cursor = self.conn.execute("""
            SELECT student_id, exam_event_id, grade, transaction_id
            FROM grade_results WHERE transaction_id = ?
        """, (transaction_id,))
        return {tuple(row) for row in cursor.fetchall()}

    def _ensure_connected(self) -> None:
        if not self.conn:
            raise RuntimeError("Not connected to database. Call connect() first.")

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None
            logger.info("Database connection closed")

    def __enter__(self):
        """Context manager entry."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def __repr__(self) -> str:
        return f"ResultsDatabase(db_path={self.db_path})"
