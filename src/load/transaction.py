"""Transaction handle interface and its SQLite implementation."""

import logging
import sqlite3
from datetime import date
from enum import Enum
from typing import Optional, Protocol

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class TransactionState(Enum):
    OPEN = "open"
    COMMITTED = "committed"
    ABORTED = "aborted"


class TransactionHandle(Protocol):
    """What GradeWriter needs from one open transaction."""

    transaction_id: int

    def cursor(self): ...

    def commit(self) -> None: ...

    def abort(self) -> None: ...


class SQLiteTransaction:
    """
    One open transaction on a SQLite connection in manual transaction mode.

    begin() issues BEGIN and inserts the transaction audit record inside the
    same transaction, so aborting also discards the audit record.
    commit() and abort() each end the transaction on every path and may be
    called at most once between them.
    """

    def __init__(self, conn: sqlite3.Connection, transaction_id: int):
        self.conn = conn
        self.transaction_id = transaction_id
        self.state = TransactionState.OPEN

    @classmethod
    def begin(cls, conn: sqlite3.Connection, user_id: int, transaction_date: Optional[date] = None) -> "SQLiteTransaction":
        if conn.in_transaction:
            raise RuntimeError("Connection already has a transaction in progress")

        transaction_date = transaction_date or date.today()
        try:
            conn.execute("BEGIN")
            cursor = conn.execute(
                "INSERT INTO transactions (user_id, transaction_date) VALUES (?, ?)",
                (user_id, transaction_date.isoformat())
            )
        except sqlite3.Error as e:
            if conn.in_transaction:
                conn.rollback()
            raise PersistenceError(f"Failed to open transaction for user {user_id}: {e}") from e

        handle = cls(conn, cursor.lastrowid)
        logger.debug(f"Opened transaction {handle.transaction_id} for user {user_id}")
        return handle

    def cursor(self) -> sqlite3.Cursor:
        self._ensure_open()
        return self.conn.cursor()

    def commit(self) -> None:
        self._ensure_open()
        try:
            self.conn.commit()
            self.state = TransactionState.COMMITTED
        except sqlite3.Error as e:
            self._release()
            raise PersistenceError(f"Commit of transaction {self.transaction_id} failed: {e}") from e
        logger.debug(f"Committed transaction {self.transaction_id}")

    def abort(self) -> None:
        self._ensure_open()
        try:
            self.conn.rollback()
        except sqlite3.Error as e:
            raise PersistenceError(f"Rollback of transaction {self.transaction_id} failed: {e}") from e
        finally:
            self.state = TransactionState.ABORTED
        logger.debug(f"Aborted transaction {self.transaction_id}")

    def _release(self) -> None:
        # A failed COMMIT can leave SQLite inside the transaction
        try:
            if self.conn.in_transaction:
                self.conn.rollback()
        except sqlite3.Error as e:
            logger.error(f"Could not release transaction {self.transaction_id}: {e}")
        self.state = TransactionState.ABORTED

    def _ensure_open(self) -> None:
        if self.state is not TransactionState.OPEN:
            raise RuntimeError(f"Transaction {self.transaction_id} is already {self.state.value}")

    def __repr__(self) -> str:
        return f"SQLiteTransaction(transaction_id={self.transaction_id}, state={self.state.value})"
