"""
Load module - Atomic persistence of exam results

Components for loading parsed results into SQLite:
- ResultsDatabase: Connection ownership and transaction factory
- SQLiteTransaction: Transaction handle (commit / abort / transaction_id)
- GradeWriter: All-or-nothing batch insertion of one submission
"""

from .db_writer import ResultsDatabase
from .errors import PersistenceError, TransactionFinalizeError
from .grade_writer import CommitPolicy, CommitState, GradeWriter, Outcome
from .transaction import SQLiteTransaction, TransactionHandle, TransactionState

__all__ = [
    "CommitPolicy",
    "CommitState",
    "GradeWriter",
    "Outcome",
    "PersistenceError",
    "ResultsDatabase",
    "SQLiteTransaction",
    "TransactionFinalizeError",
    "TransactionHandle",
    "TransactionState",
]
