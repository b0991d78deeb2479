"""Atomic batch insertion of parsed exam results."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Tuple

from transform.line_parser import ParsedLine, ParseFailure, ResultRecord
from .errors import PersistenceError, TransactionFinalizeError
from .transaction import TransactionHandle

logger = logging.getLogger(__name__)

INSERT_RESULT_SQL = """
    INSERT INTO grade_results (student_id, exam_event_id, grade, transaction_id)
    VALUES (?, ?, ?, ?)
"""


class CommitPolicy(Enum):
    STRICT = "strict"
    BEST_EFFORT = "best_effort"


class CommitState(Enum):
    COMMITTED = "committed"
    ABORTED = "aborted"


@dataclass(frozen=True)
class Outcome:
    committed_count: int
    failures: Tuple[ParseFailure, ...]
    state: CommitState

    @property
    def committed(self) -> bool:
        return self.state is CommitState.COMMITTED

    @property
    def ok(self) -> bool:
        return self.committed and not self.failures


class GradeWriter:
    """
    Persists one submission of parsed lines under a single transaction handle.

    Transaction strategy: one transaction per submission. Exactly one of
    handle.commit() or handle.abort() is called per insert_grades() call.

    - STRICT: any parse failure aborts the submission and nothing is inserted.
    - BEST_EFFORT: parsed records are committed, failures are reported.

    A store error while staging or flushing aborts the whole submission under
    either policy and is raised as PersistenceError. A failing commit() or
    abort() is raised as TransactionFinalizeError.
    """

    def __init__(self, policy: CommitPolicy = CommitPolicy.STRICT):
        self.policy = policy

    def insert_grades(self, records: Iterable[ParsedLine], handle: TransactionHandle) -> Outcome:
        transaction_id = handle.transaction_id

        try:
            staged, failures = self._partition(records)
        except BaseException:
            self._abort(handle, [])
            raise

        if failures and self.policy is CommitPolicy.STRICT:
            logger.warning(
                f"Transaction {transaction_id}: {len(failures)} unparsable line(s), "
                f"aborting submission of {len(staged) + len(failures)} lines"
            )
            return self._abort(handle, failures)

        if not staged:
            logger.info(f"Transaction {transaction_id}: nothing to insert, aborting")
            return self._abort(handle, failures)

        try:
            rows = self._stage(staged, transaction_id)
        except BaseException:
            self._abort(handle, failures)
            raise

        try:
            cursor = handle.cursor()
            cursor.executemany(INSERT_RESULT_SQL, rows)
        except BaseException as e:
            outcome = self._abort(handle, failures, cause=e)
            if not isinstance(e, Exception):
                raise
            raise PersistenceError(
                f"Transaction {transaction_id}: insert of {len(staged)} results failed: {e}",
                outcome=outcome
            ) from e

        try:
            handle.commit()
        except Exception as e:
            logger.error(f"Transaction {transaction_id}: commit failed, state unknown: {e}")
            raise TransactionFinalizeError(
                f"Commit of transaction {transaction_id} failed: {e}",
                transaction_id=transaction_id,
                committed=True
            ) from e

        logger.info(
            f"Transaction {transaction_id}: committed {len(staged)} results, "
            f"{len(failures)} line(s) rejected"
        )
        return Outcome(committed_count=len(staged), failures=tuple(failures), state=CommitState.COMMITTED)

    def _partition(self, records: Iterable[ParsedLine]) -> Tuple[List[ResultRecord], List[ParseFailure]]:
        staged = []
        failures = []
        for record in records:
            if isinstance(record, ParseFailure):
                failures.append(record)
            elif isinstance(record, ResultRecord):
                staged.append(record)
            else:
                raise TypeError(f"Expected ResultRecord or ParseFailure, got {type(record).__name__}")
        return staged, failures

    def _stage(self, records: List[ResultRecord], transaction_id: int) -> List[tuple]:
        rows = []
        for record in records:
            if record.transaction_id != transaction_id:
                raise ValueError(
                    f"Record for student {record.student_id} carries transaction "
                    f"{record.transaction_id}, expected {transaction_id}"
                )
            rows.append(record.as_row())
        return rows

    def _abort(self, handle: TransactionHandle, failures: List[ParseFailure], cause: BaseException = None) -> Outcome:
        transaction_id = handle.transaction_id
        try:
            handle.abort()
        except Exception as e:
            logger.error(f"Transaction {transaction_id}: abort failed, state unknown: {e}")
            detail = f" after: {cause}" if cause is not None else ""
            raise TransactionFinalizeError(
                f"Abort of transaction {transaction_id} failed: {e}{detail}",
                transaction_id=transaction_id,
                committed=False
            ) from e

        if cause is not None:
            logger.error(f"Transaction {transaction_id}: aborted after error: {cause}")
        return Outcome(committed_count=0, failures=tuple(failures), state=CommitState.ABORTED)

    def __repr__(self) -> str:
        return f"GradeWriter(policy={self.policy.value})"
