"""Persistence error types raised by the load layer."""


class PersistenceError(Exception):
    """
    The store rejected a staged insert, the batch flush, or a finalize call.

    When raised by GradeWriter the transaction has already been aborted and
    `outcome` describes the aborted submission.
    """

    def __init__(self, message: str, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class TransactionFinalizeError(Exception):
    """
    commit() or abort() itself failed, so the end state of the transaction is unknown.

    `committed` is True when commit() was the call that failed.
    """

    def __init__(self, message: str, transaction_id: int, committed: bool):
        super().__init__(message)
        self.transaction_id = transaction_id
        self.committed = committed
