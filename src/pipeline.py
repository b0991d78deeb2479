#!/usr/bin/env python3
"""
Exam Result Ingest Pipeline

Reads one results file, parses every line, and commits the parsed grades
as a single transaction. Parse failures are logged and reported.
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Sequence

from config import ConfigManager
from extract.line_reader import read_result_lines
from transform.line_parser import LineParser, ParseFailure
from load.db_writer import ResultsDatabase
from load.errors import PersistenceError, TransactionFinalizeError
from load.grade_writer import CommitPolicy, GradeWriter, Outcome

logger = logging.getLogger(__name__)


def setup_logging() -> None:
    Path("logs").mkdir(exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler('logs/pipeline.log'),
            logging.StreamHandler(sys.stdout)
        ]
    )


class Pipeline:
    """
    Orchestrates one submission: extract lines, parse, load atomically.

    Handles:
    - Exam event check (before any transaction is opened)
    - One transaction per submission, stamped with the configured user
    - Failure log of rejected lines
    """

    def __init__(self, config_path: str = "settings.yaml"):
        self.config = ConfigManager(config_path)
        self.writer = GradeWriter(CommitPolicy(self.config.policy))
        self.failure_log_path = Path(self.config.failure_log)

    def run(self, results_path: str, exam_event_id: int) -> Outcome:
        logger.info(f"Starting ingest of {results_path} for exam event {exam_event_id}")
        logger.info(f"Commit policy: {self.writer.policy.value}")

        lines = read_result_lines(results_path, encoding=self.config.encoding)

        with ResultsDatabase(self.config.database_path) as db:
            if not db.exam_event_exists(exam_event_id):
                raise ValueError(f"Unknown exam event: {exam_event_id}")

            handle = db.begin_transaction(self.config.user_id)
            parser = LineParser(exam_event_id, handle.transaction_id)
            try:
                outcome = self.writer.insert_grades(parser.parse_lines(lines), handle)
            except PersistenceError as e:
                logger.error(f"Transaction {handle.transaction_id}: insert failed: {e}")
                self._report(lines, e.outcome, handle.transaction_id)
                raise

        self._report(lines, outcome, handle.transaction_id)
        return outcome

    def _report(self, lines: Sequence[str], outcome: Outcome, transaction_id: int) -> None:
        if outcome.failures:
            self._log_failures(outcome.failures)

        logger.info("=== Ingest Complete ===")
        logger.info(f"Lines read: {len(lines)}")
        logger.info(f"Results committed: {outcome.committed_count}")
        logger.info(f"Lines rejected: {len(outcome.failures)}")
        logger.info(f"Transaction {transaction_id}: {outcome.state.value}")

        if outcome.failures:
            logger.info(f"Rejected lines logged to: {self.failure_log_path}")

    def _log_failures(self, failures: Sequence[ParseFailure]) -> None:
        self.failure_log_path.parent.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().isoformat()
        with open(self.failure_log_path, 'a') as f:
            for failure in failures:
                line = failure.line.rstrip('\r\n')
                f.write(f"{timestamp}\t{failure.line_number}\t{failure.reason.value}\t{line}\n")


def main(argv: Sequence[str]) -> int:
    usage = f"Usage: {argv[0]} RESULTS_FILE EXAM_EVENT_ID"
    if len(argv) != 3:
        print(usage, file=sys.stderr)
        return 2

    try:
        exam_event_id = int(argv[2])
    except ValueError:
        print(f"EXAM_EVENT_ID must be an integer, got {argv[2]!r}\n{usage}", file=sys.stderr)
        return 2

    setup_logging()
    try:
        outcome = Pipeline().run(argv[1], exam_event_id)
    except PersistenceError as e:
        logger.error(f"Ingest aborted: {e}")
        return 1
    except TransactionFinalizeError as e:
        logger.error(f"Transaction {e.transaction_id} end state unknown: {e}")
        return 1
    return 0 if outcome.ok else 1


if __name__ == "__main__":
    sys.exit(main(sys.argv))
