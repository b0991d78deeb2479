"""Exam result line parser using pure functions over a fixed submission context."""

import logging
import re
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterable, List, Optional, Union

logger = logging.getLogger(__name__)

STUDENT_ID_PATTERN = re.compile(r'(?<!\d)(?!0{7})(\d{7})(?!\d)', re.ASCII)
# A grade-shaped token anywhere in the line, used only for classification
GRADE_TOKEN_PATTERN = re.compile(r'(?:^|\s)(10|[1-9](?:[.,]\d)?)(?=\s|$)', re.ASCII)
TRAILING_GRADE_PATTERN = re.compile(r'(?:^|\s)(10|[1-9](?:[.,]\d)?)$', re.ASCII)

MIN_GRADE = 10
MAX_GRADE = 100


class MissingField(Enum):
    NEITHER = "neither found"
    STUDENT_ID = "student id missing"
    GRADE = "grade missing"
    MALFORMED = "malformed line"


@dataclass(frozen=True)
class ResultRecord:
    student_id: int
    exam_event_id: int
    grade: int
    transaction_id: int

    def __post_init__(self):
        for name in ("student_id", "exam_event_id", "grade", "transaction_id"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool):
                raise ValueError(f"{name} must be an integer, got {value!r}")
        if not 0 < self.student_id <= 9_999_999:
            raise ValueError(f"student_id must be a 7-digit positive integer, got {self.student_id}")
        if not MIN_GRADE <= self.grade <= MAX_GRADE:
            raise ValueError(f"grade must be within {MIN_GRADE}-{MAX_GRADE}, got {self.grade}")

    def as_row(self) -> tuple:
        return (self.student_id, self.exam_event_id, self.grade, self.transaction_id)


@dataclass(frozen=True)
class ParseFailure:
    line: str
    reason: MissingField
    line_number: Optional[int] = None

    def __str__(self) -> str:
        where = f"line {self.line_number}" if self.line_number is not None else "line"
        return f"{where}: {self.reason.value}: {self.line!r}"


ParsedLine = Union[ResultRecord, ParseFailure]


def grade_to_fixed_point(token: str) -> int:
    """Convert a grade token ('7,7', '8', '10') to tenths, truncating."""
    return int(Decimal(token.replace(',', '.')) * 10)


def classify_failure(line: str) -> MissingField:
    has_id = STUDENT_ID_PATTERN.search(line) is not None
    has_grade = GRADE_TOKEN_PATTERN.search(line) is not None

    if not has_id and not has_grade:
        return MissingField.NEITHER
    if not has_id:
        return MissingField.STUDENT_ID
    if not has_grade:
        return MissingField.GRADE
    return MissingField.MALFORMED


class LineParser:
    """
    Turns raw result lines into ResultRecords for one submission.

    exam_event_id and transaction_id are constant for the submission and are
    stamped onto every record; nothing else is carried between calls.
    """

    def __init__(self, exam_event_id: int, transaction_id: int):
        self.exam_event_id = exam_event_id
        self.transaction_id = transaction_id

    def parse_line(self, line: str, line_number: Optional[int] = None) -> ParsedLine:
        """Failures keep the line exactly as submitted; matching ignores trailing whitespace."""
        text = line.rstrip()

        id_match = STUDENT_ID_PATTERN.search(text)
        grade_match = TRAILING_GRADE_PATTERN.search(text)

        if id_match is None or grade_match is None:
            failure = ParseFailure(line=line, reason=classify_failure(text), line_number=line_number)
            logger.warning(f"Rejected {failure}")
            return failure

        return ResultRecord(
            student_id=int(id_match.group(1)),
            exam_event_id=self.exam_event_id,
            grade=grade_to_fixed_point(grade_match.group(1)),
            transaction_id=self.transaction_id
        )

    def parse_lines(self, lines: Iterable[str]) -> List[ParsedLine]:
        """Parse a whole submission in order. Blank lines are reported, not skipped."""
        return [self.parse_line(line, line_number) for line_number, line in enumerate(lines, start=1)]

    def __repr__(self) -> str:
        return f"LineParser(exam_event_id={self.exam_event_id}, transaction_id={self.transaction_id})"
