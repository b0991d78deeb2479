#!/usr/bin/env python3
"""
Unit tests for the exam result line parser.
"""

import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from transform.line_parser import LineParser, MissingField, ParseFailure, ResultRecord, grade_to_fixed_point

EXAM_EVENT_ID = 5
TRANSACTION_ID = 42


def make_parser():
    return LineParser(EXAM_EVENT_ID, TRANSACTION_ID)


@pytest.mark.parametrize("line, student_id, grade", [
    ("1234567   7,7", 1234567, 77),
    ("1234567\t10", 1234567, 100),
    ("1234567 8", 1234567, 80),
    ("1234567 1.0", 1234567, 10),
    ("1234567  A  B  7,7", 1234567, 77),
    ("7654321 name 9", 7654321, 90),
    ("Smith, John 2011 1234567 group-3 9.9", 1234567, 99),
    ("1234567 8  \n", 1234567, 80),
])
def test_valid_lines(line, student_id, grade):
    record = make_parser().parse_line(line)

    assert isinstance(record, ResultRecord), f"Expected a record for {line!r}, got {record}"
    assert record.student_id == student_id
    assert record.grade == grade
    assert record.exam_event_id == EXAM_EVENT_ID
    assert record.transaction_id == TRANSACTION_ID


def test_first_seven_digit_token_is_student_id():
    record = make_parser().parse_line("2345678 1234567 6")
    assert record.student_id == 2345678

    # 8 digits are not a student id, the following 7-digit token is
    record = make_parser().parse_line("12345678 7654321 6")
    assert record.student_id == 7654321


@pytest.mark.parametrize("line", [
    "1234567 10.5",
    "1234567 10,0",
    "1234567 11",
    "1234567 0",
    "1234567 0,5",
    "1234567 7,75",
    "1234567 7;7",
    "1234567 8x",
])
def test_out_of_range_or_malformed_grade_is_rejected(line):
    failure = make_parser().parse_line(line)

    assert isinstance(failure, ParseFailure), f"Accepted invalid grade in {line!r}"
    assert failure.reason is MissingField.GRADE
    assert failure.line == line


@pytest.mark.parametrize("line, reason", [
    ("badline", MissingField.NEITHER),
    ("", MissingField.NEITHER),
    ("   ", MissingField.NEITHER),
    ("Student  Name  Grade", MissingField.NEITHER),
    ("123456 8", MissingField.STUDENT_ID),
    ("Smith 7,5", MissingField.STUDENT_ID),
    ("0000000 7", MissingField.STUDENT_ID),
    ("1234567", MissingField.GRADE),
    ("1234567 Smith", MissingField.GRADE),
    ("1234567 8 absent", MissingField.MALFORMED),
    ("8 1234567", MissingField.MALFORMED),
])
def test_failure_classification(line, reason):
    failure = make_parser().parse_line(line)

    assert isinstance(failure, ParseFailure)
    assert failure.reason is reason, f"{line!r}: expected {reason}, got {failure.reason}"


def test_parsing_is_idempotent():
    parser = make_parser()
    for line in ["1234567 7,7", "badline", "1234567 8 absent", "1234567 10.5"]:
        first = parser.parse_line(line)
        second = parser.parse_line(line)
        assert first == second

    assert LineParser(EXAM_EVENT_ID, TRANSACTION_ID).parse_line("1234567 7,7") == parser.parse_line("1234567 7,7")


def test_parse_lines_numbers_failures():
    results = make_parser().parse_lines(["1234567 8", "badline", "", "7654321 6,5"])

    assert len(results) == 4
    assert isinstance(results[0], ResultRecord)
    assert results[1] == ParseFailure(line="badline", reason=MissingField.NEITHER, line_number=2)
    assert results[2] == ParseFailure(line="", reason=MissingField.NEITHER, line_number=3)
    assert results[3].grade == 65


def test_grade_to_fixed_point_truncates():
    assert grade_to_fixed_point("7,7") == 77
    assert grade_to_fixed_point("4.1") == 41
    assert grade_to_fixed_point("8") == 80
    assert grade_to_fixed_point("10") == 100


def test_result_record_rejects_invalid_fields():
    with pytest.raises(ValueError):
        ResultRecord(student_id=0, exam_event_id=1, grade=50, transaction_id=1)
    with pytest.raises(ValueError):
        ResultRecord(student_id=12345678, exam_event_id=1, grade=50, transaction_id=1)
    with pytest.raises(ValueError):
        ResultRecord(student_id=1234567, exam_event_id=1, grade=9, transaction_id=1)
    with pytest.raises(ValueError):
        ResultRecord(student_id=1234567, exam_event_id=1, grade=101, transaction_id=1)
    with pytest.raises(ValueError):
        ResultRecord(student_id=1234567, exam_event_id="1", grade=50, transaction_id=1)
    with pytest.raises(ValueError):
        ResultRecord(student_id=1234567, exam_event_id=5, grade=77.5, transaction_id=42)
    with pytest.raises(ValueError):
        ResultRecord(student_id=True, exam_event_id=5, grade=77, transaction_id=42)
    with pytest.raises(ValueError):
        ResultRecord(student_id=1234567, exam_event_id=5, grade=77, transaction_id=42.0)


def test_parse_failure_str():
    failure = ParseFailure(line="badline", reason=MissingField.NEITHER, line_number=2)
    assert str(failure) == "line 2: neither found: 'badline'"


@pytest.mark.parametrize("line, reason", [
    ("١٢٣٤٥٦٧ 8", MissingField.STUDENT_ID),
    ("１２３４５６７ 8", MissingField.STUDENT_ID),
    ("1234567 7,٧", MissingField.GRADE),
    ("1234567 ٨", MissingField.GRADE),
])
def test_non_ascii_digits_are_rejected(line, reason):
    failure = make_parser().parse_line(line)

    assert isinstance(failure, ParseFailure), f"Accepted non-ASCII digits in {line!r}"
    assert failure.reason is reason


def test_failure_keeps_line_as_submitted():
    failure = make_parser().parse_line("1234567 8 absent  \n", line_number=3)

    assert failure.line == "1234567 8 absent  \n"
    assert failure.reason is MissingField.MALFORMED
