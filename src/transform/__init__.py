from .line_parser import (
    LineParser,
    MissingField,
    ParseFailure,
    ParsedLine,
    ResultRecord,
    classify_failure,
    grade_to_fixed_point,
)

__all__ = [
    "LineParser",
    "MissingField",
    "ParseFailure",
    "ParsedLine",
    "ResultRecord",
    "classify_failure",
    "grade_to_fixed_point",
]
