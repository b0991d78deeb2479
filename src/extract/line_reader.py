"""Reads raw exam result submissions from text files."""

import logging
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def read_result_lines(path: str, encoding: str = "utf-8") -> List[str]:
    """
    Read a results file into a list of lines without line terminators.

    Every line is kept, blank ones included; deciding what a line means is the
    parser's job.
    """
    results_path = Path(path)
    if not results_path.exists():
        raise FileNotFoundError(f"Results file not found: {results_path}")

    lines = results_path.read_text(encoding=encoding).splitlines()
    logger.info(f"Read {len(lines)} lines from {results_path}")
    return lines
