"""
Extract module - Raw result submissions

Components for reading exam result lines supplied by examiners:
- read_result_lines: One submission per text file
"""

from .line_reader import read_result_lines

__all__ = [
    "read_result_lines",
]
