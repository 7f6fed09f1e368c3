"""
Diff Layer

This module provides unified diff rendering and parsing,
changed line extraction, and patch application.
"""

from .engine import DiffEngine, MalformedDiffError, split_lines
from .changes import changed_lines, removed_line_numbers
from .patch import apply_file_diff, reverse_file_diff, PatchApplyError

__all__ = [
    'DiffEngine',
    'MalformedDiffError',
    'split_lines',
    'changed_lines',
    'removed_line_numbers',
    'apply_file_diff',
    'reverse_file_diff',
    'PatchApplyError',
]
