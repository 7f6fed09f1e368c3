"""
Change-Set Extractor

Maps a parsed FileDiff to the line numbers it touches.
"""

from typing import List

from ..models.diff import FileDiff, LineKind


def changed_lines(file_diff: FileDiff) -> List[int]:
    """
    Get new-file line numbers of added lines.

    Each hunk is walked with its own cursor starting at ``new_start``;
    removed lines neither advance the cursor nor appear in the result.

    Args:
        file_diff: Parsed FileDiff

    Returns:
        Strictly increasing list of 1-based line numbers
    """
    lines = []
    for hunk in file_diff.hunks:
        line_no = hunk.new_start
        for line in hunk.lines:
            if line.kind is LineKind.ADDED:
                lines.append(line_no)
                line_no += 1
            elif line.kind is LineKind.CONTEXT:
                line_no += 1
    return lines


def removed_line_numbers(file_diff: FileDiff) -> List[int]:
    """Get old-file line numbers of removed lines."""
    lines = []
    for hunk in file_diff.hunks:
        line_no = hunk.old_start
        for line in hunk.lines:
            if line.kind is LineKind.REMOVED:
                lines.append(line_no)
                line_no += 1
            elif line.kind is LineKind.CONTEXT:
                line_no += 1
    return lines
