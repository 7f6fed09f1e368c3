"""
Patch Applier

Replays a parsed FileDiff against one side of a change to rebuild
the other side.
"""

import logging
from typing import List

from ..models.diff import DiffLine, FileDiff
from .engine import split_lines


logger = logging.getLogger(__name__)


class PatchApplyError(ValueError):
    """Raised when hunk lines do not match the text they are applied to."""

    def __init__(self, message: str, hunk_index: int, line_number: int):
        super().__init__(message)
        self.hunk_index = hunk_index
        self.line_number = line_number


def apply_file_diff(text: str, file_diff: FileDiff, reverse: bool = False) -> str:
    """
    Apply a FileDiff to text.

    Args:
        text: Old file content (or new content when ``reverse`` is set)
        file_diff: Parsed FileDiff
        reverse: Rebuild the old side from the new side instead

    Returns:
        The other side of the change

    Raises:
        PatchApplyError: If a context or removed line does not match
    """
    source = split_lines(text)
    result: List[str] = []
    cursor = 0

    for hunk_index, hunk in enumerate(file_diff.hunks):
        start = hunk.new_start if reverse else hunk.old_start
        count = hunk.new_count if reverse else hunk.old_count
        index = start - 1 if count else start

        if index < cursor:
            raise PatchApplyError(f"Hunk {hunk_index} overlaps the previous hunk", hunk_index, start)

        result.extend(source[cursor:index])
        cursor = index

        for line in hunk.lines:
            consumes = line.in_new if reverse else line.in_old
            produces = line.in_old if reverse else line.in_new
            expected = _line_text(line)

            if consumes:
                if cursor >= len(source) or source[cursor] != expected:
                    raise PatchApplyError(
                        f"Hunk {hunk_index} does not match at line {cursor + 1}",
                        hunk_index,
                        cursor + 1,
                    )
                cursor += 1
            if produces:
                result.append(expected)

    result.extend(source[cursor:])
    logger.debug(f"Applied {len(file_diff.hunks)} hunks to {file_diff.path or 'text'}")
    return ''.join(result)


def reverse_file_diff(text: str, file_diff: FileDiff) -> str:
    """Rebuild the old side of a change from its new side."""
    return apply_file_diff(text, file_diff, reverse=True)


def _line_text(line: DiffLine) -> str:
    if line.missing_newline:
        return line.content
    return f"{line.content}\n"
