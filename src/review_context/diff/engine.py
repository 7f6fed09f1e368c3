"""
Diff Engine

Computes line-level diffs between two text blobs and renders/parses
the unified diff text format (``diff -u`` / git style).
"""

import re
import difflib
import logging
from typing import List, Optional, Tuple

from ..models.diff import NULL_PATH, LineKind, DiffLine, Hunk, FileDiff


logger = logging.getLogger(__name__)

NO_NEWLINE_MARKER = "\\ No newline at end of file"

_LINE_PATTERN = re.compile(r'[^\n]*\n|[^\n]+$')


class MalformedDiffError(ValueError):
    """Raised when a hunk header does not follow the unified diff grammar."""

    def __init__(self, message: str, line_number: Optional[int] = None, line: Optional[str] = None):
        super().__init__(message)
        self.line_number = line_number
        self.line = line


def split_lines(text: str) -> List[str]:
    """
    Split text on ``\\n`` only, keeping the terminators.

    ``str.splitlines`` also breaks on ``\\r`` and other separators, which
    would change line numbering for files with stray carriage returns.
    """
    return _LINE_PATTERN.findall(text)


class DiffEngine:
    """
    Renders and parses unified diffs for exactly two text blobs.

    Rendering is deterministic: the same inputs always give byte-identical
    output. Parsing tolerates several file sections in one blob and
    treats unknown hunk line markers as context.
    """

    def __init__(self, context_lines: int = 5, old_label: str = "base", new_label: str = "branch"):
        """
        Initialize diff engine.

        Args:
            context_lines: Unchanged lines kept around each change
            old_label: Default label written after the old path
            new_label: Default label written after the new path
        """
        if context_lines < 0:
            raise ValueError("context_lines must be non-negative")
        self.context_lines = context_lines
        self.old_label = old_label
        self.new_label = new_label
        self.hunk_header_pattern = re.compile(r'^@@\s*-(\d+)(?:,(\d+))?\s*\+(\d+)(?:,(\d+))?\s*@@(.*)$')

    def render(
        self,
        old_text: str,
        new_text: str,
        file_path: str,
        old_label: Optional[str] = None,
        new_label: Optional[str] = None,
        context_lines: Optional[int] = None
    ) -> str:
        """
        Render a unified diff between two versions of a file.

        Args:
            old_text: Previous file content
            new_text: New file content
            file_path: Repository-relative path written into the headers
            old_label: Label for the old side (defaults to engine setting)
            new_label: Label for the new side (defaults to engine setting)
            context_lines: Context window override

        Returns:
            Unified diff text; only the two header lines when texts are equal
        """
        if context_lines is None:
            context_lines = self.context_lines
        old_label = self.old_label if old_label is None else old_label
        new_label = self.new_label if new_label is None else new_label

        old_lines = split_lines(old_text)
        new_lines = split_lines(new_text)

        old_path = f"a/{file_path}" if old_text else NULL_PATH
        new_path = f"b/{file_path}" if new_text else NULL_PATH

        output = [
            self._file_header('---', old_path, old_label),
            self._file_header('+++', new_path, new_label),
        ]

        if old_lines == new_lines:
            return ''.join(output)

        matcher = difflib.SequenceMatcher(None, old_lines, new_lines, autojunk=False)
        hunk_count = 0
        for group in matcher.get_grouped_opcodes(context_lines):
            old_first, old_last = group[0][1], group[-1][2]
            new_first, new_last = group[0][3], group[-1][4]
            output.append(
                f"@@ -{self._range_start(old_first, old_last)},{old_last - old_first} "
                f"+{self._range_start(new_first, new_last)},{new_last - new_first} @@\n"
            )

            for tag, i1, i2, j1, j2 in group:
                if tag == 'equal':
                    for line in old_lines[i1:i2]:
                        output.extend(self._body_line(' ', line))
                    continue
                if tag in ('replace', 'delete'):
                    for line in old_lines[i1:i2]:
                        output.extend(self._body_line('-', line))
                if tag in ('replace', 'insert'):
                    for line in new_lines[j1:j2]:
                        output.extend(self._body_line('+', line))
            hunk_count += 1

        logger.debug(f"Rendered diff for {file_path}: {hunk_count} hunks")
        return ''.join(output)

    def parse(self, diff_text: str) -> List[FileDiff]:
        """
        Parse unified diff text into FileDiff objects.

        Args:
            diff_text: Unified diff text, possibly with several file sections

        Returns:
            List of FileDiff objects in input order

        Raises:
            MalformedDiffError: If a hunk header cannot be parsed
        """
        lines = split_lines(diff_text)
        file_diffs: List[FileDiff] = []
        section_starts: List[int] = []

        current: Optional[FileDiff] = None
        hunk: Optional[Hunk] = None
        old_remaining = 0
        new_remaining = 0
        preamble_start: Optional[int] = None

        i = 0
        while i < len(lines):
            line = lines[i][:-1] if lines[i].endswith('\n') else lines[i]

            if line.startswith('\\'):
                # Applies to the line just before it
                if hunk is not None and hunk.lines:
                    hunk.lines[-1].missing_newline = True
                i += 1
                continue

            if hunk is not None and (old_remaining > 0 or new_remaining > 0):
                marker = line[:1]
                if marker == '+':
                    kind = LineKind.ADDED
                    new_remaining -= 1
                elif marker == '-':
                    kind = LineKind.REMOVED
                    old_remaining -= 1
                else:
                    kind = LineKind.CONTEXT
                    old_remaining -= 1
                    new_remaining -= 1
                hunk.lines.append(DiffLine(kind=kind, content=line[1:]))
                i += 1
                continue

            if line.startswith('@@'):
                header_match = self.hunk_header_pattern.match(line)
                if not header_match:
                    raise MalformedDiffError(f"Invalid hunk header at line {i + 1}: {line!r}", i + 1, line)

                if current is None:
                    current = FileDiff(old_path='', new_path='')
                    file_diffs.append(current)
                    section_starts.append(preamble_start if preamble_start is not None else i)
                    preamble_start = None

                old_count = int(header_match.group(2)) if header_match.group(2) is not None else 1
                new_count = int(header_match.group(4)) if header_match.group(4) is not None else 1
                hunk = Hunk(
                    old_start=int(header_match.group(1)),
                    old_count=old_count,
                    new_start=int(header_match.group(3)),
                    new_count=new_count,
                )
                current.hunks.append(hunk)
                old_remaining = old_count
                new_remaining = new_count
                i += 1
                continue

            if line.startswith('--- ') and i + 1 < len(lines) and lines[i + 1].startswith('+++ '):
                old_path, old_label = self._split_file_header(line[4:])
                new_path, new_label = self._split_file_header(lines[i + 1].rstrip('\n')[4:])
                current = FileDiff(
                    old_path=old_path,
                    new_path=new_path,
                    old_label=old_label,
                    new_label=new_label,
                )
                file_diffs.append(current)
                section_starts.append(preamble_start if preamble_start is not None else i)
                preamble_start = None
                hunk = None
                i += 2
                continue

            if line.startswith(('diff ', 'Index: ', '====')):
                if preamble_start is None:
                    preamble_start = i
                hunk = None

            i += 1

        # Slice the raw text of each section
        boundaries = section_starts[1:] + [len(lines)]
        for file_diff, start, end in zip(file_diffs, section_starts, boundaries):
            file_diff.unified_diff = ''.join(lines[start:end])

        logger.debug(f"Parsed {len(file_diffs)} file diffs")
        return file_diffs

    def diff(self, old_text: str, new_text: str, file_path: str, **kwargs) -> FileDiff:
        """Render and parse in one step, returning the single FileDiff."""
        return self.parse(self.render(old_text, new_text, file_path, **kwargs))[0]

    @staticmethod
    def _range_start(first: int, last: int) -> int:
        # Empty ranges point at the line before the change
        return first + 1 if last > first else first

    @staticmethod
    def _file_header(prefix: str, path: str, label: str) -> str:
        if label:
            return f"{prefix} {path}\t{label}\n"
        return f"{prefix} {path}\n"

    @staticmethod
    def _body_line(marker: str, line: str) -> List[str]:
        if line.endswith('\n'):
            return [f"{marker}{line}"]
        return [f"{marker}{line}\n", f"{NO_NEWLINE_MARKER}\n"]

    @staticmethod
    def _split_file_header(value: str) -> Tuple[str, str]:
        if '\t' in value:
            path, label = value.split('\t', 1)
            return path, label
        return value.rstrip(), ''
