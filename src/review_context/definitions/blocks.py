"""
Definition Block Extraction

Locates the source block (function, method, class) enclosing a
resolved definition line using line-oriented heuristics.

This is not a parser. Block starts are found by matching
declaration-shaped lines and block ends by counting ``{`` / ``}``.
Languages without brace-delimited blocks, or braces inside string
and comment literals, can produce imprecise boundaries; such code
degrades to the single resolved line.
"""

import re
import logging
from dataclasses import dataclass

from .ports import Document


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtractedBlock:
    """Extracted definition block (1-based inclusive lines)."""
    start_line: int
    end_line: int
    content: str
    truncated: bool = False

    @property
    def midpoint(self) -> int:
        return (self.start_line + self.end_line) // 2


class BlockExtractor:
    """
    Extracts definition blocks with brace-depth counting.

    Scans upward for a declaration line, then downward until the brace
    nesting closes, the character budget is exceeded, or the file ends.
    """

    def __init__(self, max_chars: int = 20000, scan_window: int = 20):
        """
        Initialize block extractor.

        Args:
            max_chars: Character budget per block
            scan_window: Lines searched upward for a declaration
        """
        if max_chars <= 0:
            raise ValueError("max_chars must be positive")
        self.max_chars = max_chars
        self.scan_window = scan_window

        self.declaration_patterns = [
            re.compile(r'^\s*(export\s+)?(default\s+)?(async\s+)?function\b'),
            re.compile(r'^\s*(export\s+)?(default\s+)?(abstract\s+)?class\b'),
            re.compile(r'^\s*(export\s+)?(interface|enum|struct|trait|impl)\b'),
            re.compile(
                r'^\s*((public|private|protected|internal|static|async|final|override|abstract)\s+)+'
                r'[\w<>\[\],.? ]*?\w+\s*\('
            ),
            re.compile(r'^\s*(export\s+)?(const|let|var)\s+\w+\s*=\s*(async\s+)?(\(|function\b)'),
            re.compile(r'^\s*(pub\s+)?(func|fn|def|fun)\s+'),
        ]

    def is_declaration(self, line_text: str) -> bool:
        return any(pattern.search(line_text) for pattern in self.declaration_patterns)

    def extract(self, document: Document, line_index: int) -> ExtractedBlock:
        """
        Extract the block around a resolved line.

        Args:
            document: Document containing the definition
            line_index: 0-based resolved line

        Returns:
            ExtractedBlock with untruncated line bounds and content cut to
            the character budget
        """
        line_index = max(0, min(line_index, document.line_count - 1))

        block_start = line_index
        for i in range(line_index, max(0, line_index - self.scan_window) - 1, -1):
            if self.is_declaration(document.line_at(i)):
                block_start = i
                break

        brace_depth = 0
        found_open_brace = False
        char_count = 0
        block_end = None

        for i in range(block_start, document.line_count):
            line_text = document.line_at(i)
            char_count += len(line_text) + 1

            for ch in line_text:
                if ch == '{':
                    brace_depth += 1
                    found_open_brace = True
                elif ch == '}':
                    brace_depth -= 1

            if found_open_brace and brace_depth == 0:
                block_end = i
                break

            if char_count > self.max_chars:
                block_end = i
                break

        if not found_open_brace:
            # No brace-delimited body, keep only the resolved line
            block_start = block_end = line_index
        elif block_end is None:
            block_end = document.line_count - 1

        content = document.text_range(block_start, block_end)
        truncated = len(content) > self.max_chars
        if truncated:
            logger.debug(
                f"Truncated block {document.relative_path}:{block_start + 1}-{block_end + 1} "
                f"from {len(content)} to {self.max_chars} chars"
            )
            content = content[:self.max_chars]

        return ExtractedBlock(
            start_line=block_start + 1,
            end_line=block_end + 1,
            content=content,
            truncated=truncated,
        )
