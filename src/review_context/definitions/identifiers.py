"""
Identifier Extraction

Finds candidate symbol references (member access or call syntax)
on a single source line.
"""

import re
from dataclasses import dataclass
from typing import List


_LINE_COMMENT = re.compile(r'//.*$')
_BLOCK_COMMENT = re.compile(r'/\*.*?\*/')
_REFERENCE = re.compile(r'\b([A-Z][a-zA-Z0-9_]*|[a-z_][a-zA-Z0-9_]{2,})\s*[.(]')


@dataclass(frozen=True)
class Identifier:
    """Identifier token and its 0-based column."""
    name: str
    column: int


def strip_comments(line_text: str) -> str:
    """Remove a trailing ``//`` comment and inline ``/* ... */`` spans."""
    return _BLOCK_COMMENT.sub('', _LINE_COMMENT.sub('', line_text))


def extract_identifiers(line_text: str) -> List[Identifier]:
    """
    Extract identifiers followed by ``.`` or ``(``, left to right.

    Columns refer to the comment-stripped line, so they match the
    original line whenever no inline block comment precedes the token.
    """
    stripped = strip_comments(line_text)
    return [Identifier(name=m.group(1), column=m.start(1)) for m in _REFERENCE.finditer(stripped)]
