"""
Definition Tracking Ports

Interfaces for the external collaborators the collector depends on:
a symbol resolver ("go to definition") and a document content provider.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from ..models.definition import SourceLocation


class ReadFailure(Exception):
    """A document could not be opened or read."""

    def __init__(self, file: str, reason: Optional[str] = None):
        message = f"Cannot read {file}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.file = file
        self.reason = reason


class ResolutionStatus(Enum):
    """Outcome of a symbol resolution request."""
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"


@dataclass
class Resolution:
    """Result channel of a SymbolResolver call."""
    status: ResolutionStatus
    locations: List[SourceLocation] = field(default_factory=list)
    error: Optional[str] = None

    @classmethod
    def found(cls, locations: List[SourceLocation]) -> "Resolution":
        if not locations:
            return cls.empty()
        return cls(status=ResolutionStatus.OK, locations=list(locations))

    @classmethod
    def empty(cls) -> "Resolution":
        return cls(status=ResolutionStatus.EMPTY)

    @classmethod
    def failed(cls, error: str) -> "Resolution":
        return cls(status=ResolutionStatus.FAILED, error=error)

    @property
    def ok(self) -> bool:
        return self.status is ResolutionStatus.OK


class Document:
    """
    Full text of one file, addressable by 0-based line index.

    Line text excludes the terminator.
    """

    def __init__(self, file: str, text: str, relative_path: Optional[str] = None):
        self.file = file
        self.text = text
        self.relative_path = relative_path or file
        self._lines = text.split('\n')
        if len(self._lines) > 1 and self._lines[-1] == '':
            self._lines.pop()

    @property
    def line_count(self) -> int:
        return len(self._lines)

    def line_at(self, index: int) -> str:
        if index < 0 or index >= len(self._lines):
            raise IndexError(f"Line {index} out of range for {self.file}")
        return self._lines[index]

    def lines(self, start: int, end: int) -> List[str]:
        """Lines in ``[start, end)`` (0-based)."""
        return self._lines[start:end]

    def text_range(self, start: int, end: int) -> str:
        """Text of lines ``start..end`` inclusive, with their terminators."""
        text = '\n'.join(self._lines[start:end + 1])
        if end < len(self._lines) - 1 or self.text.endswith('\n'):
            text += '\n'
        return text


class SymbolResolver(ABC):
    """External "go to definition" capability."""

    @abstractmethod
    async def resolve(self, file: str, line: int, column: int) -> Resolution:
        """
        Resolve the symbol at a 0-based position.

        Args:
            file: File identity as used by the content provider
            line: 0-based line index
            column: 0-based column

        Returns:
            Resolution with zero or more definition locations
        """


class ContentProvider(ABC):
    """External document source."""

    @abstractmethod
    async def open(self, file: str) -> Document:
        """
        Open a document.

        Raises:
            ReadFailure: If the file cannot be read
        """
