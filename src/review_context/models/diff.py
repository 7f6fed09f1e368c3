"""
Diff Data Models

Unified diff 관련 데이터 모델들
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List
from pydantic import BaseModel, validator


NULL_PATH = "/dev/null"


class LineKind(Enum):
    """Hunk 내 라인 종류"""
    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"


LINE_MARKERS = {
    LineKind.CONTEXT: ' ',
    LineKind.ADDED: '+',
    LineKind.REMOVED: '-',
}


@dataclass
class DiffLine:
    """Hunk 내 개별 라인"""
    kind: LineKind
    content: str
    missing_newline: bool = False

    @property
    def marker(self) -> str:
        return LINE_MARKERS[self.kind]

    @property
    def in_old(self) -> bool:
        """이전 버전에 존재하는 라인 여부"""
        return self.kind is not LineKind.ADDED

    @property
    def in_new(self) -> bool:
        """새 버전에 존재하는 라인 여부"""
        return self.kind is not LineKind.REMOVED


@dataclass
class Hunk:
    """Unified diff의 개별 hunk"""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[DiffLine] = field(default_factory=list)

    def __post_init__(self):
        """데이터 검증"""
        if self.old_start < 0 or self.new_start < 0:
            raise ValueError("Line numbers must be non-negative")
        if self.old_count < 0 or self.new_count < 0:
            raise ValueError("Line counts must be non-negative")

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"

    @property
    def added_lines(self) -> List[str]:
        return [line.content for line in self.lines if line.kind is LineKind.ADDED]

    @property
    def removed_lines(self) -> List[str]:
        return [line.content for line in self.lines if line.kind is LineKind.REMOVED]

    def old_text(self) -> str:
        """Hunk 범위의 이전 버전 텍스트 재구성"""
        return _join(line for line in self.lines if line.in_old)

    def new_text(self) -> str:
        """Hunk 범위의 새 버전 텍스트 재구성"""
        return _join(line for line in self.lines if line.in_new)


@dataclass
class FileDiff:
    """파일 하나에 대한 unified diff"""
    old_path: str
    new_path: str
    hunks: List[Hunk] = field(default_factory=list)
    unified_diff: str = ""
    old_label: str = ""
    new_label: str = ""

    @property
    def is_new(self) -> bool:
        """신규 파일 여부"""
        return self.old_path == NULL_PATH

    @property
    def is_deleted(self) -> bool:
        """삭제된 파일 여부"""
        return self.new_path == NULL_PATH

    @property
    def path(self) -> str:
        """a/, b/ 접두사를 제거한 파일 경로"""
        raw = self.old_path if self.is_deleted else self.new_path
        if raw == NULL_PATH:
            return ""
        if raw.startswith(('a/', 'b/')):
            return raw[2:]
        return raw

    @property
    def additions(self) -> int:
        return sum(len(h.added_lines) for h in self.hunks)

    @property
    def deletions(self) -> int:
        return sum(len(h.removed_lines) for h in self.hunks)

    def to_payload(self) -> "FileDiffPayload":
        return FileDiffPayload(
            old_path=self.old_path,
            new_path=self.new_path,
            is_new=self.is_new,
            is_deleted=self.is_deleted,
            hunks=[
                HunkPayload(
                    old_start=h.old_start,
                    old_count=h.old_count,
                    new_start=h.new_start,
                    new_count=h.new_count,
                    lines=[f"{line.marker}{line.content}" for line in h.lines],
                )
                for h in self.hunks
            ],
            unified_diff=self.unified_diff,
        )


def _join(lines) -> str:
    parts = []
    for line in lines:
        parts.append(line.content)
        if not line.missing_newline:
            parts.append('\n')
    return ''.join(parts)


# Pydantic models for API export
class HunkPayload(BaseModel):
    """API 응답용 Hunk 모델"""
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: List[str]

    @validator('old_start', 'new_start')
    def validate_line_numbers(cls, v):
        if v < 0:
            raise ValueError('Line numbers must be non-negative')
        return v

    @validator('old_count', 'new_count')
    def validate_line_counts(cls, v):
        if v < 0:
            raise ValueError('Line counts must be non-negative')
        return v


class FileDiffPayload(BaseModel):
    """API 응답용 FileDiff 모델"""
    old_path: str
    new_path: str
    is_new: bool
    is_deleted: bool
    hunks: List[HunkPayload]
    unified_diff: str