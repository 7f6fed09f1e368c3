"""
Data Models

Review Context 시스템의 핵심 데이터 모델들
"""

from .diff import (
    NULL_PATH,
    LineKind,
    DiffLine,
    Hunk,
    FileDiff,
    HunkPayload,
    FileDiffPayload,
)
from .definition import SourceLocation, DefinitionContext, DefinitionContextPayload

__all__ = [
    "NULL_PATH",
    "LineKind",
    "DiffLine",
    "Hunk",
    "FileDiff",
    "HunkPayload",
    "FileDiffPayload",
    "SourceLocation",
    "DefinitionContext",
    "DefinitionContextPayload",
]
