"""
Definition Data Models

정의 추적(definition tracking) 관련 데이터 모델들
"""

from dataclasses import dataclass
from pydantic import BaseModel, validator


@dataclass(frozen=True)
class SourceLocation:
    """심볼 해석 결과 위치 (0-based 에디터 좌표)"""
    file: str
    start_line: int
    start_column: int = 0
    end_line: int = -1
    end_column: int = 0

    def __post_init__(self):
        """데이터 검증"""
        if self.start_line < 0 or self.start_column < 0:
            raise ValueError("Positions must be non-negative")


@dataclass(frozen=True)
class DefinitionContext:
    """변경 라인이 참조하는 정의 블록"""
    symbol_name: str
    origin_file: str
    definition_file: str
    definition_content: str
    start_line: int
    end_line: int

    def __post_init__(self):
        """데이터 검증"""
        if self.start_line < 1:
            raise ValueError("start_line must be 1-based")
        if self.end_line < self.start_line:
            raise ValueError("end_line must not precede start_line")

    @property
    def key(self):
        """중복 제거 키"""
        return (self.definition_file, self.start_line)

    @property
    def line_span(self) -> int:
        return self.end_line - self.start_line + 1

    def to_payload(self) -> "DefinitionContextPayload":
        return DefinitionContextPayload(
            symbol_name=self.symbol_name,
            origin_file=self.origin_file,
            definition_file=self.definition_file,
            definition_content=self.definition_content,
            start_line=self.start_line,
            end_line=self.end_line,
        )


# Pydantic models for downstream consumers
class DefinitionContextPayload(BaseModel):
    """프롬프트 조립 단계로 전달되는 DefinitionContext 모델"""
    symbol_name: str
    origin_file: str
    definition_file: str
    definition_content: str
    start_line: int
    end_line: int

    @validator('symbol_name', 'definition_file')
    def validate_not_empty(cls, v):
        if not v:
            raise ValueError('Value must not be empty')
        return v

    @validator('start_line')
    def validate_start_line(cls, v):
        if v < 1:
            raise ValueError('Line numbers are 1-based')
        return v

    @validator('end_line')
    def validate_end_line(cls, v, values):
        start_line = values.get('start_line')
        if start_line is not None and v < start_line:
            raise ValueError('end_line must not precede start_line')
        return v
