"""
Review Context Builder

코드 변경에 대한 리뷰 컨텍스트(unified diff + 정의 추적) 구성 라이브러리
"""

__version__ = "1.0.0"

from .api import ReviewContextAPI, FileVersions, ReviewContextResult

__all__ = ["ReviewContextAPI", "FileVersions", "ReviewContextResult"]
