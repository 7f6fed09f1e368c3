"""
Configuration Management

시스템 설정 관리
"""

import os
import yaml
from dataclasses import dataclass, field
from typing import Optional, Dict, Any
from pathlib import Path
import logging


@dataclass
class DiffConfig:
    """Unified diff 생성 설정"""
    context_lines: int = 5
    old_label: str = "base"
    new_label: str = "branch"


@dataclass
class DefinitionConfig:
    """정의 추적 설정"""
    max_depth: int = 2
    max_chars_per_block: int = 20000
    scan_window: int = 20


@dataclass
class ConcurrencyConfig:
    """파일 단위 병렬 처리 설정"""
    max_concurrent_files: int = 4
    max_files: int = 30


@dataclass
class LoggingConfig:
    """로깅 설정"""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file_path: Optional[str] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    backup_count: int = 5


@dataclass
class AppConfig:
    """전체 애플리케이션 설정"""
    diff: DiffConfig = field(default_factory=DiffConfig)
    definitions: DefinitionConfig = field(default_factory=DefinitionConfig)
    concurrency: ConcurrencyConfig = field(default_factory=ConcurrencyConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_env(cls) -> "AppConfig":
        """환경 변수에서 설정 로드"""
        return cls(
            diff=DiffConfig(
                context_lines=int(os.getenv("DIFF_CONTEXT_LINES", "5")),
                old_label=os.getenv("DIFF_OLD_LABEL", "base"),
                new_label=os.getenv("DIFF_NEW_LABEL", "branch"),
            ),
            definitions=DefinitionConfig(
                max_depth=int(os.getenv("DEFINITION_DEPTH", "2")),
                max_chars_per_block=int(os.getenv("MAX_CHARS_PER_BLOCK", "20000")),
                scan_window=int(os.getenv("DEFINITION_SCAN_WINDOW", "20")),
            ),
            concurrency=ConcurrencyConfig(
                max_concurrent_files=int(os.getenv("MAX_CONCURRENT_FILES", "4")),
                max_files=int(os.getenv("MAX_FILES", "30")),
            ),
            logging=LoggingConfig(
                level=os.getenv("LOG_LEVEL", "INFO"),
                format=os.getenv("LOG_FORMAT", "%(asctime)s - %(name)s - %(levelname)s - %(message)s"),
                file_path=os.getenv("LOG_FILE"),
                max_file_size=int(os.getenv("LOG_MAX_SIZE", str(10 * 1024 * 1024))),
                backup_count=int(os.getenv("LOG_BACKUP_COUNT", "5")),
            ),
            debug=os.getenv("DEBUG", "false").lower() == "true",
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "AppConfig":
        """YAML 파일에서 설정 로드"""
        config_file = Path(config_path)
        if not config_file.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_file, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls.from_dict(config_data)

    @classmethod
    def from_dict(cls, config_data: Dict[str, Any]) -> "AppConfig":
        """딕셔너리에서 설정 로드"""
        return cls(
            diff=DiffConfig(**config_data.get('diff', {})),
            definitions=DefinitionConfig(**config_data.get('definitions', {})),
            concurrency=ConcurrencyConfig(**config_data.get('concurrency', {})),
            logging=LoggingConfig(**config_data.get('logging', {})),
            debug=config_data.get('debug', False),
        )

    def validate(self) -> None:
        """설정 유효성 검사"""
        errors = []

        if self.diff.context_lines < 0:
            errors.append("Diff context lines must be non-negative")

        # 0이면 정의 추적 비활성화
        if self.definitions.max_depth < 0:
            errors.append("Definition depth must be non-negative")

        if self.definitions.max_chars_per_block <= 0:
            errors.append("Max chars per block must be positive")

        if self.definitions.scan_window < 0:
            errors.append("Scan window must be non-negative")

        if self.concurrency.max_concurrent_files <= 0:
            errors.append("Max concurrent files must be positive")

        if self.concurrency.max_files <= 0:
            errors.append("Max files must be positive")

        valid_log_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if self.logging.level.upper() not in valid_log_levels:
            errors.append(f"Invalid log level: {self.logging.level}")

        if errors:
            raise ValueError(f"Configuration validation failed: {'; '.join(errors)}")

    def to_dict(self) -> Dict[str, Any]:
        """설정을 딕셔너리로 변환"""
        return {
            'diff': {
                'context_lines': self.diff.context_lines,
                'old_label': self.diff.old_label,
                'new_label': self.diff.new_label,
            },
            'definitions': {
                'max_depth': self.definitions.max_depth,
                'max_chars_per_block': self.definitions.max_chars_per_block,
                'scan_window': self.definitions.scan_window,
            },
            'concurrency': {
                'max_concurrent_files': self.concurrency.max_concurrent_files,
                'max_files': self.concurrency.max_files,
            },
            'logging': {
                'level': self.logging.level,
                'format': self.logging.format,
                'file_path': self.logging.file_path,
                'max_file_size': self.logging.max_file_size,
                'backup_count': self.logging.backup_count,
            },
            'debug': self.debug,
        }


class ConfigManager:
    """설정 관리자"""

    def __init__(self, config: Optional[AppConfig] = None):
        self._config = config or AppConfig.from_env()
        self._config.validate()
        self._setup_logging()

    @property
    def config(self) -> AppConfig:
        """현재 설정 반환"""
        return self._config

    def update_config(self, **kwargs) -> None:
        """설정 업데이트"""
        config_dict = self._config.to_dict()

        for key, value in kwargs.items():
            if '.' in key:
                # 중첩된 설정 (예: 'definitions.max_depth')
                section, field_name = key.split('.', 1)
                if section in config_dict:
                    config_dict[section][field_name] = value
            else:
                config_dict[key] = value

        self._config = AppConfig.from_dict(config_dict)
        self._config.validate()
        self._setup_logging()

    def _setup_logging(self) -> None:
        """로깅 설정"""
        logging.basicConfig(
            level=getattr(logging, self._config.logging.level.upper()),
            format=self._config.logging.format,
        )

        # 파일 로깅이 설정된 경우 로테이션 설정
        if self._config.logging.file_path:
            from logging.handlers import RotatingFileHandler

            handler = RotatingFileHandler(
                self._config.logging.file_path,
                maxBytes=self._config.logging.max_file_size,
                backupCount=self._config.logging.backup_count,
            )
            handler.setFormatter(logging.Formatter(self._config.logging.format))

            root_logger = logging.getLogger()
            root_logger.addHandler(handler)


# 전역 설정 관리자 인스턴스 (최초 사용 시 생성)
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """전역 설정 관리자 반환"""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager


def get_config() -> AppConfig:
    """현재 설정 반환"""
    return get_config_manager().config


def update_config(**kwargs) -> None:
    """설정 업데이트"""
    get_config_manager().update_config(**kwargs)
