"""
Main Review Context API

Main interface that assembles review context for a change set:
diffs for each changed file plus the definitions their changed
lines reference.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Tuple

from .config import AppConfig, get_config
from .diff.changes import changed_lines
from .diff.engine import DiffEngine
from .definitions.collector import DefinitionCollector
from .definitions.ports import ContentProvider, SymbolResolver
from .formatting.markdown import MarkdownContextFormatter
from .models.definition import DefinitionContext
from .models.diff import FileDiff


logger = logging.getLogger(__name__)


@dataclass
class FileVersions:
    """Both versions of one file in a change set."""
    path: str
    old_text: str
    new_text: str


@dataclass
class FileReviewContext:
    """Diff and tracked definitions for one changed file."""
    file_diff: FileDiff
    changed_lines: List[int]
    definitions: List[DefinitionContext] = field(default_factory=list)


@dataclass
class ReviewContextResult:
    """Result of review context assembly."""
    files: List[FileReviewContext]
    errors: List[str]
    skipped_files: List[str]
    processing_time: float
    cancelled: bool
    created_at: datetime

    @property
    def definitions(self) -> List[DefinitionContext]:
        return [d for f in self.files for d in f.definitions]

    @property
    def file_diffs(self) -> List[FileDiff]:
        return [f.file_diff for f in self.files]


class ReviewContextAPI:
    """
    Main Review Context API interface.

    Orchestrates context assembly:
    1. Render and parse a unified diff for each changed file
    2. Extract changed line numbers
    3. Track definitions per file, several files at a time
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        resolver: Optional[SymbolResolver] = None,
        content_provider: Optional[ContentProvider] = None
    ):
        """
        Initialize Review Context API.

        Args:
            config: Optional configuration object (defaults to the global configuration)
            resolver: Symbol resolver; definition tracking is skipped without one
            content_provider: Document source for definition tracking
        """
        self.config = config or get_config()
        self.config.validate()

        self.diff_engine = DiffEngine(
            context_lines=self.config.diff.context_lines,
            old_label=self.config.diff.old_label,
            new_label=self.config.diff.new_label,
        )
        self.collector = None
        if resolver is not None and content_provider is not None:
            self.collector = DefinitionCollector(
                resolver=resolver,
                content_provider=content_provider,
                max_depth=self.config.definitions.max_depth,
                chars_per_block=self.config.definitions.max_chars_per_block,
                scan_window=self.config.definitions.scan_window,
            )
        self.formatter = MarkdownContextFormatter()

        logger.info("Review Context API initialized")

    @property
    def tracking_enabled(self) -> bool:
        return self.collector is not None and self.config.definitions.max_depth > 0

    def build_file_diffs(
        self,
        versions: Iterable[FileVersions]
    ) -> Tuple[List[FileDiff], List[str], List[str]]:
        """
        Render and parse diffs for changed files.

        Args:
            versions: Old/new text of each file

        Returns:
            Tuple of (file diffs, skipped paths, errors)
        """
        file_diffs = []
        skipped = []
        errors = []
        overflow = 0
        max_files = self.config.concurrency.max_files

        for index, item in enumerate(versions):
            if index >= max_files:
                skipped.append(item.path)
                overflow += 1
                continue

            if item.old_text == item.new_text:
                logger.debug(f"Skipping unchanged file: {item.path}")
                skipped.append(item.path)
                continue

            try:
                diff_text = self.diff_engine.render(item.old_text, item.new_text, item.path)
                file_diffs.extend(self.diff_engine.parse(diff_text))
            except ValueError as e:
                logger.warning(f"Failed to diff {item.path}: {e}")
                errors.append(f"file: {item.path} | {e}")

        if overflow:
            logger.warning(f"Only the first {max_files} files were diffed, {overflow} skipped")

        logger.info(f"Built {len(file_diffs)} file diffs, skipped {len(skipped)}")
        return file_diffs, skipped, errors

    async def collect_definitions(
        self,
        file_diff: FileDiff,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[DefinitionContext]:
        """Track definitions referenced from one file's changed lines."""
        if not self.tracking_enabled or file_diff.is_deleted:
            return []

        lines = changed_lines(file_diff)
        if not lines:
            return []

        return await self.collector.collect(file_diff.path, lines, cancel_event=cancel_event)

    async def build_context(
        self,
        versions: Iterable[FileVersions],
        cancel_event: Optional[asyncio.Event] = None
    ) -> ReviewContextResult:
        """
        Assemble review context for a change set.

        One file's failure never aborts the others; its error is
        reported in the result instead.

        Args:
            versions: Old/new text of each file
            cancel_event: Optional event that stops definition tracking

        Returns:
            ReviewContextResult with per-file diffs and definitions
        """
        start_time = datetime.now()
        logger.info("Starting review context assembly")

        file_diffs, skipped, errors = self.build_file_diffs(versions)
        semaphore = asyncio.Semaphore(self.config.concurrency.max_concurrent_files)

        async def process(file_diff: FileDiff) -> FileReviewContext:
            file_context = FileReviewContext(file_diff=file_diff, changed_lines=changed_lines(file_diff))
            async with semaphore:
                try:
                    file_context.definitions = await self.collect_definitions(file_diff, cancel_event)
                except Exception as e:
                    logger.error(f"Definition tracking failed for {file_diff.path}: {e}")
                    errors.append(f"file: {file_diff.path} | definitions: {e}")
            return file_context

        files = list(await asyncio.gather(*(process(fd) for fd in file_diffs)))

        processing_time = (datetime.now() - start_time).total_seconds()
        result = ReviewContextResult(
            files=files,
            errors=errors,
            skipped_files=skipped,
            processing_time=processing_time,
            cancelled=cancel_event is not None and cancel_event.is_set(),
            created_at=start_time,
        )

        logger.info(
            f"Review context assembled: {len(files)} files, "
            f"{len(result.definitions)} definitions in {processing_time:.2f}s"
        )
        return result

    def format_markdown(self, result: ReviewContextResult) -> str:
        """Render diffs followed by tracked definitions as Markdown."""
        sections = [self.formatter.format_file_diff(f.file_diff) for f in result.files]
        if self.tracking_enabled:
            sections.append(self.formatter.format_definitions(result.definitions))
        return '\n\n'.join(sections)
