"""
Definition Graph Collector

Follows symbol references from changed lines to the blocks that define
them, across files, to a bounded depth.

The traversal keeps an explicit stack of frames instead of recursing,
so cycle safety rests on the visited sets rather than on call depth.
Results come out in the same order a depth-first recursive walk
would produce them.
"""

import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..models.definition import DefinitionContext, SourceLocation
from .blocks import BlockExtractor
from .identifiers import extract_identifiers
from .ports import ContentProvider, Document, ReadFailure, Resolution, SymbolResolver


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Probe:
    """One identifier position considered for resolution."""
    file: str
    line: int
    column: int
    name: str


@dataclass
class _Frame:
    """Pending work for one visited file."""
    document: Document
    depth: int
    probes: Deque[Probe]
    locations: Deque[Tuple[Probe, SourceLocation]] = field(default_factory=deque)


@dataclass
class _TraversalState:
    """Visited sets, document cache and results of a single collect() call."""
    origin_file: str
    visited_files: Set[str] = field(default_factory=set)
    visited_probes: Set[Tuple[str, int, int]] = field(default_factory=set)
    visited_definitions: Set[Tuple[str, int]] = field(default_factory=set)
    documents: Dict[str, Document] = field(default_factory=dict)
    unreadable_files: Set[str] = field(default_factory=set)
    results: List[DefinitionContext] = field(default_factory=list)
    resolver_calls: int = 0


class DefinitionCollector:
    """
    Collects definition blocks referenced from a set of lines.

    Each collect() call is one traversal with its own visited sets;
    separate calls share nothing and may run concurrently.
    """

    def __init__(
        self,
        resolver: SymbolResolver,
        content_provider: ContentProvider,
        max_depth: int = 2,
        chars_per_block: int = 20000,
        scan_window: int = 20
    ):
        """
        Initialize definition collector.

        Args:
            resolver: "Go to definition" capability
            content_provider: Document source
            max_depth: File hops followed from the origin (0 disables tracking)
            chars_per_block: Character budget per extracted block
            scan_window: Lines searched upward for a declaration
        """
        if max_depth < 0:
            raise ValueError("max_depth must be non-negative")
        self.resolver = resolver
        self.content_provider = content_provider
        self.max_depth = max_depth
        self.block_extractor = BlockExtractor(max_chars=chars_per_block, scan_window=scan_window)

    async def collect(
        self,
        origin_file: str,
        seed_lines: Iterable[int],
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[DefinitionContext]:
        """
        Collect definitions referenced from seed lines.

        Args:
            origin_file: File containing the seed lines
            seed_lines: 1-based line numbers, processed in order
            cancel_event: Optional event; once set, no new external calls
                are made and the results so far are returned

        Returns:
            DefinitionContext records in discovery order
        """
        state = _TraversalState(origin_file=origin_file)
        seed_lines = list(seed_lines)

        logger.info(f"Collecting definitions for {origin_file} ({len(seed_lines)} seed lines, depth {self.max_depth})")

        stack: List[_Frame] = []
        frame = await self._enter_file(origin_file, seed_lines, 0, state, cancel_event)
        if frame:
            stack.append(frame)

        while stack:
            if self._cancelled(cancel_event):
                logger.info(f"Definition collection for {origin_file} cancelled with {len(state.results)} results")
                break

            frame = stack[-1]

            if frame.locations:
                probe, location = frame.locations.popleft()
                context, block_lines = await self._record_definition(frame, probe, location, state)
                if context is not None:
                    child = await self._enter_file(
                        location.file, block_lines, frame.depth + 1, state, cancel_event
                    )
                    if child:
                        stack.append(child)
                continue

            if frame.probes:
                probe = frame.probes.popleft()
                resolution = await self._resolve(probe, state)
                for location in resolution.locations:
                    frame.locations.append((probe, location))
                continue

            stack.pop()

        logger.info(
            f"Collected {len(state.results)} definitions for {origin_file} "
            f"({len(state.visited_files)} files, {state.resolver_calls} resolver calls)"
        )
        return state.results

    async def _enter_file(
        self,
        file: str,
        target_lines: List[int],
        depth: int,
        state: _TraversalState,
        cancel_event: Optional[asyncio.Event]
    ) -> Optional[_Frame]:
        """Open a file and build its probe queue, honoring the depth gate."""
        if depth >= self.max_depth:
            return None
        if file in state.visited_files:
            return None
        if self._cancelled(cancel_event):
            return None

        try:
            document = await self._open(file, state)
        except ReadFailure as e:
            logger.debug(f"Skipping unreadable file: {e}")
            return None
        except Exception as e:
            logger.debug(f"Skipping {file}, open failed: {e}")
            return None

        state.visited_files.add(file)
        probes: Deque[Probe] = deque()

        for line_no in target_lines:
            line_index = max(min(line_no - 1, document.line_count - 1), 0)
            line_text = document.line_at(line_index)

            for identifier in extract_identifiers(line_text):
                key = (file, line_index + 1, identifier.column)
                if key in state.visited_probes:
                    continue
                state.visited_probes.add(key)
                probes.append(Probe(file=file, line=line_index, column=identifier.column, name=identifier.name))

        logger.debug(f"Entered {document.relative_path} at depth {depth} with {len(probes)} probes")
        return _Frame(document=document, depth=depth, probes=probes)

    async def _open(self, file: str, state: _TraversalState) -> Document:
        """Open a document at most once per traversal."""
        if file in state.documents:
            return state.documents[file]
        if file in state.unreadable_files:
            raise ReadFailure(file, "previously failed")

        try:
            document = await self.content_provider.open(file)
        except Exception:
            state.unreadable_files.add(file)
            raise

        state.documents[file] = document
        return document

    async def _resolve(self, probe: Probe, state: _TraversalState) -> Resolution:
        state.resolver_calls += 1
        try:
            resolution = await self.resolver.resolve(probe.file, probe.line, probe.column)
        except Exception as e:
            resolution = Resolution.failed(str(e))

        if resolution.error:
            logger.debug(f"Resolution failed for {probe.name} at {probe.file}:{probe.line + 1}:{probe.column}: {resolution.error}")
        return resolution

    async def _record_definition(
        self,
        frame: _Frame,
        probe: Probe,
        location: SourceLocation,
        state: _TraversalState
    ) -> Tuple[Optional[DefinitionContext], List[int]]:
        """Extract and record the block at a location if it is new."""
        if location.file == frame.document.file or location.file == state.origin_file:
            return None, []

        try:
            definition_doc = await self._open(location.file, state)
        except ReadFailure as e:
            logger.debug(f"Skipping definition of {probe.name}: {e}")
            return None, []
        except Exception as e:
            logger.debug(f"Skipping definition of {probe.name} in {location.file}: {e}")
            return None, []

        block = self.block_extractor.extract(definition_doc, location.start_line)

        key = (location.file, block.start_line)
        if key in state.visited_definitions:
            return None, []
        state.visited_definitions.add(key)

        context = DefinitionContext(
            symbol_name=probe.name,
            origin_file=frame.document.relative_path,
            definition_file=definition_doc.relative_path,
            definition_content=block.content,
            start_line=block.start_line,
            end_line=block.end_line,
        )
        state.results.append(context)
        logger.debug(
            f"Recorded {probe.name}: {context.definition_file}:{block.start_line}-{block.end_line}"
        )

        return context, [block.start_line, block.midpoint]

    @staticmethod
    def _cancelled(cancel_event: Optional[asyncio.Event]) -> bool:
        return cancel_event is not None and cancel_event.is_set()
