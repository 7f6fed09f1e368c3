"""
Local Providers

ContentProvider and SymbolResolver implementations that work without
an editor: documents come from the file system or from memory, and
symbols are resolved by a declaration-name index.
"""

import re
import asyncio
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from ..models.definition import SourceLocation
from .identifiers import extract_identifiers
from .ports import ContentProvider, Document, ReadFailure, Resolution, SymbolResolver


logger = logging.getLogger(__name__)


class FileSystemContentProvider(ContentProvider):
    """Reads documents relative to a workspace root."""

    def __init__(self, root: str, encoding: str = 'utf-8'):
        self.root = Path(root).resolve()
        self.encoding = encoding

    def _resolve_path(self, file: str) -> Path:
        path = Path(file)
        if not path.is_absolute():
            path = self.root / path
        return path.resolve()

    def relative_path(self, file: str) -> str:
        path = self._resolve_path(file)
        try:
            return path.relative_to(self.root).as_posix()
        except ValueError:
            return path.as_posix()

    async def open(self, file: str) -> Document:
        path = self._resolve_path(file)
        try:
            text = await asyncio.to_thread(path.read_text, encoding=self.encoding)
        except (OSError, UnicodeDecodeError) as e:
            raise ReadFailure(file, str(e)) from e
        return Document(file=file, text=text, relative_path=self.relative_path(file))

    def list_files(self, extensions: Optional[Iterable[str]] = None) -> List[str]:
        """List workspace files, optionally filtered by extension (without dot)."""
        wanted = {ext.lower().lstrip('.') for ext in extensions} if extensions else None
        files = []
        for path in sorted(self.root.rglob('*')):
            if not path.is_file():
                continue
            if wanted is not None and path.suffix.lower().lstrip('.') not in wanted:
                continue
            files.append(path.relative_to(self.root).as_posix())
        return files


class InMemoryContentProvider(ContentProvider):
    """Serves documents from a path-to-text mapping."""

    def __init__(self, files: Dict[str, str]):
        self.files = dict(files)

    async def open(self, file: str) -> Document:
        if file not in self.files:
            raise ReadFailure(file, "not found")
        return Document(file=file, text=self.files[file])

    def list_files(self) -> List[str]:
        return sorted(self.files)


class DeclarationIndexResolver(SymbolResolver):
    """
    Resolves identifiers by name against declarations found in a file set.

    A lightweight stand-in for an editor's "go to definition": it has no
    notion of scope or imports, so every declaration sharing the name is
    returned.
    """

    def __init__(self, content_provider: ContentProvider, files: Iterable[str]):
        self.content_provider = content_provider
        self.files = list(files)
        self.index: Dict[str, List[SourceLocation]] = {}
        self.documents: Dict[str, Document] = {}
        self._built = False
        self._lock: Optional[asyncio.Lock] = None

        self.name_patterns = [
            re.compile(r'\b(?:function|class|interface|enum|struct|trait|def|fn|func|fun)\s+\*?\s*([A-Za-z_]\w*)'),
            re.compile(r'^\s*(?:export\s+)?(?:const|let|var)\s+([A-Za-z_]\w*)\s*='),
            re.compile(
                r'^\s*(?:(?:public|private|protected|internal|static|async|final|override|abstract)\s+)+'
                r'(?:[\w<>\[\],.?]+\s+)*?([A-Za-z_]\w*)\s*\('
            ),
        ]

    async def build(self) -> None:
        """Scan all files and index their declarations."""
        # Created on first use so it binds to the running loop
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            if self._built:
                return
            for file in self.files:
                try:
                    document = await self.content_provider.open(file)
                except ReadFailure as e:
                    logger.debug(f"Not indexing {file}: {e}")
                    continue
                self.documents[file] = document
                for line_index in range(document.line_count):
                    line_text = document.line_at(line_index)
                    for pattern in self.name_patterns:
                        match = pattern.search(line_text)
                        if match:
                            self.index.setdefault(match.group(1), []).append(
                                SourceLocation(
                                    file=file,
                                    start_line=line_index,
                                    start_column=match.start(1),
                                    end_line=line_index,
                                    end_column=match.end(1),
                                )
                            )
                            break
            self._built = True
            logger.info(f"Indexed {sum(len(v) for v in self.index.values())} declarations in {len(self.files)} files")

    async def resolve(self, file: str, line: int, column: int) -> Resolution:
        await self.build()
        try:
            document = self.documents.get(file) or await self.content_provider.open(file)
            line_text = document.line_at(line)
        except (ReadFailure, IndexError) as e:
            return Resolution.failed(str(e))

        for identifier in extract_identifiers(line_text):
            if identifier.column == column:
                return Resolution.found(self.index.get(identifier.name, []))
        return Resolution.empty()
