"""
Markdown Context Formatter

Formats collected definitions and file diffs as Markdown snippets
for the downstream prompt assembly step.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List

from ..models.definition import DefinitionContext
from ..models.diff import FileDiff


logger = logging.getLogger(__name__)


FENCE_LANGUAGES = {
    'ts': 'typescript', 'tsx': 'tsx', 'js': 'javascript', 'jsx': 'jsx',
    'java': 'java', 'py': 'python', 'go': 'go', 'rb': 'ruby', 'php': 'php',
    'cs': 'csharp', 'cpp': 'cpp', 'c': 'c', 'h': 'c', 'swift': 'swift',
    'kt': 'kotlin', 'rs': 'rust', 'vue': 'vue', 'svelte': 'svelte',
    'scala': 'scala', 'dart': 'dart',
}

MESSAGES = {
    "korean": {
        "no_definitions": "(정의 추적 결과 없음)",
        "definition_heading": "정의 위치",
        "symbols": "심볼",
        "new_file": "신규 파일",
        "deleted_file": "삭제된 파일",
    },
    "english": {
        "no_definitions": "(no definitions tracked)",
        "definition_heading": "Definition",
        "symbols": "symbols",
        "new_file": "new file",
        "deleted_file": "deleted file",
    },
}


@dataclass
class DefinitionGroup:
    """Definitions found in one file."""
    definition_file: str
    symbols: List[str]
    definitions: List[DefinitionContext]


class MarkdownContextFormatter:
    """
    Formats review context as Markdown.

    Definitions are grouped by definition file; each group shows the
    distinct symbols that led there and the first block found in it.
    """

    def __init__(self, language: str = "english"):
        """
        Initialize markdown formatter.

        Args:
            language: Language for headings ("korean" or "english")
        """
        if language not in MESSAGES:
            raise ValueError(f"Unsupported language: {language}")
        self.language = language
        self.messages = MESSAGES[language]

    def group_definitions(self, definitions: List[DefinitionContext]) -> List[DefinitionGroup]:
        """Group definitions by file, preserving discovery order."""
        grouped: Dict[str, List[DefinitionContext]] = {}
        for definition in definitions:
            grouped.setdefault(definition.definition_file, []).append(definition)

        groups = []
        for definition_file, defs in grouped.items():
            symbols = list(dict.fromkeys(d.symbol_name for d in defs))
            groups.append(DefinitionGroup(definition_file=definition_file, symbols=symbols, definitions=defs))
        return groups

    def format_definitions(self, definitions: List[DefinitionContext]) -> str:
        if not definitions:
            return self.messages["no_definitions"]

        parts = []
        for group in self.group_definitions(definitions):
            first = group.definitions[0]
            symbols = ', '.join(group.symbols)
            parts.append(
                f"### {self.messages['definition_heading']}: `{group.definition_file}` "
                f"({self.messages['symbols']}: `{symbols}`)\n"
                f"```{self.fence_language(group.definition_file)}\n"
                f"{first.definition_content.strip()}\n"
                f"```"
            )

        logger.debug(f"Formatted {len(definitions)} definitions into {len(parts)} sections")
        return '\n\n'.join(parts)

    def format_file_diff(self, file_diff: FileDiff) -> str:
        heading = f"### `{file_diff.path}`"
        if file_diff.is_new:
            heading += f" ({self.messages['new_file']})"
        elif file_diff.is_deleted:
            heading += f" ({self.messages['deleted_file']})"
        return f"{heading}\n```diff\n{file_diff.unified_diff.rstrip()}\n```"

    @staticmethod
    def fence_language(file_path: str) -> str:
        if '.' not in file_path:
            return ''
        return FENCE_LANGUAGES.get(file_path.rsplit('.', 1)[-1].lower(), '')
