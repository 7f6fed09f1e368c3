"""
Unit tests for the Markdown context formatter.
"""

import pytest

from review_context.diff.engine import DiffEngine
from review_context.formatting.markdown import MarkdownContextFormatter
from review_context.models.definition import DefinitionContext


def definition(symbol, definition_file, content, start_line=1):
    return DefinitionContext(
        symbol_name=symbol,
        origin_file="x.ts",
        definition_file=definition_file,
        definition_content=content,
        start_line=start_line,
        end_line=start_line + 2,
    )


class TestMarkdownContextFormatter:
    """Unit tests for MarkdownContextFormatter."""

    def setup_method(self):
        self.formatter = MarkdownContextFormatter()

    def test_empty_definitions(self):
        assert self.formatter.format_definitions([]) == "(no definitions tracked)"

    def test_korean_messages(self):
        assert MarkdownContextFormatter("korean").format_definitions([]) == "(정의 추적 결과 없음)"

    def test_unsupported_language(self):
        with pytest.raises(ValueError):
            MarkdownContextFormatter("klingon")

    def test_groups_by_file_with_first_block(self):
        definitions = [
            definition("loadUser", "src/y.ts", "function loadUser() {}\n", 3),
            definition("formatName", "src/z.py", "def formatName(): pass\n"),
            definition("saveUser", "src/y.ts", "function saveUser() {}\n", 9),
            definition("loadUser", "src/y.ts", "function loadUser() {}\n", 20),
        ]

        text = self.formatter.format_definitions(definitions)

        assert text == (
            "### Definition: `src/y.ts` (symbols: `loadUser, saveUser`)\n"
            "```typescript\n"
            "function loadUser() {}\n"
            "```\n"
            "\n"
            "### Definition: `src/z.py` (symbols: `formatName`)\n"
            "```python\n"
            "def formatName(): pass\n"
            "```"
        )

    def test_file_diff_section(self):
        file_diff = DiffEngine().diff("", "x\n", "new.ts")

        text = self.formatter.format_file_diff(file_diff)

        assert text.startswith("### `new.ts` (new file)\n```diff\n")
        assert text.endswith("+x\n```")

    def test_fence_language(self):
        assert self.formatter.fence_language("a/b.TS") == "typescript"
        assert self.formatter.fence_language("Makefile") == ""
        assert self.formatter.fence_language("notes.txt") == ""
