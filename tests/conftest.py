"""
Shared test fixtures and fakes.
"""

import pytest
from typing import Dict, Iterable, List, Optional

from review_context.definitions.identifiers import extract_identifiers
from review_context.definitions.ports import Resolution, SymbolResolver
from review_context.definitions.providers import InMemoryContentProvider
from review_context.models.definition import SourceLocation


class NameResolver(SymbolResolver):
    """Resolves the identifier at a position by name from a fixed table."""

    def __init__(
        self,
        provider: InMemoryContentProvider,
        definitions: Dict[str, List[SourceLocation]],
        failing: Iterable[str] = (),
        on_resolve=None
    ):
        self.provider = provider
        self.definitions = definitions
        self.failing = set(failing)
        self.on_resolve = on_resolve
        self.calls = []

    async def resolve(self, file: str, line: int, column: int) -> Resolution:
        self.calls.append((file, line, column))
        document = await self.provider.open(file)
        name = self._name_at(document.line_at(line), column)
        if self.on_resolve:
            self.on_resolve(name)
        if name in self.failing:
            raise RuntimeError(f"resolver crashed on {name}")
        if name is None:
            return Resolution.failed("no identifier at position")
        return Resolution.found(self.definitions.get(name, []))

    @staticmethod
    def _name_at(line_text: str, column: int) -> Optional[str]:
        for identifier in extract_identifiers(line_text):
            if identifier.column == column:
                return identifier.name
        return None


X_CHAIN = (
    "export function main() {\n"
    "    const user = loadUser(42);\n"
    "    return user;\n"
    "}\n"
)

Y_CHAIN = (
    "import { formatName } from './z';\n"
    "\n"
    "export function loadUser(id) {\n"
    "    return formatName(id);\n"
    "}\n"
)

Z_CHAIN = (
    "export function formatName(id) {\n"
    "    return String(id).trim();\n"
    "}\n"
)

CHAIN_DEFINITIONS = {
    'loadUser': [SourceLocation(file='y.ts', start_line=2, start_column=16)],
    'formatName': [SourceLocation(file='z.ts', start_line=0, start_column=16)],
}


@pytest.fixture
def chain_provider():
    """x.ts -> y.ts -> z.ts reference chain."""
    return InMemoryContentProvider({'x.ts': X_CHAIN, 'y.ts': Y_CHAIN, 'z.ts': Z_CHAIN})


@pytest.fixture
def chain_resolver(chain_provider):
    return NameResolver(chain_provider, CHAIN_DEFINITIONS)


@pytest.fixture
def make_resolver():
    """Factory for NameResolver with custom tables."""
    def factory(provider, definitions, failing=(), on_resolve=None):
        return NameResolver(provider, definitions, failing=failing, on_resolve=on_resolve)
    return factory
