"""
Integration tests for review context assembly.

Tests the complete flow from file versions through diffs and changed
lines to tracked definitions and Markdown output.
"""

import asyncio

import pytest

from review_context import FileVersions, ReviewContextAPI
from review_context.config import AppConfig
from review_context.definitions.ports import Resolution, SymbolResolver
from review_context.definitions.providers import DeclarationIndexResolver, InMemoryContentProvider
from review_context.models.definition import SourceLocation


OLD_X = (
    "export function main() {\n"
    "    return null;\n"
    "}\n"
)


@pytest.fixture
def new_x(chain_provider):
    return chain_provider.files['x.ts']


@pytest.fixture
def make_api(chain_provider):
    """API over the x.ts -> y.ts -> z.ts workspace at the new revision."""
    def factory(max_depth=2, resolver=True, **sections):
        config_data = {'definitions': {'max_depth': max_depth}}
        config_data.update(sections)
        config = AppConfig.from_dict(config_data)

        if not resolver:
            return ReviewContextAPI(config=config)

        index = DeclarationIndexResolver(chain_provider, chain_provider.list_files())
        return ReviewContextAPI(config=config, resolver=index, content_provider=chain_provider)
    return factory


class TestReviewContextFlow:
    """End-to-end review context assembly."""

    @pytest.mark.asyncio
    async def test_changed_file_with_definition_chain(self, make_api, new_x):
        api = make_api()

        result = await api.build_context([FileVersions("x.ts", OLD_X, new_x)])

        assert result.errors == []
        assert not result.cancelled
        assert len(result.files) == 1

        file_context = result.files[0]
        assert file_context.file_diff.path == "x.ts"
        assert file_context.changed_lines == [2, 3]
        assert [(d.symbol_name, d.origin_file, d.definition_file) for d in result.definitions] == [
            ('loadUser', 'x.ts', 'y.ts'),
            ('formatName', 'y.ts', 'z.ts'),
        ]

    @pytest.mark.asyncio
    async def test_zero_depth_disables_tracking(self, make_api, new_x):
        api = make_api(max_depth=0)

        result = await api.build_context([FileVersions("x.ts", OLD_X, new_x)])

        assert not api.tracking_enabled
        assert result.files[0].changed_lines == [2, 3]
        assert result.definitions == []

    @pytest.mark.asyncio
    async def test_without_resolver_only_diffs(self, make_api, new_x):
        api = make_api(resolver=False)

        result = await api.build_context([FileVersions("x.ts", OLD_X, new_x)])

        assert len(result.file_diffs) == 1
        assert result.definitions == []
        assert "Definition" not in api.format_markdown(result)

    @pytest.mark.asyncio
    async def test_unchanged_files_are_skipped(self, make_api, new_x):
        api = make_api()

        result = await api.build_context([
            FileVersions("same.ts", "a\n", "a\n"),
            FileVersions("x.ts", OLD_X, new_x),
        ])

        assert result.skipped_files == ["same.ts"]
        assert [f.file_diff.path for f in result.files] == ["x.ts"]

    @pytest.mark.asyncio
    async def test_deleted_file_has_no_definitions(self, make_api, new_x):
        api = make_api()

        result = await api.build_context([FileVersions("x.ts", new_x, "")])

        file_context = result.files[0]
        assert file_context.file_diff.is_deleted
        assert file_context.changed_lines == []
        assert file_context.definitions == []

    def test_file_limit(self, make_api):
        api = make_api(concurrency={'max_files': 2})
        versions = [FileVersions(f"f{i}.ts", "a\n", f"b{i}\n") for i in range(4)]

        file_diffs, skipped, errors = api.build_file_diffs(versions)

        assert [fd.path for fd in file_diffs] == ["f0.ts", "f1.ts"]
        assert skipped == ["f2.ts", "f3.ts"]
        assert errors == []

    @pytest.mark.asyncio
    async def test_cancelled_before_start(self, make_api, new_x):
        api = make_api()
        event = asyncio.Event()
        event.set()

        result = await api.build_context([FileVersions("x.ts", OLD_X, new_x)], cancel_event=event)

        assert result.cancelled
        assert result.definitions == []
        assert result.files[0].changed_lines == [2, 3]

    @pytest.mark.asyncio
    async def test_markdown_output(self, make_api, new_x):
        api = make_api()
        result = await api.build_context([FileVersions("x.ts", OLD_X, new_x)])

        text = api.format_markdown(result)

        assert text.startswith("### `x.ts`\n```diff\n--- a/x.ts\tbase\n+++ b/x.ts\tbranch\n")
        assert "+    const user = loadUser(42);" in text
        assert "### Definition: `y.ts` (symbols: `loadUser`)\n```typescript\n" in text
        assert "### Definition: `z.ts` (symbols: `formatName`)" in text


class TestFailureIsolation:
    """One file's failure never aborts the others."""

    @pytest.mark.asyncio
    async def test_unreadable_changed_file_yields_no_definitions(self, make_api, new_x):
        api = make_api()

        result = await api.build_context([
            FileVersions("gone.ts", "a\n", "b\n"),
            FileVersions("x.ts", OLD_X, new_x),
        ])

        assert result.errors == []
        assert [f.definitions for f in result.files][0] == []
        assert len(result.definitions) == 2

    @pytest.mark.asyncio
    async def test_collector_error_reported_per_file(self, make_api, new_x):
        api = make_api()
        collect = api.collector.collect

        async def exploding_collect(origin_file, seed_lines, cancel_event=None):
            if origin_file == 'boom.ts':
                raise RuntimeError("resolver process died")
            return await collect(origin_file, seed_lines, cancel_event=cancel_event)

        api.collector.collect = exploding_collect

        result = await api.build_context([
            FileVersions("boom.ts", "a\n", "b\n"),
            FileVersions("x.ts", OLD_X, new_x),
        ])

        assert len(result.files) == 2
        assert len(result.errors) == 1
        assert "boom.ts" in result.errors[0]
        assert len(result.definitions) == 2


class GatedResolver(SymbolResolver):
    """Holds every call until released and tracks how many overlap."""

    def __init__(self, location):
        self.location = location
        self.release = asyncio.Event()
        self.in_flight = 0
        self.peak = 0

    async def resolve(self, file, line, column):
        self.in_flight += 1
        self.peak = max(self.peak, self.in_flight)
        try:
            await self.release.wait()
        finally:
            self.in_flight -= 1
        return Resolution.found([self.location])


class TestConcurrency:
    """Per-file traversals run concurrently up to the configured limit."""

    SHARED = "export function shared(n) {\n    return n;\n}\n"

    @pytest.mark.asyncio
    async def test_concurrent_traversals_bounded_with_fresh_state(self):
        names = ['a.ts', 'b.ts', 'c.ts']
        files = {name: "function run() {\n    shared(1);\n}\n" for name in names}
        files['lib.ts'] = self.SHARED
        provider = InMemoryContentProvider(files)
        resolver = GatedResolver(SourceLocation(file='lib.ts', start_line=0, start_column=16))
        config = AppConfig.from_dict({
            'definitions': {'max_depth': 1},
            'concurrency': {'max_concurrent_files': 2},
        })
        api = ReviewContextAPI(config=config, resolver=resolver, content_provider=provider)

        asyncio.get_running_loop().call_later(0.05, resolver.release.set)
        result = await api.build_context([
            FileVersions(name, "function run() {\n}\n", files[name]) for name in names
        ])

        assert resolver.peak == 2
        assert result.errors == []
        for file_context in result.files:
            assert [(d.symbol_name, d.definition_file, d.start_line) for d in file_context.definitions] == [
                ('shared', 'lib.ts', 1)
            ]

    @pytest.mark.asyncio
    async def test_single_file_limit_serializes_traversals(self):
        files = {'a.ts': "shared(1);\n", 'b.ts': "shared(2);\n", 'lib.ts': self.SHARED}
        provider = InMemoryContentProvider(files)
        resolver = GatedResolver(SourceLocation(file='lib.ts', start_line=0, start_column=16))
        config = AppConfig.from_dict({
            'definitions': {'max_depth': 1},
            'concurrency': {'max_concurrent_files': 1},
        })
        api = ReviewContextAPI(config=config, resolver=resolver, content_provider=provider)

        asyncio.get_running_loop().call_later(0.05, resolver.release.set)
        result = await api.build_context([
            FileVersions('a.ts', "", files['a.ts']),
            FileVersions('b.ts', "", files['b.ts']),
        ])

        assert resolver.peak == 1
        assert len(result.definitions) == 2


def test_in_memory_provider_lists_sorted_files():
    provider = InMemoryContentProvider({'b.ts': "", 'a.ts': ""})

    assert provider.list_files() == ['a.ts', 'b.ts']
