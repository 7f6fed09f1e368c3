#!/usr/bin/env python3
"""
Definition Tracking Demo

Diffs an old copy of a file against its current version in a workspace
and prints the diff together with the definitions its changed lines
reference.

Usage:
    python examples/definition_tracking_demo.py <workspace> <relative_path> <old_copy>

Example:
    python examples/definition_tracking_demo.py ./my-app src/cart.ts /tmp/cart.ts.orig
"""

import sys
import os
import asyncio
import logging
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from review_context.api import ReviewContextAPI, FileVersions
from review_context.definitions.providers import DeclarationIndexResolver, FileSystemContentProvider


SOURCE_EXTENSIONS = [
    'ts', 'tsx', 'js', 'jsx', 'java', 'py', 'go', 'rb', 'php', 'cs',
    'cpp', 'c', 'h', 'swift', 'kt', 'rs', 'vue', 'svelte', 'scala', 'dart',
]


def setup_logging():
    """Set up logging configuration."""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


async def run(workspace: str, relative_path: str, old_copy: str) -> int:
    provider = FileSystemContentProvider(workspace)
    resolver = DeclarationIndexResolver(provider, provider.list_files(SOURCE_EXTENSIONS))
    api = ReviewContextAPI(resolver=resolver, content_provider=provider)

    old_text = Path(old_copy).read_text(encoding='utf-8')
    new_text = (Path(workspace) / relative_path).read_text(encoding='utf-8')

    result = await api.build_context([FileVersions(path=relative_path, old_text=old_text, new_text=new_text)])

    print(api.format_markdown(result))
    for error in result.errors:
        print(f"Error: {error}", file=sys.stderr)
    return 1 if result.errors else 0


def main():
    """Main demo function."""
    setup_logging()

    if len(sys.argv) != 4:
        print("Usage: python definition_tracking_demo.py <workspace> <relative_path> <old_copy>")
        sys.exit(1)

    try:
        sys.exit(asyncio.run(run(sys.argv[1], sys.argv[2], sys.argv[3])))
    except KeyboardInterrupt:
        print("\nDemo interrupted by user")
        sys.exit(1)
    except OSError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
