"""
Definition Tracking

This module provides bounded, cycle-safe collection of definition
blocks referenced from changed lines.
"""

from .ports import (
    ContentProvider,
    Document,
    ReadFailure,
    Resolution,
    ResolutionStatus,
    SymbolResolver,
)
from .identifiers import Identifier, extract_identifiers, strip_comments
from .blocks import BlockExtractor, ExtractedBlock
from .collector import DefinitionCollector, Probe
from .providers import DeclarationIndexResolver, FileSystemContentProvider, InMemoryContentProvider

__all__ = [
    'ContentProvider',
    'Document',
    'ReadFailure',
    'Resolution',
    'ResolutionStatus',
    'SymbolResolver',
    'Identifier',
    'extract_identifiers',
    'strip_comments',
    'BlockExtractor',
    'ExtractedBlock',
    'DefinitionCollector',
    'Probe',
    'DeclarationIndexResolver',
    'FileSystemContentProvider',
    'InMemoryContentProvider',
]
