"""
Context Formatter

This module provides Markdown formatting for collected review context.
"""

from .markdown import MarkdownContextFormatter, DefinitionGroup

__all__ = ['MarkdownContextFormatter', 'DefinitionGroup']
