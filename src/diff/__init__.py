"""
Unified diff parsing and serialization.

This package turns the unified diff text produced by git into immutable
file-change records, and renders those records as canonical plain text for
a language model.
"""

from diff.diff_exceptions import (
    DiffError,
    DiffParseError,
    DiffSerializationError,
)
from diff.diff_parser import DiffParser, ParserState
from diff.diff_serializer import DiffSerializer
from diff.diff_types import (
    DiffHunk,
    DiffLine,
    DiffLineKind,
    DiffParseAnomaly,
    DiffParseResult,
    FileChange,
    FileChangeType,
)

__all__ = [
    # Exceptions
    'DiffError',
    'DiffParseError',
    'DiffSerializationError',
    # Types
    'DiffLine',
    'DiffLineKind',
    'DiffHunk',
    'FileChange',
    'FileChangeType',
    'DiffParseAnomaly',
    'DiffParseResult',
    # Core classes
    'DiffParser',
    'DiffSerializer',
    'ParserState',
]
