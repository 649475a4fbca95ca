"""Shared dataclasses for parsed diffs."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple


class DiffLineKind(Enum):
    """Classification of a single line inside a hunk."""

    CONTEXT = "context"
    ADDED = "added"
    REMOVED = "removed"

    @property
    def prefix(self) -> str:
        """The marker character used for this kind of line in a unified diff."""
        if self is DiffLineKind.ADDED:
            return '+'

        if self is DiffLineKind.REMOVED:
            return '-'

        return ' '


class FileChangeType(Enum):
    """How a file was changed."""

    ADDED = "added"
    DELETED = "deleted"
    MODIFIED = "modified"
    RENAMED = "renamed"
    COPIED = "copied"
    BINARY = "binary"
    MODE_CHANGED = "mode-changed"


@dataclass(frozen=True)
class DiffLine:
    """Represents a single line in a diff hunk."""

    kind: DiffLineKind
    content: str  # The line content, without the prefix character or line terminator
    has_trailing_newline: bool = True


@dataclass(frozen=True)
class DiffHunk:
    """Represents a single hunk from a unified diff."""

    old_start: int  # Starting line number in original file (1-indexed)
    old_count: int  # Number of lines in original file
    new_start: int  # Starting line number in new file (1-indexed)
    new_count: int  # Number of lines in new file
    lines: Tuple[DiffLine, ...] = ()
    section: str = ""  # Function context printed after the closing @@

    def added_count(self) -> int:
        """Number of added lines in this hunk."""
        return sum(1 for line in self.lines if line.kind is DiffLineKind.ADDED)

    def removed_count(self) -> int:
        """Number of removed lines in this hunk."""
        return sum(1 for line in self.lines if line.kind is DiffLineKind.REMOVED)

    def header(self) -> str:
        """
        Render the canonical hunk header.

        Returns:
            Header of the form "@@ -old_start,old_count +new_start,new_count @@"
            followed by the section text, if any
        """
        header = f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
        if self.section:
            header += f" {self.section}"

        return header


@dataclass(frozen=True)
class FileChange:
    """All the changes made to one file."""

    path: str  # Empty only for deleted files
    old_path: str | None
    change_type: FileChangeType
    is_binary: bool = False
    hunks: Tuple[DiffHunk, ...] = ()
    old_mode: str | None = None
    new_mode: str | None = None
    similarity: int | None = None  # Percentage, for renames and copies

    def display_path(self) -> str:
        """The path that best identifies this file."""
        return self.path or self.old_path or ""

    def added_count(self) -> int:
        """Number of added lines across all hunks."""
        return sum(hunk.added_count() for hunk in self.hunks)

    def removed_count(self) -> int:
        """Number of removed lines across all hunks."""
        return sum(hunk.removed_count() for hunk in self.hunks)


@dataclass(frozen=True)
class DiffParseAnomaly:
    """A recoverable problem found while parsing a diff."""

    line_number: int  # 1-indexed line in the raw diff text
    message: str
    path: str | None = None


@dataclass(frozen=True)
class DiffParseResult:
    """Everything produced by one parse."""

    changes: Tuple[FileChange, ...] = ()
    anomalies: Tuple[DiffParseAnomaly, ...] = field(default_factory=tuple)
