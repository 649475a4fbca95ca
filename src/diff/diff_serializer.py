"""Canonical text rendering of parsed diffs for language model input."""

import logging
from typing import Iterable, List

from diff.diff_exceptions import DiffSerializationError
from diff.diff_types import DiffHunk, FileChange, FileChangeType


class DiffSerializer:
    """
    Renders file changes as plain text for a language model's context window.

    Each file gets one section: a "FILE:" header line naming the path(s) and
    change type, followed by its hunks with their original ' ', '+' and '-'
    prefixes.  Sections are separated by a fixed delimiter line.  The output
    depends only on the input, so identical changes always give identical text.
    """

    SECTION_DELIMITER = "=" * 80
    NO_NEWLINE_MARKER = "\\ No newline at end of file"

    def __init__(self) -> None:
        """Initialize the serializer."""
        self._logger = logging.getLogger("DiffSerializer")

    def serialize(self, changes: Iterable[FileChange]) -> str:
        """
        Serialize file changes.

        Args:
            changes: File changes, in the order they should appear

        Returns:
            The canonical text, ending in a newline, or an empty string if
            there are no changes
        """
        sections = [self._serialize_file(change) for change in changes]
        if not sections:
            return ""

        separator = f"\n{self.SECTION_DELIMITER}\n"
        return separator.join(sections) + "\n"

    def write(self, changes: Iterable[FileChange], path: str) -> str:
        """
        Serialize file changes and write them to a file.

        Args:
            changes: File changes to serialize
            path: Destination file path

        Returns:
            The serialized text that was written

        Raises:
            DiffSerializationError: If the file cannot be written
        """
        text = self.serialize(changes)
        try:
            with open(path, 'w', encoding='utf-8', newline='\n') as f:
                f.write(text)

        except OSError as e:
            raise DiffSerializationError(f"Failed to write changes to {path}: {e}", {"path": path}) from e

        self._logger.debug("Wrote %d characters of serialized changes to %s", len(text), path)
        return text

    def header_line(self, change: FileChange) -> str:
        """
        Build the header line for one file section.

        Args:
            change: The file change

        Returns:
            A line such as "FILE: src/a.py [modified]" or
            "FILE: old.py -> new.py [renamed]"
        """
        change_type = change.change_type
        if change_type is FileChangeType.DELETED:
            paths = change.old_path or change.path

        elif change_type in (FileChangeType.RENAMED, FileChangeType.COPIED) and change.old_path:
            paths = f"{change.old_path} -> {change.path}"

        else:
            paths = change.path

        header = f"FILE: {paths} [{change_type.value}]"

        if change.old_mode and change.new_mode and change.old_mode != change.new_mode:
            header += f" (mode {change.old_mode} -> {change.new_mode})"

        if change.is_binary and change_type is not FileChangeType.BINARY:
            header += " (binary)"

        return header

    def _serialize_file(self, change: FileChange) -> str:
        lines: List[str] = [self.header_line(change)]

        if not change.is_binary:
            for hunk in change.hunks:
                lines.extend(self._serialize_hunk(hunk))

        return "\n".join(lines)

    def _serialize_hunk(self, hunk: DiffHunk) -> List[str]:
        lines = [hunk.header()]
        for line in hunk.lines:
            lines.append(f"{line.kind.prefix}{line.content}")
            if not line.has_trailing_newline:
                lines.append(self.NO_NEWLINE_MARKER)

        return lines
