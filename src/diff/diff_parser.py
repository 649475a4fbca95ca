"""Unified diff parsing."""

from enum import Enum, auto
import logging
import re
from typing import Dict, List, Tuple

from diff.diff_exceptions import DiffParseError
from diff.diff_types import (
    DiffHunk,
    DiffLine,
    DiffLineKind,
    DiffParseAnomaly,
    DiffParseResult,
    FileChange,
    FileChangeType,
)


class ParserState(Enum):
    """Where the scanner is within the diff."""

    SEEKING_FILE_HEADER = auto()
    IN_FILE_METADATA = auto()
    IN_HUNK = auto()


_HUNK_HEADER_PATTERN = re.compile(r'^@@\s+-(\d+)(?:,(\d+))?\s+\+(\d+)(?:,(\d+))?\s+@@')
_SIMILARITY_PATTERN = re.compile(r'^similarity index (\d+)%$')

_KIND_BY_MARKER: Dict[str, DiffLineKind] = {
    ' ': DiffLineKind.CONTEXT,
    '-': DiffLineKind.REMOVED,
    '+': DiffLineKind.ADDED,
}

# Escapes git uses when it quotes a path
_C_ESCAPES: Dict[str, int] = {
    'a': 0x07,
    'b': 0x08,
    't': 0x09,
    'n': 0x0a,
    'v': 0x0b,
    'f': 0x0c,
    'r': 0x0d,
    '"': 0x22,
    '\\': 0x5c,
}

_DEV_NULL = '/dev/null'


def _take_quoted(text: str) -> Tuple[str, str]:
    """
    Decode a C-style quoted string as written by git.

    Args:
        text: Text starting with a double quote

    Returns:
        Tuple of (decoded string, text remaining after the closing quote)

    Raises:
        DiffParseError: If the quoting is malformed
    """
    out = bytearray()
    i = 1
    while i < len(text):
        ch = text[i]
        if ch == '"':
            return out.decode('utf-8', errors='replace'), text[i + 1:]

        if ch != '\\':
            out.extend(ch.encode('utf-8'))
            i += 1
            continue

        i += 1
        if i >= len(text):
            break

        esc = text[i]
        if esc in '01234567':
            digits = text[i:i + 3]
            if len(digits) != 3 or any(d not in '01234567' for d in digits):
                raise DiffParseError(f"Invalid octal escape in quoted path: {text}")

            out.append(int(digits, 8) & 0xff)
            i += 3
            continue

        if esc not in _C_ESCAPES:
            raise DiffParseError(f"Invalid escape '\\{esc}' in quoted path: {text}")

        out.append(_C_ESCAPES[esc])
        i += 1

    raise DiffParseError(f"Unterminated quoted path: {text}")


def _is_binary_marker(line: str) -> bool:
    return (line.startswith('Binary files ') and line.endswith(' differ')) or line == 'GIT binary patch'


def _strip_prefix(path: str, prefix: str) -> str:
    if path.startswith(prefix):
        return path[len(prefix):]

    return path


class _HunkBuilder:
    """Accumulates the lines of one hunk and checks them against its header."""

    def __init__(self, old_start: int, old_count: int, new_start: int, new_count: int, section: str) -> None:
        self.old_start = old_start
        self.old_count = old_count
        self.new_start = new_start
        self.new_count = new_count
        self.section = section
        self.lines: List[DiffLine] = []
        self.old_remaining = old_count
        self.new_remaining = new_count

    def is_complete(self) -> bool:
        """True once every line promised by the header has been seen."""
        return self.old_remaining == 0 and self.new_remaining == 0

    def accepts(self, kind: DiffLineKind) -> bool:
        """True if the header still has room for a line of this kind."""
        if kind is DiffLineKind.CONTEXT:
            return self.old_remaining > 0 and self.new_remaining > 0

        if kind is DiffLineKind.REMOVED:
            return self.old_remaining > 0

        return self.new_remaining > 0

    def add(self, kind: DiffLineKind, content: str) -> None:
        """Append a line; the caller must have checked accepts() first."""
        if kind is not DiffLineKind.ADDED:
            self.old_remaining -= 1

        if kind is not DiffLineKind.REMOVED:
            self.new_remaining -= 1

        self.lines.append(DiffLine(kind, content))

    def mark_no_newline(self) -> bool:
        """
        Record that the last line has no trailing newline.

        Returns:
            False if there is no line to attach the marker to
        """
        if not self.lines:
            return False

        last = self.lines[-1]
        self.lines[-1] = DiffLine(last.kind, last.content, has_trailing_newline=False)
        return True

    def build(self) -> DiffHunk:
        return DiffHunk(
            self.old_start,
            self.old_count,
            self.new_start,
            self.new_count,
            tuple(self.lines),
            self.section
        )


class _FileBuilder:
    """Accumulates the metadata and hunks of one file section."""

    def __init__(self, old_path: str, new_path: str, line_number: int) -> None:
        self.line_number = line_number
        self.old_path = old_path
        self.new_path = new_path
        self.is_new = False
        self.is_deleted = False
        self.is_rename = False
        self.is_copy = False
        self.is_binary = False
        self.old_mode: str | None = None
        self.new_mode: str | None = None
        self.similarity: int | None = None
        self.hunks: List[DiffHunk] = []

    def display_path(self) -> str:
        return self.new_path or self.old_path

    def change_type(self) -> FileChangeType:
        """Work out the change type from everything seen in the section."""
        if self.is_deleted:
            return FileChangeType.DELETED

        if self.is_new:
            return FileChangeType.ADDED

        if self.is_copy:
            return FileChangeType.COPIED

        if self.is_rename or self.old_path != self.new_path:
            return FileChangeType.RENAMED

        if self.is_binary:
            return FileChangeType.BINARY

        if self.old_mode and self.new_mode and self.old_mode != self.new_mode and not self.hunks:
            return FileChangeType.MODE_CHANGED

        return FileChangeType.MODIFIED

    def build(self) -> FileChange:
        change_type = self.change_type()
        if change_type is FileChangeType.DELETED:
            path = ""
            old_path: str | None = self.old_path or self.new_path

        elif change_type in (FileChangeType.RENAMED, FileChangeType.COPIED):
            path = self.new_path
            old_path = self.old_path

        else:
            path = self.new_path or self.old_path
            old_path = None

        return FileChange(
            path=path,
            old_path=old_path,
            change_type=change_type,
            is_binary=self.is_binary,
            hunks=() if self.is_binary else tuple(self.hunks),
            old_mode=self.old_mode,
            new_mode=self.new_mode,
            similarity=self.similarity
        )


class _DiffScan:
    """
    State for a single pass over one diff text.

    A new scan is created for every parse so that DiffParser itself holds no
    state between calls.
    """

    def __init__(self, parser: 'DiffParser', logger: logging.Logger) -> None:
        self._parser = parser
        self._logger = logger
        self.state = ParserState.SEEKING_FILE_HEADER
        self.file: _FileBuilder | None = None
        self.hunk: _HunkBuilder | None = None
        self.changes: List[FileChange] = []
        self.anomalies: List[DiffParseAnomaly] = []

    def anomaly(self, line_number: int, message: str) -> None:
        path = self.file.display_path() if self.file is not None else None
        self.anomalies.append(DiffParseAnomaly(line_number, message, path or None))
        self._logger.warning("Line %d: %s", line_number, message)

    def feed(self, line_number: int, raw_line: str) -> None:
        """Process one physical line of the diff."""
        line = raw_line[:-1] if raw_line.endswith('\r') else raw_line

        # Hunk content always starts with ' ', '+', '-' or '\', so a file header can never be hunk content
        if line.startswith('diff --git '):
            self.start_file(line_number, line)
            return

        if self.state is ParserState.IN_HUNK:
            self.hunk_line(line_number, raw_line, line)
            return

        if self.state is ParserState.IN_FILE_METADATA:
            self.metadata_line(line_number, line)
            return

        if line.startswith('@@'):
            if self.file is not None and self.file.is_binary:
                self._logger.debug("Line %d: ignoring hunk header in binary file section", line_number)
                return

            self.anomaly(line_number, f"Hunk header outside of a file section: {line}")

    def start_file(self, line_number: int, line: str) -> None:
        self.close_file(line_number)

        try:
            old_path, new_path = self._parser.parse_file_header(line)

        except DiffParseError as e:
            self.anomaly(line_number, str(e))
            old_path, new_path = "", ""

        self.file = _FileBuilder(old_path, new_path, line_number)
        self.state = ParserState.IN_FILE_METADATA

    def close_file(self, line_number: int) -> None:
        self.close_hunk(line_number)
        if self.file is None:
            return

        file = self.file
        if not file.display_path():
            self.anomaly(file.line_number, "File section has no usable path, skipping it")

        else:
            self.changes.append(file.build())

        self.file = None
        self.state = ParserState.SEEKING_FILE_HEADER

    def open_hunk(self, line_number: int, line: str) -> None:
        self.close_hunk(line_number)
        self.state = ParserState.IN_HUNK

        try:
            old_start, old_count, new_start, new_count, section = self._parser.parse_hunk_header(line)

        except DiffParseError as e:
            # Skip everything up to the next hunk or file header
            self.anomaly(line_number, str(e))
            self.hunk = None
            return

        self.hunk = _HunkBuilder(old_start, old_count, new_start, new_count, section)

    def close_hunk(self, line_number: int) -> None:
        hunk = self.hunk
        if hunk is None:
            return

        self.hunk = None
        if not hunk.is_complete():
            self.anomaly(
                line_number,
                f"Hunk at -{hunk.old_start} +{hunk.new_start} ended early: "
                f"{hunk.old_remaining} old and {hunk.new_remaining} new lines missing, skipping it"
            )
            return

        assert self.file is not None, "Open hunk without an open file"
        self.file.hunks.append(hunk.build())

    def drop_hunk(self, line_number: int, message: str) -> None:
        hunk = self.hunk
        assert hunk is not None
        self.anomaly(line_number, f"Hunk at -{hunk.old_start} +{hunk.new_start}: {message}, skipping it")
        self.hunk = None

    def hunk_line(self, line_number: int, raw_line: str, line: str) -> None:
        if line.startswith('@@'):
            self.open_hunk(line_number, line)
            return

        hunk = self.hunk
        if hunk is None:
            return

        marker = raw_line[:1]
        if marker == '\\':
            if not hunk.mark_no_newline():
                self._logger.debug("Line %d: no-newline marker with no preceding line", line_number)

            return

        kind = _KIND_BY_MARKER.get(marker)
        content = raw_line[1:]

        # Some tools strip the single space from empty context lines
        if kind is None and not line and hunk.accepts(DiffLineKind.CONTEXT):
            kind = DiffLineKind.CONTEXT
            content = ""

        if kind is None:
            if not line:
                return

            if _is_binary_marker(line):
                assert self.file is not None
                self.file.is_binary = True
                self.hunk = None
                self.state = ParserState.SEEKING_FILE_HEADER
                return

            if hunk.is_complete():
                # Anything else after a finished hunk ends the file section
                self.close_file(line_number)
                return

            self.drop_hunk(line_number, f"unexpected line inside hunk: {line!r}")
            return

        if not hunk.accepts(kind):
            self.drop_hunk(
                line_number,
                f"more lines than declared (-{hunk.old_count} +{hunk.new_count})"
            )
            return

        hunk.add(kind, content)

    def metadata_line(self, line_number: int, line: str) -> None:
        file = self.file
        assert file is not None, "Metadata state without an open file"

        if line.startswith('@@'):
            self.open_hunk(line_number, line)
            return

        try:
            self._apply_metadata(file, line)

        except DiffParseError as e:
            self.anomaly(line_number, str(e))

        if file.is_binary:
            # Nothing else in a binary section is parsed
            self.state = ParserState.SEEKING_FILE_HEADER

    def _apply_metadata(self, file: _FileBuilder, line: str) -> None:
        if line.startswith('--- '):
            path = self._parser.parse_marker_path(line[4:], 'a/')
            if path is None:
                file.is_new = True

            elif not file.is_rename and not file.is_copy:
                file.old_path = path

            return

        if line.startswith('+++ '):
            path = self._parser.parse_marker_path(line[4:], 'b/')
            if path is None:
                file.is_deleted = True

            elif not file.is_rename and not file.is_copy:
                file.new_path = path

            return

        if line.startswith('new file mode '):
            file.is_new = True
            file.new_mode = line[len('new file mode '):].strip()
            return

        if line.startswith('deleted file mode '):
            file.is_deleted = True
            file.old_mode = line[len('deleted file mode '):].strip()
            return

        if line.startswith('old mode '):
            file.old_mode = line[len('old mode '):].strip()
            return

        if line.startswith('new mode '):
            file.new_mode = line[len('new mode '):].strip()
            return

        if line.startswith('rename from '):
            file.is_rename = True
            file.old_path = self._parser.parse_metadata_path(line[len('rename from '):])
            return

        if line.startswith('rename to '):
            file.is_rename = True
            file.new_path = self._parser.parse_metadata_path(line[len('rename to '):])
            return

        if line.startswith('copy from '):
            file.is_copy = True
            file.old_path = self._parser.parse_metadata_path(line[len('copy from '):])
            return

        if line.startswith('copy to '):
            file.is_copy = True
            file.new_path = self._parser.parse_metadata_path(line[len('copy to '):])
            return

        match = _SIMILARITY_PATTERN.match(line)
        if match:
            file.similarity = int(match.group(1))
            return

        if _is_binary_marker(line):
            file.is_binary = True
            return

        # index, dissimilarity index and anything unknown carry nothing we keep
        self._logger.debug("Ignoring metadata line: %s", line)


class DiffParser:
    """
    Parser for unified diffs produced by git.

    The parser is a state machine over physical lines.  A "diff --git" line
    starts a new file section, metadata lines refine it, and "@@" headers open
    hunks whose lines are classified by their first column only.  Malformed
    sections are skipped and reported as anomalies rather than aborting the
    whole parse.
    """

    def __init__(self) -> None:
        """Initialize the parser."""
        self._logger = logging.getLogger("DiffParser")

    def parse(self, diff_text: str) -> List[FileChange]:
        """
        Parse unified diff text into file changes.

        Args:
            diff_text: Unified diff format text

        Returns:
            File changes in the order they appear in the diff.  Empty or
            whitespace-only input gives an empty list.
        """
        return list(self.parse_with_anomalies(diff_text).changes)

    def parse_with_anomalies(self, diff_text: str) -> DiffParseResult:
        """
        Parse unified diff text, also returning any problems that were skipped.

        Args:
            diff_text: Unified diff format text

        Returns:
            The parsed file changes and the anomalies recovered from
        """
        if not diff_text or not diff_text.strip():
            return DiffParseResult()

        lines = diff_text.split('\n')
        if lines[-1] == '':
            lines.pop()

        scan = _DiffScan(self, self._logger)
        for index, line in enumerate(lines):
            scan.feed(index + 1, line)

        scan.close_file(len(lines) + 1)

        self._logger.debug(
            "Parsed %d file changes with %d anomalies", len(scan.changes), len(scan.anomalies)
        )
        return DiffParseResult(tuple(scan.changes), tuple(scan.anomalies))

    def parse_hunk_header(self, header: str) -> Tuple[int, int, int, int, str]:
        """
        Parse a hunk header line.

        Args:
            header: Line of the form "@@ -old_start[,old_count] +new_start[,new_count] @@ [section]"

        Returns:
            Tuple of (old_start, old_count, new_start, new_count, section).  An
            omitted count defaults to 1.

        Raises:
            DiffParseError: If the header is malformed
        """
        match = _HUNK_HEADER_PATTERN.match(header)
        if not match:
            raise DiffParseError(f"Invalid hunk header format: {header}", {"header": header})

        old_start = int(match.group(1))
        old_count = int(match.group(2)) if match.group(2) is not None else 1
        new_start = int(match.group(3))
        new_count = int(match.group(4)) if match.group(4) is not None else 1
        section = header[match.end():].strip()
        return old_start, old_count, new_start, new_count, section

    def parse_file_header(self, header: str) -> Tuple[str, str]:
        """
        Extract the two paths from a "diff --git a/<old> b/<new>" line.

        Args:
            header: The full header line

        Returns:
            Tuple of (old path, new path) with the a/ and b/ prefixes removed

        Raises:
            DiffParseError: If the paths cannot be found
        """
        rest = header[len('diff --git '):]

        if rest.startswith('"'):
            old_path, remainder = _take_quoted(rest)
            remainder = remainder.lstrip(' ')
            if not remainder:
                raise DiffParseError(f"Missing new path in file header: {header}", {"header": header})

            new_path = _take_quoted(remainder)[0] if remainder.startswith('"') else remainder
            return _strip_prefix(old_path, 'a/'), _strip_prefix(new_path, 'b/')

        if rest.endswith('"') and ' "' in rest:
            split = rest.index(' "')
            new_path = _take_quoted(rest[split + 1:])[0]
            return _strip_prefix(rest[:split], 'a/'), _strip_prefix(new_path, 'b/')

        # When both sides name the same file the split point is exactly in the middle
        if len(rest) % 2 == 1:
            middle = len(rest) // 2
            if rest[middle] == ' ':
                old_path = _strip_prefix(rest[:middle], 'a/')
                new_path = _strip_prefix(rest[middle + 1:], 'b/')
                if old_path == new_path:
                    return old_path, new_path

        split = rest.rfind(' b/')
        if split < 0:
            split = rest.rfind(' ')

        if split <= 0:
            raise DiffParseError(f"Cannot find paths in file header: {header}", {"header": header})

        return _strip_prefix(rest[:split], 'a/'), _strip_prefix(rest[split + 1:], 'b/')

    def parse_marker_path(self, value: str, prefix: str) -> str | None:
        """
        Parse the path from a "---" or "+++" line.

        Args:
            value: Text after the "--- " or "+++ " marker
            prefix: The side prefix to strip ("a/" or "b/")

        Returns:
            The path, or None for /dev/null

        Raises:
            DiffParseError: If a quoted path is malformed
        """
        if value.startswith('"'):
            path = _take_quoted(value)[0]

        else:
            # Anything after a tab is a timestamp
            path = value.split('\t', 1)[0]

        if path == _DEV_NULL:
            return None

        return _strip_prefix(path, prefix)

    def parse_metadata_path(self, value: str) -> str:
        """
        Parse the path from a rename or copy line, which carry no a/ or b/ prefix.

        Raises:
            DiffParseError: If a quoted path is malformed
        """
        if value.startswith('"'):
            return _take_quoted(value)[0]

        return value
