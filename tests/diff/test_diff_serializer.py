"""Tests for the language model diff serializer."""

import os

import pytest

from diff.diff_exceptions import DiffSerializationError
from diff.diff_parser import DiffParser
from diff.diff_serializer import DiffSerializer
from diff.diff_types import DiffHunk, DiffLine, DiffLineKind, FileChange, FileChangeType


DELIMITER = "=" * 80


MIXED_DIFF = """diff --git a/src/app.py b/src/app.py
index 1111111..2222222 100644
--- a/src/app.py
+++ b/src/app.py
@@ -1,3 +1,4 @@ def main():
 import os
-import sys
+import sys, json
+import re
 print(os)
diff --git a/old.txt b/new.txt
similarity index 100%
rename from old.txt
rename to new.txt
diff --git a/logo.png b/logo.png
index 3333333..4444444 100644
Binary files a/logo.png and b/logo.png differ
diff --git a/gone.txt b/gone.txt
deleted file mode 100644
--- a/gone.txt
+++ /dev/null
@@ -1 +0,0 @@
-bye
\\ No newline at end of file
"""


class TestDiffSerializerFormat:
    """Test the serialized text format."""

    def test_serialize_empty(self):
        """Test that no changes give an empty string."""
        assert DiffSerializer().serialize([]) == ""

    def test_serialize_single_file(self):
        """Test the exact output for one modified file."""
        change = FileChange(
            path="src/a.go",
            old_path=None,
            change_type=FileChangeType.MODIFIED,
            hunks=(
                DiffHunk(1, 3, 1, 4, (
                    DiffLine(DiffLineKind.CONTEXT, "foo"),
                    DiffLine(DiffLineKind.REMOVED, "bar"),
                    DiffLine(DiffLineKind.ADDED, "bar2"),
                    DiffLine(DiffLineKind.ADDED, "baz"),
                    DiffLine(DiffLineKind.CONTEXT, "qux"),
                )),
            )
        )

        assert DiffSerializer().serialize([change]) == (
            "FILE: src/a.go [modified]\n"
            "@@ -1,3 +1,4 @@\n"
            " foo\n"
            "-bar\n"
            "+bar2\n"
            "+baz\n"
            " qux\n"
        )

    def test_serialize_mixed_diff(self):
        """Test the exact output for several kinds of change."""
        changes = DiffParser().parse(MIXED_DIFF)
        text = DiffSerializer().serialize(changes)

        assert text == (
            "FILE: src/app.py [modified]\n"
            "@@ -1,3 +1,4 @@ def main():\n"
            " import os\n"
            "-import sys\n"
            "+import sys, json\n"
            "+import re\n"
            " print(os)\n"
            f"{DELIMITER}\n"
            "FILE: old.txt -> new.txt [renamed]\n"
            f"{DELIMITER}\n"
            "FILE: logo.png [binary]\n"
            f"{DELIMITER}\n"
            "FILE: gone.txt [deleted]\n"
            "@@ -1,1 +0,0 @@\n"
            "-bye\n"
            "\\ No newline at end of file\n"
        )

    def test_sections_separated_by_delimiter(self):
        """Test that there is one delimiter between each pair of sections."""
        text = DiffSerializer().serialize(DiffParser().parse(MIXED_DIFF))
        assert text.count(DELIMITER) == 3
        assert not text.startswith(DELIMITER)
        assert text.endswith("\n")
        assert not text.endswith("\n\n")

    def test_mode_change_header(self):
        """Test that mode changes are shown in the header."""
        change = FileChange(
            path="run.sh",
            old_path=None,
            change_type=FileChangeType.MODE_CHANGED,
            old_mode="100644",
            new_mode="100755"
        )
        assert DiffSerializer().header_line(change) == "FILE: run.sh [mode-changed] (mode 100644 -> 100755)"

    def test_binary_added_header(self):
        """Test that a binary file with a structural type is flagged binary."""
        change = FileChange(path="img.png", old_path=None, change_type=FileChangeType.ADDED, is_binary=True)
        assert DiffSerializer().header_line(change) == "FILE: img.png [added] (binary)"

    def test_copied_header(self):
        """Test the header for a copied file."""
        change = FileChange(path="b.txt", old_path="a.txt", change_type=FileChangeType.COPIED)
        assert DiffSerializer().header_line(change) == "FILE: a.txt -> b.txt [copied]"

    def test_deleted_header_uses_old_path(self):
        """Test the header for a deleted file."""
        change = FileChange(path="", old_path="gone.txt", change_type=FileChangeType.DELETED)
        assert DiffSerializer().header_line(change) == "FILE: gone.txt [deleted]"

    def test_hunk_section_text_preserved(self):
        """Test that function context after the hunk header is kept."""
        hunk = DiffHunk(4, 1, 4, 1, (DiffLine(DiffLineKind.CONTEXT, "x"),), "class Foo:")
        assert hunk.header() == "@@ -4,1 +4,1 @@ class Foo:"

    def test_header_like_content_round_trip(self):
        """Test that header-like hunk content keeps its prefix in the output."""
        diff_text = """diff --git a/notes.md b/notes.md
--- a/notes.md
+++ b/notes.md
@@ -1,2 +1,2 @@
--- a/x
+++ b/x
 end
"""
        text = DiffSerializer().serialize(DiffParser().parse(diff_text))
        assert "\n--- a/x\n+++ b/x\n end\n" in text


class TestDiffSerializerDeterminism:
    """Test that serialization depends only on its input."""

    def test_repeated_serialization_identical(self):
        """Test that serializing the same parse twice gives identical text."""
        first = DiffSerializer().serialize(DiffParser().parse(MIXED_DIFF))
        second = DiffSerializer().serialize(DiffParser().parse(MIXED_DIFF))
        assert first == second

    def test_serializer_instance_reuse(self):
        """Test that a serializer instance keeps no state between calls."""
        serializer = DiffSerializer()
        changes = DiffParser().parse(MIXED_DIFF)

        first = serializer.serialize(changes)
        serializer.serialize([])
        assert serializer.serialize(changes) == first


class TestDiffSerializerWrite:
    """Test writing serialized changes to a file."""

    def test_write_creates_file(self, tmp_path):
        """Test that write saves the same text it returns."""
        path = os.path.join(tmp_path, "changes.txt")
        text = DiffSerializer().write(DiffParser().parse(MIXED_DIFF), path)

        with open(path, 'r', encoding='utf-8') as f:
            assert f.read() == text

    def test_write_to_missing_directory_raises(self, tmp_path):
        """Test that an unwritable path raises DiffSerializationError."""
        path = os.path.join(tmp_path, "missing", "changes.txt")

        with pytest.raises(DiffSerializationError) as exc_info:
            DiffSerializer().write([], path)

        assert exc_info.value.error_details == {"path": path}
