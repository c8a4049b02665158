"""Tests for utils: first_paragraph, slugify, truncate, short_cwd."""

from pathlib import Path

from plugdesk.core.utils import first_paragraph, short_cwd, slugify, truncate


class TestFirstParagraph:
    def test_blank_line_separator(self):
        assert first_paragraph("One.\n\nTwo.") == "One."

    def test_blank_line_with_spaces(self):
        assert first_paragraph("  One.  \n   \nTwo.") == "One."

    def test_single_newline(self):
        assert first_paragraph("First\nSecond") == "First"

    def test_no_breaks(self):
        assert first_paragraph("Only one") == "Only one"

    def test_empty(self):
        assert first_paragraph("") == ""

    def test_leading_blank_paragraph_falls_back_to_full_text(self):
        text = "\n\nBody"
        assert first_paragraph(text) == text


class TestSlugify:
    def test_basic(self):
        assert slugify("Code Fmt") == "code-fmt"

    def test_collapses_symbols(self):
        assert slugify("  My__Plugin!! v2 ") == "my-plugin-v2"


class TestTruncate:
    def test_short(self):
        assert truncate("abc", 5) == "abc"

    def test_long(self):
        assert truncate("abcdef", 4) == "abc…"
        assert len(truncate("abcdef", 4)) == 4

    def test_tiny_width(self):
        assert truncate("abcdef", 1) == "a"


class TestShortCwd:
    def test_home(self):
        assert short_cwd(Path.home()) == "~"

    def test_under_home(self):
        assert short_cwd(Path.home() / "x" / "y") == "~/x/y"

    def test_outside_home(self, tmp_path):
        if str(tmp_path).startswith(str(Path.home())):
            return
        assert short_cwd(tmp_path) == str(tmp_path)
