"""Tests for Matcher and Selection."""

from pathlib import Path

import pytest

from metaborg.core.exceptions import SelectionError, TraversalError
from metaborg.fs.selection import Matcher, Selection, parse_patterns
from metaborg.fs.sorter import Sorter


class TestParsePatterns:
    """Tests for parse_patterns function."""

    def test_none_returns_empty_list(self):
        """None input returns empty list."""
        assert parse_patterns(None) == []

    def test_string_returns_single_item_list(self):
        """String input returns list with single pattern."""
        assert parse_patterns("*.flac") == ["*.flac"]

    def test_list_returns_copy(self):
        """List input returns a new list."""
        patterns = ["*.flac", "*.mp3"]
        result = parse_patterns(patterns)

        assert result == patterns
        assert result is not patterns


class TestMatcher:
    """Tests for Matcher."""

    def test_matches_file_name_only(self):
        """Patterns are matched against the final path component."""
        matcher = Matcher("*.flac")

        assert matcher.matches(Path("/music/album/01.flac"))
        assert not matcher.matches(Path("/music.flac/cover.jpg"))

    def test_any_pattern_matches(self):
        """A name matching any one pattern is a match."""
        matcher = Matcher(["*.flac", "*.mp3"])

        assert matcher.matches("01.mp3")
        assert not matcher.matches("01.ogg")

    def test_empty_matches_nothing(self):
        """A matcher without patterns never matches."""
        assert not Matcher.empty().matches("anything")

    def test_any_matches_everything(self):
        """The wildcard matcher matches every name."""
        assert Matcher.any().matches("anything")
        assert Matcher.any().matches(".hidden")

    def test_character_classes(self):
        """Glob character classes are supported."""
        matcher = Matcher("0[1-3].flac")

        assert matcher.matches("02.flac")
        assert not matcher.matches("04.flac")

    @pytest.mark.parametrize("pattern", ["", None, 3])
    def test_invalid_pattern(self, pattern):
        """Empty or non-string patterns are rejected."""
        with pytest.raises(SelectionError, match="Invalid pattern"):
            Matcher([pattern])


class TestSelection:
    """Tests for Selection."""

    def test_default_selects_everything(self, tmp_path: Path):
        """By default every file and directory is selected."""
        (tmp_path / "a.txt").write_text("")
        (tmp_path / "sub").mkdir()

        selection = Selection()

        assert selection.is_selected(tmp_path / "a.txt")
        assert selection.is_selected(tmp_path / "sub")

    def test_file_and_dir_patterns_are_separate(self, tmp_path: Path):
        """File patterns do not apply to directories and vice versa."""
        (tmp_path / "music.flac").mkdir()
        (tmp_path / "01.flac").write_text("")
        (tmp_path / "notes").write_text("")

        selection = Selection.from_patterns(include_files="*.flac", exclude_dirs="*.flac")

        assert selection.is_selected(tmp_path / "01.flac")
        assert not selection.is_selected(tmp_path / "notes")
        assert not selection.is_selected(tmp_path / "music.flac")

    def test_exclusion_wins(self):
        """A path both included and excluded is not selected."""
        selection = Selection.from_patterns(include_files="*.yml", exclude_files="self.yml")

        assert selection.is_file_pattern_match("item.yml")
        assert not selection.is_file_pattern_match("self.yml")

    def test_missing_path_not_selected(self, tmp_path: Path):
        """Paths that do not exist are never selected."""
        assert not Selection().is_selected(tmp_path / "missing")

    def test_select_in_dir_sorted(self, tmp_path: Path):
        """Selected entries are returned in sorter order."""
        for name in ("c.flac", "a.flac", "self.yml", "b.flac"):
            (tmp_path / name).write_text("")

        selection = Selection.from_patterns(exclude_files="*.yml")
        result = selection.select_in_dir_sorted(tmp_path, Sorter())

        assert [p.name for p in result] == ["a.flac", "b.flac", "c.flac"]

    def test_select_in_missing_dir(self, tmp_path: Path):
        """Listing a missing directory fails."""
        with pytest.raises(TraversalError):
            list(Selection().select_in_dir(tmp_path / "missing"))
