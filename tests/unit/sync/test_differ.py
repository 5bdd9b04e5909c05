"""Tests for the sync differ."""

from mbank.sync.differ import diff


class TestDiff:
    """Tests for set difference in both directions."""

    def test_identical_sets_are_empty(self) -> None:
        """Matching collections produce no discrepancies."""
        result = diff(["a.md", "b.md"], ["b.md", "a.md"])
        assert result.is_empty
        assert result.total == 0

    def test_missing_and_orphaned(self) -> None:
        """Each side's extra entries land in the right list."""
        result = diff(["a.md", "b.md", "c.md"], ["a.md", "x.md"])
        assert result.missing == ["b.md", "c.md"]
        assert result.orphaned == ["x.md"]
        assert result.total == 3

    def test_rename_is_one_missing_plus_one_orphaned(self) -> None:
        """No fuzzy matching: a renamed file shows up in both lists."""
        result = diff(["features/login.md"], ["features/signin.md"])
        assert result.missing == ["features/login.md"]
        assert result.orphaned == ["features/signin.md"]

    def test_empty_memory_bank_is_all_orphaned(self) -> None:
        """An empty memory bank against references yields only orphans."""
        result = diff([], ["progress.md"])
        assert result.missing == []
        assert result.orphaned == ["progress.md"]

    def test_no_references_is_all_missing(self) -> None:
        """A memory bank with no references yields only missing entries."""
        result = diff(["progress.md"], [])
        assert result.missing == ["progress.md"]
        assert result.orphaned == []

    def test_duplicates_do_not_matter(self) -> None:
        """Inputs are treated as sets."""
        result = diff(["a.md", "a.md"], ["a.md"])
        assert result.is_empty
