"""Tests for one-time legend display."""

from pathlib import Path

from prstack.core.legend import FilesystemLegendTracker, InMemoryLegendTracker, format_legend


def test_filesystem_tracker_shows_legend_once(tmp_path: Path) -> None:
    tracker = FilesystemLegendTracker(home=tmp_path)

    assert tracker.should_show() is True
    assert tracker.should_show() is False
    assert tracker.marker_path().exists()


def test_in_memory_tracker() -> None:
    tracker = InMemoryLegendTracker()

    assert tracker.should_show() is True
    assert tracker.seen is True
    assert tracker.should_show() is False


def test_format_legend_ascii_and_unicode() -> None:
    assert "Status: [CI | Approved | Mergeable | Stack]" in format_legend(True)
    assert "✓ pass" in format_legend(True)
    assert "Y=pass" in format_legend(False)
