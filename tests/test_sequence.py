"""
Tests for sequence cleaning, window extraction and fan-out.
"""

import pytest

from emas.core.errors import DimensionMismatchError
from emas.core.parallel import parallel_map
from emas.core.sequence import clean_sequence, extract_windows, sliding_window


# Yeast Sup35 prion segment
SUP35_GNNQQNY = "GNNQQNY"


class TestWindows:
    """Tests for sliding-window extraction."""

    def test_clean_sequence(self):
        assert clean_sequence(" gnn qq\nny ") == SUP35_GNNQQNY

    def test_sliding_window_positions(self):
        windows = list(sliding_window(SUP35_GNNQQNY, 3))
        assert windows[0] == (0, "GNN")
        assert windows[-1] == (4, "QNY")
        assert len(windows) == 5

    def test_sliding_window_step(self):
        windows = list(sliding_window(SUP35_GNNQQNY, 3, step=2))
        assert [i for i, _ in windows] == [0, 2, 4]

    def test_extract_windows_count(self):
        assert len(extract_windows("A" * 20, 9)) == 12

    def test_extract_windows_exact_length(self):
        assert extract_windows(SUP35_GNNQQNY, 7) == [SUP35_GNNQQNY]

    def test_too_short_gives_no_windows(self):
        assert extract_windows(SUP35_GNNQQNY, 9) == []

    def test_min_windows_enforced(self):
        with pytest.raises(DimensionMismatchError):
            extract_windows(SUP35_GNNQQNY, 9, min_windows=1)


class TestParallelMap:
    """Tests for ordered fan-out."""

    def test_sequential(self):
        assert parallel_map(len, ["A", "AA", "AAA"]) == [1, 2, 3]

    def test_threaded_preserves_order(self):
        items = ["A" * i for i in range(1, 30)]
        assert parallel_map(len, items, max_workers=4) == list(range(1, 30))

    def test_empty(self):
        assert parallel_map(len, [], max_workers=4) == []
