"""
Sequence handling utilities for emas.

Normalization and window extraction shared by the encoders and scorers.
Ambiguity codes inside otherwise valid sequences are kept here; the
scorers skip them in counts and sums.
"""

from __future__ import annotations

from typing import Iterator, Optional

from .errors import DimensionMismatchError


def clean_sequence(sequence: str) -> str:
    """Uppercase a sequence and strip whitespace."""
    return "".join(sequence.upper().split())


def sliding_window(
    sequence: str,
    window_size: int,
    step: int = 1,
) -> Iterator[tuple[int, str]]:
    """
    Generate sliding windows over a sequence.

    Args:
        sequence: Input sequence
        window_size: Size of each window
        step: Step size between windows

    Yields:
        Tuple of (start_position, window_sequence)
    """
    for i in range(0, len(sequence) - window_size + 1, step):
        yield i, sequence[i:i + window_size]


def extract_windows(
    sequence: str,
    window_size: int,
    min_windows: Optional[int] = None,
) -> list[str]:
    """
    All windows of length ``window_size``, at every offset 0..len-window_size.

    Args:
        sequence: Input sequence
        window_size: Window length
        min_windows: If set, require at least this many windows

    Raises:
        DimensionMismatchError: If fewer than ``min_windows`` windows exist
    """
    windows = [w for _, w in sliding_window(sequence, window_size)]
    if min_windows is not None and len(windows) < min_windows:
        raise DimensionMismatchError(
            f"Sequence of length {len(sequence)} yields {len(windows)} windows "
            f"of length {window_size}; at least {min_windows} required"
        )
    return windows
