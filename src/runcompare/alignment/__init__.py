"""Shared-axis alignment of experiment series."""

from runcompare.alignment.aligner import (
    AlignedSeries,
    AlignedSeriesSet,
    Selection,
    align_selection,
    align_series,
)

__all__ = [
    "AlignedSeries",
    "AlignedSeriesSet",
    "Selection",
    "align_selection",
    "align_series",
]
