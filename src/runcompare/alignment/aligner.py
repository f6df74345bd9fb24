"""
Alignment of several experiments' series onto one shared step axis.

Given a metric and an ordered selection of experiments, the aligner takes the
union of the steps each selected experiment recorded for that metric, sorts it
numerically, and emits one value per step per experiment. A step an
experiment did not record is ``None`` in its series: gaps are explicit and are
never filled with zero or with a neighbouring value.

Two kinds of emptiness are kept apart:

- ``align_series`` returns ``None`` ("no result") when nothing is selected or
  the metric is unknown to the index.
- It returns an :class:`AlignedSeriesSet` with an empty axis when the metric
  exists but none of the selected experiments recorded it.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from runcompare import logger
from runcompare.index.builder import MetricIndex
from runcompare.index.coercion import Step


@dataclass(frozen=True)
class Selection:
    """
    Caller-owned choice of metric and experiments.

    ``experiments`` keeps the caller's order; repeated ids collapse onto their
    first occurrence. All mutators return a new Selection.
    """

    metric: Optional[str] = None
    experiments: Tuple[str, ...] = field(default=())

    def __post_init__(self):
        if isinstance(self.experiments, str):
            raise TypeError(
                f"experiments must be a sequence of ids, not the string {self.experiments!r}"
            )
        object.__setattr__(self, "experiments", tuple(dict.fromkeys(self.experiments)))

    def with_metric(self, metric: Optional[str]) -> 'Selection':
        return replace(self, metric=metric or None)

    def with_experiments(self, experiments: Iterable[str]) -> 'Selection':
        return replace(self, experiments=experiments)

    def toggle(self, experiment_id: str) -> 'Selection':
        """Remove ``experiment_id`` if selected, otherwise append it."""
        if experiment_id in self.experiments:
            return replace(self, experiments=tuple(e for e in self.experiments if e != experiment_id))
        return replace(self, experiments=self.experiments + (experiment_id,))

    def clear(self) -> 'Selection':
        return Selection()

    @property
    def is_complete(self) -> bool:
        """True when both a metric and at least one experiment are chosen."""
        return bool(self.metric) and bool(self.experiments)


@dataclass(frozen=True)
class AlignedSeries:
    """One experiment's values on the shared axis; ``None`` marks a gap."""

    experiment_id: str
    values: Tuple[Optional[float], ...]

    @property
    def observed_count(self) -> int:
        return sum(v is not None for v in self.values)

    def __len__(self) -> int:
        return len(self.values)


@dataclass(frozen=True)
class AlignedSeriesSet:
    """
    Series of several experiments sharing a strictly increasing step axis.

    Attributes:
        metric: Metric the series belong to, used for axis labelling
        steps: Sorted, de-duplicated union of observed steps
        series: One entry per selected experiment, in selection order
    """

    metric: str
    steps: Tuple[Step, ...]
    series: Tuple[AlignedSeries, ...]

    @property
    def experiment_ids(self) -> Tuple[str, ...]:
        return tuple(s.experiment_id for s in self.series)

    @property
    def is_empty(self) -> bool:
        """True when the selection is valid but contributed no steps."""
        return not self.steps

    def series_for(self, experiment_id: str) -> Optional[AlignedSeries]:
        for s in self.series:
            if s.experiment_id == experiment_id:
                return s
        return None

    def to_dataframe(self) -> pd.DataFrame:
        """
        Wide DataFrame: index ``step``, one nullable ``Float64`` column per
        experiment, gaps as ``pd.NA``.
        """
        data = {
            s.experiment_id: pd.array(list(s.values), dtype="Float64")
            for s in self.series
        }
        return pd.DataFrame(data, index=pd.Index(list(self.steps), name="step"))

    def to_chart_data(self) -> Dict[str, Any]:
        """
        Plain structure for a line-chart collaborator.

        Returns:
            ``{"title": metric, "labels": [steps], "datasets": [{"label", "data"}]}``
            with ``None`` for gaps
        """
        return {
            "title": self.metric,
            "labels": list(self.steps),
            "datasets": [
                {"label": s.experiment_id, "data": list(s.values)}
                for s in self.series
            ],
        }


def align_series(
    index: MetricIndex,
    metric: Optional[str],
    experiments: Sequence[str],
) -> Optional[AlignedSeriesSet]:
    """
    Align the selected experiments' values for ``metric`` on a shared axis.

    Args:
        index: Index to read from; never modified
        metric: Chosen metric name, or None when nothing is chosen
        experiments: Chosen experiment ids in display order; unknown ids and
            ids without the metric contribute no steps

    Returns:
        The aligned set, or ``None`` when no experiment is selected or the
        metric is unset or absent from the index

    Raises:
        TypeError: If ``experiments`` is a single string instead of a sequence

    Example:
        >>> aligned = align_series(index, "loss", ["E1", "E2"])
        >>> aligned.steps
        (0, 1, 2)
        >>> aligned.series[0].values
        (1.0, 0.5, None)
    """
    if isinstance(experiments, str):
        raise TypeError(f"experiments must be a sequence of ids, not the string {experiments!r}")
    selected = tuple(dict.fromkeys(experiments))
    if not metric or not selected:
        logger.debug("Alignment skipped: selection incomplete")
        return None
    if not index.has_metric(metric):
        logger.debug(f"Alignment skipped: metric '{metric}' not in index")
        return None

    step_maps = [index.series(experiment_id, metric) or {} for experiment_id in selected]

    union = set()
    for steps in step_maps:
        union.update(steps)
    axis: List[Step] = sorted(union)

    series = tuple(
        AlignedSeries(
            experiment_id=experiment_id,
            values=tuple(steps.get(step) for step in axis),
        )
        for experiment_id, steps in zip(selected, step_maps)
    )

    logger.debug(
        f"Aligned metric '{metric}' for {len(series)} experiment(s) on {len(axis)} step(s)"
    )
    return AlignedSeriesSet(metric=metric, steps=tuple(axis), series=series)


def align_selection(index: MetricIndex, selection: Selection) -> Optional[AlignedSeriesSet]:
    """Shorthand for ``align_series(index, selection.metric, selection.experiments)``."""
    return align_series(index, selection.metric, selection.experiments)


__all__ = [
    "AlignedSeries",
    "AlignedSeriesSet",
    "Selection",
    "align_selection",
    "align_series",
]
