"""
Hierarchical experiment -> metric -> step -> value index.

``build_index`` is the only writer. It walks the records once, coerces step
and value, drops rows that fail coercion, and overwrites earlier values for a
repeated (experiment, metric, step) triple. The resulting :class:`MetricIndex`
is read-only: accessors hand out ``MappingProxyType`` views and tuples.

Ordering guarantees:

- experiments are kept in the order their first valid row appeared
- metrics within an experiment are kept in first-appearance order
- ``metric_names`` keeps the global first-appearance order across all
  experiments, which the catalog relies on
"""

from types import MappingProxyType
from typing import Dict, Iterable, Iterator, Mapping, Optional, Tuple

import pandas as pd

from runcompare import logger
from runcompare.config.models import IngestConfig
from runcompare.io.records import Record

from .coercion import Step, coerce_step, coerce_value

_StepMap = Dict[Step, float]
_MetricMap = Dict[str, _StepMap]


class MetricIndex:
    """
    Read-only three-level lookup built by :func:`build_index`.

    Example:
        >>> index = build_index(parse_records(text))
        >>> index.series("E1", "loss")[0]
        1.0
    """

    __slots__ = ("_data", "_metric_names", "_observation_count")

    def __init__(self, data: Dict[str, _MetricMap], metric_names: Iterable[str]):
        # Takes ownership of ``data``; only build_index and empty() construct indexes
        self._data = data
        self._metric_names: Tuple[str, ...] = tuple(metric_names)
        self._observation_count = sum(
            len(steps) for metrics in data.values() for steps in metrics.values()
        )

    @classmethod
    def empty(cls) -> 'MetricIndex':
        return cls({}, ())

    @property
    def experiment_ids(self) -> Tuple[str, ...]:
        """Experiment identifiers in first-insertion order."""
        return tuple(self._data)

    @property
    def metric_names(self) -> Tuple[str, ...]:
        """Distinct metric names in global first-insertion order."""
        return self._metric_names

    @property
    def observation_count(self) -> int:
        """Number of retained (experiment, metric, step) triples."""
        return self._observation_count

    @property
    def is_empty(self) -> bool:
        return not self._data

    def has_metric(self, metric_name: Optional[str]) -> bool:
        return metric_name in self._metric_names

    def metrics_for(self, experiment_id: str) -> Tuple[str, ...]:
        """Metric names recorded for one experiment, empty if unknown."""
        return tuple(self._data.get(experiment_id, ()))

    def series(self, experiment_id: str, metric_name: str) -> Optional[Mapping[Step, float]]:
        """
        Read-only ``{step: value}`` view for one experiment and metric.

        Returns:
            The step map, or ``None`` if the experiment never recorded the metric
        """
        steps = self._data.get(experiment_id, {}).get(metric_name)
        if steps is None:
            return None
        return MappingProxyType(steps)

    def get(self, experiment_id: str, metric_name: str, step: Step) -> Optional[float]:
        return self._data.get(experiment_id, {}).get(metric_name, {}).get(step)

    def items(self) -> Iterator[Tuple[str, str, Step, float]]:
        """Yield every retained ``(experiment_id, metric_name, step, value)``."""
        for experiment_id, metrics in self._data.items():
            for metric_name, steps in metrics.items():
                for step, value in steps.items():
                    yield experiment_id, metric_name, step, value

    def to_dataframe(self) -> pd.DataFrame:
        """
        Long-form DataFrame of the index in index order.

        Returns:
            DataFrame with columns ``experiment_id``, ``metric_name``,
            ``step`` and ``value``
        """
        columns = ["experiment_id", "metric_name", "step", "value"]
        df = pd.DataFrame(list(self.items()), columns=columns)
        return df.astype({"value": "float64"})

    def __contains__(self, experiment_id: object) -> bool:
        return experiment_id in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MetricIndex):
            return NotImplemented
        if self._metric_names != other._metric_names:
            return False
        if self.experiment_ids != other.experiment_ids:
            return False
        # Plain dict equality ignores order, so compare the nested key order explicitly
        for experiment_id, metrics in self._data.items():
            other_metrics = other._data[experiment_id]
            if list(metrics) != list(other_metrics):
                return False
            for metric_name, steps in metrics.items():
                if list(steps.items()) != list(other_metrics[metric_name].items()):
                    return False
        return True

    __hash__ = None

    def __repr__(self) -> str:
        return (
            f"MetricIndex(experiments={len(self._data)}, "
            f"metrics={len(self._metric_names)}, "
            f"observations={self._observation_count})"
        )


def build_index(records: Iterable[Record], config: Optional[IngestConfig] = None) -> MetricIndex:
    """
    Build the experiment -> metric -> step -> value index.

    Rows are dropped, never defaulted, when the experiment id is missing, the
    metric name is missing or empty, or step or value fails numeric coercion. A later row for
    the same (experiment, metric, step) replaces the earlier value.

    Args:
        records: Parsed records in input order
        config: Ingest settings; only ``integer_steps`` is consulted

    Returns:
        A new, read-only MetricIndex
    """
    config = config or IngestConfig()

    data: Dict[str, _MetricMap] = {}
    metric_names: Dict[str, None] = {}
    accepted = 0
    dropped = 0
    overwritten = 0

    for record in records:
        step = coerce_step(record.step, integer_steps=config.integer_steps)
        value = coerce_value(record.value)
        if record.experiment_id is None or not record.metric_name or step is None or value is None:
            dropped += 1
            logger.debug(
                f"Dropping row on line {record.line_number}: "
                f"metric={record.metric_name!r} step={record.step!r} value={record.value!r}"
            )
            continue

        steps = data.setdefault(record.experiment_id, {}).setdefault(record.metric_name, {})
        metric_names.setdefault(record.metric_name, None)
        if step in steps:
            overwritten += 1
        steps[step] = value
        accepted += 1

    index = MetricIndex(data, metric_names)
    logger.info(
        f"Indexed {accepted} row(s) into {len(index)} experiment(s) and "
        f"{len(index.metric_names)} metric(s); dropped {dropped}, overwrote {overwritten}"
    )
    return index


__all__ = ["MetricIndex", "build_index"]
