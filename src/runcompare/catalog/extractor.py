"""
Catalog of experiments and metrics available in an index.

The catalog is a projection, recomputed from the index whenever it is asked
for; it holds no state of its own that could drift from the index.
"""

from dataclasses import dataclass
from typing import Tuple

from runcompare import logger
from runcompare.index.builder import MetricIndex


@dataclass(frozen=True)
class Catalog:
    """
    Distinct experiment ids and metric names, each in first-appearance order.

    Attributes:
        experiments: Experiment identifiers for the selection checklist
        metrics: Metric names for the single-choice metric selector
    """

    experiments: Tuple[str, ...] = ()
    metrics: Tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.experiments

    def search_experiments(self, query: str) -> Tuple[str, ...]:
        """
        Case-insensitive substring search over experiment ids.

        Args:
            query: Search text; blank returns every experiment

        Returns:
            Matching experiment ids in catalog order
        """
        needle = (query or "").lower()
        if not needle:
            return self.experiments
        return tuple(e for e in self.experiments if needle in e.lower())


def extract_catalog(index: MetricIndex) -> Catalog:
    """Project an index onto its experiment and metric lists."""
    catalog = Catalog(experiments=index.experiment_ids, metrics=index.metric_names)
    logger.debug(
        f"Catalog extracted: {len(catalog.experiments)} experiment(s), "
        f"{len(catalog.metrics)} metric(s)"
    )
    return catalog


__all__ = ["Catalog", "extract_catalog"]
