"""Experiment -> metric -> step -> value index and numeric coercion."""

from runcompare.index.builder import MetricIndex, build_index
from runcompare.index.coercion import Step, coerce_step, coerce_value

__all__ = ["MetricIndex", "Step", "build_index", "coerce_step", "coerce_value"]
