"""
Tests for shared-axis alignment of experiment series.
"""

import math

import pandas as pd
import pytest

from runcompare.alignment.aligner import (
    AlignedSeries,
    AlignedSeriesSet,
    Selection,
    align_selection,
    align_series,
)
from runcompare.index.builder import MetricIndex, build_index
from runcompare.io.records import Record, parse_records


@pytest.fixture
def scenario_index(scenario_csv) -> MetricIndex:
    return build_index(parse_records(scenario_csv))


@pytest.fixture
def mixed_index(mixed_csv) -> MetricIndex:
    return build_index(parse_records(mixed_csv))


class TestAlignSeries:

    def test_scenario_alignment(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1", "E2"])

        assert aligned.metric == "loss"
        assert aligned.steps == (0, 1, 2)
        assert aligned.series == (
            AlignedSeries("E1", (1.0, 0.5, None)),
            AlignedSeries("E2", (None, 0.7, 0.4)),
        )

    def test_series_follow_selection_order(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E2", "E1"])

        assert aligned.experiment_ids == ("E2", "E1")
        assert aligned.series[0].values == (None, 0.7, 0.4)

    def test_steps_sort_numerically_not_lexically(self):
        records = [Record("E1", "loss", str(step), "1") for step in (10, 9, 100, 2)]

        aligned = align_series(build_index(records), "loss", ["E1"])

        assert aligned.steps == (2, 9, 10, 100)

    def test_no_forward_fill(self, mixed_index):
        aligned = align_series(mixed_index, "loss", ["warmup-lr", "baseline"])

        assert aligned.steps == (0, 1, 2)
        assert aligned.series_for("warmup-lr").values == (2.1, None, 1.5)
        assert aligned.series_for("baseline").values == (2.3, 1.85, None)

    def test_zero_is_distinct_from_missing(self, mixed_index):
        aligned = align_series(mixed_index, "accuracy", ["baseline", "warmup-lr"])

        assert aligned.steps == (0, 3)
        assert aligned.series_for("baseline").values == (0.1, None)
        assert aligned.series_for("warmup-lr").values == (None, 0.0)

    def test_unknown_experiment_contributes_gaps_only(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1", "ghost"])

        assert aligned.steps == (0, 1)
        assert aligned.series_for("ghost").values == (None, None)
        assert aligned.series_for("ghost").observed_count == 0

    def test_metric_known_but_not_recorded_by_selection(self):
        index = build_index([
            Record("E1", "loss", "0", "1"),
            Record("E2", "acc", "0", "1"),
        ])

        aligned = align_series(index, "acc", ["E1"])

        assert aligned is not None
        assert aligned.is_empty
        assert aligned.steps == ()
        assert aligned.series == (AlignedSeries("E1", ()),)

    def test_duplicate_selection_collapses(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1", "E2", "E1"])

        assert aligned.experiment_ids == ("E1", "E2")

    def test_every_series_matches_axis_length(self, mixed_index):
        aligned = align_series(mixed_index, "loss", ["baseline", "warmup-lr", "nobody"])

        assert all(len(s) == len(aligned.steps) for s in aligned.series)

    def test_fresh_result_each_call(self, scenario_index):
        first = align_series(scenario_index, "loss", ["E1"])
        second = align_series(scenario_index, "loss", ["E1"])

        assert first == second
        assert first is not second


class TestNoResult:
    """Nothing selected must be distinguishable from a selection with zero data."""

    def test_empty_experiment_selection(self, scenario_index):
        assert align_series(scenario_index, "loss", []) is None

    @pytest.mark.parametrize("metric", [None, ""])
    def test_unset_metric(self, scenario_index, metric):
        assert align_series(scenario_index, metric, ["E1"]) is None

    def test_metric_absent_from_index(self, scenario_index):
        assert align_series(scenario_index, "perplexity", ["E1"]) is None

    def test_empty_index(self):
        assert align_series(MetricIndex.empty(), "loss", ["E1"]) is None


class TestSelection:

    def test_toggle_appends_and_removes(self):
        selection = Selection().toggle("E1").toggle("E2").toggle("E3")

        assert selection.experiments == ("E1", "E2", "E3")
        assert selection.toggle("E2").experiments == ("E1", "E3")

    def test_selection_is_immutable(self):
        original = Selection(metric="loss")

        changed = original.toggle("E1")

        assert original.experiments == ()
        assert changed.experiments == ("E1",)
        with pytest.raises(AttributeError):
            original.metric = "acc"

    def test_duplicates_collapse_on_construction(self):
        assert Selection(experiments=("b", "a", "b")).experiments == ("b", "a")

    def test_bare_string_experiments_rejected(self):
        with pytest.raises(TypeError):
            Selection(experiments="E1")
        with pytest.raises(TypeError):
            Selection().with_experiments("E1")

    def test_with_experiments_accepts_any_iterable(self):
        selection = Selection().with_experiments(e for e in ["E2", "E1", "E2"])

        assert selection.experiments == ("E2", "E1")

    def test_align_series_rejects_bare_string(self, scenario_index):
        with pytest.raises(TypeError):
            align_series(scenario_index, "loss", "E1")

    def test_with_metric_normalizes_blank(self):
        assert Selection(metric="loss").with_metric("").metric is None

    def test_clear(self):
        assert Selection(metric="loss", experiments=("E1",)).clear() == Selection()

    def test_is_complete(self):
        assert not Selection().is_complete
        assert not Selection(metric="loss").is_complete
        assert not Selection(experiments=("E1",)).is_complete
        assert Selection(metric="loss", experiments=("E1",)).is_complete

    def test_align_selection(self, scenario_index):
        selection = Selection(metric="loss", experiments=("E2",))

        aligned = align_selection(scenario_index, selection)

        assert aligned.steps == (1, 2)
        assert aligned.series[0].values == (0.7, 0.4)

    def test_align_incomplete_selection(self, scenario_index):
        assert align_selection(scenario_index, Selection(metric="loss")) is None


class TestAlignedSeriesSetExports:

    def test_to_dataframe_uses_nullable_floats(self, scenario_index):
        df = align_series(scenario_index, "loss", ["E1", "E2"]).to_dataframe()

        assert df.index.name == "step"
        assert list(df.index) == [0, 1, 2]
        assert list(df.columns) == ["E1", "E2"]
        assert str(df["E1"].dtype) == "Float64"
        assert df.loc[0, "E1"] == 1.0
        assert df.loc[2, "E1"] is pd.NA
        assert df.loc[0, "E2"] is pd.NA

    def test_to_dataframe_keeps_zero(self, mixed_index):
        df = align_series(mixed_index, "accuracy", ["baseline", "warmup-lr"]).to_dataframe()

        assert df.loc[3, "warmup-lr"] == 0.0
        assert df["warmup-lr"].isna().tolist() == [True, False]

    def test_to_chart_data(self, scenario_index):
        chart = align_series(scenario_index, "loss", ["E1", "E2"]).to_chart_data()

        assert chart == {
            "title": "loss",
            "labels": [0, 1, 2],
            "datasets": [
                {"label": "E1", "data": [1.0, 0.5, None]},
                {"label": "E2", "data": [None, 0.7, 0.4]},
            ],
        }

    def test_series_for_unknown(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1"])

        assert aligned.series_for("E2") is None

    def test_gaps_are_none_not_nan(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1", "E2"])

        for series in aligned.series:
            for value in series.values:
                assert value is None or not math.isnan(value)

    def test_set_is_frozen(self, scenario_index):
        aligned = align_series(scenario_index, "loss", ["E1"])

        assert isinstance(aligned, AlignedSeriesSet)
        with pytest.raises(AttributeError):
            aligned.steps = ()
