"""
Tests for the hierarchical experiment -> metric -> step -> value index.
"""

import pandas as pd
import pytest

from runcompare.config.models import IngestConfig
from runcompare.index.builder import MetricIndex, build_index
from runcompare.io.records import Record, parse_records


@pytest.fixture
def mixed_index(mixed_csv) -> MetricIndex:
    return build_index(parse_records(mixed_csv))


class TestBuildIndex:

    def test_scenario_index_contents(self, scenario_csv):
        index = build_index(parse_records(scenario_csv))

        assert dict(index.series("E1", "loss")) == {0: 1.0, 1: 0.5}
        assert dict(index.series("E2", "loss")) == {1: 0.7, 2: 0.4}
        assert index.observation_count == 4

    def test_experiment_and_metric_order(self, mixed_index):
        assert mixed_index.experiment_ids == ("baseline", "warmup-lr")
        assert mixed_index.metric_names == ("loss", "accuracy")
        assert mixed_index.metrics_for("baseline") == ("loss", "accuracy")
        assert mixed_index.metrics_for("warmup-lr") == ("loss", "accuracy")

    def test_global_metric_order_is_first_appearance(self):
        records = [
            Record("E1", "a", "0", "1"),
            Record("E2", "b", "0", "1"),
            Record("E1", "c", "0", "1"),
        ]

        index = build_index(records)

        assert index.metric_names == ("a", "b", "c")
        assert index.metrics_for("E1") == ("a", "c")

    def test_last_write_wins(self, mixed_index):
        assert mixed_index.get("baseline", "loss", 1) == 1.85

    def test_overwrite_keeps_first_insertion_position(self):
        records = [
            Record("E1", "loss", "5", "1"),
            Record("E1", "loss", "2", "1"),
            Record("E1", "loss", "5", "9"),
        ]

        index = build_index(records)

        assert list(index.series("E1", "loss").items()) == [(5, 9.0), (2, 1.0)]

    def test_malformed_step_row_is_dropped(self):
        text = "experiment_id,metric_name,step,value\nE3,acc,x,1.0\n"

        index = build_index(parse_records(text))

        assert "E3" not in index
        assert index.is_empty
        assert index.metric_names == ()

    def test_malformed_row_does_not_remove_valid_rows(self, mixed_index):
        assert "broken" not in mixed_index
        assert mixed_index.get("baseline", "accuracy", 1) is None
        assert dict(mixed_index.series("baseline", "accuracy")) == {0: 0.1}

    def test_zero_values_are_kept(self, mixed_index):
        assert mixed_index.get("warmup-lr", "accuracy", 3) == 0.0

    def test_rows_missing_identifiers_are_dropped(self):
        records = [
            Record(None, "loss", "0", "1"),
            Record("E1", None, "0", "1"),
            Record("E1", "loss", None, "1"),
            Record("E1", "loss", "0", None),
        ]

        assert build_index(records).is_empty

    def test_empty_metric_name_is_dropped(self):
        text = "experiment_id,metric_name,step,value\nE1,,0,1.0\nE1,loss,0,2.0\n"

        index = build_index(parse_records(text))

        assert index.metric_names == ("loss",)
        assert index.metrics_for("E1") == ("loss",)
        assert not index.has_metric("")

    def test_empty_experiment_id_is_kept(self):
        index = build_index([Record("", "loss", "0", "1")])

        assert index.experiment_ids == ("",)

    def test_fractional_steps_follow_config(self):
        records = [Record("E1", "loss", "0.5", "1"), Record("E1", "loss", "1", "2")]

        strict = build_index(records)
        relaxed = build_index(records, IngestConfig(integer_steps=False))

        assert dict(strict.series("E1", "loss")) == {1: 2.0}
        assert dict(relaxed.series("E1", "loss")) == {0.5: 1.0, 1: 2.0}

    def test_accepts_any_iterable(self, scenario_csv):
        records = parse_records(scenario_csv)

        assert build_index(iter(records)) == build_index(records)

    def test_logs_summary(self, mixed_csv, caplog):
        build_index(parse_records(mixed_csv))

        assert any("dropped 2, overwrote 1" in r.message for r in caplog.records)


class TestMetricIndexAccess:

    def test_series_is_read_only(self, mixed_index):
        series = mixed_index.series("baseline", "loss")

        with pytest.raises(TypeError):
            series[99] = 1.0

    def test_unknown_lookups(self, mixed_index):
        assert mixed_index.series("nobody", "loss") is None
        assert mixed_index.series("baseline", "perplexity") is None
        assert mixed_index.metrics_for("nobody") == ()
        assert mixed_index.get("nobody", "loss", 0) is None

    def test_container_protocol(self, mixed_index):
        assert len(mixed_index) == 2
        assert list(mixed_index) == ["baseline", "warmup-lr"]
        assert "baseline" in mixed_index
        assert mixed_index.has_metric("loss")
        assert not mixed_index.has_metric("perplexity")
        assert not mixed_index.has_metric(None)

    def test_empty_index(self):
        index = MetricIndex.empty()

        assert index.is_empty
        assert len(index) == 0
        assert index.experiment_ids == ()
        assert index.metric_names == ()
        assert index.observation_count == 0

    def test_items_in_index_order(self, scenario_csv):
        index = build_index(parse_records(scenario_csv))

        assert list(index.items()) == [
            ("E1", "loss", 0, 1.0),
            ("E1", "loss", 1, 0.5),
            ("E2", "loss", 1, 0.7),
            ("E2", "loss", 2, 0.4),
        ]

    def test_to_dataframe(self, mixed_index):
        df = mixed_index.to_dataframe()

        assert list(df.columns) == ["experiment_id", "metric_name", "step", "value"]
        assert len(df) == mixed_index.observation_count
        assert df["value"].dtype == "float64"
        assert df.iloc[0].to_dict() == {
            "experiment_id": "baseline", "metric_name": "loss", "step": 0, "value": 2.3,
        }

    def test_empty_to_dataframe(self):
        df = MetricIndex.empty().to_dataframe()

        assert isinstance(df, pd.DataFrame)
        assert df.empty
        assert list(df.columns) == ["experiment_id", "metric_name", "step", "value"]


class TestIdempotence:

    def test_rebuild_is_equal(self, mixed_csv):
        records = parse_records(mixed_csv)

        first = build_index(records)
        second = build_index(records)

        assert first == second
        assert first is not second
        assert first.experiment_ids == second.experiment_ids
        assert first.metric_names == second.metric_names

    def test_equality_is_order_sensitive(self):
        a = build_index([Record("E1", "loss", "0", "1"), Record("E2", "loss", "0", "1")])
        b = build_index([Record("E2", "loss", "0", "1"), Record("E1", "loss", "0", "1")])

        assert a != b

    def test_different_values_are_unequal(self):
        a = build_index([Record("E1", "loss", "0", "1")])
        b = build_index([Record("E1", "loss", "0", "2")])

        assert a != b

    def test_index_is_unhashable(self):
        with pytest.raises(TypeError):
            hash(MetricIndex.empty())
