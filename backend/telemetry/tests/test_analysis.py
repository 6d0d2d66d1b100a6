from datetime import datetime

import pytest

from telemetry.analysis import analyze_dataset, next_summary_id, temperature_fence
from telemetry.exceptions import EmptyDatasetError
from telemetry.parsing import parse_csv
from telemetry.sample_data import generate_sample_csv


def test_empty_batch_is_rejected():
    with pytest.raises(EmptyDatasetError):
        analyze_dataset([], "empty.csv")


def test_example_file_summary(example_csv):
    summary = analyze_dataset(parse_csv(example_csv), "example.csv")

    assert summary.total_count == 2
    assert summary.avg_pressure == pytest.approx(400.0)
    assert summary.avg_flowrate == pytest.approx(80.0)
    assert summary.avg_temperature == pytest.approx(50.0)
    assert summary.type_distribution == {"Pump": 2}
    assert summary.outlier_count == 0
    assert summary.data_quality_score == 100
    assert summary.file_name == "example.csv"
    assert summary.classification == "Pending AI Analysis"
    assert summary.ai_insights is None
    assert "aiInsights" not in summary.to_dict()


def test_hot_reading_outside_the_fence_is_an_outlier(make_record):
    records = [make_record(temperature=10) for _ in range(7)] + [make_record(temperature=100)]

    summary = analyze_dataset(records, "hot.csv")

    assert summary.outlier_count == 1
    assert summary.data_quality_score == 99


def test_quartiles_are_plain_order_statistics():
    # n=5: q1 = sorted[1] = 4, q3 = sorted[3] = 8, iqr = 4
    assert temperature_fence([14, 2, 8, 6, 4]) == (-2.0, 14.0)


def test_value_on_the_fence_is_not_an_outlier(make_record):
    records = [make_record(temperature=t) for t in (2, 4, 6, 8, 14)]

    assert analyze_dataset(records, "edge.csv").outlier_count == 0


def test_missing_equipment_ids_cost_two_points_each(make_record):
    records = [make_record(equipment_id="") for _ in range(3)] + [make_record() for _ in range(5)]

    assert analyze_dataset(records, "ids.csv").data_quality_score == 94


def test_non_finite_flowrate_counts_as_missing(make_record):
    records = [make_record(flowrate=float("nan")), make_record(), make_record()]

    assert analyze_dataset(records, "nan.csv").data_quality_score == 98


def test_quality_score_never_drops_below_zero(make_record):
    records = [make_record(equipment_id="") for _ in range(60)]

    assert analyze_dataset(records, "bad.csv").data_quality_score == 0


def test_type_distribution_adds_up_to_total(make_record):
    records = [make_record(type=t) for t in ("Pump", "Reactor", "Pump", "Unknown", "Mixer")]

    summary = analyze_dataset(records, "types.csv")

    assert summary.type_distribution == {"Pump": 2, "Reactor": 1, "Unknown": 1, "Mixer": 1}
    assert sum(summary.type_distribution.values()) == summary.total_count


@pytest.mark.parametrize("attempt", range(5))
def test_sample_batches_keep_score_in_range(attempt):
    summary = analyze_dataset(parse_csv(generate_sample_csv()), "demo.csv")

    assert 0 <= summary.data_quality_score <= 100
    assert sum(summary.type_distribution.values()) == summary.total_count == 50


def test_analysing_twice_only_changes_id_and_date(example_csv):
    records = parse_csv(example_csv)
    first = analyze_dataset(records, "a.csv", now=lambda: datetime(2024, 1, 1, 8, 0, 0))
    second = analyze_dataset(records, "a.csv", now=lambda: datetime(2024, 1, 2, 9, 30, 0))

    assert first.id != second.id
    assert first.upload_date == "2024-01-01 08:00:00"
    assert second.upload_date == "2024-01-02 09:30:00"
    for field in (
        "avg_flowrate",
        "avg_pressure",
        "avg_temperature",
        "outlier_count",
        "type_distribution",
        "data_quality_score",
    ):
        assert getattr(first, field) == getattr(second, field)


def test_summary_ids_keep_increasing():
    ids = [int(next_summary_id()) for _ in range(50)]

    assert ids == sorted(set(ids))
