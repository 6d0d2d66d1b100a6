from telemetry.analysis import analyze_dataset
from telemetry.parsing import parse_csv
from telemetry.records import EquipmentCategory
from telemetry.reports import build_report_pdf, render_distribution_chart, report_filename
from telemetry.sample_data import generate_sample_csv


def test_chart_is_a_png():
    png = render_distribution_chart({"Pump": 3, "Reactor": 1, "Mixer": 2})

    assert png.startswith(b"\x89PNG")


def test_report_for_enriched_sample():
    records = parse_csv(generate_sample_csv())
    summary = analyze_dataset(records, "demo_batch_001.csv").with_insight(
        "First paragraph of text. " * 30 + "\n\nSecond paragraph.", "Standard Processing Batch"
    )

    pdf = build_report_pdf(summary, records)

    assert pdf.startswith(b"%PDF")


def test_report_for_pending_summary(example_csv):
    records = parse_csv(example_csv)

    pdf = build_report_pdf(analyze_dataset(records, "example.csv"), records)

    assert pdf.startswith(b"%PDF")


def test_report_filename_uses_file_stem_and_id(example_csv):
    summary = analyze_dataset(parse_csv(example_csv), "plant_a.csv")

    assert report_filename(summary) == f"Equipment_Summary_Report_plant_a_{summary.id}.pdf"


def test_unknown_category_text_renders_as_other():
    assert EquipmentCategory.from_label("Heat Exchanger") is EquipmentCategory.HEAT_EXCHANGER
    assert EquipmentCategory.from_label("Unknown") is EquipmentCategory.UNKNOWN
    assert EquipmentCategory.from_label("Mixer") is EquipmentCategory.OTHER
    assert EquipmentCategory.from_label("Other") is EquipmentCategory.OTHER


def test_every_category_has_a_colour(settings):
    settings.TELEMETRY = {"CATEGORY_PALETTE": {"Other": "#123456"}}

    assert {c.colour for c in EquipmentCategory} == {"#123456"}
