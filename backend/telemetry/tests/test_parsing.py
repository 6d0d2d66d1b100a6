import pytest

from telemetry.exceptions import CSVParseError
from telemetry.parsing import decode_upload, parse_csv
from telemetry.records import EquipmentStatus, classify_status

HEADER = "timestamp,equipment_id,type,flowrate,pressure,temperature"


def test_example_file_gives_two_records(example_csv):
    records = parse_csv(example_csv)

    assert [r.id for r in records] == ["row-1", "row-2"]
    assert records[0].status is EquipmentStatus.CRITICAL
    assert records[1].status is EquipmentStatus.NORMAL
    assert records[0].equipment_id == "EQ-1"
    assert records[0].pressure == 600.0


def test_ids_follow_line_numbers():
    rows = [f"2024-01-01,EQ-{i},Reactor,10,20,30" for i in range(1, 8)]
    records = parse_csv("\n".join([HEADER, *rows]))

    assert [r.id for r in records] == [f"row-{i}" for i in range(1, 8)]


def test_short_rows_are_skipped_without_shifting_ids():
    text = "\n".join(
        [
            HEADER,
            "2024-01-01,EQ-1,Pump,1,2,3",
            "2024-01-01,EQ-2,Pump",
            "",
            "2024-01-01,EQ-4,Pump,4,5,6",
        ]
    )
    records = parse_csv(text)

    assert [r.id for r in records] == ["row-1", "row-4"]
    assert [r.equipment_id for r in records] == ["EQ-1", "EQ-4"]


def test_unreadable_numbers_become_zero():
    records = parse_csv(f"{HEADER}\n2024-01-01,EQ-1,Pump,fast,n/a,")

    record = records[0]
    assert (record.flowrate, record.pressure, record.temperature) == (0.0, 0.0, 0.0)
    assert record.status is EquipmentStatus.NORMAL


def test_numbers_with_trailing_text_keep_their_leading_value():
    records = parse_csv(f"{HEADER}\n2024,EQ-1,Pump,12abc,600 kPa,-1.5e1C")

    record = records[0]
    assert record.flowrate == 12.0
    assert record.pressure == 600.0
    assert record.temperature == -15.0
    assert record.status is EquipmentStatus.CRITICAL


@pytest.mark.parametrize("cell,expected", [(".5", 0.5), ("+7", 7.0), ("kPa 600", 0.0), ("-", 0.0)])
def test_leading_number_edge_cases(cell, expected):
    assert parse_csv(f"{HEADER}\n2024,EQ-1,Pump,{cell},0,0")[0].flowrate == expected


def test_header_names_are_trimmed_and_lower_cased():
    text = " Timestamp , EQUIPMENT_ID ,Type,FlowRate,Pressure ,TEMPERATURE\n2024,EQ-9,Separator,1,2,95"
    record = parse_csv(text)[0]

    assert record.equipment_id == "EQ-9"
    assert record.type == "Separator"
    assert record.temperature == 95.0
    assert record.status is EquipmentStatus.WARNING


def test_byte_order_mark_and_crlf_are_tolerated():
    text = "\ufeff" + HEADER + "\r\n2024-01-01,EQ-1,Pump,1,2,101\r\n"
    record = parse_csv(text)[0]

    assert record.timestamp == "2024-01-01"
    assert record.temperature == 101.0
    assert record.status is EquipmentStatus.CRITICAL


def test_missing_or_empty_type_defaults_to_unknown():
    no_column = parse_csv("equipment_id,flowrate,pressure,temperature\nEQ-1,1,2,3")
    empty_value = parse_csv(f"{HEADER}\n2024,EQ-1,,1,2,3")

    assert no_column[0].type == "Unknown"
    assert no_column[0].timestamp == ""
    assert empty_value[0].type == "Unknown"


def test_unknown_columns_are_kept_on_the_record():
    record = parse_csv(f"{HEADER},location\n2024,EQ-1,Pump,1,2,3,Plant A")[0]

    assert record.extra == {"location": "Plant A"}
    assert record.to_dict()["location"] == "Plant A"


def test_extra_trailing_values_are_ignored():
    record = parse_csv(f"{HEADER}\n2024,EQ-1,Pump,1,2,3,surplus,values")[0]

    assert record.extra == {}
    assert record.temperature == 3.0


def test_header_only_file_gives_no_records():
    assert parse_csv(HEADER) == []


@pytest.mark.parametrize("payload", ["", "   \n  ", None, b"timestamp"])
def test_payload_without_header_is_a_parse_error(payload):
    with pytest.raises(CSVParseError):
        parse_csv(payload)


def test_invalid_utf8_upload_is_a_parse_error():
    with pytest.raises(CSVParseError):
        decode_upload(b"\xff\xfe\x00broken")


@pytest.mark.parametrize(
    "temperature,pressure,expected",
    [
        (80, 300, EquipmentStatus.NORMAL),
        (80.5, 0, EquipmentStatus.WARNING),
        (0, 300.5, EquipmentStatus.WARNING),
        (100, 500, EquipmentStatus.WARNING),
        (100.1, 0, EquipmentStatus.CRITICAL),
        (0, 500.1, EquipmentStatus.CRITICAL),
    ],
)
def test_status_thresholds_are_strict(temperature, pressure, expected):
    assert classify_status(temperature, pressure) is expected


def test_thresholds_can_be_tuned_from_settings(settings):
    settings.TELEMETRY = {"CRITICAL_TEMPERATURE": 40.0}

    assert classify_status(45, 0) is EquipmentStatus.CRITICAL
