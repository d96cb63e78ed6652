from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from typedcsv.domain.decoder import decode_value, split_items, zero_value
from typedcsv.domain.schema import ColumnDescriptor, ColumnOptions, extract_columns
from typedcsv.errors import FieldParseError, UnknownTimeZoneError, UnsupportedTypeError
from sample_records import (
    Color,
    CustomTime,
    DefaultsRecord,
    ListOfMapRecord,
    ListRecord,
    MapRecord,
    NumbersRecord,
    OptionalRecord,
    PaletteRecord,
    Person,
    PersonStatus,
    Size,
    StatusRecord,
    TaggedRecord,
    TimeFormatRecord,
    TimeRecord,
    WrongZoneRecord,
)

TOKYO = timezone(timedelta(hours=9))


def _column(record_type, name: str) -> ColumnDescriptor:
    for column in extract_columns(record_type):
        if column.name == name:
            return column
    raise AssertionError(f"no column {name}")


def test_decode_scalars():
    assert decode_value(_column(NumbersRecord, "count"), "42") == 42
    assert decode_value(_column(NumbersRecord, "count"), "-7") == -7
    assert decode_value(_column(NumbersRecord, "ratio"), "12.35") == 12.35
    assert decode_value(_column(NumbersRecord, "flag"), "true") is True
    assert decode_value(_column(NumbersRecord, "flag"), "F") is False
    assert decode_value(_column(NumbersRecord, "flag"), "1") is True
    assert decode_value(_column(NumbersRecord, "amount"), "10.50") == Decimal("10.50")
    assert decode_value(_column(Person, "name"), " John ") == " John "


def test_decode_empty_text_gives_zero_value():
    assert decode_value(_column(NumbersRecord, "count"), "") == 0
    assert decode_value(_column(NumbersRecord, "ratio"), "  ") == 0.0
    assert decode_value(_column(NumbersRecord, "flag"), "") is False
    assert decode_value(_column(NumbersRecord, "amount"), "") == Decimal(0)
    assert decode_value(_column(Person, "name"), "") == ""


def test_decode_invalid_number_is_attributed_to_column():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(NumbersRecord, "count"), "abc")

    assert exc.value.field == "count"
    assert isinstance(exc.value.cause, ValueError)
    assert exc.value.__cause__ is exc.value.cause


def test_decode_invalid_boolean():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(NumbersRecord, "flag"), "maybe")

    assert exc.value.field == "flag"
    assert "invalid boolean value" in str(exc.value)


def test_decode_time_with_layout_defaults_to_utc():
    value = decode_value(_column(Person, "birthday"), "1970-06-17")

    assert value == datetime(1970, 6, 17, tzinfo=timezone.utc)
    assert value.tzinfo is timezone.utc


def test_decode_time_with_location():
    value = decode_value(_column(TimeRecord, "time"), "1970-06-17 01:02:03")

    assert value == datetime(1970, 6, 17, 1, 2, 3, tzinfo=TOKYO)
    assert value.utcoffset() == timedelta(hours=9)


def test_decode_datetime_subclass_keeps_type():
    value = decode_value(_column(TimeRecord, "custom_time"), "1971-07-18 02:03:04")

    assert isinstance(value, CustomTime)
    assert value == datetime(1971, 7, 18, 2, 3, 4, tzinfo=TOKYO)


def test_decode_time_without_layout_uses_iso_format():
    value = decode_value(_column(TimeRecord, "time_without_format"), "1972-08-19T03:04:05+09:00")

    assert value == datetime(1972, 8, 19, 3, 4, 5, tzinfo=TOKYO)


def test_decode_time_with_wrong_text():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(TimeFormatRecord, "time_with_location"), "abc")

    assert exc.value.field == "time_with_location"
    assert isinstance(exc.value.cause, ValueError)
    assert str(exc.value).startswith("typedcsv: error parsing field 'time_with_location': time data 'abc'")

    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(TimeFormatRecord, "time_without_location"), "abc")

    assert exc.value.field == "time_without_location"


def test_decode_time_with_unknown_location():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(WrongZoneRecord, "time"), "1970-06-17 01:02:03")

    assert exc.value.field == "time"
    assert isinstance(exc.value.cause, UnknownTimeZoneError)
    assert str(exc.value) == "typedcsv: error parsing field 'time': unknown time zone abcdef"


def test_decode_date_with_layout():
    column = ColumnDescriptor(
        name="day",
        attr="day",
        field_type=date,
        options=ColumnOptions(time_format="%d.%m.%Y"),
    )

    assert decode_value(column, "17.06.1970") == date(1970, 6, 17)


def test_decode_optional_values():
    assert decode_value(_column(OptionalRecord, "optional_string"), "") == ""
    assert decode_value(_column(OptionalRecord, "optional_string_with_empty_tag"), "") is None
    assert decode_value(_column(OptionalRecord, "optional_string_with_empty_tag"), "x") == "x"
    assert decode_value(_column(OptionalRecord, "optional_time"), "NULL") is None
    assert decode_value(_column(OptionalRecord, "optional_time"), "1970-06-17T01:02:03+09:00") == datetime(
        1970, 6, 17, 1, 2, 3, tzinfo=TOKYO
    )


def test_decode_lists():
    assert decode_value(_column(ListRecord, "slice"), "a;b;c") == ["a", "b", "c"]
    assert decode_value(_column(ListRecord, "slice_with_new_line"), "d\ne\nf") == ["d", "e", "f"]
    assert decode_value(_column(ListRecord, "slice_without_separator"), "ghi") == ["g", "h", "i"]
    assert decode_value(_column(ListRecord, "slice_without_separator"), "") == []
    assert decode_value(_column(NumbersRecord, "scores"), "1,2,3") == [1, 2, 3]


def test_decode_list_error_is_attributed_to_element():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(NumbersRecord, "scores"), "1,x,3")

    assert exc.value.field == "scores[1]"
    assert isinstance(exc.value.cause, ValueError)


def test_decode_text_hook():
    assert decode_value(_column(StatusRecord, "person_status"), "active") is PersonStatus.ACTIVE


def test_decode_text_hook_failure_keeps_cause():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(StatusRecord, "person_status"), "abcdef")

    assert exc.value.field == "person_status"
    assert str(exc.value.cause) == "unknown status"
    assert exc.value.unwrap() is exc.value.cause
    assert str(exc.value) == "typedcsv: error parsing field 'person_status': unknown status"


def test_decode_unsupported_types():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(MapRecord, "map"), "1:2")

    assert exc.value.field == "map"
    assert isinstance(exc.value.cause, UnsupportedTypeError)
    assert str(exc.value) == "typedcsv: error parsing field 'map': can't scan type: dict[str, str]"

    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(ListOfMapRecord, "slice_of_map"), "1:2")

    assert exc.value.field == "slice_of_map[0]"
    assert isinstance(exc.value.cause, UnsupportedTypeError)


def test_split_items():
    assert split_items("a;b", ";") == ["a", "b"]
    assert split_items("", ";") == []
    assert split_items("", "") == []
    assert split_items("a;;b", ";") == ["a", "", "b"]
    assert split_items("ab", "") == ["a", "b"]


def test_zero_values_for_absent_columns():
    columns = {c.name: c for c in extract_columns(DefaultsRecord)}

    assert zero_value(columns["count"]) == 0
    assert zero_value(columns["tags"]) == []
    assert zero_value(columns["note"]) is None
    assert zero_value(columns["birthday"]) == datetime(1, 1, 2, tzinfo=timezone.utc)
    assert zero_value(_column(StatusRecord, "person_status")) is PersonStatus.UNKNOWN


def test_decode_empty_list_cell_with_separator():
    assert decode_value(_column(TaggedRecord, "tags"), "") == []
    assert decode_value(_column(TaggedRecord, "nums"), "") == []
    assert decode_value(_column(TaggedRecord, "nums"), "1;;3") == [1, 0, 3]


def test_decode_plain_enum_by_value():
    assert decode_value(_column(PaletteRecord, "color"), "green") is Color.GREEN
    assert decode_value(_column(PaletteRecord, "size"), "2") is Size.LARGE


def test_decode_plain_enum_unknown_value():
    with pytest.raises(FieldParseError) as exc:
        decode_value(_column(PaletteRecord, "color"), "blue")

    assert exc.value.field == "color"
    assert isinstance(exc.value.cause, ValueError)


def test_zero_value_of_plain_enum_is_none():
    assert zero_value(_column(PaletteRecord, "color")) is None
