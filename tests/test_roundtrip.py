import io
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from typedcsv import TypedCsvReader, TypedCsvWriter
from sample_records import (
    Color,
    CustomTime,
    EventRecord,
    ListRecord,
    NumbersRecord,
    OptionalRecord,
    PaletteRecord,
    Person,
    PersonStatus,
    Size,
    TaggedRecord,
    TimeRecord,
)

TOKYO = timezone(timedelta(hours=9))


def roundtrip(record_type, records, **fmtparams):
    out = io.StringIO()
    writer = TypedCsvWriter.from_stream(record_type, out, **fmtparams)
    writer.write_header()
    writer.write_records(records)
    writer.flush()
    assert writer.error() is None

    reader = TypedCsvReader.from_stream(record_type, io.StringIO(out.getvalue(), newline=""), **fmtparams)
    reader.read_header()
    return reader.read_all(), out.getvalue()


def test_person_roundtrip():
    person = Person(
        name="John, Jr.",
        birthday=datetime(1970, 6, 17, tzinfo=timezone.utc),
        age=55,
        pet_names=["Fluffy", "Spot"],
        active=True,
        status=PersonStatus.INACTIVE,
        percentage=12.35,
        optional="tea",
    )

    records, text = roundtrip(Person, [person])

    assert records == [person]
    assert '"John, Jr."' in text


def test_times_roundtrip_keep_instant():
    record = TimeRecord(
        time=datetime(1970, 6, 17, 1, 2, 3, tzinfo=TOKYO),
        custom_time=CustomTime(1971, 7, 18, 2, 3, 4, tzinfo=TOKYO),
        time_without_format=datetime(1972, 8, 19, 3, 4, 5, tzinfo=TOKYO),
    )

    records, text = roundtrip(TimeRecord, [record])

    assert records == [record]
    assert isinstance(records[0].custom_time, CustomTime)
    assert text.splitlines()[1] == "1970-06-17 01:02:03,1971-07-18 02:03:04,1972-08-19T03:04:05+09:00"


def test_optional_and_list_roundtrip():
    optional = OptionalRecord("Hello", None, None)
    lists = ListRecord(items=["a", "b"], lines=["x", "y"], letters=["q", "r"])

    assert roundtrip(OptionalRecord, [optional])[0] == [optional]
    assert roundtrip(ListRecord, [lists])[0] == [lists]


def test_numbers_roundtrip_with_semicolon_delimiter():
    record = NumbersRecord(count=-3, ratio=0.25, flag=True, amount=Decimal("1.10"), scores=[1, 2, 3])

    records, text = roundtrip(NumbersRecord, [record], delimiter=";")

    assert records == [record]
    assert text.splitlines()[1] == "-3;0.25;true;1.10;1,2,3"


def test_empty_lists_roundtrip_with_separator():
    record = TaggedRecord(tags=[], nums=[])

    records, text = roundtrip(TaggedRecord, [record])

    assert records == [record]
    assert text == "tags,nums\n,\n"


def test_plain_enum_roundtrip():
    record = PaletteRecord(color=Color.GREEN, size=Size.LARGE)

    records, text = roundtrip(PaletteRecord, [record])

    assert records == [record]
    assert text.splitlines()[1] == "green,2"


def test_absent_time_column_roundtrip():
    text = "name,age,pet names,active,status,percentage,optional\nJohn,55,Fluffy;Spot,true,active,12.35,NULL\n"
    reader = TypedCsvReader.from_stream(Person, io.StringIO(text, newline=""))
    reader.read_header()
    person = reader.read_record()

    records, written = roundtrip(Person, [person])

    assert records == [person]
    assert written.splitlines()[1].startswith("John,0001-01-02,55,")


def test_absent_time_column_rewrites_in_western_zone():
    reader = TypedCsvReader.from_stream(EventRecord, io.StringIO("other\nx\n", newline=""))
    reader.read_header()
    event = reader.read_record()

    records, written = roundtrip(EventRecord, [event])
    _, rewritten = roundtrip(EventRecord, records)

    assert written == "at,other\n0001-01-01,x\n"
    assert rewritten == written
