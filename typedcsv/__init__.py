from typedcsv.domain.header import HeaderIndex, map_header
from typedcsv.domain.ports.text_hooks import TextDecodable, TextEncodable
from typedcsv.domain.schema import (
    ColumnDescriptor,
    ColumnOptions,
    SchemaRegistry,
    csv_field,
    csv_record,
    default_registry,
    extract_columns,
)
from typedcsv.domain.decoder import decode_value
from typedcsv.domain.encoder import encode_value
from typedcsv.errors import (
    CsvFormatError,
    EndOfInput,
    FieldFormatError,
    FieldParseError,
    HeaderNotRead,
    TypedCsvError,
    UnknownTimeZoneError,
    UnsupportedTypeError,
)
from typedcsv.infra.sinks.csv_row_sink import CsvRowSink
from typedcsv.reader import TypedCsvReader
from typedcsv.writer import TypedCsvWriter

__all__ = [
    "HeaderIndex",
    "map_header",
    "TextDecodable",
    "TextEncodable",
    "ColumnDescriptor",
    "ColumnOptions",
    "SchemaRegistry",
    "csv_field",
    "csv_record",
    "default_registry",
    "extract_columns",
    "decode_value",
    "encode_value",
    "CsvFormatError",
    "EndOfInput",
    "FieldFormatError",
    "FieldParseError",
    "HeaderNotRead",
    "TypedCsvError",
    "UnknownTimeZoneError",
    "UnsupportedTypeError",
    "CsvRowSink",
    "TypedCsvReader",
    "TypedCsvWriter",
]
