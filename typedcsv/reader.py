from __future__ import annotations

import csv
import logging
from typing import Any, Generic, Iterable, Iterator, Sequence, TextIO, TypeVar

from typedcsv.domain.decoder import decode_value, zero_value, zero_value_of
from typedcsv.domain.header import HeaderIndex, map_header
from typedcsv.domain.schema import (
    ColumnDescriptor,
    PlainField,
    SchemaRegistry,
    default_registry,
    extract_plain_fields,
)
from typedcsv.errors import CsvFormatError, EndOfInput, HeaderNotRead

T = TypeVar("T")


class TypedCsvReader(Generic[T]):
    """
    Назначение/ответственность:
        Читает dataclass-записи из строк CSV.

    Колонки описываются metadata полей (см. csv_field):
        - "csv": имя колонки в заголовке;
        - "null": для Optional-полей значение, означающее None;
        - "time_format": strptime-шаблон для datetime/date;
        - "time_location": IANA-зона для time_format;
        - "separator": разделитель элементов list-полей.
    Если тип поля определяет from_text, ячейка передаётся в него.
    Поля без колонки и без default получают нулевое значение своего типа.

    Взаимодействия:
        rows - любой итератор строк (обычно csv.reader). Поток не закрывается.
    """

    def __init__(
        self,
        record_type: type[T],
        rows: Iterable[Sequence[str]],
        registry: SchemaRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.record_type = record_type
        self.registry = registry or default_registry
        self.columns: tuple[ColumnDescriptor, ...] = self.registry.columns_for(record_type)
        self.plain_fields: tuple[PlainField, ...] = extract_plain_fields(record_type, self.columns)
        self.logger = logger or logging.getLogger("typedcsv")
        self.header: HeaderIndex | None = None
        self._rows = iter(rows)

    @classmethod
    def from_stream(
        cls,
        record_type: type[T],
        stream: TextIO,
        registry: SchemaRegistry | None = None,
        logger: logging.Logger | None = None,
        **fmtparams: Any,
    ) -> "TypedCsvReader[T]":
        return cls(record_type, csv.reader(stream, **fmtparams), registry=registry, logger=logger)

    @property
    def line_no(self) -> int | None:
        return getattr(self._rows, "line_num", None)

    def read_header(self) -> HeaderIndex:
        """
        Назначение:
            Читает одну строку как заголовок и строит HeaderIndex.

        Ошибки:
            EndOfInput - строк нет.
        """
        header = map_header(self._next_row())
        for name in header.duplicates:
            self.logger.warning(
                f"Duplicate header column '{name}': last occurrence wins",
                extra={"component": "header"},
            )
        self.logger.debug(
            f"Header mapped columns={header.width} record_type={self.record_type.__qualname__}",
            extra={"component": "header"},
        )
        self.header = header
        return header

    def read_record(self) -> T:
        """
        Назначение:
            Читает и разбирает одну строку в новую запись.

        Ошибки:
            HeaderNotRead - read_header ещё не вызывался.
            EndOfInput - строки закончились.
            CsvFormatError - число ячеек не совпадает с заголовком.
            FieldParseError - первое поле, которое не удалось разобрать.
        """
        if self.header is None:
            raise HeaderNotRead()

        row = self._next_row()
        if len(row) != self.header.width:
            raise CsvFormatError(
                f"Invalid column count at line {self.line_no}: expected {self.header.width}, got {len(row)}"
            )

        init_values: dict[str, Any] = {
            plain.attr: zero_value_of(plain.field_type, plain.optional) for plain in self.plain_fields
        }
        late_values: dict[str, Any] = {}
        for column in self.columns:
            index = self.header.position(column.name)
            if index is None:
                if column.has_default:
                    continue
                value = zero_value(column)
            else:
                value = decode_value(column, row[index])
            if column.init:
                init_values[column.attr] = value
            else:
                late_values[column.attr] = value

        record = self.record_type(**init_values)
        for attr, value in late_values.items():
            object.__setattr__(record, attr, value)
        return record

    def read_all(self) -> list[T]:
        """
        Назначение:
            Читает все оставшиеся записи до EndOfInput.

        Ошибки:
            Любая ошибка, кроме EndOfInput, пробрасывается без частичного результата.
        """
        records: list[T] = []
        while True:
            try:
                records.append(self.read_record())
            except EndOfInput:
                return records

    def __iter__(self) -> Iterator[T]:
        while True:
            try:
                record = self.read_record()
            except EndOfInput:
                return
            yield record

    def _next_row(self) -> list[str]:
        for row in self._rows:
            if row:
                return list(row)
        raise EndOfInput()
