from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, TextIO, TypeVar

from typedcsv.domain.encoder import encode_value
from typedcsv.domain.ports.rows import RowSink
from typedcsv.domain.schema import ColumnDescriptor, SchemaRegistry, default_registry
from typedcsv.infra.sinks.csv_row_sink import DEFAULT_BUFFER_SIZE, CsvRowSink

T = TypeVar("T")


class TypedCsvWriter(Generic[T]):
    """
    Назначение/ответственность:
        Пишет dataclass-записи строками CSV.

    Колонки описываются metadata полей (см. csv_field):
        - "csv": имя колонки в заголовке;
        - "null": текст для Optional-поля со значением None;
        - "format": printf-шаблон ("%.2f"); для list-полей применяется к каждому элементу;
        - "time_format" / "time_location": strftime-шаблон и зона для datetime/date;
        - "separator": разделитель элементов list-полей.
    Если тип поля определяет to_text, ячейка берётся из него.

    Поведение:
        flush() не возвращает ошибку; после flush() её нужно проверить через error().
    """

    def __init__(
        self,
        record_type: type[T],
        sink: RowSink,
        registry: SchemaRegistry | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.record_type = record_type
        self.sink = sink
        self.registry = registry or default_registry
        self.columns: tuple[ColumnDescriptor, ...] = self.registry.columns_for(record_type)
        self.logger = logger or logging.getLogger("typedcsv")

    @classmethod
    def from_stream(
        cls,
        record_type: type[T],
        stream: TextIO,
        registry: SchemaRegistry | None = None,
        logger: logging.Logger | None = None,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        **fmtparams: Any,
    ) -> "TypedCsvWriter[T]":
        sink = CsvRowSink(stream, buffer_size=buffer_size, logger=logger, **fmtparams)
        return cls(record_type, sink, registry=registry, logger=logger)

    def header_row(self) -> list[str]:
        return [column.name for column in self.columns]

    def encode_record(self, record: T) -> list[str]:
        return [encode_value(column, getattr(record, column.attr)) for column in self.columns]

    def write_header(self) -> None:
        self.sink.write(self.header_row())

    def write_record(self, record: T) -> None:
        """
        Ошибки:
            FieldFormatError - поле не удалось отформатировать; строка не пишется.
            OSError - ошибка приёмника при сбросе переполненного буфера.
        """
        self.sink.write(self.encode_record(record))

    def write_records(self, records: Iterable[T]) -> None:
        for record in records:
            self.write_record(record)

    def flush(self) -> None:
        self.sink.flush()

    def error(self) -> BaseException | None:
        return self.sink.error()
