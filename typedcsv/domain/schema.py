from __future__ import annotations

import dataclasses
import types
from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Union, get_args, get_origin, get_type_hints

CSV_KEY = "csv"
NULL_KEY = "null"
FORMAT_KEY = "format"
TIME_FORMAT_KEY = "time_format"
TIME_LOCATION_KEY = "time_location"
SEPARATOR_KEY = "separator"


@dataclass(frozen=True)
class ColumnOptions:
    """
    Назначение:
        Опции конвертации колонки, объявленные в metadata поля.

    Инварианты/гарантии:
        - null=None означает "токен не объявлен"; пустая строка - валидный токен.
        - separator по умолчанию "" (поэлементное разбиение/склейка без разделителя).
    """

    null: str | None = None
    format: str | None = None
    time_format: str | None = None
    time_location: str | None = None
    separator: str = ""

    @classmethod
    def from_metadata(cls, metadata: Mapping[str, Any]) -> "ColumnOptions":
        return cls(
            null=metadata.get(NULL_KEY),
            format=metadata.get(FORMAT_KEY),
            time_format=metadata.get(TIME_FORMAT_KEY) or None,
            time_location=metadata.get(TIME_LOCATION_KEY) or None,
            separator=metadata.get(SEPARATOR_KEY) or "",
        )


@dataclass(frozen=True)
class ColumnDescriptor:
    """
    Назначение:
        Неизменяемое описание одной колонки записи.

    Поля:
        name: имя колонки в заголовке CSV.
        attr: имя атрибута dataclass.
        field_type: объявленный тип без Optional-обёртки.
        optional: поле объявлено как Optional[T] / T | None.
        has_default: у поля есть default/default_factory.
        init: поле передаётся в __init__.
    """

    name: str
    attr: str
    field_type: Any
    optional: bool = False
    options: ColumnOptions = field(default_factory=ColumnOptions)
    has_default: bool = False
    init: bool = True


def csv_field(
    name: str,
    *,
    null: str | None = None,
    fmt: str | None = None,
    time_format: str | None = None,
    time_location: str | None = None,
    separator: str | None = None,
    metadata: Mapping[str, Any] | None = None,
    **field_kwargs: Any,
) -> Any:
    """
    Назначение:
        Объявляет поле dataclass как колонку CSV.

    Входные данные:
        name: str
            Имя колонки (обязательно непустое).
        null, fmt, time_format, time_location, separator:
            Опции конвертации; None - опция не объявлена.
        field_kwargs:
            Передаются в dataclasses.field (default, default_factory, init, ...).

    Выходные данные:
        dataclasses.Field с заполненным metadata.
    """
    meta = dict(metadata or {})
    meta[CSV_KEY] = name
    if null is not None:
        meta[NULL_KEY] = null
    if fmt is not None:
        meta[FORMAT_KEY] = fmt
    if time_format is not None:
        meta[TIME_FORMAT_KEY] = time_format
    if time_location is not None:
        meta[TIME_LOCATION_KEY] = time_location
    if separator is not None:
        meta[SEPARATOR_KEY] = separator
    return dataclasses.field(metadata=meta, **field_kwargs)


def unwrap_optional(tp: Any) -> tuple[Any, bool]:
    origin = get_origin(tp)
    if origin is Union or origin is types.UnionType:
        args = get_args(tp)
        inner = [arg for arg in args if arg is not type(None)]
        if len(inner) == 1 and len(inner) != len(args):
            return inner[0], True
    return tp, False


def is_list_type(tp: Any) -> bool:
    return tp is list or get_origin(tp) is list


def list_element_type(tp: Any) -> Any:
    args = get_args(tp)
    return args[0] if args else str


def _has_default(f: dataclasses.Field) -> bool:
    return f.default is not dataclasses.MISSING or f.default_factory is not dataclasses.MISSING


def _is_valid_csv_field(f: dataclasses.Field) -> bool:
    return not f.name.startswith("_") and bool(f.metadata.get(CSV_KEY))


def extract_columns(record_type: type) -> tuple[ColumnDescriptor, ...]:
    """
    Назначение:
        Строит упорядоченный список колонок для dataclass-записи.

    Алгоритм:
        - Поля без metadata["csv"] или с именем "_..." пропускаются молча.
        - Аннотации разрешаются через typing.get_type_hints.
        - Порядок колонок = порядок объявления полей.

    Ошибки:
        TypeError - record_type не dataclass.
        ValueError - имя колонки повторяется в схеме.
    """
    if not isinstance(record_type, type) or not dataclasses.is_dataclass(record_type):
        raise TypeError(f"typedcsv: record type must be a dataclass, got {record_type!r}")

    hints = get_type_hints(record_type)
    columns: list[ColumnDescriptor] = []
    seen: set[str] = set()
    for f in dataclasses.fields(record_type):
        if not _is_valid_csv_field(f):
            continue
        name = f.metadata[CSV_KEY]
        if name in seen:
            raise ValueError(f"typedcsv: duplicate column '{name}' in {record_type.__qualname__}")
        seen.add(name)
        field_type, optional = unwrap_optional(hints.get(f.name, f.type))
        columns.append(
            ColumnDescriptor(
                name=name,
                attr=f.name,
                field_type=field_type,
                optional=optional,
                options=ColumnOptions.from_metadata(f.metadata),
                has_default=_has_default(f),
                init=f.init,
            )
        )
    return tuple(columns)


@dataclass(frozen=True)
class PlainField:
    """
    Назначение:
        Поле __init__ без колонки и без default: читатель заполняет его нулевым значением.
    """

    attr: str
    field_type: Any
    optional: bool = False


def extract_plain_fields(
    record_type: type,
    columns: Iterable[ColumnDescriptor] | None = None,
) -> tuple[PlainField, ...]:
    if columns is None:
        columns = extract_columns(record_type)
    column_attrs = {column.attr for column in columns}
    hints = get_type_hints(record_type)
    plain: list[PlainField] = []
    for f in dataclasses.fields(record_type):
        if f.name in column_attrs or not f.init or _has_default(f):
            continue
        field_type, optional = unwrap_optional(hints.get(f.name, f.type))
        plain.append(PlainField(attr=f.name, field_type=field_type, optional=optional))
    return tuple(plain)


class SchemaRegistry:
    """
    Назначение/ответственность:
        Кэш схем: record_type -> кортеж ColumnDescriptor.
        Схема извлекается один раз на тип, а не на каждую строку.
    """

    def __init__(self) -> None:
        self._columns: dict[type, tuple[ColumnDescriptor, ...]] = {}

    def register(
        self,
        record_type: type,
        columns: Iterable[ColumnDescriptor] | None = None,
    ) -> tuple[ColumnDescriptor, ...]:
        resolved = tuple(columns) if columns is not None else extract_columns(record_type)
        self._columns[record_type] = resolved
        return resolved

    def columns_for(self, record_type: type) -> tuple[ColumnDescriptor, ...]:
        cached = self._columns.get(record_type)
        if cached is None:
            cached = self.register(record_type)
        return cached

    def clear(self) -> None:
        self._columns.clear()

    def __contains__(self, record_type: object) -> bool:
        return record_type in self._columns


default_registry = SchemaRegistry()


def csv_record(record_type: type) -> type:
    """
    Назначение:
        Декоратор класса: регистрирует схему в default_registry при объявлении.
    """
    default_registry.register(record_type)
    return record_type


__all__ = [
    "ColumnOptions",
    "ColumnDescriptor",
    "csv_field",
    "csv_record",
    "extract_columns",
    "extract_plain_fields",
    "PlainField",
    "unwrap_optional",
    "is_list_type",
    "list_element_type",
    "SchemaRegistry",
    "default_registry",
]
