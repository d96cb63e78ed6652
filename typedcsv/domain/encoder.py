from __future__ import annotations

from typing import Any

from typedcsv.domain.ports.text_hooks import has_text_encoder
from typedcsv.domain.scalars import format_scalar
from typedcsv.domain.schema import ColumnDescriptor, is_list_type
from typedcsv.domain.temporal import format_time, is_temporal_type, resolve_zone
from typedcsv.errors import FieldFormatError, UnknownTimeZoneError


def render_item(value: Any, fmt: str | None) -> str:
    if fmt is None:
        return format_scalar(value)
    return fmt % (value,)


def encode_value(column: ColumnDescriptor, value: Any) -> str:
    """
    Назначение:
        Преобразует значение поля в текст ячейки.

    Алгоритм (первое сработавшее правило):
        1) Optional: None -> null-токен (или "").
        2) Время + time_format: перевод в зону time_location и strftime.
        3) Тип с to_text: результат хука (bytes декодируются как UTF-8).
        4) list[T]: элементы по format (или строковое представление), склейка через separator.
        5) format: printf-подстановка "%" целиком.
        6) Строковое представление из таблицы форматтеров.

    Ошибки:
        FieldFormatError(field, cause).
    """
    options = column.options
    if column.optional and value is None:
        return options.null or ""

    tp = column.field_type

    if is_temporal_type(tp) and options.time_format:
        zone = None
        if options.time_location:
            try:
                zone = resolve_zone(options.time_location)
            except UnknownTimeZoneError as exc:
                raise FieldFormatError(column.name, exc) from exc
        try:
            return format_time(value, options.time_format, zone)
        except (OverflowError, ValueError) as exc:
            raise FieldFormatError(column.name, exc) from exc

    if has_text_encoder(tp):
        try:
            text = value.to_text()
            if isinstance(text, (bytes, bytearray)):
                return bytes(text).decode("utf-8")
            return str(text)
        except Exception as exc:
            raise FieldFormatError(column.name, exc) from exc

    if is_list_type(tp):
        try:
            return options.separator.join(render_item(item, options.format) for item in value)
        except (TypeError, ValueError) as exc:
            raise FieldFormatError(column.name, exc) from exc

    if options.format is not None:
        try:
            return options.format % (value,)
        except (TypeError, ValueError) as exc:
            raise FieldFormatError(column.name, exc) from exc

    return format_scalar(value)
