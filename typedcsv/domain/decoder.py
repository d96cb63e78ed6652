from __future__ import annotations

from typing import Any

from typedcsv.domain.ports.text_hooks import has_text_decoder
from typedcsv.domain.scalars import parse_scalar, zero_value_for
from typedcsv.domain.schema import ColumnDescriptor, is_list_type, list_element_type
from typedcsv.domain.temporal import is_temporal_type, parse_time, resolve_zone
from typedcsv.errors import FieldParseError, UnknownTimeZoneError, UnsupportedTypeError


def split_items(raw: str, separator: str) -> list[str]:
    # пустая ячейка - пустой список при любом разделителе
    if raw == "":
        return []
    if separator == "":
        return list(raw)
    return raw.split(separator)


def zero_value_of(tp: Any, optional: bool = False) -> Any:
    """
    Назначение:
        Нулевое значение для объявленного типа поля.

    Поведение:
        - Optional -> None, list -> [].
        - Скаляры -> значение из таблицы нулей.
        - Прочие типы -> tp() если конструктор без аргументов работает, иначе None.
    """
    if optional:
        return None
    if is_list_type(tp):
        return []
    try:
        return zero_value_for(tp)
    except UnsupportedTypeError:
        try:
            return tp()
        except (TypeError, ValueError):
            return None
    except ValueError:
        return None


def zero_value(column: ColumnDescriptor) -> Any:
    return zero_value_of(column.field_type, column.optional)


def decode_value(column: ColumnDescriptor, raw: str) -> Any:
    """
    Назначение:
        Преобразует текст ячейки в значение поля.

    Алгоритм (первое сработавшее правило):
        1) Optional: совпадение с null-токеном -> None, иначе разбор внутреннего типа.
        2) Время + time_format: strptime (с зоной time_location, если задана).
        3) Тип с from_text: вызов хука с байтами ячейки.
        4) list[T]: разбиение по separator, элементы - через таблицу скаляров.
        5) Скаляр: таблица парсеров.

    Ошибки:
        FieldParseError(field, cause) - первая же ошибка прерывает разбор.
    """
    if column.optional:
        null = column.options.null
        if null is not None and raw == null:
            return None
    return _decode_inner(column, column.field_type, raw)


def _decode_inner(column: ColumnDescriptor, tp: Any, raw: str) -> Any:
    options = column.options

    if is_temporal_type(tp) and options.time_format:
        zone = None
        if options.time_location:
            try:
                zone = resolve_zone(options.time_location)
            except UnknownTimeZoneError as exc:
                raise FieldParseError(column.name, exc) from exc
        try:
            return parse_time(tp, raw, options.time_format, zone)
        except ValueError as exc:
            raise FieldParseError(column.name, exc) from exc

    if has_text_decoder(tp):
        try:
            return tp.from_text(raw.encode("utf-8"))
        except Exception as exc:
            raise FieldParseError(column.name, exc) from exc

    if is_list_type(tp):
        element_type = list_element_type(tp)
        items: list[Any] = []
        for index, item in enumerate(split_items(raw, options.separator)):
            try:
                items.append(parse_scalar(element_type, item))
            except (ValueError, TypeError) as exc:
                raise FieldParseError(f"{column.name}[{index}]", exc) from exc
        return items

    try:
        return parse_scalar(tp, raw)
    except (ValueError, TypeError) as exc:
        raise FieldParseError(column.name, exc) from exc
