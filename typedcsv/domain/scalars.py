from __future__ import annotations

from datetime import date, datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, get_origin

from typedcsv.errors import UnsupportedTypeError

TRUE_VALUES = frozenset({"1", "t", "true"})
FALSE_VALUES = frozenset({"0", "f", "false"})


def parse_bool_text(text: str) -> bool:
    normalized = text.strip().lower()
    if normalized in TRUE_VALUES:
        return True
    if normalized in FALSE_VALUES:
        return False
    raise ValueError(f"invalid boolean value: {text!r}")


def parse_decimal_text(text: str) -> Decimal:
    try:
        return Decimal(text.strip())
    except InvalidOperation as exc:
        raise ValueError(f"invalid decimal value: {text!r}") from exc


def _construct(tp: type, base: type, value: Any) -> Any:
    # подклассы (IntEnum, str-enum, NewType-классы) строятся из значения базового типа
    return value if tp is base else tp(value)


# базовый тип -> парсер(целевой_тип, текст)
SCALAR_PARSERS: dict[type, Callable[[type, str], Any]] = {
    str: lambda tp, text: _construct(tp, str, text),
    bool: lambda tp, text: _construct(tp, bool, parse_bool_text(text)),
    int: lambda tp, text: _construct(tp, int, int(text.strip(), 10)),
    float: lambda tp, text: _construct(tp, float, float(text)),
    Decimal: lambda tp, text: _construct(tp, Decimal, parse_decimal_text(text)),
    datetime: lambda tp, text: tp.fromisoformat(text.strip()),
    date: lambda tp, text: tp.fromisoformat(text.strip()),
}

ZERO_VALUES: dict[type, Any] = {
    str: "",
    bool: False,
    int: 0,
    float: 0.0,
    Decimal: Decimal(0),
}


def type_name(tp: Any) -> str:
    if get_origin(tp) is not None:
        return repr(tp)
    if isinstance(tp, type):
        return tp.__qualname__
    return repr(tp)


def scalar_base(tp: Any) -> type:
    """
    Назначение:
        Находит базовый тип из таблицы парсеров по MRO целевого типа.

    Ошибки:
        UnsupportedTypeError - тип не скалярный (dict, Union, произвольный класс).
    """
    if isinstance(tp, type) and get_origin(tp) is None:
        for klass in tp.__mro__:
            if klass in SCALAR_PARSERS:
                return klass
    raise UnsupportedTypeError(f"can't scan type: {type_name(tp)}")


def enum_value_type(tp: Any) -> type | None:
    """
    Назначение:
        Тип значений Enum без скалярной базы (не IntEnum и не str-enum).
        Для прочих типов и пустых Enum возвращает None.
    """
    if not (isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, Enum)):
        return None
    if any(klass in SCALAR_PARSERS for klass in tp.__mro__):
        return None
    members = list(tp)
    if not members:
        return None
    return type(members[0].value)


def zero_value_for(tp: Any) -> Any:
    base = scalar_base(tp)
    if base is datetime:
        # второй день года 1: переводится в любую зону без выхода за datetime.min
        return tp(1, 1, 2, tzinfo=timezone.utc)
    if base is date:
        return tp(1, 1, 1)
    return _construct(tp, base, ZERO_VALUES[base])


def parse_scalar(tp: Any, text: str) -> Any:
    """
    Назначение:
        Разбирает текст ячейки в скалярный тип.

    Поведение:
        - Пустой (или пробельный) текст для нестрокового типа даёт нулевое значение типа.
        - Строки возвращаются как есть.
        - Enum без скалярной базы: текст разбирается по типу значений членов, затем tp(value).

    Ошибки:
        ValueError - текст не разбирается в тип.
        UnsupportedTypeError - тип не поддерживается.
    """
    value_type = enum_value_type(tp)
    if value_type is not None:
        return tp(parse_scalar(value_type, text))
    base = scalar_base(tp)
    if base is not str and text.strip() == "":
        return zero_value_for(tp)
    return SCALAR_PARSERS[base](tp, text)


def _format_bool(value: bool) -> str:
    return "true" if value else "false"


def _format_temporal(value: date) -> str:
    return value.isoformat()


SCALAR_FORMATTERS: dict[type, Callable[[Any], str]] = {
    bool: _format_bool,
    datetime: _format_temporal,
    date: _format_temporal,
}


def format_scalar(value: Any) -> str:
    if isinstance(value, Enum):
        return format_scalar(value.value)
    for klass in type(value).__mro__:
        formatter = SCALAR_FORMATTERS.get(klass)
        if formatter is not None:
            return formatter(value)
    return str(value)


__all__ = [
    "SCALAR_PARSERS",
    "SCALAR_FORMATTERS",
    "ZERO_VALUES",
    "parse_bool_text",
    "parse_decimal_text",
    "parse_scalar",
    "format_scalar",
    "scalar_base",
    "zero_value_for",
    "type_name",
    "enum_value_type",
]
