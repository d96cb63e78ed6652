from __future__ import annotations

import re
from datetime import date, datetime, timezone, tzinfo
from typing import Any, get_origin
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from typedcsv.errors import UnknownTimeZoneError


def is_temporal_type(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and issubclass(tp, date)


def resolve_zone(name: str) -> ZoneInfo:
    """
    Назначение:
        Разрешает IANA-имя часового пояса.

    Ошибки:
        UnknownTimeZoneError - зона не найдена или имя некорректно.
    """
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, OSError) as exc:
        raise UnknownTimeZoneError(name) from exc


def parse_time(tp: type, text: str, layout: str, zone: tzinfo | None = None) -> Any:
    """
    Назначение:
        Разбирает время по strptime-шаблону.

    Поведение:
        - Наивный результат получает zone, а без неё - UTC.
        - Смещение, присутствующее в тексте (%z), сохраняется.
        - Для date-типов возвращается только дата.

    Ошибки:
        ValueError - текст не соответствует шаблону.
    """
    parsed = datetime.strptime(text, layout)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=zone or timezone.utc)
    if not issubclass(tp, datetime):
        return tp(parsed.year, parsed.month, parsed.day)
    if tp is datetime:
        return parsed
    return tp(
        parsed.year,
        parsed.month,
        parsed.day,
        parsed.hour,
        parsed.minute,
        parsed.second,
        parsed.microsecond,
        tzinfo=parsed.tzinfo,
        fold=parsed.fold,
    )


_YEAR_DIRECTIVE = re.compile(r"%(%|Y)")


def _pad_year(layout: str, year: int) -> str:
    # strftime("%Y") не дополняет годы < 1000 нулями, а strptime ждёт четыре цифры
    return _YEAR_DIRECTIVE.sub(lambda m: "%%" if m.group(1) == "%" else f"{year:04d}", layout)


def format_time(value: date, layout: str, zone: tzinfo | None = None) -> str:
    """
    Назначение:
        Форматирует время по strftime-шаблону.

    Поведение:
        - С zone datetime переводится в неё; наивное время считается UTC.
        - %Y всегда выводится четырьмя цифрами.

    Ошибки:
        OverflowError/ValueError - время не представимо в zone (края datetime.min/max).
    """
    if zone is not None and isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        value = value.astimezone(zone)
    return value.strftime(_pad_year(layout, value.year))
