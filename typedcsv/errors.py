from __future__ import annotations

from dataclasses import dataclass


class TypedCsvError(Exception):
    """
    Назначение:
        Базовая ошибка библиотеки typedcsv.
    """


class HeaderNotRead(TypedCsvError):
    """
    Назначение:
        Попытка прочитать запись до чтения заголовка (read_header).
    """

    def __init__(self) -> None:
        super().__init__("typedcsv: header not read")


class EndOfInput(TypedCsvError, EOFError):
    """
    Назначение:
        Штатный сигнал окончания строк в источнике. Не является сбоем.
    """

    def __init__(self) -> None:
        super().__init__("typedcsv: end of input")


class UnsupportedTypeError(TypeError):
    """
    Назначение:
        Тип поля не поддерживается ни таблицей скаляров, ни хуками.
    """


class UnknownTimeZoneError(ValueError):
    """
    Назначение:
        Имя часового пояса не найдено в базе IANA.
    """

    def __init__(self, name: str) -> None:
        super().__init__(f"unknown time zone {name}")
        self.name = name


class CsvFormatError(TypedCsvError):
    """
    Назначение:
        Ошибка критического формата CSV (количество колонок и т.п.).
    """


@dataclass(eq=False)
class FieldParseError(TypedCsvError):
    """
    Назначение:
        Ошибка разбора значения колонки в поле записи.
    Инварианты/гарантии:
        - field содержит имя колонки (или "<колонка>[<индекс>]" для элемента списка).
        - cause содержит исходную ошибку (парсер, зона, хук).
    """

    field: str
    cause: BaseException

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def unwrap(self) -> BaseException:
        return self.cause

    def __str__(self) -> str:
        return f"typedcsv: error parsing field '{self.field}': {self.cause}"


@dataclass(eq=False)
class FieldFormatError(TypedCsvError):
    """
    Назначение:
        Ошибка форматирования значения поля в текст колонки.
    """

    field: str
    cause: BaseException

    def __post_init__(self) -> None:
        super().__init__(str(self))

    def unwrap(self) -> BaseException:
        return self.cause

    def __str__(self) -> str:
        return f"typedcsv: error formatting field '{self.field}': {self.cause}"


__all__ = [
    "TypedCsvError",
    "HeaderNotRead",
    "EndOfInput",
    "UnsupportedTypeError",
    "UnknownTimeZoneError",
    "CsvFormatError",
    "FieldParseError",
    "FieldFormatError",
]
