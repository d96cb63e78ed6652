from __future__ import annotations

from typing import Any, Protocol, get_origin, runtime_checkable


@runtime_checkable
class TextDecodable(Protocol):
    """
    Назначение/ответственность:
        Тип поля, умеющий разобрать себя из текста колонки.
    """

    @classmethod
    def from_text(cls, text: bytes) -> Any:
        """
        Контракт:
            Вход: байты ячейки (UTF-8).
            Выход: экземпляр типа; при ошибке бросает исключение (оно станет cause у FieldParseError).
        """
        ...


@runtime_checkable
class TextEncodable(Protocol):
    """
    Назначение/ответственность:
        Тип поля, умеющий отрендерить себя в текст колонки.
    """

    def to_text(self) -> bytes:
        """
        Контракт:
            Выход: байты (UTF-8) или str; при ошибке бросает исключение (оно станет cause у FieldFormatError).
        """
        ...


def has_text_decoder(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and callable(getattr(tp, "from_text", None))


def has_text_encoder(tp: Any) -> bool:
    return isinstance(tp, type) and get_origin(tp) is None and callable(getattr(tp, "to_text", None))
