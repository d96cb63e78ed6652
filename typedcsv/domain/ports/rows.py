from __future__ import annotations

from typing import Protocol, Sequence

Row = Sequence[str]


class RowSink(Protocol):
    """
    Назначение/ответственность:
        Приёмник строк на стороне записи с буферизацией и отложенной ошибкой.
    """

    def write(self, row: Row) -> None: ...

    def flush(self) -> None:
        """
        Контракт:
            Сбрасывает буфер; ошибку не возвращает (см. error()).
        """
        ...

    def error(self) -> BaseException | None:
        """
        Контракт:
            Последняя ошибка предыдущих write/flush или None.
        """
        ...
