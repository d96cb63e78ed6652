from __future__ import annotations

import csv
import io
import logging
from typing import Any, TextIO

from typedcsv.domain.ports.rows import Row

DEFAULT_BUFFER_SIZE = 4096


class CsvRowSink:
    """
    Назначение/ответственность:
        Буферизующий приёмник строк поверх csv.writer.

    Поведение:
        - write() форматирует строку в память; при переполнении буфера сбрасывает его в stream.
        - flush() ничего не возвращает: ошибка ввода-вывода запоминается и доступна через error().
        - После зафиксированной ошибки последующие write() повторно бросают её.

    Взаимодействия:
        Не владеет stream: открытие/закрытие - ответственность вызывающего.
    """

    def __init__(
        self,
        stream: TextIO,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        logger: logging.Logger | None = None,
        **fmtparams: Any,
    ) -> None:
        fmtparams.setdefault("lineterminator", "\n")
        self.stream = stream
        self.buffer_size = buffer_size
        self.logger = logger or logging.getLogger("typedcsv")
        self._buffer = io.StringIO()
        self._writer = csv.writer(self._buffer, **fmtparams)
        self._error: BaseException | None = None

    def write(self, row: Row) -> None:
        if self._error is not None:
            raise self._error
        self._writer.writerow(row)
        if self._buffer.tell() >= self.buffer_size:
            self._drain()

    def flush(self) -> None:
        if self._error is not None:
            return
        try:
            self._drain()
            self.stream.flush()
        except OSError as exc:
            self._error = exc
            self.logger.warning(
                f"CSV sink flush failed: {exc}",
                extra={"component": "sink"},
            )

    def error(self) -> BaseException | None:
        return self._error

    def _drain(self) -> None:
        data = self._buffer.getvalue()
        if not data:
            return
        try:
            self.stream.write(data)
        except OSError as exc:
            self._error = exc
            raise
        self._buffer.seek(0)
        self._buffer.truncate(0)
