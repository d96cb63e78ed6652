from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s runId=%(runId)s cmd=%(command)s comp=%(component)s msg=%(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"

LOG_LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class RunContextFilter(logging.Filter):
    """
    Назначение:
        Дописывает в LogRecord поля runId, command и component,
        если их не передали через extra (например, сообщения reader/writer).
    """

    def __init__(self, runId: str, command: str, defaultComponent: str = "core"):
        super().__init__()
        self.runId = runId
        self.command = command
        self.defaultComponent = defaultComponent

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "runId"):
            record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = self.defaultComponent
        record.command = self.command
        return True


def mapLogLevel(levelName: str) -> int:
    """
    Назначение:
        Преобразует строковый уровень (ERROR|WARN|INFO|DEBUG) в logging level.

    Ошибки:
        ValueError - неизвестный уровень.
    """
    level = LOG_LEVELS.get((levelName or "").strip().upper())
    if level is None:
        raise ValueError(f"Unsupported log level: {levelName}")
    return level


@dataclass
class CommandLog:
    logger: logging.Logger
    path: str

    def close(self) -> None:
        closeCommandLogger(self.logger)


def createCommandLogger(commandName: str, logDir: str, runId: str, logLevel: str) -> CommandLog:
    """
    Назначение:
        Открывает файловый лог одной команды CLI: <logDir>/<command>_<runId>.log.

    Поведение:
        - Логгер "typedcsv.<command>.<runId>" не пропагирует записи в root.
        - Повторное открытие с тем же runId заменяет обработчики, а не дублирует их.
    """
    logPath = Path(logDir)
    logPath.mkdir(parents=True, exist_ok=True)
    logFilePath = str(logPath / f"{commandName}_{runId}.log")

    logger = logging.getLogger(f"typedcsv.{commandName}.{runId}")
    closeCommandLogger(logger)
    logger.propagate = False

    level = mapLogLevel(logLevel)
    logger.setLevel(level)

    handler = logging.FileHandler(logFilePath, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler.addFilter(RunContextFilter(runId=runId, command=commandName))
    logger.addHandler(handler)

    return CommandLog(logger=logger, path=logFilePath)


def closeCommandLogger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def logEvent(logger: logging.Logger, level: int, runId: str, component: str, message: str, **fields) -> None:
    """
    Назначение:
        Запись события с runId/component; fields дописываются в конец как key=value.
    """
    if fields:
        message = message + " " + " ".join(f"{key}={value}" for key, value in fields.items())
    logger.log(level, message, extra={"runId": runId, "component": component})
