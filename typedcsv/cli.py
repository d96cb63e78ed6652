from __future__ import annotations

import csv
import importlib
import io
import logging
import time
import uuid
from pathlib import Path

import typer

from typedcsv.config import Settings, csv_fmtparams, load_settings
from typedcsv.domain.schema import default_registry
from typedcsv.errors import CsvFormatError, EndOfInput, FieldFormatError, FieldParseError
from typedcsv.infra.logging.setup import createCommandLogger, logEvent, mapLogLevel
from typedcsv.reader import TypedCsvReader
from typedcsv.writer import TypedCsvWriter

app = typer.Typer(no_args_is_help=True, add_completion=False)

def loadRecordType(schemaRef: str) -> type:
    """
    Назначение:
        Загружает dataclass-схему по ссылке вида "package.module:Class".

    Выходные данные:
        type - класс записи (схема уже извлечена в default_registry).

    Ошибки:
        ValueError - ссылка некорректна.
        ImportError/AttributeError - модуль или класс не найдены.
        TypeError - класс не dataclass.
    """
    moduleName, sep, attrPath = schemaRef.partition(":")
    if not sep or not moduleName or not attrPath:
        raise ValueError(f"schema must look like 'module:Class', got {schemaRef!r}")
    target: object = importlib.import_module(moduleName)
    for part in attrPath.split("."):
        target = getattr(target, part)
    if not isinstance(target, type):
        raise TypeError(f"{schemaRef} is not a class")
    default_registry.columns_for(target)
    return target

def requireSchema(schemaRef: str) -> type:
    try:
        return loadRecordType(schemaRef)
    except (ImportError, AttributeError, ValueError, TypeError) as exc:
        typer.echo(f"ERROR: cannot load schema {schemaRef}: {exc}", err=True)
        raise typer.Exit(code=2)

def requireCsv(csvPath: str | None) -> None:
    """
    Назначение:
        Базовая проверка наличия CSV-файла.

    Поведение:
        - Если csvPath не задан или файл не существует - завершает процесс с exit code 2.
    """
    if not csvPath:
        typer.echo("ERROR: --csv is required", err=True)
        raise typer.Exit(code=2)

    p = Path(csvPath)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: CSV file not found: {csvPath}", err=True)
        raise typer.Exit(code=2)

def runCommand(ctx: typer.Context, commandName: str, runner) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - логирует старт/финиш и длительность
        - переводит код возврата runner в typer.Exit

    Входные данные:
        ctx: typer.Context
        commandName: str
        runner: Callable[[logging.Logger], int]
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]

    startMonotonic = time.monotonic()
    commandLog = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )
    logger = commandLog.logger

    exitCode: int | None = None
    try:
        logEvent(logger, logging.INFO, runId, "core", "Command started", sources=ctx.obj["sources"])
        exitCode = runner(logger)
    finally:
        durationMs = int((time.monotonic() - startMonotonic) * 1000)
        logEvent(
            logger,
            logging.INFO,
            runId,
            "core",
            "Command finished",
            exit_code=exitCode,
            duration_ms=durationMs,
            log_file=commandLog.path,
        )
        commandLog.close()

    raise typer.Exit(code=exitCode or 0)

def runCheckCommand(ctx: typer.Context, csvPath: str | None, schemaRef: str) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    requireCsv(csvPath)
    recordType = requireSchema(schemaRef)

    def execute(logger: logging.Logger) -> int:
        reader: TypedCsvReader | None = None
        records = 0
        try:
            with open(csvPath, "r", encoding=settings.encoding, newline="") as f:
                reader = TypedCsvReader.from_stream(recordType, f, logger=logger, **csv_fmtparams(settings))
                reader.read_header()
                for _record in reader:
                    records += 1
        except EndOfInput:
            logEvent(logger, logging.ERROR, runId, "csv", "CSV has no header row")
            typer.echo("ERROR: CSV is empty (no header row)", err=True)
            return 2
        except FieldParseError as exc:
            lineNo = reader.line_no if reader is not None else None
            logEvent(logger, logging.WARNING, runId, "check", "invalid row", line=lineNo, field=exc.field, error=exc.cause)
            typer.echo(f"ERROR: line {lineNo}: {exc}", err=True)
            return 1
        except (CsvFormatError, csv.Error) as exc:
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV format error: {exc}")
            typer.echo(f"ERROR: CSV format error: {exc}", err=True)
            return 2
        except OSError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV read error: {exc}")
            typer.echo(f"ERROR: CSV read error: {exc}", err=True)
            return 2

        logEvent(logger, logging.INFO, runId, "check", "check done", records=records)
        typer.echo(f"records={records} columns={len(reader.columns)}")
        return 0

    runCommand(ctx, "check", execute)

def runConvertCommand(ctx: typer.Context, csvPath: str | None, outPath: str, schemaRef: str) -> None:
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    requireCsv(csvPath)
    recordType = requireSchema(schemaRef)

    def execute(logger: logging.Logger) -> int:
        reader: TypedCsvReader | None = None
        records = 0
        try:
            with open(csvPath, "r", encoding=settings.encoding, newline="") as src, open(
                outPath, "w", encoding=settings.encoding, newline=""
            ) as dst:
                reader = TypedCsvReader.from_stream(recordType, src, logger=logger, **csv_fmtparams(settings))
                writer = TypedCsvWriter.from_stream(
                    recordType,
                    dst,
                    logger=logger,
                    lineterminator=settings.lineterminator,
                    **csv_fmtparams(settings),
                )
                reader.read_header()
                writer.write_header()
                for record in reader:
                    writer.write_record(record)
                    records += 1
                writer.flush()
                sinkError = writer.error()
        except EndOfInput:
            logEvent(logger, logging.ERROR, runId, "csv", "CSV has no header row")
            typer.echo("ERROR: CSV is empty (no header row)", err=True)
            return 2
        except FieldParseError as exc:
            lineNo = reader.line_no if reader is not None else None
            logEvent(logger, logging.WARNING, runId, "convert", "invalid row", line=lineNo, field=exc.field, error=exc.cause)
            typer.echo(f"ERROR: line {lineNo}: {exc}", err=True)
            return 1
        except FieldFormatError as exc:
            logEvent(logger, logging.WARNING, runId, "convert", "format failed", field=exc.field, error=exc.cause)
            typer.echo(f"ERROR: {exc}", err=True)
            return 1
        except (CsvFormatError, csv.Error) as exc:
            typer.echo(f"ERROR: CSV format error: {exc}", err=True)
            return 2
        except OSError as exc:
            logEvent(logger, logging.ERROR, runId, "csv", f"CSV I/O error: {exc}")
            typer.echo(f"ERROR: CSV I/O error: {exc}", err=True)
            return 2

        if sinkError is not None:
            logEvent(logger, logging.ERROR, runId, "sink", f"write failed: {sinkError}")
            typer.echo(f"ERROR: write failed: {sinkError}", err=True)
            return 1

        logEvent(logger, logging.INFO, runId, "convert", "convert done", records=records, out=outPath)
        typer.echo(f"records={records} out={outPath}")
        return 0

    runCommand(ctx, "convert", execute)

@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    delimiter: str | None = typer.Option(None, "--delimiter", help="CSV delimiter (single character)"),
    encoding: str | None = typer.Option(None, "--encoding", help="CSV file encoding"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - сохраняет всё в ctx.obj для подкоманд
    """
    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "delimiter": delimiter,
        "encoding": encoding,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except ValueError as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ctx.obj = {
        "runId": runId or str(uuid.uuid4()),
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }

@app.command()
def header(
    ctx: typer.Context,
    schema: str = typer.Option(..., "--schema", help="Record dataclass as module:Class"),
):
    """Print the CSV header row for a record schema."""
    settings: Settings = ctx.obj["settings"]
    recordType = requireSchema(schema)
    buffer = io.StringIO()
    writer = TypedCsvWriter.from_stream(
        recordType,
        buffer,
        lineterminator=settings.lineterminator,
        **csv_fmtparams(settings),
    )
    writer.write_header()
    writer.flush()
    typer.echo(buffer.getvalue(), nl=False)

@app.command()
def check(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to input CSV"),
    schema: str = typer.Option(..., "--schema", help="Record dataclass as module:Class"),
):
    """Decode every record of a CSV file and report the first field error."""
    runCheckCommand(ctx, csv, schema)

@app.command()
def convert(
    ctx: typer.Context,
    csv: str | None = typer.Option(None, "--csv", help="Path to input CSV"),
    out: str = typer.Option(..., "--out", help="Path to output CSV"),
    schema: str = typer.Option(..., "--schema", help="Record dataclass as module:Class"),
):
    """Re-encode a CSV file in canonical column order and formats."""
    runConvertCommand(ctx, csv, out, schema)

if __name__ == "__main__":
    app()
