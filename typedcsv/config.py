from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml


@dataclass(frozen=True)
class Settings:
    # CSV dialect
    delimiter: str = ","
    encoding: str = "utf-8-sig"
    lineterminator: str = "\n"

    # Logging
    log_dir: str = "./logs"
    log_level: str = "INFO"


@dataclass(frozen=True)
class LoadedSettings:
    settings: Settings
    sources_used: list[str]


ENV_PREFIX = "TYPEDCSV_"
# lineterminator задаётся только в config-файле
ENV_NAMES = {
    "delimiter": f"{ENV_PREFIX}DELIMITER",
    "encoding": f"{ENV_PREFIX}ENCODING",
    "log_dir": f"{ENV_PREFIX}LOG_DIR",
    "log_level": f"{ENV_PREFIX}LOG_LEVEL",
}

SETTING_NAMES = tuple(f.name for f in dataclasses.fields(Settings))


def _read_yaml_config(path: Path) -> dict:
    """
    Назначение:
        Читает YAML-конфиг. Отсутствующий файл или не-словарь дают пустой конфиг.
    """
    if not path.is_file():
        return {}
    with path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        return {}
    return {key: value for key, value in data.items() if key in SETTING_NAMES}


def _read_env() -> dict[str, str]:
    values: dict[str, str] = {}
    for key, name in ENV_NAMES.items():
        value = os.getenv(name)
        if value:
            values[key] = value
    return values


def _validate_delimiter(value: str) -> str:
    if len(value) != 1:
        raise ValueError(f"Delimiter must be a single character, got {value!r}")
    return value


def _validate_lineterminator(value: str) -> str:
    if value not in ("\n", "\r\n", "\r"):
        raise ValueError(f"Unsupported line terminator: {value!r}")
    return value


VALIDATORS = {
    "delimiter": _validate_delimiter,
    "lineterminator": _validate_lineterminator,
}


def load_settings(
    config_path: str | None,
    cli_overrides: Mapping[str, Any],
) -> LoadedSettings:
    """
    Назначение:
        Собирает Settings из нескольких источников.

    Приоритет:
        CLI > ENV > config > defaults.
        В cli_overrides учитываются только явно переданные значения (не None).

    Ошибки:
        ValueError - значение не прошло валидацию (delimiter, lineterminator).
    """
    layers: list[tuple[str, Mapping[str, Any]]] = [
        ("config", _read_yaml_config(Path(config_path)) if config_path else {}),
        ("env", _read_env()),
        ("cli", {key: value for key, value in cli_overrides.items() if value is not None}),
    ]

    merged: dict[str, Any] = dataclasses.asdict(Settings())
    sources: list[str] = []
    for source, values in layers:
        if not values:
            continue
        sources.append(source)
        merged.update(values)

    resolved: dict[str, str] = {}
    for name in SETTING_NAMES:
        value = str(merged[name])
        validator = VALIDATORS.get(name)
        resolved[name] = validator(value) if validator else value

    return LoadedSettings(settings=Settings(**resolved), sources_used=sources)


def csv_fmtparams(settings: Settings) -> dict:
    return {"delimiter": settings.delimiter}
