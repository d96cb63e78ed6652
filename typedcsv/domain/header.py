from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping, Sequence


@dataclass(frozen=True)
class HeaderIndex:
    """
    Назначение:
        Индекс заголовка: имя колонки -> позиция в строке.

    Инварианты/гарантии:
        - width - число ячеек в строке заголовка (включая повторы).
        - duplicates - имена, встретившиеся больше одного раза; в positions побеждает последнее вхождение.
    """

    positions: Mapping[str, int]
    width: int
    duplicates: tuple[str, ...] = field(default=())

    def position(self, name: str) -> int | None:
        return self.positions.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self.positions

    def __len__(self) -> int:
        return len(self.positions)


def map_header(row: Sequence[str]) -> HeaderIndex:
    positions: dict[str, int] = {}
    duplicates: list[str] = []
    for index, name in enumerate(row):
        if name in positions and name not in duplicates:
            duplicates.append(name)
        positions[name] = index
    return HeaderIndex(positions=positions, width=len(row), duplicates=tuple(duplicates))
