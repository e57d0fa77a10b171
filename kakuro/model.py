from dataclasses import dataclass, field
from typing import Union

from .types import Position


ROW = "row"
COLUMN = "column"
NO_RUN_INDEX = -1


@dataclass(frozen=True)
class ClueCell:
    column: int
    row: int
    down: int
    right: int


@dataclass
class EntryCell:
    column: int
    row: int
    value: int = 0
    row_run: int = NO_RUN_INDEX
    column_run: int = NO_RUN_INDEX

    @property
    def is_solved(self) -> bool:
        return self.value > 0

    @property
    def position(self) -> Position:
        return self.column, self.row

    def run_indexes(self) -> list[int]:
        return [run for run in (self.row_run, self.column_run) if run != NO_RUN_INDEX]


@dataclass
class Run:
    total: int
    direction: str
    clue_column: int
    clue_row: int
    cell_indexes: list[int] = field(default_factory=list)


LayoutCell = Union[ClueCell, int]


@dataclass
class Puzzle:
    """A wired puzzle grid.

    ``layout`` mirrors the input grid: clue positions hold a ``ClueCell`` and
    entry positions hold the index of their ``EntryCell`` in ``entries``.
    Entries and runs refer to each other by index only.
    """

    width: int
    height: int
    layout: list[list[LayoutCell]]
    entries: list[EntryCell] = field(default_factory=list)
    runs: list[Run] = field(default_factory=list)

    def unsolved_indexes(self) -> list[int]:
        return [index for index, entry in enumerate(self.entries) if not entry.is_solved]

    def values(self) -> dict[Position, int]:
        return {entry.position: entry.value for entry in self.entries}

    def entry_at(self, column: int, row: int) -> EntryCell:
        cell = self.layout[row][column]
        if isinstance(cell, ClueCell):
            raise KeyError(f"cell at column {column}, row {row} is a clue cell")
        return self.entries[cell]
