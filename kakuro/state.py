from rules.rules import BLANK

from .errors import DuplicateValueError, PuzzleFormatError
from .model import COLUMN, NO_RUN_INDEX, ROW, ClueCell, EntryCell, LayoutCell, Puzzle, Run
from .types import RawGrid
from .validation import validate_and_normalize_raw_grid


def build_initial_state(raw_grid: RawGrid) -> Puzzle:
    grid = validate_and_normalize_raw_grid(raw_grid)
    height = len(grid)
    width = len(grid[0])

    layout: list[list[LayoutCell]] = []
    entries: list[EntryCell] = []
    for row, grid_row in enumerate(grid):
        layout_row: list[LayoutCell] = []
        for column, cell in enumerate(grid_row):
            if isinstance(cell, int):
                layout_row.append(len(entries))
                entries.append(EntryCell(column=column, row=row, value=cell))
            else:
                down, right = cell
                layout_row.append(ClueCell(column=column, row=row, down=down, right=right))
        layout.append(layout_row)

    puzzle = Puzzle(width=width, height=height, layout=layout, entries=entries)
    for index, entry in enumerate(entries):
        if entry.row_run == NO_RUN_INDEX:
            _wire_run(puzzle, index, ROW)
        if entry.column_run == NO_RUN_INDEX:
            _wire_run(puzzle, index, COLUMN)
        if entry.row_run == NO_RUN_INDEX and entry.column_run == NO_RUN_INDEX:
            raise PuzzleFormatError(
                f"The value cell at column {entry.column}, row {entry.row} has no sum cell before it in either direction."
            )

    return puzzle


def _wire_run(puzzle: Puzzle, index: int, direction: str) -> None:
    entry = puzzle.entries[index]
    step_column, step_row = (1, 0) if direction == ROW else (0, 1)

    # walk back to the clue that starts this run; reaching the edge leaves the
    # cell unconstrained in this direction
    column, row = entry.column, entry.row
    while True:
        column -= step_column
        row -= step_row
        if column < 0 or row < 0:
            return
        clue = puzzle.layout[row][column]
        if isinstance(clue, ClueCell):
            break

    total = clue.right if direction == ROW else clue.down
    run = Run(total=total, direction=direction, clue_column=clue.column, clue_row=clue.row)
    run_index = len(puzzle.runs)
    puzzle.runs.append(run)

    column += step_column
    row += step_row
    while column < puzzle.width and row < puzzle.height:
        cell = puzzle.layout[row][column]
        if isinstance(cell, ClueCell):
            break
        _add_to_run(puzzle, run, run_index, cell)
        column += step_column
        row += step_row


def _add_to_run(puzzle: Puzzle, run: Run, run_index: int, index: int) -> None:
    entry = puzzle.entries[index]
    if entry.value != BLANK:
        duplicates = [
            puzzle.entries[peer]
            for peer in run.cell_indexes
            if puzzle.entries[peer].value == entry.value
        ]
        if duplicates:
            details = "\n".join(
                f"  Column: {peer.column}, Row: {peer.row}, Value: {peer.value}" for peer in duplicates
            )
            raise PuzzleFormatError(
                f"Cannot add a value cell that has a value of {entry.value} at column {entry.column} "
                f"and row {entry.row}. The following peer cells have the same value:\n{details}"
            )

    run.cell_indexes.append(index)
    if run.direction == ROW:
        entry.row_run = run_index
    else:
        entry.column_run = run_index


def apply_value(puzzle: Puzzle, index: int, value: int) -> None:
    entry = puzzle.entries[index]
    for run_index in entry.run_indexes():
        for peer in puzzle.runs[run_index].cell_indexes:
            if peer != index and puzzle.entries[peer].value == value:
                other = puzzle.entries[peer]
                raise DuplicateValueError(
                    f"value {value} at column {entry.column}, row {entry.row} is already used "
                    f"at column {other.column}, row {other.row}"
                )
    entry.value = value


def revert_value(puzzle: Puzzle, index: int) -> None:
    puzzle.entries[index].value = BLANK


def run_is_satisfied(puzzle: Puzzle, run: Run) -> bool:
    values = [puzzle.entries[index].value for index in run.cell_indexes]
    return (
        all(value != BLANK for value in values)
        and len(set(values)) == len(values)
        and sum(values) == run.total
    )


def final_constraints_met(puzzle: Puzzle) -> bool:
    return all(run_is_satisfied(puzzle, run) for run in puzzle.runs)


def to_raw_grid(puzzle: Puzzle) -> RawGrid:
    rows: RawGrid = []
    for layout_row in puzzle.layout:
        row = []
        for cell in layout_row:
            if isinstance(cell, ClueCell):
                row.append([cell.down, cell.right])
            else:
                row.append(puzzle.entries[cell].value)
        rows.append(row)
    return rows
