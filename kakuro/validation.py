from typing import Optional

from rules.rules import BLANK, MAX_CLUE_SUM, MAX_VALUE, MIN_CLUE_SUM, NO_RUN

from .errors import PuzzleFormatError
from .types import Clue, RawCell, RawGrid


NormalizedCell = RawCell
NormalizedGrid = list[list[NormalizedCell]]


def validate_and_normalize_raw_grid(raw_grid: RawGrid) -> NormalizedGrid:
    if not isinstance(raw_grid, list) or not raw_grid:
        raise PuzzleFormatError("grid must be a non-empty list of rows")
    for row in raw_grid:
        if not isinstance(row, list) or not row:
            raise PuzzleFormatError("every grid row must be a non-empty list of cells")

    validate_row_widths([len(row) for row in raw_grid])

    normalized_grid: NormalizedGrid = []
    for row_index, row in enumerate(raw_grid):
        normalized_row: list[NormalizedCell] = []
        for column_index, cell in enumerate(row):
            if _is_integer(cell):
                normalized_row.append(validate_entry_value(cell, column_index, row_index))
            elif isinstance(cell, (list, tuple)):
                normalized_row.append(validate_clue(cell, column_index, row_index))
            else:
                raise PuzzleFormatError(
                    f"the cell at column {column_index}, row {row_index} must be an integer or a [down, right] pair"
                )
        normalized_grid.append(normalized_row)

    validate_zero_sum_clues(normalized_grid)
    return normalized_grid


def validate_row_widths(widths: list[int]) -> None:
    # the first row's width is taken as correct; every other row is reported against it
    expected = widths[0]
    bad_rows = [
        f"  Line {index + 1} has {width} cells."
        for index, width in enumerate(widths)
        if width != expected
    ]
    if bad_rows:
        details = "\n".join(bad_rows)
        raise PuzzleFormatError(
            f"Based on the width of the first line of the puzzle ({expected}), "
            f"the following lines have the wrong number of cells:\n{details}"
        )


def validate_entry_value(value: object, column: int, row: int) -> int:
    if not _is_integer(value):
        raise PuzzleFormatError(f"The value at column {column}, row {row} does not appear to be a valid integer ({value}).")
    if value < BLANK or value > MAX_VALUE:
        raise PuzzleFormatError(
            f"The value at column {column}, row {row} does not have a valid value ({value}). "
            f"The value must be between {BLANK} and {MAX_VALUE} (inclusive)."
        )
    return value


def validate_clue(cell: object, column: int, row: int) -> Clue:
    if not isinstance(cell, (list, tuple)) or len(cell) != 2:
        raise PuzzleFormatError(f"The cell at column {column}, row {row} does not appear to be a valid sum cell ({cell}).")
    down = validate_clue_sum(cell[0], "down", column, row)
    right = validate_clue_sum(cell[1], "right", column, row)
    return down, right


def validate_clue_sum(value: object, direction: str, column: int, row: int) -> int:
    if not _is_integer(value):
        raise PuzzleFormatError(
            f"The '{direction}' value at column {column}, row {row} does not appear to be a valid integer ({value})."
        )
    if value != NO_RUN and (value < MIN_CLUE_SUM or value > MAX_CLUE_SUM):
        raise PuzzleFormatError(
            f"The '{direction}' value at column {column}, row {row} does not have a valid value ({value}). "
            f"The value must either be {NO_RUN}, or between {MIN_CLUE_SUM} and {MAX_CLUE_SUM} (inclusive)."
        )
    return value


def validate_zero_sum_clues(grid: NormalizedGrid) -> None:
    """Reject a zero-sum clue direction that has an entry cell right next to it.

    Only the immediately adjacent cell is inspected, not the whole run.
    """
    height = len(grid)
    width = len(grid[0])
    for row in range(height):
        for column in range(width):
            cell = grid[row][column]
            if _is_integer(cell):
                continue
            down, right = cell
            if down == NO_RUN and row < height - 1 and _is_integer(grid[row + 1][column]):
                raise PuzzleFormatError(
                    f"The sum cell at column {column} and row {row} has a 'down' value of 0, "
                    "but there's a value cell immediately below it."
                )
            if right == NO_RUN and column < width - 1 and _is_integer(grid[row][column + 1]):
                raise PuzzleFormatError(
                    f"The sum cell at column {column} and row {row} has a 'right' value of 0, "
                    "but there's a value cell immediately to the right."
                )


def validate_solve_options(
    max_seconds: Optional[float],
    trace_max_steps: int,
) -> None:
    if max_seconds is not None and max_seconds < 0:
        raise ValueError("max_seconds must be >= 0")
    if trace_max_steps < 1:
        raise ValueError("trace_max_steps must be >= 1")


def validate_count_options(limit: Optional[int], max_seconds: Optional[float]) -> None:
    if limit is not None and limit < 1:
        raise ValueError("limit must be >= 1")
    if max_seconds is not None and max_seconds < 0:
        raise ValueError("max_seconds must be >= 0")


def _is_integer(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)
