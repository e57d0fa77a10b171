from .errors import PuzzleFormatError
from .types import RawCell, RawGrid
from .validation import validate_row_widths


CELL_SEPARATOR = "|"
CLUE_SEPARATOR = "\\"


def parse_puzzle_text(text: str) -> RawGrid:
    r"""Read the text puzzle format into a raw grid.

    One puzzle row per non-blank line, cells separated by ``|``. A sum cell is
    written ``down\right``; a value cell is a single integer, 0 for blank::

         0\ 0| 3\ 0| 4\ 0
         0\ 3|  0  |  0
         0\ 4|  0  |  0
    """
    lines = [line for line in text.splitlines() if line.strip()]
    if not lines:
        raise PuzzleFormatError("the puzzle text does not contain any rows")

    validate_row_widths([line.count(CELL_SEPARATOR) + 1 for line in lines])

    grid: RawGrid = []
    for row, line in enumerate(lines):
        cells = [cell for cell in line.split(CELL_SEPARATOR) if cell]
        grid.append([_parse_cell(cell.strip(), column, row) for column, cell in enumerate(cells)])
    return grid


def _parse_cell(cell: str, column: int, row: int) -> RawCell:
    if CLUE_SEPARATOR in cell:
        values = [value for value in cell.split(CLUE_SEPARATOR) if value]
        if len(values) != 2:
            raise PuzzleFormatError(f"The cell at column {column}, row {row} does not appear to be a valid sum cell ({cell}).")
        down = _parse_integer(values[0], column, row, cell, "down")
        right = _parse_integer(values[1], column, row, cell, "right")
        return down, right
    return _parse_integer(cell, column, row, cell)


def _parse_integer(value: str, column: int, row: int, cell: str, direction: str = "") -> int:
    try:
        return int(value.strip())
    except ValueError as exc:
        label = f"'{direction}' value" if direction else "value"
        raise PuzzleFormatError(
            f"The {label} at column {column}, row {row} does not appear to be a valid integer ({cell})."
        ) from exc


def format_puzzle(grid: RawGrid) -> str:
    lines = []
    for grid_row in grid:
        cells = []
        for cell in grid_row:
            if isinstance(cell, int):
                cells.append(f"  {cell}  ")
            else:
                down, right = cell
                cells.append(f"{down:2}{CLUE_SEPARATOR}{right:2}")
        lines.append(CELL_SEPARATOR.join(cells))
    return "\n".join(lines)
