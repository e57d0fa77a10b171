from typing import Optional

from rules.rules import MAX_VALUE, MIN_VALUE

from .model import NO_RUN_INDEX, Puzzle, Run
from .partitions import PartitionCache
from .types import Diagnosis


def run_candidates(puzzle: Puzzle, run: Run, cache: PartitionCache) -> list[int]:
    solved_values: list[int] = []
    open_slots = 0
    for index in run.cell_indexes:
        value = puzzle.entries[index].value
        if value:
            solved_values.append(value)
        else:
            open_slots += 1

    if open_slots == 0:
        return []

    net_sum = run.total - sum(solved_values)
    values = cache.values(net_sum, open_slots, MIN_VALUE, MAX_VALUE)
    return sorted(values.difference(solved_values))


def direction_candidates(puzzle: Puzzle, run_index: int, cache: PartitionCache) -> list[int]:
    # a cell with no run in one direction is unconstrained along it
    if run_index == NO_RUN_INDEX:
        return list(range(MIN_VALUE, MAX_VALUE + 1))
    return run_candidates(puzzle, puzzle.runs[run_index], cache)


def cell_candidates(puzzle: Puzzle, index: int, cache: PartitionCache) -> list[int]:
    entry = puzzle.entries[index]
    row_values = direction_candidates(puzzle, entry.row_run, cache)
    if not row_values:
        return []
    column_values = set(direction_candidates(puzzle, entry.column_run, cache))
    return [value for value in row_values if value in column_values]


def select_next_cell_with_candidates(
    puzzle: Puzzle,
    remaining: list[int],
    cache: PartitionCache,
) -> Optional[tuple[int, list[int]]]:
    """Pick the unsolved cell with the fewest candidates.

    Returns ``None`` when nothing is left to solve. A cell with no candidates
    is returned immediately with an empty list so the caller can fail the
    branch without choosing anything. Ties go to the first cell in
    ``remaining``.
    """
    best_choice: Optional[tuple[int, list[int]]] = None
    best_domain_size: Optional[int] = None

    for index in remaining:
        if puzzle.entries[index].is_solved:
            continue

        candidates = cell_candidates(puzzle, index, cache)
        if not candidates:
            return index, []

        domain_size = len(candidates)
        if best_domain_size is None or domain_size < best_domain_size:
            best_domain_size = domain_size
            best_choice = (index, candidates)

    return best_choice


def diagnose_contradiction(puzzle: Puzzle, index: int, cache: PartitionCache) -> Diagnosis:
    entry = puzzle.entries[index]
    row_values = direction_candidates(puzzle, entry.row_run, cache)
    column_values = direction_candidates(puzzle, entry.column_run, cache)

    if not row_values and not column_values:
        reason = "no_row_or_column_candidates"
    elif not column_values:
        reason = "no_column_candidates"
    elif not row_values:
        reason = "no_row_candidates"
    else:
        reason = "empty_intersection"

    return {
        "column": entry.column,
        "row": entry.row,
        "row_candidates": row_values,
        "column_candidates": column_values,
        "reason": reason,
    }


def describe_contradiction(diagnosis: Diagnosis) -> list[str]:
    row_values = ", ".join(str(value) for value in diagnosis["row_candidates"])
    column_values = ", ".join(str(value) for value in diagnosis["column_candidates"])
    reason = diagnosis["reason"]

    lines = ["CONTRADICTION!"]
    if reason == "no_row_or_column_candidates":
        lines.append("There are no column or row candidates for this value cell.")
    elif reason == "no_column_candidates":
        lines.append(f"The row candidates for this cell are '{row_values}',")
        lines.append("but there are no column candidates for this value cell.")
    elif reason == "no_row_candidates":
        lines.append(f"The column candidates for this cell are '{column_values}',")
        lines.append("but there are no row candidates for this value cell.")
    else:
        lines.append(f"The column candidates for this cell are '{column_values}'.")
        lines.append(f"The row candidates for this cell are '{row_values}'.")
        lines.append("However, the intersection of those two sets of candidates is empty.")
    return lines
