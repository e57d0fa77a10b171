import time
from typing import Callable, Optional

from .constraints import describe_contradiction, diagnose_contradiction, select_next_cell_with_candidates
from .model import Puzzle
from .partitions import PartitionCache
from .state import apply_value, final_constraints_met, revert_value
from .types import Deadline, ProgressState, TraceLog, TraceStep
from .utils import format_cell, format_values, indent, trace


def search_first_solution(
    puzzle: Puzzle,
    remaining: list[int],
    cache: PartitionCache,
    trace_enabled: bool,
    trace_log: Optional[TraceLog],
    trace_steps: Optional[list[TraceStep]],
    trace_meta: Optional[dict[str, bool]],
    trace_max_steps: int,
    deadline: Deadline,
    stop_requested: Optional[Callable[[], bool]],
    progress_state: ProgressState,
    depth: int,
) -> tuple[bool, bool]:
    """Assign digits to ``remaining`` cells depth first.

    Returns ``(solved, aborted)``. Every value set on a failed or aborted
    branch is reverted before returning.
    """

    def record_step(
        event: str,
        message: str,
        column: Optional[int] = None,
        row: Optional[int] = None,
        value: Optional[int] = None,
        candidates: Optional[list[int]] = None,
        diagnosis: Optional[dict[str, object]] = None,
    ) -> None:
        if trace_steps is None:
            return
        if len(trace_steps) >= trace_max_steps:
            if trace_meta is not None:
                trace_meta["truncated"] = True
            return
        trace_steps.append(
            {
                "event": event,
                "message": message,
                "depth": depth,
                "column": column,
                "row": row,
                "value": value,
                "candidates": candidates,
                "diagnosis": diagnosis,
            }
        )

    progress_state["nodes_visited"] += 1
    padding = indent(depth)

    if stop_requested is not None and stop_requested():
        message = f"{padding}Stop requested; abandoning search"
        trace(trace_enabled, trace_log, message)
        record_step("aborted", message)
        return False, True
    if deadline is not None and time.monotonic() >= deadline:
        message = f"{padding}Time budget exhausted; abandoning search"
        trace(trace_enabled, trace_log, message)
        record_step("aborted", message)
        return False, True

    choice = select_next_cell_with_candidates(puzzle, remaining, cache)
    if choice is None:
        message = f"{padding}SOLVED!"
        trace(trace_enabled, trace_log, message)
        record_step("solved", message)
        return True, False

    index, candidates = choice
    entry = puzzle.entries[index]
    cell = format_cell(entry.column, entry.row)

    if not candidates:
        progress_state["contradictions"] += 1
        if trace_enabled or trace_steps is not None:
            diagnosis = diagnose_contradiction(puzzle, index, cache)
            lines = describe_contradiction(diagnosis)
            for line in lines:
                trace(trace_enabled, trace_log, f"{padding}{line}")
            record_step(
                "contradiction",
                " ".join(lines),
                column=entry.column,
                row=entry.row,
                candidates=[],
                diagnosis=diagnosis,
            )
        return False, False

    message = f"{padding}Select cell {cell}, # of Candidates: {len(candidates)}, Candidates: {format_values(candidates)}"
    trace(trace_enabled, trace_log, message)
    record_step("select_cell", message, column=entry.column, row=entry.row, candidates=candidates)

    remaining_after = [other for other in remaining if other != index]
    for value in candidates:
        message = f"{padding}{cell} - Try value {value}"
        trace(trace_enabled, trace_log, message)
        record_step("try_value", message, column=entry.column, row=entry.row, value=value)
        apply_value(puzzle, index, value)

        solved, aborted = search_first_solution(
            puzzle=puzzle,
            remaining=remaining_after,
            cache=cache,
            trace_enabled=trace_enabled,
            trace_log=trace_log,
            trace_steps=trace_steps,
            trace_meta=trace_meta,
            trace_max_steps=trace_max_steps,
            deadline=deadline,
            stop_requested=stop_requested,
            progress_state=progress_state,
            depth=depth + 1,
        )
        if solved:
            message = f"{padding}{cell} - Accept value {value}"
            trace(trace_enabled, trace_log, message)
            record_step("accept_value", message, column=entry.column, row=entry.row, value=value)
            return True, False

        revert_value(puzzle, index)
        if aborted:
            return False, True

        message = f"{padding}{cell} - Backtrack on value {value}"
        trace(trace_enabled, trace_log, message)
        record_step("backtrack", message, column=entry.column, row=entry.row, value=value)

    message = f"{padding}{cell} - No valid values remain"
    trace(trace_enabled, trace_log, message)
    record_step("prune_branch", message, column=entry.column, row=entry.row)
    return False, False


def count_all_solutions(
    puzzle: Puzzle,
    remaining: list[int],
    cache: PartitionCache,
    limit: Optional[int],
    deadline: Deadline,
    stop_requested: Optional[Callable[[], bool]],
    progress_state: ProgressState,
) -> tuple[int, bool]:
    """Count complete assignments, stopping once ``limit`` are found.

    Returns ``(count, timed_out)``. Reaching ``limit`` ends the search early
    but is not a timeout.
    """
    progress_state["nodes_visited"] += 1

    if stop_requested is not None and stop_requested():
        return 0, True
    if deadline is not None and time.monotonic() >= deadline:
        return 0, True

    choice = select_next_cell_with_candidates(puzzle, remaining, cache)
    if choice is None:
        if final_constraints_met(puzzle):
            progress_state["solutions_found"] += 1
            return 1, False
        return 0, False

    index, candidates = choice
    if not candidates:
        return 0, False

    remaining_after = [other for other in remaining if other != index]
    total = 0
    for value in candidates:
        apply_value(puzzle, index, value)
        count, timed_out = count_all_solutions(
            puzzle=puzzle,
            remaining=remaining_after,
            cache=cache,
            limit=None if limit is None else limit - total,
            deadline=deadline,
            stop_requested=stop_requested,
            progress_state=progress_state,
        )
        total += count
        revert_value(puzzle, index)

        if timed_out:
            return total, True
        if limit is not None and total >= limit:
            return total, False

    return total, False
