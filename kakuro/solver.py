import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from .errors import SolveAbortedError, UnsolvablePuzzleError
from .model import Puzzle, Run
from .partitions import PartitionCache
from .search import count_all_solutions, search_first_solution
from .state import build_initial_state, run_is_satisfied, to_raw_grid
from .types import CountResult, Position, RawGrid, TraceLog, TraceStep
from .utils import format_cell, timing_summary, trace as _trace
from .validation import validate_count_options, validate_solve_options


SOLVED = "solved"
UNSOLVABLE = "unsolvable"
ABORTED = "aborted"


@dataclass
class SolveResult:
    status: str
    values: dict[Position, int] = field(default_factory=dict)
    elapsed_seconds: float = 0.0
    nodes_visited: int = 0
    contradictions: int = 0
    message: str = ""

    @property
    def solved(self) -> bool:
        return self.status == SOLVED


def solve_puzzle(
    puzzle: Puzzle,
    trace: bool = False,
    trace_log: Optional[TraceLog] = None,
    trace_steps: Optional[list[TraceStep]] = None,
    trace_meta: Optional[dict[str, bool]] = None,
    trace_max_steps: int = 1000,
    max_seconds: Optional[float] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
    cache: Optional[PartitionCache] = None,
) -> SolveResult:
    """Run the backtracking search on an already wired puzzle.

    On success the puzzle's entries hold the solution. On any other outcome
    every entry is back at its starting value.
    """
    validate_solve_options(max_seconds=max_seconds, trace_max_steps=trace_max_steps)
    if cache is None:
        cache = PartitionCache()

    remaining = puzzle.unsolved_indexes()
    _trace(trace, trace_log, f"Initialized search: {puzzle.width}x{puzzle.height} grid, unsolved_cells={len(remaining)}")

    started = datetime.now()
    start_clock = time.monotonic()
    deadline = None if max_seconds is None else start_clock + max_seconds
    progress_state = {"nodes_visited": 0, "contradictions": 0}

    broken_run = next((run for run in puzzle.runs if _given_run_is_broken(puzzle, run)), None)
    if broken_run is not None:
        status = UNSOLVABLE
        message = (
            f"The {broken_run.direction} run after the sum cell at "
            f"{format_cell(broken_run.clue_column, broken_run.clue_row)} is fully given but does not sum to {broken_run.total}"
        )
        _trace(trace, trace_log, message)
    else:
        solved, aborted = search_first_solution(
            puzzle=puzzle,
            remaining=remaining,
            cache=cache,
            trace_enabled=trace,
            trace_log=trace_log,
            trace_steps=trace_steps,
            trace_meta=trace_meta,
            trace_max_steps=trace_max_steps,
            deadline=deadline,
            stop_requested=stop_requested,
            progress_state=progress_state,
            depth=0,
        )
        if solved:
            status, message = SOLVED, "Puzzle solved"
        elif aborted:
            status, message = ABORTED, "Search stopped before a solution was found"
        else:
            status, message = UNSOLVABLE, "No valid solution exists for the provided puzzle"

    elapsed = time.monotonic() - start_clock
    finished = datetime.now()
    for line in timing_summary(started, finished):
        _trace(trace, trace_log, line)

    return SolveResult(
        status=status,
        values=puzzle.values() if status == SOLVED else {},
        elapsed_seconds=elapsed,
        nodes_visited=progress_state["nodes_visited"],
        contradictions=progress_state["contradictions"],
        message=message,
    )


def solve_kakuro(
    grid: RawGrid,
    trace: bool = False,
    trace_log: Optional[TraceLog] = None,
    trace_steps: Optional[list[TraceStep]] = None,
    trace_meta: Optional[dict[str, bool]] = None,
    trace_max_steps: int = 1000,
    max_seconds: Optional[float] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
) -> RawGrid:
    """Solve a raw grid and return it with every entry filled in.

    Raises ``PuzzleFormatError`` for a malformed grid,
    ``UnsolvablePuzzleError`` when no assignment exists and
    ``SolveAbortedError`` when the time budget or stop request ends the search.
    """
    puzzle = build_initial_state(grid)
    result = solve_puzzle(
        puzzle,
        trace=trace,
        trace_log=trace_log,
        trace_steps=trace_steps,
        trace_meta=trace_meta,
        trace_max_steps=trace_max_steps,
        max_seconds=max_seconds,
        stop_requested=stop_requested,
    )
    if result.status == ABORTED:
        raise SolveAbortedError(result.message)
    if result.status == UNSOLVABLE:
        raise UnsolvablePuzzleError(result.message)
    return to_raw_grid(puzzle)


def count_solutions(
    grid: RawGrid,
    limit: Optional[int] = 2,
    max_seconds: Optional[float] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
) -> CountResult:
    validate_count_options(limit=limit, max_seconds=max_seconds)
    puzzle = build_initial_state(grid)

    start_clock = time.monotonic()
    deadline = None if max_seconds is None else start_clock + max_seconds
    progress_state = {"nodes_visited": 0, "solutions_found": 0}

    if any(_given_run_is_broken(puzzle, run) for run in puzzle.runs):
        count, timed_out = 0, False
    else:
        count, timed_out = count_all_solutions(
            puzzle=puzzle,
            remaining=puzzle.unsolved_indexes(),
            cache=PartitionCache(),
            limit=limit,
            deadline=deadline,
            stop_requested=stop_requested,
            progress_state=progress_state,
        )

    limit_reached = limit is not None and count >= limit
    exact = not timed_out and not limit_reached
    if timed_out:
        message = f"Count stopped early; at least {count} solution(s) found"
    elif limit_reached:
        message = f"Found at least {count} solutions; counting stopped at the limit"
    else:
        message = f"Found exactly {count} solution(s)"

    return {
        "count": count,
        "exact": exact,
        "unique": exact and count == 1,
        "timed_out": timed_out,
        "nodes_visited": progress_state["nodes_visited"],
        "elapsed_seconds": time.monotonic() - start_clock,
        "message": message,
    }


def _given_run_is_broken(puzzle: Puzzle, run: Run) -> bool:
    if any(not puzzle.entries[index].is_solved for index in run.cell_indexes):
        return False
    return not run_is_satisfied(puzzle, run)
