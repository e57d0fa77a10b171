import argparse
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from kakuro.errors import SolveAbortedError, UnsolvablePuzzleError
from kakuro.solver import count_solutions, solve_kakuro
from kakuro.text_format import format_puzzle, parse_puzzle_text
from kakuro.types import RawGrid
from kakuro.utils import SUMMARY_SEPARATOR, timing_summary


def run(grid: RawGrid, max_seconds: Optional[float] = None) -> RawGrid:
    _check_max_seconds(max_seconds)
    return solve_kakuro(grid, max_seconds=max_seconds)


def run_with_trace(grid: RawGrid, max_seconds: Optional[float] = None) -> tuple[RawGrid, list[str]]:
    trace_log: list[str] = []
    result = solve_kakuro(grid, trace=True, trace_log=trace_log, max_seconds=max_seconds)
    return result, trace_log


def load_puzzle_from_file(input_path: str) -> tuple[RawGrid, Optional[float]]:
    path = Path(input_path)
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ValueError(f"input file not found: {input_path}") from exc

    if path.suffix.lower() != ".json":
        return parse_puzzle_text(text), None

    try:
        payload: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"input file is not valid JSON: {input_path}") from exc

    if not isinstance(payload, dict):
        raise ValueError("JSON root must be an object")

    grid = payload.get("grid")
    puzzle_text = payload.get("puzzle_text")
    max_seconds = payload.get("max_seconds")
    if grid is None and puzzle_text is None:
        raise ValueError("JSON must include 'grid' or 'puzzle_text'")
    _check_max_seconds(max_seconds)
    if grid is None:
        if not isinstance(puzzle_text, str):
            raise ValueError("'puzzle_text' must be a string")
        grid = parse_puzzle_text(puzzle_text)

    return grid, max_seconds


def _check_max_seconds(max_seconds: Any) -> None:
    if max_seconds is None:
        return
    if isinstance(max_seconds, bool) or not isinstance(max_seconds, (int, float)):
        raise ValueError("max_seconds must be a number")


def default_output_paths(input_path: str) -> tuple[str, str]:
    path = Path(input_path)

    def with_suffix(label: str) -> str:
        return str(path.with_name(f"{path.stem}{label}{path.suffix}"))

    return with_suffix("_SOLUTION"), with_suffix("_LOG")


def solve_file(
    input_path: str,
    output_path: Optional[str] = None,
    log_path: Optional[str] = None,
    log_steps: bool = False,
    max_seconds: Optional[float] = None,
) -> RawGrid:
    """Solve a puzzle file and write the solution and log files next to it.

    The log file is always written and ends with the timing summary. It also
    holds any error message and, when ``log_steps`` is set, one line per
    search step.
    """
    default_output, default_log = default_output_paths(input_path)
    output_path = output_path or default_output
    log_path = log_path or default_log

    started = datetime.now()
    trace_log: list[str] = []
    try:
        grid, file_max_seconds = load_puzzle_from_file(input_path)
        if max_seconds is None:
            max_seconds = file_max_seconds
        solution = solve_kakuro(grid, trace=True, trace_log=trace_log, max_seconds=max_seconds)
    except ValueError as exc:
        if SUMMARY_SEPARATOR not in trace_log:
            trace_log.extend(timing_summary(started, datetime.now()))
        trace_log.insert(trace_log.index(SUMMARY_SEPARATOR), f"Error: {exc}")
        _write_log(log_path, trace_log, log_steps)
        raise

    _write_log(log_path, trace_log, log_steps)
    Path(output_path).write_text(format_puzzle(solution), encoding="utf-8")
    return solution


def _write_log(log_path: str, trace_log: list[str], log_steps: bool) -> None:
    if log_steps:
        lines = trace_log
    else:
        # timing summary and errors only
        summary_start = trace_log.index(SUMMARY_SEPARATOR) if SUMMARY_SEPARATOR in trace_log else len(trace_log)
        errors = [line for line in trace_log[:summary_start] if line.startswith("Error: ")]
        lines = errors + trace_log[summary_start:]
    Path(log_path).write_text("\n".join(lines) + "\n", encoding="utf-8")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Solve a Kakuro puzzle from a text or JSON input file")
    parser.add_argument("input", help="Path to a puzzle file (text format, or JSON with 'grid' or 'puzzle_text')")
    parser.add_argument("--output", help="Solution file to write. Defaults to the input name with '_SOLUTION' appended")
    parser.add_argument("--log-file", help="Log file to write. Defaults to the input name with '_LOG' appended")
    parser.add_argument("--log", action="store_true", help="Write one log line per search step (can get very large)")
    parser.add_argument("--json", action="store_true", help="Print the solution as JSON instead of writing files")
    parser.add_argument("--max-seconds", type=float, default=None, help="Give up after this many seconds")
    parser.add_argument("--count", action="store_true", help="Count solutions (up to 2) and report whether the puzzle is unique")
    return parser


if __name__ == "__main__":
    args = _build_parser().parse_args()

    try:
        if args.count:
            grid, _ = load_puzzle_from_file(args.input)
            print(json.dumps(count_solutions(grid, limit=2, max_seconds=args.max_seconds), indent=2))
        elif args.json:
            grid, file_max_seconds = load_puzzle_from_file(args.input)
            max_seconds = args.max_seconds if args.max_seconds is not None else file_max_seconds
            if args.log:
                solution, trace_log = run_with_trace(grid, max_seconds=max_seconds)
                print(json.dumps({"status": "solved", "solution": solution, "trace": trace_log}, indent=2))
            else:
                solution = run(grid, max_seconds=max_seconds)
                print(json.dumps({"status": "solved", "solution": solution}, indent=2))
        else:
            solve_file(
                args.input,
                output_path=args.output,
                log_path=args.log_file,
                log_steps=args.log,
                max_seconds=args.max_seconds,
            )
    except UnsolvablePuzzleError as exc:
        raise SystemExit(f"Unsolvable: {exc}")
    except SolveAbortedError as exc:
        raise SystemExit(f"Aborted: {exc}")
    except ValueError as exc:
        raise SystemExit(f"Error: {exc}")
