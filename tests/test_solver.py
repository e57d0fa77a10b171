import unittest

from kakuro.errors import PuzzleFormatError, SolveAbortedError, UnsolvablePuzzleError
from kakuro.model import ClueCell
from kakuro.partitions import PartitionCache
from kakuro.solver import ABORTED, SOLVED, UNSOLVABLE, count_solutions, solve_kakuro, solve_puzzle
from kakuro.state import build_initial_state


SINGLE_ROW = [[[0, 4], 0, 0]]

# unique solution: 2 1 / 1 3
SQUARE = [
    [[0, 0], [3, 0], [4, 0]],
    [[0, 3], 0, 0],
    [[0, 4], 0, 0],
]

# trying 1 in the top-left cell leads to a contradiction; 2 3 / 4 5 and 4 1 / 2 7 both solve it
BRANCHING = [
    [[0, 0], [6, 0], [8, 0]],
    [[0, 5], 0, 0],
    [[0, 9], 0, 0],
]

# row totals add up to 7 but column totals to 6
MISMATCHED = [
    [[0, 0], [3, 0], [3, 0]],
    [[0, 3], 0, 0],
    [[0, 4], 0, 0],
]

# built from the solution 1 2 4 / 3 1 2 / 2 3 1
THREE_BY_THREE = [
    [[0, 0], [6, 0], [6, 0], [7, 0]],
    [[0, 7], 0, 0, 0],
    [[0, 6], 0, 0, 0],
    [[0, 6], 0, 0, 0],
]


class TestSolveKakuro(unittest.TestCase):
    def test_solves_single_row(self) -> None:
        trace_steps: list[dict[str, object]] = []
        result = solve_kakuro(SINGLE_ROW, trace_steps=trace_steps)

        self.assertEqual(result[0][0], [0, 4])
        self.assertEqual(sorted(result[0][1:]), [1, 3])
        tried = [step["value"] for step in trace_steps if step["event"] == "try_value"]
        self.assertNotIn(2, tried)
        self.assertEqual(len(tried), len(set(tried)))

    def test_solves_square(self) -> None:
        result = solve_kakuro(SQUARE)
        self.assertEqual(result[1], [[0, 3], 2, 1])
        self.assertEqual(result[2], [[0, 4], 1, 3])

    def test_backtracks_out_of_contradiction(self) -> None:
        trace_log: list[str] = []
        trace_steps: list[dict[str, object]] = []
        result = solve_kakuro(BRANCHING, trace=True, trace_log=trace_log, trace_steps=trace_steps)

        self.assertEqual(result[1], [[0, 5], 2, 3])
        self.assertEqual(result[2], [[0, 9], 4, 5])
        self.assertIn("CONTRADICTION!", [line.strip() for line in trace_log])
        self.assertTrue(any("Backtrack on value 1" in line for line in trace_log))

        contradictions = [step for step in trace_steps if step["event"] == "contradiction"]
        self.assertEqual(len(contradictions), 1)
        self.assertEqual(contradictions[0]["diagnosis"]["reason"], "empty_intersection")
        self.assertEqual((contradictions[0]["column"], contradictions[0]["row"]), (2, 1))

    def test_solves_larger_grid(self) -> None:
        result = solve_kakuro(THREE_BY_THREE)
        self.assert_kakuro_constraints(result)

    def test_returns_fully_given_grid_when_already_solved(self) -> None:
        grid = [
            [[0, 0], [3, 0], [4, 0]],
            [[0, 3], 2, 1],
            [[0, 4], 1, 3],
        ]
        self.assertEqual(solve_kakuro(grid), grid)

    def test_keeps_given_values(self) -> None:
        grid = [row[:] for row in BRANCHING]
        grid[1] = [[0, 5], 4, 0]
        result = solve_kakuro(grid)
        self.assertEqual(result[1], [[0, 5], 4, 1])
        self.assertEqual(result[2], [[0, 9], 2, 7])

    def test_raises_when_no_solution_exists(self) -> None:
        with self.assertRaises(UnsolvablePuzzleError):
            solve_kakuro(MISMATCHED)

    def test_raises_when_given_run_has_wrong_sum(self) -> None:
        with self.assertRaises(UnsolvablePuzzleError):
            solve_kakuro([[[0, 4], 1, 2]])

    def test_raises_on_malformed_grid_before_solving(self) -> None:
        trace_log: list[str] = []
        with self.assertRaises(PuzzleFormatError):
            solve_kakuro([[[0, 0], 0, 0]], trace=True, trace_log=trace_log)
        self.assertEqual(trace_log, [])

    def test_malformed_and_unsolvable_are_distinct(self) -> None:
        self.assertFalse(issubclass(PuzzleFormatError, UnsolvablePuzzleError))
        self.assertFalse(issubclass(UnsolvablePuzzleError, PuzzleFormatError))
        self.assertTrue(issubclass(UnsolvablePuzzleError, ValueError))

    def test_raises_when_time_budget_is_exhausted(self) -> None:
        with self.assertRaises(SolveAbortedError):
            solve_kakuro(THREE_BY_THREE, max_seconds=0.0)

    def test_raises_when_stop_is_requested(self) -> None:
        with self.assertRaises(SolveAbortedError):
            solve_kakuro(SQUARE, stop_requested=lambda: True)

    def test_rejects_negative_time_budget(self) -> None:
        with self.assertRaises(ValueError):
            solve_kakuro(SQUARE, max_seconds=-1.0)

    def test_trace_mode_records_search_steps(self) -> None:
        trace_log: list[str] = []
        solve_kakuro(SQUARE, trace=True, trace_log=trace_log)

        self.assertTrue(any("Select cell" in line for line in trace_log))
        self.assertTrue(any("Try value" in line for line in trace_log))
        self.assertTrue(any(line.strip() == "SOLVED!" for line in trace_log))
        self.assertTrue(any(line.startswith("Elapsed: ") for line in trace_log))

    def test_trace_steps_are_capped(self) -> None:
        trace_steps: list[dict[str, object]] = []
        trace_meta = {"truncated": False}
        solve_kakuro(BRANCHING, trace_steps=trace_steps, trace_meta=trace_meta, trace_max_steps=2)

        self.assertEqual(len(trace_steps), 2)
        self.assertTrue(trace_meta["truncated"])

    def assert_kakuro_constraints(self, grid: list[list[object]]) -> None:
        puzzle = build_initial_state(grid)
        for run in puzzle.runs:
            values = [puzzle.entries[index].value for index in run.cell_indexes]
            self.assertNotIn(0, values)
            self.assertEqual(len(values), len(set(values)))
            self.assertEqual(sum(values), run.total)


class TestSolvePuzzle(unittest.TestCase):
    def test_success_exposes_values_by_position(self) -> None:
        puzzle = build_initial_state(SQUARE)
        result = solve_puzzle(puzzle)

        self.assertEqual(result.status, SOLVED)
        self.assertTrue(result.solved)
        self.assertEqual(result.values, {(1, 1): 2, (2, 1): 1, (1, 2): 1, (2, 2): 3})
        self.assertGreater(result.nodes_visited, 0)
        self.assertGreaterEqual(result.elapsed_seconds, 0)

    def test_failure_restores_every_cell(self) -> None:
        puzzle = build_initial_state(MISMATCHED)
        result = solve_puzzle(puzzle)

        self.assertEqual(result.status, UNSOLVABLE)
        self.assertEqual(result.values, {})
        self.assertTrue(all(entry.value == 0 for entry in puzzle.entries))
        self.assertGreater(result.contradictions, 0)

    def test_abort_restores_every_cell(self) -> None:
        puzzle = build_initial_state(THREE_BY_THREE)
        calls = {"count": 0}

        def stop_after_a_few_steps() -> bool:
            calls["count"] += 1
            return calls["count"] > 3

        result = solve_puzzle(puzzle, stop_requested=stop_after_a_few_steps)

        self.assertEqual(result.status, ABORTED)
        self.assertTrue(all(entry.value == 0 for entry in puzzle.entries))

    def test_uses_injected_cache(self) -> None:
        cache = PartitionCache()
        solve_puzzle(build_initial_state(BRANCHING), cache=cache)
        misses = cache.misses

        self.assertGreater(len(cache), 0)
        self.assertGreater(cache.hits, 0)

        solve_puzzle(build_initial_state(BRANCHING), cache=cache)
        self.assertEqual(cache.misses, misses)

    def test_layout_is_untouched_by_solving(self) -> None:
        puzzle = build_initial_state(SQUARE)
        solve_puzzle(puzzle)
        self.assertEqual(puzzle.layout[0][2], ClueCell(column=2, row=0, down=4, right=0))


class TestCountSolutions(unittest.TestCase):
    def test_unique_puzzle(self) -> None:
        result = count_solutions(SQUARE)
        self.assertEqual(result["count"], 1)
        self.assertTrue(result["exact"])
        self.assertTrue(result["unique"])

    def test_stops_at_limit(self) -> None:
        result = count_solutions(BRANCHING, limit=2)
        self.assertEqual(result["count"], 2)
        self.assertFalse(result["exact"])
        self.assertFalse(result["unique"])
        self.assertFalse(result["timed_out"])

    def test_exact_count_below_limit(self) -> None:
        result = count_solutions(BRANCHING, limit=10)
        self.assertEqual(result["count"], 2)
        self.assertTrue(result["exact"])
        self.assertFalse(result["unique"])

    def test_unsolvable_puzzle_has_no_solutions(self) -> None:
        result = count_solutions(MISMATCHED)
        self.assertEqual(result["count"], 0)
        self.assertTrue(result["exact"])

    def test_time_budget_marks_count_inexact(self) -> None:
        result = count_solutions(THREE_BY_THREE, max_seconds=0.0)
        self.assertTrue(result["timed_out"])
        self.assertFalse(result["exact"])

    def test_rejects_invalid_limit(self) -> None:
        with self.assertRaises(ValueError):
            count_solutions(SQUARE, limit=0)


if __name__ == "__main__":
    unittest.main()
