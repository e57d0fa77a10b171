import unittest

from kakuro.errors import DuplicateValueError, PuzzleFormatError
from kakuro.model import COLUMN, NO_RUN_INDEX, ROW, ClueCell
from kakuro.state import apply_value, build_initial_state, final_constraints_met, revert_value, to_raw_grid


SQUARE = [
    [[0, 0], [3, 0], [4, 0]],
    [[0, 3], 0, 0],
    [[0, 4], 0, 0],
]


class TestBuildInitialState(unittest.TestCase):
    def test_wires_every_entry_to_a_row_and_column_run(self) -> None:
        puzzle = build_initial_state(SQUARE)

        self.assertEqual((puzzle.width, puzzle.height), (3, 3))
        self.assertEqual(len(puzzle.entries), 4)
        self.assertEqual(len(puzzle.runs), 4)
        for entry in puzzle.entries:
            row_run = puzzle.runs[entry.row_run]
            column_run = puzzle.runs[entry.column_run]
            self.assertEqual(row_run.direction, ROW)
            self.assertEqual(column_run.direction, COLUMN)
            self.assertEqual(row_run.clue_row, entry.row)
            self.assertEqual(column_run.clue_column, entry.column)

    def test_run_totals_come_from_the_preceding_clue(self) -> None:
        puzzle = build_initial_state(SQUARE)

        top_left = puzzle.entry_at(1, 1)
        bottom_right = puzzle.entry_at(2, 2)
        self.assertEqual(puzzle.runs[top_left.row_run].total, 3)
        self.assertEqual(puzzle.runs[top_left.column_run].total, 3)
        self.assertEqual(puzzle.runs[bottom_right.row_run].total, 4)
        self.assertEqual(puzzle.runs[bottom_right.column_run].total, 4)
        self.assertEqual(len(puzzle.runs[top_left.row_run].cell_indexes), 2)

    def test_runs_stop_at_the_next_clue(self) -> None:
        grid = [
            [[0, 0], [3, 0], [0, 0], [4, 0]],
            [[0, 3], 0, [0, 0], 0],
        ]
        with self.assertRaises(PuzzleFormatError):
            # the 'right' 0 clue sits immediately before an entry
            build_initial_state(grid)

        grid = [
            [[0, 0], [3, 0], [0, 0], [4, 0]],
            [[0, 3], 0, [0, 4], 0],
        ]
        puzzle = build_initial_state(grid)
        self.assertEqual([len(run.cell_indexes) for run in puzzle.runs if run.direction == ROW], [1, 1])

    def test_layout_keeps_clue_cells(self) -> None:
        puzzle = build_initial_state(SQUARE)
        self.assertEqual(puzzle.layout[0][1], ClueCell(column=1, row=0, down=3, right=0))
        with self.assertRaises(KeyError):
            puzzle.entry_at(0, 0)

    def test_single_row_entries_have_no_column_run(self) -> None:
        puzzle = build_initial_state([[[0, 4], 0, 0]])
        for entry in puzzle.entries:
            self.assertNotEqual(entry.row_run, NO_RUN_INDEX)
            self.assertEqual(entry.column_run, NO_RUN_INDEX)

    def test_rejects_entry_without_any_clue(self) -> None:
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[0, [0, 0]]])

    def test_rejects_zero_sum_clue_next_to_entry(self) -> None:
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 0], 0]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 0]], [0]])

    def test_rejects_rows_of_different_width(self) -> None:
        with self.assertRaises(PuzzleFormatError) as context:
            build_initial_state([[[0, 0], [3, 0]], [[0, 3], 0, 0]])
        self.assertIn("Line 2 has 3 cells", str(context.exception))

    def test_rejects_out_of_range_values(self) -> None:
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 2], 0]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 46], 0]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 4], 10]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 4], -1]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 4, 1], 0]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([[[0, 4], "x"]])
        with self.assertRaises(PuzzleFormatError):
            build_initial_state([])

    def test_rejects_prefilled_duplicates_in_a_run(self) -> None:
        with self.assertRaises(PuzzleFormatError) as context:
            build_initial_state([[[0, 4], 2, 2]])
        self.assertIn("Column: 1, Row: 0, Value: 2", str(context.exception))


class TestApplyAndRevert(unittest.TestCase):
    def test_apply_and_revert_value(self) -> None:
        puzzle = build_initial_state(SQUARE)
        apply_value(puzzle, 0, 2)
        self.assertTrue(puzzle.entries[0].is_solved)
        revert_value(puzzle, 0)
        self.assertFalse(puzzle.entries[0].is_solved)
        self.assertEqual(puzzle.entries[0].value, 0)

    def test_apply_rejects_duplicate_in_run(self) -> None:
        puzzle = build_initial_state(SQUARE)
        apply_value(puzzle, 0, 1)
        with self.assertRaises(DuplicateValueError):
            apply_value(puzzle, 1, 1)
        with self.assertRaises(DuplicateValueError):
            apply_value(puzzle, 2, 1)
        self.assertEqual(puzzle.entries[1].value, 0)

    def test_final_constraints(self) -> None:
        puzzle = build_initial_state(SQUARE)
        self.assertFalse(final_constraints_met(puzzle))
        for index, value in enumerate([2, 1, 1, 3]):
            apply_value(puzzle, index, value)
        self.assertTrue(final_constraints_met(puzzle))
        self.assertEqual(to_raw_grid(puzzle)[1:], [[[0, 3], 2, 1], [[0, 4], 1, 3]])


if __name__ == "__main__":
    unittest.main()
