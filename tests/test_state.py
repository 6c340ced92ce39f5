import unittest

from solver.constraints import find_next_possibility, make_all_possibilities, make_possibilities, restore_possibilities
from solver.errors import ConflictError, RangeError, UnsolvableError
from solver.search import search_first_solution
from solver.state import (
    EmptyCell,
    apply_value,
    build_initial_state,
    new_block_state,
    revert_value,
    set_value_in_blocks,
    value_exists_in_any_block,
    value_exists_in_block,
)
from solver.utils import block_index


def empty_table() -> list[list[int]]:
    return [[0] * 9 for _ in range(9)]


class TestBlockIndex(unittest.TestCase):
    def test_block_indexes(self) -> None:
        self.assertEqual(block_index("row", (4, 7)), 4)
        self.assertEqual(block_index("column", (4, 7)), 7)
        self.assertEqual(block_index("square", (0, 0)), 0)
        self.assertEqual(block_index("square", (4, 7)), 5)
        self.assertEqual(block_index("square", (8, 2)), 6)
        self.assertEqual(block_index("square", (8, 8)), 8)

    def test_unknown_kind(self) -> None:
        with self.assertRaises(ValueError):
            block_index("diagonal", (0, 0))


class TestBlockState(unittest.TestCase):
    def test_set_value_marks_all_three_blocks(self) -> None:
        block_state = new_block_state()
        set_value_in_blocks(block_state, (4, 7), 3)
        self.assertTrue(value_exists_in_block(block_state, "row", (4, 0), 3))
        self.assertTrue(value_exists_in_block(block_state, "column", (0, 7), 3))
        self.assertTrue(value_exists_in_block(block_state, "square", (3, 6), 3))
        self.assertFalse(value_exists_in_block(block_state, "row", (5, 0), 3))
        self.assertFalse(value_exists_in_any_block(block_state, (0, 0), 3))
        self.assertFalse(value_exists_in_any_block(block_state, (4, 7), 4))

    def test_unset_value_clears_all_three_blocks(self) -> None:
        block_state = new_block_state()
        set_value_in_blocks(block_state, (4, 7), 3)
        set_value_in_blocks(block_state, (4, 7), 3, exists=False)
        self.assertFalse(value_exists_in_any_block(block_state, (4, 7), 3))

    def test_set_value_twice_in_block_raises(self) -> None:
        block_state = new_block_state()
        set_value_in_blocks(block_state, (0, 0), 5)
        with self.assertRaises(ConflictError) as context:
            set_value_in_blocks(block_state, (1, 1), 5)
        self.assertEqual(context.exception.block_kind, "square")
        self.assertEqual(context.exception.block_index, 0)


class TestInitialState(unittest.TestCase):
    def test_collects_empty_cells_in_row_major_order(self) -> None:
        table = empty_table()
        table[0][0] = 1
        table[8][8] = 9
        grid, block_state, to_be_filled = build_initial_state(table)
        self.assertEqual(len(to_be_filled), 79)
        self.assertEqual(to_be_filled[0].index, (0, 1))
        self.assertEqual(to_be_filled[-1].index, (8, 7))
        self.assertTrue(value_exists_in_block(block_state, "row", (0, 5), 1))
        self.assertTrue(value_exists_in_block(block_state, "square", (7, 7), 9))
        self.assertEqual(grid, table)
        self.assertIsNot(grid, table)

    def test_registering_duplicate_clue_raises(self) -> None:
        table = empty_table()
        table[0][0] = 6
        table[5][0] = 6
        with self.assertRaises(ConflictError) as context:
            build_initial_state(table)
        self.assertEqual(context.exception.block_kind, "column")

    def test_possibilities_are_a_setup_snapshot(self) -> None:
        table = empty_table()
        table[0] = [0, 2, 3, 0, 0, 0, 0, 0, 0]
        table[4][0] = 7
        _, block_state, to_be_filled = build_initial_state(table)
        cell = to_be_filled[0]
        candidates = make_possibilities(cell, block_state)
        self.assertEqual(candidates, [1, 4, 5, 6, 8, 9])
        self.assertEqual(cell.untried.pop(), 1)

    def test_sorting_puts_most_constrained_cell_on_top(self) -> None:
        table = empty_table()
        table[0] = [1, 2, 3, 4, 5, 6, 7, 8, 0]
        _, block_state, to_be_filled = build_initial_state(table)
        make_all_possibilities(to_be_filled, block_state, sort_by_possibilities=True)
        self.assertEqual(to_be_filled[-1].index, (0, 8))
        self.assertEqual(to_be_filled[-1].untried, [9])


class TestPossibilities(unittest.TestCase):
    def test_empty_cell_rejects_index_outside_grid(self) -> None:
        with self.assertRaises(RangeError) as context:
            EmptyCell(index=(9, 0))
        self.assertIn("row index", str(context.exception))
        with self.assertRaises(RangeError):
            EmptyCell(index=(0, -1))

    def test_skips_digits_placed_after_setup(self) -> None:
        block_state = new_block_state()
        cell = EmptyCell(index=(0, 0), untried=[3, 2, 1])
        set_value_in_blocks(block_state, (0, 5), 1)
        set_value_in_blocks(block_state, (5, 0), 2)
        self.assertEqual(find_next_possibility(cell, block_state), 3)
        self.assertEqual(cell.untried, [])
        self.assertEqual(cell.tried, [1, 2, 3])

    def test_returns_none_when_exhausted(self) -> None:
        block_state = new_block_state()
        set_value_in_blocks(block_state, (0, 5), 1)
        cell = EmptyCell(index=(0, 0), untried=[1])
        self.assertIsNone(find_next_possibility(cell, block_state))
        restore_possibilities(cell)
        self.assertEqual(cell.untried, [1])
        self.assertEqual(cell.tried, [])

    def test_restore_keeps_ascending_pop_order(self) -> None:
        cell = EmptyCell(index=(0, 0), untried=[], tried=[2, 5, 7])
        restore_possibilities(cell)
        self.assertEqual([cell.untried.pop() for _ in range(3)], [2, 5, 7])

    def test_apply_and_revert_value(self) -> None:
        grid = empty_table()
        block_state = new_block_state()
        cell = EmptyCell(index=(2, 3))
        apply_value(6, cell, grid, block_state)
        self.assertEqual(grid[2][3], 6)
        self.assertTrue(value_exists_in_block(block_state, "square", (0, 5), 6))
        revert_value(cell, grid, block_state)
        self.assertEqual(grid[2][3], 0)
        self.assertFalse(value_exists_in_any_block(block_state, (2, 3), 6))


class TestSearchLoop(unittest.TestCase):
    def test_backtracks_into_previous_cell(self) -> None:
        grid = empty_table()
        block_state = new_block_state()
        first = EmptyCell(index=(0, 0), untried=[2, 1])
        second = EmptyCell(index=(0, 1), untried=[1])
        trace_log: list[str] = []

        steps = search_first_solution(
            grid,
            block_state,
            [second, first],
            trace_enabled=True,
            trace_log=trace_log,
        )

        self.assertEqual(grid[0][:2], [2, 1])
        self.assertEqual(steps, 4)
        self.assertIn("No valid values remain for (0, 1)", trace_log)
        self.assertIn("Backtrack on (0, 0) value 1", trace_log)

    def test_raises_when_backtracking_past_first_cell(self) -> None:
        grid = empty_table()
        block_state = new_block_state()
        first = EmptyCell(index=(0, 0), untried=[1])
        second = EmptyCell(index=(0, 1), untried=[1])

        with self.assertRaises(UnsolvableError):
            search_first_solution(grid, block_state, [second, first])
        self.assertEqual(grid[0][:2], [0, 0])
        self.assertFalse(value_exists_in_any_block(block_state, (0, 0), 1))

    def test_drains_to_be_filled_stack(self) -> None:
        grid = empty_table()
        block_state = new_block_state()
        to_be_filled = [EmptyCell(index=(1, 1), untried=[4])]
        search_first_solution(grid, block_state, to_be_filled)
        self.assertEqual(to_be_filled, [])
        self.assertEqual(grid[1][1], 4)


if __name__ == "__main__":
    unittest.main()
