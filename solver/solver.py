from typing import Any, Callable, Optional

from rules.rules import BLOCK_KINDS, EMPTY, GRID_SIZE, MAX_VALUE, MIN_VALUE

from .constraints import make_all_possibilities
from .search import search_first_solution
from .state import build_initial_state
from .types import Table, TraceLog, TraceMeta, TraceStep
from .utils import block_index, copy_table
from .utils import trace as _trace
from .validation import validate_table


def solve_table(
    table: Any,
    sort_by_possibilities: bool = False,
    trace: bool = False,
    trace_log: Optional[TraceLog] = None,
    trace_steps: Optional[list[TraceStep]] = None,
    trace_meta: TraceMeta = None,
    trace_max_steps: int = 1000,
    max_steps: Optional[int] = None,
    max_seconds: Optional[float] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
    stats: Optional[dict[str, int]] = None,
) -> Table:
    """Solve a 9x9 Sudoku table and return the completed copy.

    ``table`` is validated once up front and never modified. ``0`` marks an
    empty cell. ``stats``, when given, receives ``empty_cells`` and ``steps``.
    """
    grid, block_state, to_be_filled = build_initial_state(validate_table(table))
    make_all_possibilities(to_be_filled, block_state, sort_by_possibilities)

    _trace(
        trace,
        trace_log,
        f"Initialized search: empty_cells={len(to_be_filled)}, sort_by_possibilities={sort_by_possibilities}",
    )
    if trace_steps is not None and trace_max_steps > 0:
        trace_steps.append(
            {
                "event": "setup",
                "message": f"Collected {len(to_be_filled)} empty cells",
                "depth": 0,
                "row": None,
                "col": None,
                "value": None,
                "candidates": None,
                "grid": copy_table(grid),
            }
        )

    empty_cells = len(to_be_filled)
    steps = search_first_solution(
        grid=grid,
        block_state=block_state,
        to_be_filled=to_be_filled,
        trace_enabled=trace,
        trace_log=trace_log,
        trace_steps=trace_steps,
        trace_meta=trace_meta,
        trace_max_steps=trace_max_steps,
        max_steps=max_steps,
        max_seconds=max_seconds,
        stop_requested=stop_requested,
    )
    if stats is not None:
        stats["empty_cells"] = empty_cells
        stats["steps"] = steps

    return grid


def is_solved(table: Table) -> bool:
    """True when every row, column and square is a permutation of 1..9."""
    expected = set(range(MIN_VALUE, MAX_VALUE + 1))
    for kind in BLOCK_KINDS:
        blocks: list[set[int]] = [set() for _ in range(GRID_SIZE)]
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                if table[r][c] == EMPTY:
                    return False
                blocks[block_index(kind, (r, c))].add(table[r][c])
        if any(block != expected for block in blocks):
            return False
    return True
