import time
from typing import Callable, Optional

from .constraints import find_next_possibility, restore_possibilities
from .errors import SolveTimeoutError, UnsolvableError
from .state import EmptyCell, apply_value, is_cell_empty, revert_value
from .types import BlockState, Table, TraceLog, TraceMeta, TraceStep
from .utils import trace


def search_first_solution(
    grid: Table,
    block_state: BlockState,
    to_be_filled: list[EmptyCell],
    trace_enabled: bool = False,
    trace_log: Optional[TraceLog] = None,
    trace_steps: Optional[list[TraceStep]] = None,
    trace_meta: TraceMeta = None,
    trace_max_steps: int = 1000,
    max_steps: Optional[int] = None,
    max_seconds: Optional[float] = None,
    stop_requested: Optional[Callable[[], bool]] = None,
) -> int:
    """Fill every cell in ``to_be_filled`` by chronological backtracking.

    ``grid`` and ``block_state`` are mutated in place and ``to_be_filled`` is
    drained. Cells placed on the current path live on a second stack; a dead
    end moves the most recently placed cell back on top of ``to_be_filled``
    so it is retried with its next untried digit.

    Returns the number of loop iterations taken. Raises ``UnsolvableError``
    when a dead end is reached with nothing left to undo, and
    ``SolveTimeoutError`` when ``max_steps``, ``max_seconds`` or
    ``stop_requested`` cuts the search short.
    """
    filled: list[EmptyCell] = []
    deadline = None if max_seconds is None else time.monotonic() + max_seconds
    tracing = trace_enabled or trace_steps is not None
    steps = 0

    def record_step(
        event: str,
        message: str,
        cell: Optional[EmptyCell] = None,
        value: Optional[int] = None,
    ) -> None:
        trace(trace_enabled, trace_log, message)
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
                "depth": len(filled),
                "row": None if cell is None else cell.index[0],
                "col": None if cell is None else cell.index[1],
                "value": value,
                "candidates": None if cell is None else cell.untried[::-1],
                "grid": [grid_row[:] for grid_row in grid],
            }
        )

    while to_be_filled:
        if max_steps is not None and steps >= max_steps:
            raise SolveTimeoutError(f"search stopped after {steps} steps without a solution")
        if deadline is not None and time.monotonic() >= deadline:
            raise SolveTimeoutError(f"search exceeded the time limit of {max_seconds} seconds")
        if stop_requested is not None and stop_requested():
            raise SolveTimeoutError("search was stopped before a solution was found")
        steps += 1

        cell = to_be_filled.pop()
        r, c = cell.index
        if tracing:
            record_step(
                "select_cell",
                f"Select cell ({r}, {c}) with {len(cell.untried)} untried candidates",
                cell=cell,
            )

        value = find_next_possibility(cell, block_state)
        if value is not None:
            apply_value(value, cell, grid, block_state)
            filled.append(cell)
            if tracing:
                record_step("place_value", f"Place value {value} at ({r}, {c})", cell=cell, value=value)
            continue

        if not is_cell_empty(cell, grid):
            revert_value(cell, grid, block_state)
        restore_possibilities(cell)
        to_be_filled.append(cell)
        if tracing:
            record_step("dead_end", f"No valid values remain for ({r}, {c})", cell=cell)

        if not filled:
            raise UnsolvableError("No valid solution exists for the provided table")

        previous = filled.pop()
        previous_value = grid[previous.index[0]][previous.index[1]]
        revert_value(previous, grid, block_state)
        to_be_filled.append(previous)
        if tracing:
            record_step(
                "backtrack",
                f"Backtrack on ({previous.index[0]}, {previous.index[1]}) value {previous_value}",
                cell=previous,
                value=previous_value,
            )

    if tracing:
        record_step("solved", f"All cells assigned after {steps} steps")
    return steps
