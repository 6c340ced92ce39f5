from typing import Optional

from rules.rules import MAX_VALUE, MIN_VALUE

from .state import EmptyCell, value_exists_in_any_block
from .types import BlockState, Possibilities


def make_possibilities(cell: EmptyCell, block_state: BlockState) -> Possibilities:
    """Fill ``cell.untried`` from the digits the given clues leave open.

    This is a snapshot of the setup-time block state only. Digits placed
    later in the search are rejected by ``find_next_possibility``.
    """
    candidates = [
        value for value in range(MIN_VALUE, MAX_VALUE + 1) if not value_exists_in_any_block(block_state, cell.index, value)
    ]
    cell.untried = candidates[::-1]
    cell.tried = []
    return candidates


def make_all_possibilities(to_be_filled: list[EmptyCell], block_state: BlockState, sort_by_possibilities: bool) -> None:
    for cell in to_be_filled:
        make_possibilities(cell, block_state)

    if sort_by_possibilities:
        # The top of the stack is popped first, so the most constrained cells go last.
        to_be_filled.sort(key=lambda cell: len(cell.untried), reverse=True)


def find_next_possibility(cell: EmptyCell, block_state: BlockState) -> Optional[int]:
    while cell.untried:
        value = cell.untried.pop()
        cell.tried.append(value)
        if not value_exists_in_any_block(block_state, cell.index, value):
            return value
    return None


def restore_possibilities(cell: EmptyCell) -> None:
    # tried holds the digits in the order they were popped, i.e. ascending.
    cell.untried = cell.tried[::-1]
    cell.tried = []
