from dataclasses import dataclass, field

from rules.rules import BLOCK_KINDS, EMPTY, GRID_SIZE, MAX_VALUE

from .errors import ConflictError
from .types import BlockKind, BlockState, CellIndex, Possibilities, Table
from .utils import block_index
from .validation import validate_cell_index, validate_cell_value


@dataclass
class EmptyCell:
    """An empty cell and its candidate digits.

    ``untried`` is a stack whose ``pop()`` yields digits in ascending order.
    ``tried`` collects every digit popped from it on the current path, the
    committed one included, so it can be restored when the cell dead-ends.
    """

    index: CellIndex
    untried: Possibilities = field(default_factory=list)
    tried: Possibilities = field(default_factory=list)

    def __post_init__(self) -> None:
        validate_cell_index(self.index)


InitialState = tuple[Table, BlockState, list[EmptyCell]]


def new_block_state() -> BlockState:
    return {kind: [[False] * (MAX_VALUE + 1) for _ in range(GRID_SIZE)] for kind in BLOCK_KINDS}


def value_exists_in_block(block_state: BlockState, kind: BlockKind, index: CellIndex, value: int) -> bool:
    return block_state[kind][block_index(kind, index)][value]


def value_exists_in_any_block(block_state: BlockState, index: CellIndex, value: int) -> bool:
    for kind in BLOCK_KINDS:
        if value_exists_in_block(block_state, kind, index, value):
            return True
    return False


def set_value_in_blocks(block_state: BlockState, index: CellIndex, value: int, exists: bool = True) -> None:
    if exists:
        for kind in BLOCK_KINDS:
            if value_exists_in_block(block_state, kind, index, value):
                raise ConflictError(kind, block_index(kind, index), value, index=index)

    for kind in BLOCK_KINDS:
        block_state[kind][block_index(kind, index)][value] = exists


def build_initial_state(table: Table) -> InitialState:
    """Register the given digits and collect empty cells in row-major order."""
    grid = [row[:] for row in table]
    block_state = new_block_state()
    to_be_filled: list[EmptyCell] = []

    for r in range(GRID_SIZE):
        for c in range(GRID_SIZE):
            index = (r, c)
            value = grid[r][c]
            validate_cell_value(value, index=index)
            if value == EMPTY:
                to_be_filled.append(EmptyCell(index=index))
            else:
                set_value_in_blocks(block_state, index, value)

    return grid, block_state, to_be_filled


def apply_value(value: int, cell: EmptyCell, grid: Table, block_state: BlockState) -> None:
    r, c = cell.index
    set_value_in_blocks(block_state, cell.index, value)
    grid[r][c] = value


def revert_value(cell: EmptyCell, grid: Table, block_state: BlockState) -> None:
    r, c = cell.index
    value = grid[r][c]
    if value == EMPTY:
        return
    set_value_in_blocks(block_state, cell.index, value, exists=False)
    grid[r][c] = EMPTY


def is_cell_empty(cell: EmptyCell, grid: Table) -> bool:
    r, c = cell.index
    return grid[r][c] == EMPTY
