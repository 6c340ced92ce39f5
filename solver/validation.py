from typing import Any, Optional

from rules.rules import BLOCK_KINDS, EMPTY, GRID_SIZE, MAX_VALUE

from .errors import ConflictError, FormatError, RangeError
from .types import CellIndex, Table
from .utils import block_index


def validate_cell_value(value: int, index: Optional[CellIndex] = None) -> None:
    if value < EMPTY or value > MAX_VALUE:
        raise RangeError(
            f"Expected table cell value to be in the range of {EMPTY} to {MAX_VALUE}, got {value}",
            index=index,
            value=value,
        )


def validate_cell_index(index: CellIndex) -> None:
    for axis_name, position in zip(("row", "column"), index):
        if position < 0 or position >= GRID_SIZE:
            raise RangeError(
                f"Expected table {axis_name} index to be in the range of 0 to {GRID_SIZE - 1}, got {position}",
                value=position,
            )


def validate_table_shape(table: Any) -> None:
    if not isinstance(table, list) or len(table) != GRID_SIZE:
        raise FormatError(f"table must be a list of exactly {GRID_SIZE} rows")

    for r, row in enumerate(table):
        if not isinstance(row, list) or len(row) != GRID_SIZE:
            raise FormatError(f"row {r} must be a list of exactly {GRID_SIZE} values")
        for c, value in enumerate(row):
            if isinstance(value, bool) or not isinstance(value, int):
                raise FormatError(f"table entries must be integers, got {value!r} at index ({r}, {c})")


def find_conflicts(table: Table) -> list[ConflictError]:
    """Scan every block family and collect all duplicates, reporting each digit once per block."""
    conflicts: list[ConflictError] = []
    for kind in BLOCK_KINDS:
        seen: list[dict[int, CellIndex]] = [{} for _ in range(GRID_SIZE)]
        reported: list[set[int]] = [set() for _ in range(GRID_SIZE)]
        for r in range(GRID_SIZE):
            for c in range(GRID_SIZE):
                value = table[r][c]
                if value == EMPTY:
                    continue
                block = block_index(kind, (r, c))
                if value not in seen[block]:
                    seen[block][value] = (r, c)
                    continue
                if value in reported[block]:
                    continue
                reported[block].add(value)
                conflicts.append(ConflictError(kind, block, value, index=(r, c)))
    return conflicts


def check_table(table: Any) -> list[ConflictError]:
    """Check shape and ranges, then report every duplicate without raising for it."""
    validate_table_shape(table)
    for r, row in enumerate(table):
        for c, value in enumerate(row):
            validate_cell_value(value, index=(r, c))
    return find_conflicts(table)


def validate_table(table: Any) -> Table:
    """Check shape, ranges and block uniqueness of ``table``.

    Returns a normalized copy. Raises ``FormatError``, ``RangeError`` or the
    first ``ConflictError`` in row, column, square order.
    """
    validate_table_shape(table)

    normalized_table: Table = []
    for r, row in enumerate(table):
        for c, value in enumerate(row):
            validate_cell_value(value, index=(r, c))
        normalized_table.append(list(row))

    conflicts = find_conflicts(normalized_table)
    if conflicts:
        raise conflicts[0]

    return normalized_table
