from typing import Optional

from rules.rules import BOX_SIZE

from .types import BlockKind, CellIndex, Table, TraceLog


def block_index(kind: BlockKind, index: CellIndex) -> int:
    r, c = index
    if kind == "row":
        return r
    if kind == "column":
        return c
    if kind == "square":
        return r // BOX_SIZE * BOX_SIZE + c // BOX_SIZE
    raise ValueError(f"unknown block kind: {kind}")


def trace(enabled: bool, trace_log: Optional[TraceLog], message: str) -> None:
    if not enabled:
        return
    if trace_log is not None:
        trace_log.append(message)
    else:
        print(message)


def copy_table(table: Table) -> Table:
    return [row[:] for row in table]


def format_table_rows(table: Table) -> list[str]:
    return [" ".join(str(value) for value in row) for row in table]
