from typing import Optional

from .types import BlockKind, CellIndex


class SudokuError(ValueError):
    """Base class for every error raised while loading or solving a table."""


class FormatError(SudokuError):
    """The input is not a 9x9 grid of integers."""


class RangeError(SudokuError):
    def __init__(self, message: str, index: Optional[CellIndex] = None, value: Optional[int] = None) -> None:
        if index is not None:
            message = f"{message}, at index ({index[0]}, {index[1]})"
        super().__init__(message)
        self.index = index
        self.value = value


class ConflictError(SudokuError):
    """The same nonzero digit appears twice in one row, column or square."""

    def __init__(self, block_kind: BlockKind, block_index: int, value: int, index: Optional[CellIndex] = None) -> None:
        message = f"value {value} appears more than once in {block_kind} {block_index}"
        if index is not None:
            message = f"{message} (at index ({index[0]}, {index[1]}))"
        super().__init__(message)
        self.block_kind = block_kind
        self.block_index = block_index
        self.value = value
        self.index = index


class UnsolvableError(SudokuError):
    pass


class SolveTimeoutError(SudokuError):
    pass
