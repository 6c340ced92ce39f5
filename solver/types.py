from typing import Optional


Table = list[list[int]]
CellIndex = tuple[int, int]
Possibilities = list[int]
BlockKind = str
ValueExistence = list[bool]
BlockState = dict[BlockKind, list[ValueExistence]]
TraceLog = list[str]
TraceStep = dict[str, object]
TraceMeta = Optional[dict[str, bool]]
