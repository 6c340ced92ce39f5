from typing import Optional

from fastapi import FastAPI, HTTPException, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from solver.errors import SolveTimeoutError
from solver.solver import solve_table
from solver.utils import format_table_rows
from solver.validation import check_table


class SolveRequest(BaseModel):
    table: list[list[int]] = Field(..., description="9x9 grid of integers 0-9, row-major, with 0 for empty cells")
    sort_by_possibilities: bool = Field(
        default=False,
        description="Try the empty cells with the fewest candidates first instead of row-major order.",
    )
    max_steps: Optional[int] = Field(default=None, ge=1, description="Give up after this many search steps.")
    max_seconds: Optional[float] = Field(default=10.0, ge=0.0, description="Give up after this many seconds. Use null for no limit.")
    trace: bool = Field(default=False, description="Include solver trace output in the response")
    trace_steps: bool = Field(default=False, description="Include structured trace steps for walkthrough/debugging.")
    trace_max_steps: int = Field(default=1000, ge=1, le=20000, description="Maximum number of trace steps to return.")


class TraceStepResponse(BaseModel):
    event: str
    message: str
    depth: int
    row: Optional[int] = None
    col: Optional[int] = None
    value: Optional[int] = None
    candidates: Optional[list[int]] = None
    grid: list[list[int]]


class SolveResponse(BaseModel):
    solution: list[list[int]]
    grid_rows: list[str]
    grid_text: str
    steps: int
    trace: Optional[list[str]] = None
    trace_steps: Optional[list[TraceStepResponse]] = None
    trace_truncated: bool = False


class ValidateRequest(BaseModel):
    table: list[list[int]] = Field(..., description="9x9 grid of integers 0-9, row-major, with 0 for empty cells")


class ConflictResponse(BaseModel):
    block_kind: str
    block_index: int
    value: int
    row: Optional[int] = None
    col: Optional[int] = None
    message: str


class ValidateResponse(BaseModel):
    valid: bool
    conflicts: list[ConflictResponse]


app = FastAPI(
    title="Sudoku Solver API",
    description="Solve 9x9 Sudoku tables by constraint-guided backtracking.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://127.0.0.1:5173", "http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.post("/solve", response_model=SolveResponse)
def solve(request: SolveRequest) -> SolveResponse:
    trace_log: list[str] = []
    trace_steps: list[dict[str, object]] = []
    trace_meta = {"truncated": False}
    stats: dict[str, int] = {}
    try:
        solution = solve_table(
            request.table,
            sort_by_possibilities=request.sort_by_possibilities,
            trace=request.trace,
            trace_log=trace_log,
            trace_steps=trace_steps if request.trace_steps else None,
            trace_meta=trace_meta,
            trace_max_steps=request.trace_max_steps,
            max_steps=request.max_steps,
            max_seconds=request.max_seconds,
            stats=stats,
        )
    except SolveTimeoutError as exc:
        raise HTTPException(status_code=status.HTTP_408_REQUEST_TIMEOUT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    grid_rows = format_table_rows(solution)
    return SolveResponse(
        solution=solution,
        grid_rows=grid_rows,
        grid_text="\n".join(grid_rows),
        steps=stats["steps"],
        trace=trace_log if request.trace else None,
        trace_steps=trace_steps if request.trace_steps else None,
        trace_truncated=trace_meta["truncated"],
    )


@app.post("/validate", response_model=ValidateResponse)
def validate(request: ValidateRequest) -> ValidateResponse:
    try:
        found = check_table(request.table)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    conflicts = [
        ConflictResponse(
            block_kind=conflict.block_kind,
            block_index=conflict.block_index,
            value=conflict.value,
            row=None if conflict.index is None else conflict.index[0],
            col=None if conflict.index is None else conflict.index[1],
            message=str(conflict),
        )
        for conflict in found
    ]
    return ValidateResponse(valid=not conflicts, conflicts=conflicts)
