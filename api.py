from typing import Any, Optional, Union

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

from kakuro.solver import ABORTED, UNSOLVABLE, count_solutions, solve_puzzle
from kakuro.state import build_initial_state, to_raw_grid
from kakuro.text_format import format_puzzle, parse_puzzle_text
from kakuro.types import RawGrid


GridCell = Union[int, list[int]]


class PuzzleRequest(BaseModel):
    grid: Optional[list[list[GridCell]]] = Field(
        default=None,
        description="Puzzle rows. A sum cell is a [down, right] pair, a value cell is an integer (0 for blank).",
    )
    puzzle_text: Optional[str] = Field(
        default=None,
        description="Puzzle in the text format, used when grid is not given.",
    )
    max_seconds: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Time budget for the search. Use null to search to completion.",
    )


class SolveRequest(PuzzleRequest):
    trace: bool = Field(default=False, description="Include solver trace output in the response")
    trace_steps: bool = Field(default=False, description="Include structured trace steps for walkthrough/debugging.")
    trace_max_steps: int = Field(default=1000, ge=1, le=20000, description="Maximum number of trace steps to return.")


class TraceStepResponse(BaseModel):
    event: str
    message: str
    depth: int
    column: Optional[int] = None
    row: Optional[int] = None
    value: Optional[int] = None
    candidates: Optional[list[int]] = None
    diagnosis: Optional[dict[str, Any]] = None


class SolveResponse(BaseModel):
    status: str
    solution: list[list[GridCell]]
    grid_text: str
    elapsed_seconds: float
    nodes_visited: int
    trace: Optional[list[str]] = None
    trace_steps: Optional[list[TraceStepResponse]] = None
    trace_truncated: bool = False


class CountRequest(PuzzleRequest):
    limit: int = Field(default=2, ge=1, le=1000, description="Stop counting once this many solutions are found")


class CountResponse(BaseModel):
    count: int
    exact: bool
    unique: bool
    timed_out: bool
    nodes_visited: int
    elapsed_seconds: float
    message: str


app = FastAPI(
    title="Kakuro Solver API",
    description="Solve Kakuro puzzles: fill every run with distinct digits 1-9 that add up to its clue.",
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
    try:
        puzzle = build_initial_state(_resolve_grid(request))
        trace_log: list[str] = []
        trace_steps: list[dict[str, object]] = []
        trace_meta = {"truncated": False}
        result = solve_puzzle(
            puzzle,
            trace=request.trace,
            trace_log=trace_log,
            trace_steps=trace_steps if request.trace_steps else None,
            trace_meta=trace_meta,
            trace_max_steps=request.trace_max_steps,
            max_seconds=request.max_seconds,
        )
        if result.status == ABORTED:
            raise HTTPException(status_code=408, detail=result.message)
        if result.status == UNSOLVABLE:
            raise HTTPException(status_code=422, detail=result.message)

        solution = to_raw_grid(puzzle)
        return SolveResponse(
            status=result.status,
            solution=solution,
            grid_text=format_puzzle(solution),
            elapsed_seconds=result.elapsed_seconds,
            nodes_visited=result.nodes_visited,
            trace=trace_log if request.trace else None,
            trace_steps=trace_steps if request.trace_steps else None,
            trace_truncated=trace_meta["truncated"],
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/count", response_model=CountResponse)
def count(request: CountRequest) -> CountResponse:
    try:
        result = count_solutions(
            _resolve_grid(request),
            limit=request.limit,
            max_seconds=request.max_seconds,
        )
        return CountResponse(**result)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


def _resolve_grid(request: PuzzleRequest) -> RawGrid:
    if request.grid is not None:
        return request.grid
    if request.puzzle_text is not None:
        return parse_puzzle_text(request.puzzle_text)
    raise ValueError("request must include 'grid' or 'puzzle_text'")
