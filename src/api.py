"""FastAPI application exposing the fetch strategies over HTTP.

Endpoints:
    GET /health
    GET /posts/n-plus-one?limit=10
    GET /posts/optimized?limit=10
    GET /posts/batched?limit=10
    GET /benchmark?limit=10

Every /posts response carries `X-Query-Count` and `X-Query-Time-Ms` headers
taken from a monitor attached for that request only.

Usage:
    uvicorn src.api:app --host 0.0.0.0 --port 3000
"""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.responses import JSONResponse

from src.domain.models import Post
from src.errors import QueryError
from src.infrastructure.db_factory import create_executor
from src.infrastructure.executor import QueryExecutor
from src.orchestrator import (
    available_strategies,
    compare_runs,
    resolve_strategy,
    run_benchmark,
    run_strategy,
)
from src.utils.logging import get_logger

log = get_logger(__name__)

app = FastAPI(
    title="N+1 Query Benchmark API",
    description="Serves the same posts through the naive, join and batched fetch strategies.",
    version="0.1.0",
)


def get_executor() -> QueryExecutor:
    """Fresh executor per request so monitors never leak across requests."""
    return create_executor()


@app.exception_handler(QueryError)
async def query_error_handler(request: Request, exc: QueryError) -> JSONResponse:
    log.error("Query failed on %s: %s", request.url.path, exc, exc_info=exc)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _serve_strategy(name: str, executor: QueryExecutor, limit: int, response: Response) -> List[Post]:
    run = run_strategy(resolve_strategy(name, executor), limit, profile=False)
    response.headers["X-Query-Count"] = str(run.stats.query_count)
    response.headers["X-Query-Time-Ms"] = f"{run.stats.total_time_ms:.2f}"
    return run.posts


@app.get("/health", tags=["Health"])
def health_check() -> Dict[str, str]:
    return {"status": "healthy"}


@app.get("/posts/n-plus-one", response_model=List[Post], tags=["Posts"])
def posts_n_plus_one(
    response: Response,
    limit: int = Query(10, ge=0),
    executor: QueryExecutor = Depends(get_executor),
) -> List[Post]:
    """Posts loaded with one extra query per post for users and comments."""
    return _serve_strategy("naive", executor, limit, response)


@app.get("/posts/optimized", response_model=List[Post], tags=["Posts"])
def posts_optimized(
    response: Response,
    limit: int = Query(10, ge=0),
    executor: QueryExecutor = Depends(get_executor),
) -> List[Post]:
    """Posts loaded with a single JOIN + json_agg query."""
    return _serve_strategy("join", executor, limit, response)


@app.get("/posts/batched", response_model=List[Post], tags=["Posts"])
def posts_batched(
    response: Response,
    limit: int = Query(10, ge=0),
    executor: QueryExecutor = Depends(get_executor),
) -> List[Post]:
    """Posts loaded with three queries regardless of page size."""
    return _serve_strategy("batched", executor, limit, response)


@app.get("/benchmark", tags=["Benchmark"])
def benchmark(
    limit: int = Query(10, ge=0),
    executor: QueryExecutor = Depends(get_executor),
) -> Dict[str, Any]:
    """Run every strategy once at `limit` and report stats and comparisons."""
    runs = run_benchmark(executor, sizes=[limit], profile=False)
    return {
        "limit": limit,
        "strategies": available_strategies(),
        "runs": [
            {
                "strategy": run.strategy,
                "posts": len(run.posts),
                "query_count": run.stats.query_count,
                "total_time_ms": round(run.stats.total_time_ms, 3),
                "elapsed_ms": round(run.stats.elapsed_ms, 3),
            }
            for run in runs
        ],
        "comparisons": [c.to_dict() for c in compare_runs(runs)],
    }


__all__ = ["app", "get_executor"]
