"""FastAPI application exposing pkggrade analysis as a service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..models import FinalReport
from ..oracle import OracleError
from ..orchestrator import PackageAnalyzer
from ..source.base import ContentStoreError, NotFoundError


class AnalyzeRequest(BaseModel):
    owner: str
    repo: str
    packages: List[str] = Field(min_length=1)


class AnalyzeResponse(BaseModel):
    model_config = {"populate_by_name": True}

    passed: bool = Field(alias="pass")
    score: int
    grade: str
    report: str


class HealthResponse(BaseModel):
    status: str


def _default_analyzer() -> PackageAnalyzer:
    return PackageAnalyzer.from_path(Path.cwd())


def create_app(
    analyzer_factory: Callable[[], PackageAnalyzer] = _default_analyzer,
) -> FastAPI:
    """Create the FastAPI application exposing the analyze operation."""
    app = FastAPI(title="pkggrade", version="0.1.0")

    async def get_analyzer() -> PackageAnalyzer:
        return analyzer_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze", response_model=AnalyzeResponse, response_model_by_alias=True)
    async def analyze(
        payload: AnalyzeRequest,
        analyzer: PackageAnalyzer = Depends(get_analyzer),
    ) -> AnalyzeResponse:
        def _run() -> FinalReport:
            return analyzer.analyze(payload.owner, payload.repo, payload.packages)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run)
        return AnalyzeResponse(**result.to_dict())

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_: Any, exc: NotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ContentStoreError)
    async def content_store_handler(_: Any, exc: ContentStoreError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    @app.exception_handler(OracleError)
    async def oracle_handler(_: Any, exc: OracleError) -> JSONResponse:
        return JSONResponse(status_code=502, content={"detail": str(exc)})

    return app


def run_service(host: str = "0.0.0.0", port: int = 8000) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)


__all__ = ["AnalyzeRequest", "AnalyzeResponse", "create_app", "run_service"]
