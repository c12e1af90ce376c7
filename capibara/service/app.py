"""FastAPI application entrypoint for capibara service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List

from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from ..errors import CapibaraError
from ..pipeline import BuildResult, Pipeline


class BuildRequest(BaseModel):
    path: str
    reference_url: str


class BuildResponse(BaseModel):
    document: Dict[str, Any]
    diagnostics: List[Dict[str, str]]


class HealthResponse(BaseModel):
    status: str


def _default_pipeline() -> Pipeline:
    return Pipeline()


def create_app(
    pipeline_factory: Callable[[], Pipeline] = _default_pipeline,
) -> FastAPI:
    """Create the FastAPI application exposing the aggregation pipeline."""

    app = FastAPI(title="Capibara Service", version="1.0.0")

    async def get_pipeline() -> Pipeline:
        # A fresh pipeline per request keeps run state isolated.
        return pipeline_factory()

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/build", response_model=BuildResponse)
    async def build(
        payload: BuildRequest,
        pipeline: Pipeline = Depends(get_pipeline),
    ) -> BuildResponse:
        def _run_build() -> BuildResult:
            return pipeline.run(payload.path, payload.reference_url)

        loop = asyncio.get_running_loop()
        result = await loop.run_in_executor(None, _run_build)
        return BuildResponse(
            document=result.document.to_dict(),
            diagnostics=[diagnostic.to_dict() for diagnostic in result.diagnostics],
        )

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(
        _: Any, exc: NotADirectoryError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(OSError)
    async def os_error_handler(
        _: Any, exc: OSError
    ) -> JSONResponse:
        return JSONResponse(status_code=500, content={"detail": str(exc)})

    @app.exception_handler(CapibaraError)
    async def capibara_error_handler(
        _: Any, exc: CapibaraError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "127.0.0.1", port: int = 8000
) -> None:  # pragma: no cover - integration path
    import uvicorn

    uvicorn.run(create_app(), host=host, port=port)
