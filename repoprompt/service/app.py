"""FastAPI application entrypoint for repoprompt service mode."""

from __future__ import annotations

import asyncio
from typing import Any, Callable, Dict, List, Optional

import uvicorn
from fastapi import Depends, FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..orchestrator import Orchestrator


class AnalysisOptions(BaseModel):
    exclude_patterns: Optional[List[str]] = Field(default=None, alias="excludePatterns")
    max_file_size_kb: Optional[int] = Field(default=None, alias="maxFileSizeKB")
    include_tests: Optional[bool] = Field(default=None, alias="includeTests")
    sample_limit: Optional[int] = Field(default=None, alias="sampleLimit")
    facets: Optional[List[str]] = None

    model_config = {"populate_by_name": True}

    def overrides(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class AnalyzeRequest(BaseModel):
    path: str
    options: AnalysisOptions = Field(default_factory=AnalysisOptions)


class HealthResponse(BaseModel):
    status: str


OrchestratorFactory = Callable[[Dict[str, Any]], Orchestrator]


def _default_orchestrator(overrides: Dict[str, Any]) -> Orchestrator:
    return Orchestrator(config_overrides=overrides)


def create_app(
    orchestrator_factory: OrchestratorFactory = _default_orchestrator,
) -> FastAPI:
    """Create the FastAPI application exposing repoprompt operations."""

    app = FastAPI(title="RepoPrompt Service", version="1.0.0")

    async def get_factory() -> OrchestratorFactory:
        return orchestrator_factory

    async def _in_executor(func: Callable[[], Any]) -> Any:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, func)

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/analyze")
    async def analyze_repo(
        payload: AnalyzeRequest,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> Dict[str, Any]:
        orchestrator = factory(payload.options.overrides())
        analysis = await _in_executor(lambda: orchestrator.analyze(payload.path))
        return analysis.to_dict()

    @app.post("/prompts")
    async def prompts_for_repo(
        payload: AnalyzeRequest,
        factory: OrchestratorFactory = Depends(get_factory),
    ) -> Dict[str, Any]:
        orchestrator = factory(payload.options.overrides())
        _, library = await _in_executor(lambda: orchestrator.generate(payload.path))
        return library.to_dict()

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(_: Any, exc: FileNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(NotADirectoryError)
    async def not_a_directory_handler(_: Any, exc: NotADirectoryError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(RuntimeError)
    async def runtime_error_handler(_: Any, exc: RuntimeError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(host: str = "127.0.0.1", port: int = 8000) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)


__all__ = ["AnalysisOptions", "AnalyzeRequest", "create_app", "run_service"]
