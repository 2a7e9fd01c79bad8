"""
DevTrace HTTP API — FastAPI application serving tasks and dashboard metrics.

Endpoints:
    GET    /health
    GET    /api/tasks            (?status=&testStatus=&developer=)
    GET    /api/tasks/{task_id}
    POST   /api/tasks
    PUT    /api/tasks/{task_id}
    DELETE /api/tasks/{task_id}
    GET    /api/metrics

Run:
    devtrace run
"""

from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Body, FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from devtrace import __version__
from devtrace.engine.config import DevTraceConfig, get_config
from devtrace.engine.errors import (
    DevTraceError,
    DevTraceNotFoundError,
    DevTraceValidationError,
)
from devtrace.engine.logging import (
    init_logging,
    log,
    log_error,
    log_system_event,
    log_web_api_request,
    shutdown_logging,
)
from devtrace.records.enums import Status, TestStatus
from devtrace.services.task_service import TaskService
from devtrace.storage.json_store import JsonTaskStore

logger = logging.getLogger("devtrace.api.server")


def _status_code_for(error: DevTraceError) -> int:
    if isinstance(error, DevTraceValidationError):
        return 400
    if isinstance(error, DevTraceNotFoundError):
        return 404
    return 500


def create_app(
    config: Optional[DevTraceConfig] = None,
    service: Optional[TaskService] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Settings; defaults to the loaded devtrace.yaml.
        service: Task service; defaults to one over the configured JSON file.
    """
    config = config or get_config()
    if service is None:
        store = JsonTaskStore(config.storage.path)
        store.initialize()
        service = TaskService(store)

    started_at = datetime.now(timezone.utc)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if config.logging.file_logging:
            init_logging(config.logging)
        log(log_system_event("startup", details={
            "environment": config.environment,
            "storage": str(service.store.path),
        }))
        logger.info("DevTrace API ready (tasks: %s)", service.store.path)
        yield
        log(log_system_event("shutdown"))
        shutdown_logging()

    app = FastAPI(
        title=config.name,
        description="Development task tracking with quality scoring and dashboard metrics",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.service = service
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.server.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # -----------------------------------------------------------------------
    # Request logging + error mapping
    # -----------------------------------------------------------------------

    @app.middleware("http")
    async def request_logger(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = round((time.perf_counter() - start) * 1000, 2)
        log(log_web_api_request(
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=duration_ms,
            client=request.client.host if request.client else None,
        ))
        return response

    @app.exception_handler(DevTraceError)
    async def devtrace_error_handler(request: Request, exc: DevTraceError):
        status_code = _status_code_for(exc)
        body: Dict[str, Any] = {"error": exc.message}
        if isinstance(exc, DevTraceValidationError) and exc.validation_errors:
            body["details"] = exc.validation_errors
        if status_code >= 500:
            logger.error("Request %s %s failed: %r", request.method, request.url.path, exc)
            log(log_error(exc.to_dict(), path=request.url.path))
        return JSONResponse(status_code=status_code, content=body)

    # -----------------------------------------------------------------------
    # Endpoints
    # -----------------------------------------------------------------------
    # Plain def: store I/O runs in the threadpool, serialized by the store lock.

    @app.get("/health")
    def health_check():
        """Liveness probe."""
        uptime = (datetime.now(timezone.utc) - started_at).total_seconds()
        return {
            "status": "healthy",
            "version": __version__,
            "uptime_seconds": round(uptime, 2),
            "total_tasks": service.store.count(),
        }

    @app.get("/api/tasks")
    def list_tasks(
        status: Optional[str] = None,
        test_status: Optional[str] = Query(default=None, alias="testStatus"),
        developer: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Every task, newest first."""
        tasks = service.list_tasks(
            status=Status.parse(status) if status else None,
            test_status=TestStatus.parse(test_status) if test_status else None,
            developer=developer,
        )
        return [task.to_json_dict() for task in tasks]

    @app.get("/api/tasks/{task_id}")
    def get_task(task_id: str):
        return service.get_task(task_id).to_json_dict()

    @app.post("/api/tasks", status_code=201)
    def create_task(payload: Dict[str, Any] = Body(...)):
        """Create a task; the quality score is derived, never read from the body."""
        return service.create_task(payload).to_json_dict()

    @app.put("/api/tasks/{task_id}")
    def update_task(task_id: str, payload: Dict[str, Any] = Body(...)):
        return service.update_task(task_id, payload).to_json_dict()

    @app.delete("/api/tasks/{task_id}")
    def delete_task(task_id: str):
        service.delete_task(task_id)
        return {"message": "Task deleted successfully"}

    @app.get("/api/metrics")
    def get_metrics():
        """Dashboard summary over the current task snapshot."""
        return service.get_metrics().to_json_dict()

    return app
