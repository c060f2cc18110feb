from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from project_tracker.api.v1 import dashboard, projects, tasks
from project_tracker.config import settings
from project_tracker.database import Database
from project_tracker.errors import TrackerError
from project_tracker.lifecycle import Clock
from project_tracker.logging_config import configure_logging


def create_app(database: Optional[Database] = None, clock: Optional[Clock] = None) -> FastAPI:
    """Build the API around an explicitly owned database handle.

    The handle is opened when the app starts and closed when it stops.
    """
    configure_logging(settings.LOG_LEVEL)
    database = database or Database()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database.open()
        try:
            yield
        finally:
            database.close()

    app = FastAPI(title=settings.APP_NAME, version=settings.APP_VERSION, debug=settings.DEBUG, lifespan=lifespan)
    app.state.database = database
    app.state.clock = clock

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(TrackerError)
    async def tracker_error_handler(request: Request, exc: TrackerError):
        if exc.status_code >= 500:
            logger.error("{} {} failed: {}", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    app.include_router(projects.router, prefix="/api/v1/projects", tags=["projects"])
    app.include_router(tasks.router, prefix="/api/v1/tasks", tags=["tasks"])
    app.include_router(dashboard.router, prefix="/api/v1/dashboard", tags=["dashboard"])

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
