import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from cutroom.api import jobs, projects, websocket
from cutroom.config import Settings, get_settings
from cutroom.exceptions import CutroomError
from cutroom.models.database import create_db_engine, create_session_maker, init_db
from cutroom.render.engine import MediaEngine
from cutroom.render.media import MediaResolver
from cutroom.services.job_notifier import JobStatusNotifier
from cutroom.services.job_queue import JobQueue
from cutroom.services.job_store import SqlJobStore, SqlProjectStore
from cutroom.services.notification_hub import NotificationHub
from cutroom.tasks.job_worker import JobWorker

logger = logging.getLogger(__name__)


def create_app(settings: Settings | None = None, engine: MediaEngine | None = None) -> FastAPI:
    """Build the API app. ``engine`` overrides the ffmpeg runner (used by tests)."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        # Startup
        db_engine = create_db_engine(settings)
        await init_db(db_engine)
        session_maker = create_session_maker(db_engine)

        hub = NotificationHub()
        queue = JobQueue(maxsize=settings.job_queue_capacity)
        job_store = SqlJobStore(session_maker)
        project_store = SqlProjectStore(session_maker)
        worker = JobWorker(
            queue=queue,
            job_store=job_store,
            project_store=project_store,
            notifier=JobStatusNotifier(hub),
            engine=engine or MediaEngine(settings.ffmpeg_path, timeout=settings.engine_timeout_seconds),
            resolver=MediaResolver(settings.media_root, settings.media_base_url),
            settings=settings,
        )

        app.state.hub = hub
        app.state.job_queue = queue
        app.state.job_store = job_store
        app.state.project_store = project_store
        app.state.worker = worker

        hub.start()
        worker.start()
        logger.info(f"{settings.app_name} {settings.app_version} started ({settings.environment})")
        yield
        # Shutdown
        await worker.stop()
        await hub.stop()
        await db_engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(CutroomError)
    async def cutroom_exception_handler(request: Request, exc: CutroomError) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    # Global exception handler to ensure errors return proper JSON
    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled exception: {exc}")
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    # Routers
    app.include_router(projects.router, prefix="/api/projects", tags=["projects"])
    app.include_router(jobs.router, prefix="/api", tags=["jobs"])
    app.include_router(websocket.router, tags=["notifications"])

    # Rendered outputs are served from local disk
    app.mount(
        settings.uploads_url_prefix,
        StaticFiles(directory=settings.uploads_root, check_dir=False),
        name="uploads",
    )

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()
