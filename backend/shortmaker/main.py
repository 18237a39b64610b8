"""
Short Video Maker API
FastAPI application that turns narrated scene lists into rendered short videos

This is the main entry point that wires settings, collaborators, the
orchestrator and the routes together.
"""

import random
import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import API_DESCRIPTION, API_TITLE, API_VERSION, Settings
from .core import (
    JobConflictError,
    NotFoundError,
    ValidationError,
    clear_context,
    get_logger,
    inspect_render_host,
    set_request_id,
    setup_logging,
)
from .routes import videos_router
from .services.music import MusicLibrary
from .services.orchestration import StatusStore, VideoOrchestrator
from .services.pipeline import ScenePipeline

logger = get_logger(__name__, service="api")


def build_orchestrator(settings: Settings, rng: Optional[random.Random] = None) -> VideoOrchestrator:
    """Wire the production collaborators. Their libraries are imported here so tests never load them."""
    from .services.collaborators.edge_tts_synthesizer import EdgeTTSSynthesizer
    from .services.collaborators.ffmpeg_renderer import FFmpegRenderer
    from .services.collaborators.gemini_enhancer import GeminiPromptEnhancer
    from .services.collaborators.pexels import PexelsFootageSearch
    from .services.collaborators.whisper_transcriber import WhisperTranscriber

    enhancer = None
    if settings.gemini_api_key:
        enhancer = GeminiPromptEnhancer(settings.gemini_api_key, model=settings.gemini_model)
    else:
        logger.info("GEMINI_API_KEY not set, footage queries use raw keywords")

    pipeline = ScenePipeline(
        synthesizer=EdgeTTSSynthesizer(),
        transcriber=WhisperTranscriber(model=settings.whisper_model),
        footage_search=PexelsFootageSearch(settings.pexels_api_key or ""),
        enhancer=enhancer,
    )
    store = StatusStore(settings.job_data_dir if settings.persist_jobs else None)

    return VideoOrchestrator(
        settings=settings,
        store=store,
        pipeline=pipeline,
        renderer=FFmpegRenderer(work_root=settings.temp_dir),
        music_library=MusicLibrary(settings.music_dir),
        rng=rng,
    )


def create_app(settings: Optional[Settings] = None, orchestrator: Optional[VideoOrchestrator] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service settings; read from the environment when omitted
        orchestrator: Pre-built orchestrator; built from ``settings`` at startup when omitted
    """
    settings = settings or Settings.from_env()

    setup_logging(
        level=settings.log_level,
        log_file=settings.log_file,
        use_json=settings.json_logs,
    )
    logger.info("Starting Short Video Maker API", extra={
        "log_level": settings.log_level,
        "json_logs": settings.json_logs,
        "fps": settings.fps,
        "data_dir": str(settings.data_dir),
    })

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        settings.ensure_directories()
        app.state.runtime_report = inspect_render_host(
            {
                "videos": settings.videos_dir,
                "temp": settings.temp_dir,
                "job_data": settings.job_data_dir,
            },
            strict_tools=settings.strict_runtime_checks,
            footage_search_configured=bool(settings.pexels_api_key),
            music_tracks=len(MusicLibrary(settings.music_dir).tracks()),
        )
        logger.info("Startup runtime checks complete", extra={"runtime_report": app.state.runtime_report})

        if app.state.orchestrator is None:
            app.state.orchestrator = build_orchestrator(settings)

        recovered = app.state.orchestrator.recover()
        if recovered:
            logger.info("Re-queued jobs from previous run", extra={"count": recovered})

        app.state.orchestrator.start()
        try:
            yield
        finally:
            await app.state.orchestrator.stop()

    app = FastAPI(
        title=API_TITLE,
        description=API_DESCRIPTION,
        version=API_VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.orchestrator = orchestrator
    app.state.runtime_report = None

    @app.middleware("http")
    async def add_request_correlation(request: Request, call_next):
        """Add correlation ID and log each request."""
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        set_request_id(request_id)
        path = request.url.path

        logger.info(f"{request.method} {path}", extra={
            "method": request.method,
            "path": path,
            "client": request.client.host if request.client else "unknown",
        })

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            response.headers.setdefault("X-Content-Type-Options", "nosniff")

            logger.info(f"Response: {response.status_code}", extra={
                "status_code": response.status_code,
                "method": request.method,
                "path": path,
            })
            return response
        finally:
            clear_context()

    @app.exception_handler(ValidationError)
    async def validation_error_handler(_request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={
            "error": "Validation failed",
            "message": exc.message,
            "missingFields": exc.missing_fields,
        })

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(_request: Request, exc: RequestValidationError):
        fields = [".".join(str(part) for part in err["loc"] if part != "body") for err in exc.errors()]
        return JSONResponse(status_code=400, content={
            "error": "Validation failed",
            "message": "Request body is malformed",
            "missingFields": fields,
        })

    @app.exception_handler(NotFoundError)
    async def not_found_handler(_request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"error": str(exc)})

    @app.exception_handler(JobConflictError)
    async def conflict_handler(_request: Request, exc: JobConflictError):
        return JSONResponse(status_code=409, content={"error": str(exc)})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(videos_router)

    @app.get("/")
    async def root():
        """Root endpoint - API info"""
        return {
            "message": "Short Video Maker API - Render narrated short videos",
            "version": API_VERSION,
        }

    @app.get("/health")
    async def health_check():
        """Runtime report from startup plus job counts."""
        orchestrator = app.state.orchestrator
        report = app.state.runtime_report or {}
        body = {
            "status": "healthy" if report.get("ok", True) else "degraded",
            "runtime": report,
        }
        if orchestrator is not None:
            body["jobs"] = orchestrator.summary()
            body["queue_depth"] = orchestrator.queue_depth()
        return body

    return app


if __name__ == "__main__":
    import uvicorn

    env_settings = Settings.from_env()
    uvicorn.run(create_app(env_settings), host="0.0.0.0", port=env_settings.port)
