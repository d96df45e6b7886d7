import logging
import time
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import settings
from ai.providers import DraftProvider, get_provider
from db.repository import Storage
from auth.routes import router as auth_router
from api.settings import router as settings_router
from api.tools import router as tools_router
from api.canned_responses import router as canned_responses_router
from api.action_items import router as action_items_router
from api.automations import router as automations_router
from api.time_saved import router as time_saved_router
from api.achievements import router as achievements_router
from api.accessibility import router as accessibility_router
from api.slack import router as slack_router
from services.seed_service import seed_demo_data
from services.slack_service import MessageSender, SimulatedSlackSender

logger = logging.getLogger(__name__)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"message": "Invalid input data", "errors": jsonable_encoder(exc.errors())},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


def create_app(
    storage: Storage | None = None,
    *,
    draft_provider: DraftProvider | None = None,
    message_sender: MessageSender | None = None,
    seed: bool | None = None,
    demo_auto_login: bool | None = None,
) -> FastAPI:
    """Build the API around an entity store and its integrations.

    Anything not passed in is built from ``settings``; a fresh ``Storage`` is
    created (and seeded when ``SEED_DEMO_DATA`` is on) if none is given.
    """
    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    settings.validate_security_configuration()

    if storage is None:
        storage = Storage()
    if draft_provider is None:
        draft_provider = get_provider(settings.AI_PROVIDER, latency_scale=settings.SIMULATED_LATENCY_SCALE)
    if message_sender is None:
        message_sender = SimulatedSlackSender(latency_scale=settings.SIMULATED_LATENCY_SCALE)
    if seed is None:
        seed = settings.SEED_DEMO_DATA
    if demo_auto_login is None:
        demo_auto_login = settings.DEMO_AUTO_LOGIN

    if seed:
        seed_demo_data(storage, password=settings.DEMO_USER_PASSWORD)

    app = FastAPI(title=settings.APP_NAME, version="1.0.0")
    app.state.storage = storage
    app.state.draft_provider = draft_provider
    app.state.message_sender = message_sender
    app.state.demo_auto_login = demo_auto_login

    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)
        if not settings.SECURITY_HEADERS_ENABLED:
            return response
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Permissions-Policy"] = "camera=(), microphone=(), geolocation=()"
        response.headers["Content-Security-Policy"] = settings.SECURITY_CSP
        return response

    @app.middleware("http")
    async def request_timing_middleware(request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            if request.url.path.startswith("/api"):
                logger.debug(
                    "%s %s -> %s in %.1fms",
                    request.method,
                    request.url.path,
                    status_code,
                    (time.perf_counter() - started) * 1000.0,
                )

    # Routers
    app.include_router(auth_router, prefix="/api")
    app.include_router(settings_router, prefix="/api")
    app.include_router(tools_router, prefix="/api")
    app.include_router(canned_responses_router, prefix="/api")
    app.include_router(action_items_router, prefix="/api")
    app.include_router(automations_router, prefix="/api")
    app.include_router(time_saved_router, prefix="/api")
    app.include_router(achievements_router, prefix="/api")
    app.include_router(accessibility_router, prefix="/api")
    app.include_router(slack_router, prefix="/api")

    @app.get("/api/health")
    def health_check():
        return {"status": "ok", "app": settings.APP_NAME}

    # Serve frontend static files (in production)
    static_dir = Path(__file__).parent / "static"
    if static_dir.exists():
        app.mount("/", StaticFiles(directory=str(static_dir), html=True), name="static")

    return app


app = create_app()
