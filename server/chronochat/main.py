import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from .config import get_settings
from fastapi import APIRouter

# API routers
from .api.v1.chat import router as chat_router
from .api.v1.conversations import router as conversations_router
from .api.v1.points import router as points_router
from .core.errors import ChatError
from .core.logging import setup_logging
from .db.session import close_db, init_db

logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    settings = get_settings()
    # Setup logging early
    setup_logging(settings.log_level)
    app = FastAPI(title="ChronoChat Server", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
    )

    @app.exception_handler(ChatError)
    async def _chat_error(request: Request, exc: ChatError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        first = exc.errors()[0] if exc.errors() else {}
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        detail = f"{field}: {first.get('msg')}" if field else "Invalid request body"
        return JSONResponse(status_code=400, content={"error": detail})

    # Mount API v1
    api_v1 = APIRouter()
    api_v1.include_router(chat_router, prefix="/v1")
    api_v1.include_router(conversations_router, prefix="/v1")
    api_v1.include_router(points_router, prefix="/v1")
    app.include_router(api_v1, prefix="/api")

    @app.on_event("startup")
    async def _startup() -> None:
        # Ensure tables exist
        await init_db()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        await close_db()

    @app.get("/healthz")
    def healthz():
        return {"status": "ok"}

    @app.get("/")
    def root():
        return {"service": "chronochat", "version": "0.1.0"}

    return app


def run() -> None:
    import uvicorn

    uvicorn.run("chronochat.main:app", host="0.0.0.0", port=get_settings().server_port)


app = create_app()
