from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn
from loguru import logger

from vidtube.api import api_router
from vidtube.core.config import AppSettings, DatabaseSettings
from vidtube.core.errors import ApiError
from vidtube.db.database import dispose_engine, init_models
from vidtube.utils.responses import error_response


def get_app_settings() -> AppSettings:
    try:
        return AppSettings()
    except Exception as e:
        logger.error(f"Error loading settings: {e}")
        raise

def setup_logging():
    settings = get_app_settings()
    logger.add(
        settings.log_file,
        rotation=settings.log_rotation,
        compression=settings.log_compression.value,
        format=settings.log_format,
        level=settings.app_log_level.value.upper(),
    )

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application starting...")
    if DatabaseSettings().create_tables:
        await init_models()
        logger.info("Database tables ensured")
    yield
    logger.info("Application shutting down...")
    await dispose_engine()

def register_exception_handlers(app: FastAPI):
    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} -> {exc.status_code}: {exc.message}")
        return error_response(exc.status_code, exc.message, exc.errors)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.info(f"{request.method} {request.url.path} -> 400: invalid input")
        return error_response(400, "Invalid input", exc.errors())

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return error_response(500, "Internal server error")

def create_app():
    settings = get_app_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Video sharing platform API",
        version="1.0.0",
        lifespan=lifespan,
    )
    setup_logging()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.get("/")
    def read_root():
        return {"message": "Welcome to VidTube"}

    app.include_router(api_router, prefix=settings.api_prefix)

    return app

app = create_app()

if __name__ == "__main__":
    settings = get_app_settings()
    uvicorn.run(
        "vidtube.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=settings.app_reload,
    )
