from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from .auth import routers as auth_router
from .chat import routers as chat_router
from .match import routers as match_router
from .profiles import routers as profile_router
from .admin import routers as admin_router

from .core.config import get_settings
from .core.errors import AppError, InvalidRequest
from .core.middleware import logging_middleware
from .utils.logging_config import setup_logging


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


def describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        parts.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(parts)


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed or missing request bodies and parameters are plain 400s."""
    error = InvalidRequest("Invalid request body.", describe_validation_errors(exc))
    return JSONResponse(status_code=error.status_code, content=error.to_dict())


def create_app() -> FastAPI:
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(title="SoulMatch API")
    app.include_router(auth_router.router, prefix="/auth", tags=["Authentication"])
    app.include_router(chat_router.router, prefix="/messages", tags=["Messages"])
    app.include_router(match_router.router, prefix="/match", tags=["Match"])
    app.include_router(profile_router.router, prefix="/profile", tags=["Profile"])
    app.include_router(admin_router.router, prefix="/admin", tags=["Admin"])

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.middleware("http")(logging_middleware)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app


app = create_app()
