import logging
import os
from collections.abc import Awaitable, Callable
from pathlib import Path

from dotenv import load_dotenv
from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_500_INTERNAL_SERVER_ERROR

load_dotenv()

from portfolio.database import Base, engine  # noqa: E402
from portfolio.logging_config import setup_logging  # noqa: E402
from portfolio.routers.gallery import router as gallery_router  # noqa: E402
from portfolio.routers.photos import router as photos_router  # noqa: E402
from portfolio.schemas import ErrorResponse  # noqa: E402

setup_logging()
logger = logging.getLogger(__name__)

# Ensure database tables exist
Base.metadata.create_all(bind=engine)

STATIC_DIR = Path(__file__).resolve().parent / "static"
API_PREFIX = "/api/"


class ErrorEnvelopeMiddleware(BaseHTTPMiddleware):
    """Convert exceptions escaping API handlers into the JSON error envelope.
    Handlers map the failures they expect themselves; this catches the rest,
    such as a dependency that cannot be constructed."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            if not request.url.path.startswith(API_PREFIX):
                raise
            logger.exception("Unhandled error for %s %s", request.method, request.url.path)
            return JSONResponse(
                status_code=HTTP_500_INTERNAL_SERVER_ERROR,
                content=ErrorResponse(error=str(exc) or "Internal server error").model_dump(),
            )


def validation_message(exc: RequestValidationError) -> str:
    """Flatten request validation errors into one ``field: message`` line."""
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ())[1:])
        message = error.get("msg", "Invalid request")
        parts.append(f"{field}: {message}" if field else message)
    return "; ".join(parts) or "Invalid request"


async def validation_error_handler(request: Request, exc: RequestValidationError) -> Response:
    if not request.url.path.startswith(API_PREFIX):
        return await request_validation_exception_handler(request, exc)
    message = validation_message(exc)
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error=message).model_dump(),
    )


def mount_media(application: FastAPI) -> None:
    """Serve filesystem blobs when MEDIA_URL is a local path."""
    media_url = os.getenv("MEDIA_URL", "/media").rstrip("/")
    if not media_url.startswith("/"):
        return
    media_root = Path(os.getenv("MEDIA_ROOT", "./media"))
    media_root.mkdir(parents=True, exist_ok=True)
    application.mount(media_url, StaticFiles(directory=media_root), name="media")


app = FastAPI(title="Photo Portfolio")

app.add_middleware(ErrorEnvelopeMiddleware)
app.add_exception_handler(RequestValidationError, validation_error_handler)

app.include_router(photos_router)
app.include_router(gallery_router)

app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")
mount_media(app)

__all__ = [
    "ErrorEnvelopeMiddleware",
    "app",
]
