"""
User Service - OTP-gated sign-up, sign-in and JWT sessions
"""
from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from .config import get_settings, warn_on_insecure_defaults
from .db import init_db
from .routes import health, users
from .utils.logging_setup import configure_logging
from .validation import error_label, format_validation_errors

settings = get_settings()
configure_logging(settings)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Check configuration and initialize database on startup"""
    warn_on_insecure_defaults(get_settings())
    init_db()
    yield


app = FastAPI(
    title="User Service",
    description="OTP-gated sign-up, sign-in and JWT sessions",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(users.router)
app.include_router(health.router)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    return JSONResponse(
        status_code=422,
        content={"message": error_label(errors), "details": format_validation_errors(errors)},
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    status_code = exc.status_code if 400 <= exc.status_code < 600 else 500
    return JSONResponse(
        status_code=status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal server error"})


if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
