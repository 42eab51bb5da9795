import time
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.responses import PlainTextResponse

from changemakers_api.api.envelope import error_response
from changemakers_api.api.routers import main_router
from changemakers_api.core.config import settings
from changemakers_api.core.exceptions import AppError, ValidationError
from changemakers_api.core.loguru_logger import setup_logging
from changemakers_api.db.db_helper import db_helper as db_lifespan

GREETING = "Together, Make Bangladesh Great!"

setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # startup
    await db_lifespan.ping()
    if settings.db.create_tables:
        await db_lifespan.create_tables()
    logger.info(f"ChangeMakers backend listening on port {settings.run.port}")

    yield

    # shutdown
    logger.info("dispose db engine")
    await db_lifespan.dispose()

main_app = FastAPI(title="ChangeMakers Backend", lifespan=lifespan)
main_app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
main_app.include_router(
    main_router,
    prefix=settings.api.prefix,
    responses={404: {"description": "Not found"}},
)


@main_app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.error}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.error}")
    return error_response(exc)


@main_app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    error = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()))}: {err.get('msg')}"
        for err in exc.errors()
    )
    return await app_error_handler(request, ValidationError(error or "Invalid request body"))


@main_app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else "Request failed"
    return await app_error_handler(
        request, AppError(detail, message=detail, status_code=exc.status_code)
    )


@main_app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - start_time
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} "
        f"({round(elapsed * 1000, 2)} ms)"
    )
    return response


@main_app.get("/", response_class=PlainTextResponse)
async def root():
    """Liveness route."""
    return GREETING


if __name__ == "__main__":
    uvicorn.run("main:main_app",
                host=settings.run.host,
                port=settings.run.port,
                reload=settings.run.reload
    )
