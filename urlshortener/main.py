from contextlib import asynccontextmanager, suppress
import asyncio
import signal, sys

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from urlshortener.core.config import settings
from urlshortener.core.exceptions import GenerationExhausted, NotFoundError, StoreError, ValidationError
from urlshortener.core.logging_config import configure_logging
from urlshortener.db.Connection import database
from urlshortener.db.Models import models
from urlshortener.schemas import ErrorResponse
from urlshortener.api import shortener
from urlshortener.services.sweeper import ExpirySweeper

logger = configure_logging()
logger.info(f"Application '{settings.PROJECT_NAME}' starting up.")

models.Base.metadata.create_all(bind=database.engine)
logger.info("Database models initialized/checked.")


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = None
    if settings.SWEEP_INTERVAL_SECONDS > 0:
        sweeper = ExpirySweeper(database.SessionLocal, settings.SWEEP_INTERVAL_SECONDS)
        task = asyncio.create_task(sweeper.run())
    yield
    if task is not None:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task
        logger.info("Expiry sweeper stopped")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="URL Shortener Service with expiring short codes",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(shortener.router)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError):
    logger.warning(f"Validation error on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ErrorResponse(error="Validation Error", message=exc.message, reason=exc.reason).model_dump(),
    )

@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    logger.warning(f"404: Short code not found: {exc.short_code}")
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": "URL not found"})

@app.exception_handler(GenerationExhausted)
async def generation_exhausted_handler(request: Request, exc: GenerationExhausted):
    logger.error(f"Short code generation exhausted: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Could not allocate a short code"})

@app.exception_handler(StoreError)
async def store_exception_handler(request: Request, exc: StoreError):
    logger.error(f"Store error: {exc}", exc_info=True)
    return JSONResponse(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, content={"detail": "Storage unavailable"})

@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})


def _shutdown(signum, frame):
    logger.info(f"Received {signal.Signals(signum).name}, closing connections")
    database.close_connections()
    sys.exit(0)

signal.signal(signal.SIGTERM, _shutdown)
signal.signal(signal.SIGINT, _shutdown)
