import json
import logging

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from sqlalchemy.orm import Session

from urlshortener.core.config import settings
from urlshortener.core.exceptions import ValidationError
from urlshortener.db.Connection import database
from urlshortener.db.Models.models import URLItem
from urlshortener.db.repository import URLRepository
from urlshortener.schemas import URLInfoResponse, URLStatsResponse
from urlshortener.services.lifecycle import LifecycleManager
from urlshortener.services.RedisURLCache import RedisURLCache
from urlshortener.services.shortener import URLService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")


def get_url_service(db: Session = Depends(database.get_db)) -> URLService:
    cache = RedisURLCache(database.redis_client, settings.CACHE_TTL) if settings.CACHE_ENABLED else None
    return URLService(
        URLRepository(db),
        lifecycle=LifecycleManager(settings.RETENTION_MONTHS),
        cache=cache,
        base_url=settings.BASE_URL,
        max_probes=settings.MAX_PROBES,
        max_insert_retries=settings.MAX_INSERT_RETRIES,
    )


async def read_url_body(request: Request) -> str:
    """Accept the URL as raw text, a JSON string, or a JSON object with a 'url' key."""
    try:
        text = (await request.body()).decode("utf-8")
    except UnicodeDecodeError:
        raise ValidationError("malformed", "Request body is not valid UTF-8")
    if "json" not in request.headers.get("content-type", ""):
        return text
    try:
        payload = json.loads(text)
    except ValueError:
        return text
    if isinstance(payload, dict):
        payload = payload.get("url")
    return "" if payload is None else str(payload)


def _info_response(service: URLService, db_url: URLItem) -> URLInfoResponse:
    return URLInfoResponse(
        id=str(db_url.id),
        url=service.short_url(db_url.short_code),
        original_url=db_url.original_url,
        short_code=db_url.short_code,
        created_at=db_url.created_at,
        updated_at=db_url.updated_at,
        expires_at=db_url.expires_at,
    )


@router.get("/health", response_class=PlainTextResponse, tags=["health"])
def health_check():
    return "Application is running"


@router.get("/ready", tags=["health"])
def readiness():
    details = {
        "db": "ok" if database.verify_database_connection() else "error",
        "redis": "disabled",
    }
    if settings.CACHE_ENABLED:
        details["redis"] = "ok" if database.verify_redis_connection() else "error"
    ready = details["db"] == "ok" and details["redis"] != "error"
    return {"ready": ready, "details": details}


@router.post("/shorten", response_model=URLInfoResponse, responses={200: {"model": URLInfoResponse}})
def shorten_url_endpoint(long_url: str = Depends(read_url_body), service: URLService = Depends(get_url_service)):
    logger.info("Received URL to shorten: %s", long_url[:50])
    db_url, created = service.create_short_url(long_url)
    body = _info_response(service, db_url)
    return JSONResponse(
        status_code=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        content=body.model_dump(mode="json", by_alias=True),
    )


@router.put("/shorten/{short_code}", response_model=URLInfoResponse)
def update_url_endpoint(short_code: str, long_url: str = Depends(read_url_body), service: URLService = Depends(get_url_service)):
    logger.info("Updating URL for short code: %s", short_code)
    db_url = service.update_short_url(short_code, long_url)
    return _info_response(service, db_url)


@router.delete("/shorten/{short_code}", status_code=status.HTTP_204_NO_CONTENT)
def delete_url_endpoint(short_code: str, service: URLService = Depends(get_url_service)):
    service.delete_short_url(short_code)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/shorten/{short_code}/stats", response_model=URLStatsResponse)
def get_url_statistics_endpoint(short_code: str, service: URLService = Depends(get_url_service)):
    db_url = service.get_url_stats(short_code)
    return URLStatsResponse(
        id=str(db_url.id),
        original_url=db_url.original_url,
        short_code=db_url.short_code,
        created_at=db_url.created_at,
        updated_at=db_url.updated_at,
        expires_at=db_url.expires_at,
        access_count=db_url.access_count or 0,
    )


@router.get("/{short_code}", tags=["redirect"])
def redirect_to_url_endpoint(short_code: str, service: URLService = Depends(get_url_service)):
    target = service.redirect(short_code)
    return RedirectResponse(url=target, status_code=status.HTTP_302_FOUND)
