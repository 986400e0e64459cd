import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from duofit.api import days, exercises, foods, meals, users
from duofit.core.config import settings
from duofit.core.errors import (
    ConsistencyViolation,
    ExternalServiceError,
    NotFoundError,
    ValidationError,
)

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="DuoFit API")


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(ExternalServiceError)
async def external_error_handler(request: Request, exc: ExternalServiceError):
    logger.warning(f"[API] External service error on {request.url.path}: {exc}")
    return JSONResponse(status_code=502, content={"detail": str(exc)})


@app.exception_handler(ConsistencyViolation)
async def consistency_handler(request: Request, exc: ConsistencyViolation):
    logger.error(f"[API] Consistency violation on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={"detail": "Stored totals are inconsistent; run POST /repair", "violation": str(exc)},
    )


@app.get("/health")
async def health_check():
    return {
        "status": "ok",
        "app": "DuoFit",
        "db_url_present": bool(settings.database_url),
        "timezone": settings.timezone,
    }


app.include_router(users.router)
app.include_router(foods.router)
app.include_router(meals.router)
app.include_router(exercises.router)
app.include_router(days.router)
