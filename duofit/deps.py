from collections.abc import Generator
from functools import lru_cache

from sqlalchemy.orm import Session

from duofit.core.cache import ResponseCache
from duofit.core.clock import CivilClock, get_default_clock
from duofit.core.config import settings
from duofit.db.session import SessionLocal
from duofit.external.openfoodfacts_client import OpenFoodFactsSearch
from duofit.external.photo_analyzer import PhotoAnalyzer


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_clock() -> CivilClock:
    return get_default_clock()


@lru_cache()
def get_food_search() -> OpenFoodFactsSearch:
    cache = ResponseCache(
        max_entries=settings.search_cache_size,
        ttl_seconds=settings.search_cache_ttl_seconds,
    )
    return OpenFoodFactsSearch(
        cache,
        base_url=settings.openfoodfacts_base_url,
        timeout=settings.external_timeout_seconds,
    )


@lru_cache()
def get_photo_analyzer() -> PhotoAnalyzer:
    return PhotoAnalyzer(
        api_key=settings.openai_api_key,
        model=settings.vision_model,
        timeout=settings.external_timeout_seconds * 6,
    )
