"""
OpenFoodFacts client for food search by name.
"""
import logging
from typing import List, Optional

import httpx

from duofit.core.cache import ResponseCache
from duofit.core.errors import ExternalServiceError
from duofit.schemas.food import FoodCandidate, ReferenceQuantityFood

logger = logging.getLogger(__name__)

OPENFOODFACTS_API_BASE = "https://world.openfoodfacts.org"
PAGE_SIZE = 30


def normalize_product(product: dict) -> Optional[FoodCandidate]:
    """
    Per-100 g candidate from an OpenFoodFacts product, or None when the
    product has no energy-kcal_100g value.
    """
    if not isinstance(product, dict):
        return None
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        return None
    calories = nutriments.get("energy-kcal_100g")
    if not calories:
        return None

    try:
        food = ReferenceQuantityFood(
            name=str(product.get("product_name") or "").strip() or "Unnamed food",
            calories=round(float(calories)),
            protein_g=round(float(nutriments.get("proteins_100g") or 0), 1),
            carbs_g=round(float(nutriments.get("carbohydrates_100g") or 0), 1),
            fat_g=round(float(nutriments.get("fat_100g") or 0), 1),
        )
    except (TypeError, ValueError, OverflowError) as e:
        # negative or malformed nutriments
        logger.debug(f"Skipping product {product.get('code')}: {e}")
        return None

    external_id = product.get("id") or product.get("_id") or product.get("code")
    return FoodCandidate(
        origin="OPEN_FOOD_FACTS",
        external_id=str(external_id) if external_id is not None else None,
        food=food,
    )


class OpenFoodFactsSearch:
    """Name search against OpenFoodFacts, cached by lowercase query."""

    def __init__(
        self,
        cache: ResponseCache,
        base_url: str = OPENFOODFACTS_API_BASE,
        timeout: float = 5.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.cache = cache
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport

    async def _fetch(self, query: str) -> List[dict]:
        url = f"{self.base_url}/cgi/search.pl"
        params = {
            "search_terms": query,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": PAGE_SIZE,
            "cc": "br",
            "lc": "pt",
        }
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(url, params=params)
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExternalServiceError(f"OpenFoodFacts search failed for {query!r}: {e}") from e

        if not isinstance(data, dict):
            raise ExternalServiceError(
                f"OpenFoodFacts returned {type(data).__name__} instead of an object for {query!r}"
            )
        products = data.get("products") or []
        if not isinstance(products, list):
            raise ExternalServiceError(f"OpenFoodFacts products is not a list for {query!r}")
        return [p for p in products if isinstance(p, dict)]

    async def search(self, query: str) -> List[FoodCandidate]:
        query = (query or "").strip()
        if not query:
            return []

        key = query.lower()
        cached = self.cache.get(key)
        if cached is not None:
            logger.debug(f"[OFF] Cache hit for {key!r}")
            return list(cached)

        try:
            products = await self._fetch(query)
        except ExternalServiceError as e:
            logger.warning(f"[OFF] {e}")
            return []

        candidates = [c for c in (normalize_product(p) for p in products) if c is not None]
        self.cache.set(key, candidates)
        logger.info(f"[OFF] {len(candidates)} candidate(s) for {query!r} ({len(products)} products)")
        return list(candidates)
