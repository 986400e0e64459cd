import base64
import json
import logging
import math
from typing import List, Optional

from anyio import to_thread
from openai import OpenAI, OpenAIError

from duofit.core.errors import ExternalServiceError
from duofit.schemas.food import FoodCandidate, ScaledQuantityFood

logger = logging.getLogger(__name__)

PROMPT = (
    "You are a nutritionist analysing a photo of a meal. Identify every visible food. "
    "For each one give: name (specific, e.g. 'french fries' not 'potato'), "
    "quantity (estimated grams from the visual size), unit (always \"g\"), "
    "calories, protein_g, carbs_g and fat_g as TOTALS for that quantity, not per 100 g. "
    "Respond only with JSON: {\"items\": [{\"name\": str, \"quantity\": number, "
    "\"unit\": \"g\", \"calories\": number, \"protein_g\": number, "
    "\"carbs_g\": number, \"fat_g\": number}]}"
)


def _strip_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```json"):
        text = text[7:]
    elif text.startswith("```"):
        text = text[3:]
    if text.endswith("```"):
        text = text[:-3]
    return text.strip()


def parse_items(content: str) -> List[FoodCandidate]:
    """Candidates from the model's JSON answer. Malformed items are skipped."""
    try:
        payload = json.loads(_strip_fences(content or "{}"))
    except json.JSONDecodeError as e:
        raise ExternalServiceError(f"Photo analysis returned invalid JSON: {e}") from e

    items = payload.get("items") if isinstance(payload, dict) else None
    if not isinstance(items, list):
        items = []
    candidates: List[FoodCandidate] = []
    for record in items:
        if not isinstance(record, dict):
            continue
        try:
            quantity = float(record.get("quantity") or 0)
            if not math.isfinite(quantity) or quantity <= 0:
                continue
            food = ScaledQuantityFood(
                name=str(record.get("name") or "").strip(),
                calories=float(record.get("calories") or 0),
                protein_g=float(record.get("protein_g") or 0),
                carbs_g=float(record.get("carbs_g") or 0),
                fat_g=float(record.get("fat_g") or 0),
            )
        except (TypeError, ValueError) as e:
            logger.debug(f"[PHOTO] Skipping item {record!r}: {e}")
            continue
        if not food.name:
            continue
        candidates.append(FoodCandidate(origin="PHOTO", food=food, quantity=quantity, unit="g"))
    return candidates


class PhotoAnalyzer:
    """Meal photo to portion-scaled food candidates through an OpenAI vision model."""

    def __init__(self, api_key: Optional[str], model: str = "gpt-4o-mini", timeout: float = 30.0):
        self.model = model
        self._client = OpenAI(api_key=api_key, timeout=timeout) if api_key else None

    @property
    def available(self) -> bool:
        return self._client is not None

    async def analyze(self, image_bytes: bytes, content_type: str = "image/jpeg") -> List[FoodCandidate]:
        if self._client is None:
            logger.warning("[PHOTO] OPENAI_API_KEY not configured, skipping analysis")
            return []
        if not image_bytes:
            return []

        encoded = base64.b64encode(image_bytes).decode("ascii")
        mime = content_type if (content_type or "").startswith("image/") else "image/jpeg"

        def _call():
            return self._client.chat.completions.create(
                model=self.model,
                temperature=0,
                response_format={"type": "json_object"},
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": PROMPT},
                            {"type": "image_url", "image_url": {"url": f"data:{mime};base64,{encoded}"}},
                        ],
                    }
                ],
            )

        try:
            resp = await to_thread.run_sync(_call)
            if not resp.choices:
                raise ExternalServiceError("Photo analysis returned no choices")
            content = resp.choices[0].message.content or "{}"
            candidates = parse_items(content)
        except (OpenAIError, ExternalServiceError) as e:
            logger.warning(f"[PHOTO] Analysis failed: {e}")
            return []

        logger.info(f"[PHOTO] Analyzed {len(image_bytes)} bytes, found {len(candidates)} food(s)")
        return candidates
