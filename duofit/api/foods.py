import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from duofit.deps import get_db, get_food_search, get_photo_analyzer
from duofit.external.openfoodfacts_client import OpenFoodFactsSearch
from duofit.external.photo_analyzer import PhotoAnalyzer
from duofit.schemas.food import FoodCreate, FoodRead, FoodSearchResponse
from duofit.services import food_ledger

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/foods", tags=["foods"])


@router.get("/search", response_model=FoodSearchResponse)
async def search_foods(
    query: str = Query("", description="Food name, at least 2 characters"),
    db: Session = Depends(get_db),
    search: OpenFoodFactsSearch = Depends(get_food_search),
):
    """Local catalog first, then OpenFoodFacts, deduplicated by name."""
    items = await food_ledger.lookup_by_name(db, query, external=search)
    return FoodSearchResponse(items=items)


@router.post("", response_model=FoodRead, status_code=201)
def create_food(food_in: FoodCreate, db: Session = Depends(get_db)):
    return food_ledger.create_food(db, food_in)


@router.post("/transient", response_model=FoodRead)
def create_transient_food(food_in: FoodCreate):
    """Food with a negative id, persisted only when a meal using it is saved."""
    return food_ledger.create_transient(food_in)


@router.post("/analyze-photo", response_model=FoodSearchResponse)
async def analyze_photo(
    photo: UploadFile = File(...),
    analyzer: PhotoAnalyzer = Depends(get_photo_analyzer),
):
    """
    Foods detected in a meal photo. Values are totals for the detected
    portion; send them back as `scaled` inline foods when saving the meal.
    """
    try:
        image_bytes = await photo.read()
    except Exception as e:
        logger.error(f"[PHOTO] Error reading upload: {e}")
        raise HTTPException(status_code=400, detail="Could not read the photo")

    if not image_bytes:
        raise HTTPException(status_code=400, detail="Empty photo")

    items = await analyzer.analyze(image_bytes, photo.content_type or "image/jpeg")
    return FoodSearchResponse(items=items)
