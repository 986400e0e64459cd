from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class FoodCreate(BaseModel):
    """Nutrition per reference quantity (100 g/ml, or one count unit)."""
    name: str
    calories: float = Field(0, ge=0)
    protein_g: float = Field(0, ge=0)
    carbs_g: float = Field(0, ge=0)
    fat_g: float = Field(0, ge=0)

    model_config = ConfigDict(allow_inf_nan=False)


class FoodRead(BaseModel):
    id: int
    name: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float

    model_config = ConfigDict(from_attributes=True)


class ReferenceQuantityFood(FoodCreate):
    """Inline food whose values are per reference quantity (search results, manual entry)."""
    basis: Literal["reference"] = "reference"


class ScaledQuantityFood(FoodCreate):
    """Inline food whose values are already totals for the logged quantity (photo analysis)."""
    basis: Literal["scaled"] = "scaled"


InlineFood = Annotated[
    Union[ReferenceQuantityFood, ScaledQuantityFood],
    Field(discriminator="basis"),
]


class FoodCandidate(BaseModel):
    origin: Literal["LOCAL", "OPEN_FOOD_FACTS", "PHOTO"]
    food_id: Optional[int] = None
    external_id: Optional[str] = None
    food: InlineFood
    # detected portion, photo candidates only
    quantity: Optional[float] = None
    unit: Optional[str] = None


class FoodSearchResponse(BaseModel):
    items: List[FoodCandidate]
