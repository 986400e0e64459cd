from datetime import date as date_type, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from duofit.schemas.food import InlineFood


class MealItemCreate(BaseModel):
    """
    One line of a meal. A positive food_id references the catalog; zero or a
    negative (transient) id means the inline `food` is created on save.
    """
    food_id: int = 0
    quantity: float
    unit: str
    food: Optional[InlineFood] = None


class MealCreate(BaseModel):
    user_id: int
    slot: str
    items: List[MealItemCreate]
    date: Optional[date_type] = None


class MealItemQuantityUpdate(BaseModel):
    quantity: float


class MealItemRead(BaseModel):
    id: int
    food_id: int
    food_name: str
    quantity: float
    unit: str
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float

    model_config = ConfigDict(from_attributes=True)


class MealRead(BaseModel):
    id: int
    user_id: int
    slot: str
    eaten_at: datetime
    total_calories: float
    total_protein_g: float
    total_carbs_g: float
    total_fat_g: float
    items: List[MealItemRead] = Field(default_factory=list)

    model_config = ConfigDict(from_attributes=True)


class DayMeals(BaseModel):
    user_id: int
    date: date_type
    meals: List[MealRead]
