from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserCreate(BaseModel):
    name: str
    color: str = "YELLOW"
    avatar: Optional[str] = None
    calorie_goal: Optional[float] = Field(default=None, gt=0)
    protein_goal_g: Optional[float] = Field(default=None, ge=0)
    carbs_goal_g: Optional[float] = Field(default=None, ge=0)
    fat_goal_g: Optional[float] = Field(default=None, ge=0)


class GoalsUpdate(BaseModel):
    calorie_goal: Optional[float] = Field(default=None, gt=0)
    protein_goal_g: Optional[float] = Field(default=None, ge=0)
    carbs_goal_g: Optional[float] = Field(default=None, ge=0)
    fat_goal_g: Optional[float] = Field(default=None, ge=0)


class UserRead(BaseModel):
    id: int
    name: str
    color: str
    avatar: Optional[str] = None
    calorie_goal: float
    protein_goal_g: float
    carbs_goal_g: float
    fat_goal_g: float
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
