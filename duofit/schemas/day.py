from datetime import date
from typing import List, Optional

from pydantic import BaseModel, ConfigDict


class DailyNutritionRead(BaseModel):
    user_id: int
    date: date
    calories: float
    protein_g: float
    carbs_g: float
    fat_g: float
    goal_calories: float
    goal_met: bool
    invalid: bool

    model_config = ConfigDict(from_attributes=True)


class DailyPointsRead(BaseModel):
    user_id: int
    date: date
    exercise_points: int = 0
    calorie_points: int = 0
    total_points: int = 0

    model_config = ConfigDict(from_attributes=True)


class DaySummary(BaseModel):
    nutrition: DailyNutritionRead
    points: DailyPointsRead


class InvalidDayUpdate(BaseModel):
    invalid: bool


class StreakRead(BaseModel):
    user_id: int
    current: int = 0
    longest: int = 0
    last_date: Optional[date] = None

    model_config = ConfigDict(from_attributes=True)


class UserMonth(BaseModel):
    user_id: int
    name: str
    color: str
    diet_days: int
    training_days: int
    exercise_minutes: int
    exercise_sessions: int
    total_points: int


class MonthlySummary(BaseModel):
    year: int
    month: int
    days_in_month: int
    users: List[UserMonth]


class RepairReport(BaseModel):
    days_checked: int
    days_fixed: int
    violations: List[str]
