from datetime import date as date_type, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ExerciseCreate(BaseModel):
    user_id: int
    type: str
    name: str
    duration_min: int
    description: Optional[str] = None
    date: Optional[date_type] = None


class ExerciseUpdate(BaseModel):
    type: Optional[str] = None
    name: Optional[str] = None
    duration_min: Optional[int] = None
    description: Optional[str] = None


class ExerciseRead(BaseModel):
    id: int
    user_id: int
    type: str
    name: str
    description: Optional[str] = None
    duration_min: int
    points: int
    performed_at: datetime

    model_config = ConfigDict(from_attributes=True)
