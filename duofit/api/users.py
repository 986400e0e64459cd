from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from duofit.deps import get_db
from duofit.schemas.user import GoalsUpdate, UserCreate, UserRead
from duofit.services import users as user_service

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(user_in: UserCreate, db: Session = Depends(get_db)):
    return user_service.create_user(db, user_in)


@router.get("", response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return user_service.list_users(db)


@router.get("/{user_id}", response_model=UserRead)
def get_user(user_id: int, db: Session = Depends(get_db)):
    return user_service.get_user(db, user_id)


@router.patch("/{user_id}/goals", response_model=UserRead)
def update_goals(user_id: int, goals: GoalsUpdate, db: Session = Depends(get_db)):
    """New goals apply to a stored day on its next full recompute."""
    return user_service.update_goals(db, user_id, goals)
