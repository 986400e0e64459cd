import logging
from typing import List

from sqlalchemy.orm import Session

from duofit.core.config import settings
from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.user import User
from duofit.schemas.user import GoalsUpdate, UserCreate

logger = logging.getLogger(__name__)


def get_user(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError(f"User {user_id} not found")
    return user


def list_users(db: Session) -> List[User]:
    return db.query(User).order_by(User.id.asc()).all()


def create_user(db: Session, payload: UserCreate) -> User:
    """Register one of the two competitors. Commits."""
    name = (payload.name or "").strip()
    if not name:
        raise ValidationError("User name cannot be empty")
    if db.query(User).count() >= settings.max_users:
        raise ValidationError(f"DuoFit supports at most {settings.max_users} users")

    user = User(
        name=name,
        color=payload.color,
        avatar=payload.avatar,
        calorie_goal=payload.calorie_goal or settings.default_calorie_goal,
        protein_goal_g=payload.protein_goal_g if payload.protein_goal_g is not None else settings.default_protein_goal,
        carbs_goal_g=payload.carbs_goal_g if payload.carbs_goal_g is not None else settings.default_carbs_goal,
        fat_goal_g=payload.fat_goal_g if payload.fat_goal_g is not None else settings.default_fat_goal,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[USERS] Created user id={user.id} name={user.name!r}")
    return user


def update_goals(db: Session, user_id: int, payload: GoalsUpdate) -> User:
    """
    Change a user's goals. Stored days keep their goal snapshot until the
    next full recompute of that day. Commits.
    """
    user = get_user(db, user_id)
    for field in ("calorie_goal", "protein_goal_g", "carbs_goal_g", "fat_goal_g"):
        value = getattr(payload, field)
        if value is not None:
            setattr(user, field, value)
    db.commit()
    db.refresh(user)
    logger.info(f"[USERS] Updated goals user_id={user.id} calorie_goal={user.calorie_goal}")
    return user
