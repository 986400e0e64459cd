from datetime import date as date_type
from typing import Optional

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from duofit.core.clock import CivilClock
from duofit.deps import get_clock, get_db
from duofit.schemas.meal import DayMeals, MealCreate, MealItemQuantityUpdate, MealItemRead, MealRead
from duofit.services import meals as meal_service
from duofit.services.users import get_user

router = APIRouter(tags=["meals"])


@router.post("/meals", response_model=MealRead, status_code=201)
def create_meal(
    meal_in: MealCreate,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    """
    Log a meal for `date` (today when omitted). Each line references a
    catalog food by positive food_id or carries an inline food to create.
    """
    return meal_service.save_meal(
        db,
        meal_in.user_id,
        meal_in.slot,
        meal_in.items,
        day=meal_in.date,
        clock=clock,
    )


@router.get("/meals/{user_id}/{day}", response_model=DayMeals)
def list_day_meals(
    user_id: int,
    day: date_type,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    get_user(db, user_id)
    meals = meal_service.list_meals_for_day(db, user_id, day, clock)
    return DayMeals(user_id=user_id, date=day, meals=meals)


@router.delete("/meals/{meal_id}", status_code=204)
def delete_meal(
    meal_id: int,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    meal_service.delete_meal(db, meal_id, clock)
    return Response(status_code=204)


@router.delete("/meal-items/{item_id}", response_model=Optional[MealRead])
def delete_meal_item(
    item_id: int,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    """Returns the remaining meal, or null when its last item was removed."""
    return meal_service.delete_meal_item(db, item_id, clock)


@router.patch("/meal-items/{item_id}", response_model=MealItemRead)
def update_meal_item(
    item_id: int,
    update: MealItemQuantityUpdate,
    db: Session = Depends(get_db),
    clock: CivilClock = Depends(get_clock),
):
    return meal_service.update_item_quantity(db, item_id, update.quantity, clock)
