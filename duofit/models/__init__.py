from duofit.db.base import Base

# Model imports so Alembic sees every table
from duofit.models.user import User  # noqa
from duofit.models.food_item import FoodItem  # noqa
from duofit.models.meal import Meal, MealItem  # noqa
from duofit.models.daily_nutrition import DailyNutrition  # noqa
from duofit.models.daily_points import DailyPoints  # noqa
from duofit.models.exercise import Exercise  # noqa
from duofit.models.streak import Streak  # noqa
