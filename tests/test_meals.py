"""Tests for the meal aggregator."""

from datetime import date, datetime

import pytest
import pytz

from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.daily_nutrition import DailyNutrition
from duofit.models.food_item import FoodItem
from duofit.models.meal import Meal, MealItem
from duofit.schemas.meal import MealItemCreate
from duofit.services import daily_reconciler, meals, points_ledger
from tests.helpers import inline_line, line


def _day(db, user_id, day):
    return daily_reconciler.get_daily_nutrition(db, user_id, day)


class TestSaveMeal:
    def test_saves_items_and_cached_totals(self, db, clock, today, user_a, rice, egg):
        meal = meals.save_meal(db, user_a.id, "lunch", [line(rice, 150), line(egg, 2, "unit")], clock=clock)

        assert meal.slot == "LUNCH"
        assert len(meal.items) == 2
        assert meal.total_calories == pytest.approx(195 + 156)
        assert meal.items[0].food_name == "Arroz branco cozido"
        assert clock.date_key(meal.eaten_at) == today

        day = _day(db, user_a.id, today)
        assert day.calories == pytest.approx(351)
        assert day.goal_calories == 2000

    def test_requires_items(self, db, clock, user_a):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "LUNCH", [], clock=clock)

    def test_rejects_unknown_slot(self, db, clock, user_a, rice):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "brunch", [line(rice)], clock=clock)

    def test_unknown_unit_writes_nothing(self, db, clock, user_a, rice):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "LUNCH", [line(rice), line(rice, 1, "kg")], clock=clock)
        assert db.query(Meal).count() == 0
        assert db.query(DailyNutrition).count() == 0

    def test_unknown_user(self, db, clock, rice):
        with pytest.raises(NotFoundError):
            meals.save_meal(db, 99, "LUNCH", [line(rice)], clock=clock)

    def test_unknown_food(self, db, clock, user_a):
        with pytest.raises(NotFoundError):
            meals.save_meal(
                db, user_a.id, "LUNCH", [MealItemCreate(food_id=404, quantity=100, unit="g")], clock=clock
            )

    def test_non_positive_quantity(self, db, clock, user_a, rice):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "LUNCH", [line(rice, 0)], clock=clock)

    @pytest.mark.parametrize("quantity", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_quantity(self, db, clock, today, user_a, rice, quantity):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "LUNCH", [line(rice, quantity)], clock=clock)
        assert db.query(Meal).count() == 0
        assert _day(db, user_a.id, today).calories == 0

    def test_inline_reference_food_is_created(self, db, clock, user_a):
        meal = meals.save_meal(db, user_a.id, "SNACK", [inline_line("Açaí", 58, 300)], clock=clock)
        food = db.query(FoodItem).filter(FoodItem.name == "Açaí").one()
        assert food.calories == pytest.approx(58)
        assert meal.items[0].food_id == food.id
        assert meal.total_calories == pytest.approx(174)

    def test_inline_scaled_food_keeps_portion_totals(self, db, clock, user_a):
        meal = meals.save_meal(
            db, user_a.id, "DINNER", [inline_line("Batata frita", 468, 150, scaled=True)], clock=clock
        )
        assert meal.total_calories == pytest.approx(468)
        assert meal.items[0].food.calories == pytest.approx(312)

    def test_inline_line_needs_food_data(self, db, clock, user_a):
        with pytest.raises(ValidationError):
            meals.save_meal(db, user_a.id, "LUNCH", [MealItemCreate(food_id=-3, quantity=1, unit="g")], clock=clock)

    def test_backdated_meal_lands_on_its_day(self, db, clock, user_a, rice):
        past = date(2024, 3, 10)
        meal = meals.save_meal(db, user_a.id, "LUNCH", [line(rice)], day=past, clock=clock)
        assert clock.date_key(meal.eaten_at) == past
        assert _day(db, user_a.id, past).calories == pytest.approx(130)
        assert _day(db, user_a.id, date(2024, 3, 15)).calories == 0

    def test_late_evening_meal_belongs_to_civil_day(self, db, clock, frozen_now, user_a, rice):
        # 23:30 in Sao Paulo, already the next day in UTC
        frozen_now.set(datetime(2024, 3, 16, 2, 30, tzinfo=pytz.utc))
        meals.save_meal(db, user_a.id, "DINNER", [line(rice)], clock=clock)
        assert _day(db, user_a.id, date(2024, 3, 15)).calories == pytest.approx(130)
        assert _day(db, user_a.id, date(2024, 3, 16)).calories == 0
        assert len(meals.list_meals_for_day(db, user_a.id, date(2024, 3, 15), clock)) == 1


class TestEditMeal:
    def test_quantity_edits_do_not_compound(self, db, clock, today, user_a, rice):
        meal = meals.save_meal(db, user_a.id, "LUNCH", [line(rice, 100)], clock=clock)
        item_id = meal.items[0].id

        meals.update_item_quantity(db, item_id, 150, clock)
        item = meals.update_item_quantity(db, item_id, 80, clock)

        assert item.quantity == 80
        assert item.calories == pytest.approx(104)
        assert item.meal.total_calories == pytest.approx(104)
        assert _day(db, user_a.id, today).calories == pytest.approx(104)

    def test_quantity_must_be_positive(self, db, clock, user_a, rice):
        meal = meals.save_meal(db, user_a.id, "LUNCH", [line(rice)], clock=clock)
        with pytest.raises(ValidationError):
            meals.update_item_quantity(db, meal.items[0].id, 0, clock)

    @pytest.mark.parametrize("quantity", [float("nan"), float("inf")])
    def test_non_finite_quantity_leaves_line_untouched(self, db, clock, today, user_a, rice, quantity):
        meal = meals.save_meal(db, user_a.id, "LUNCH", [line(rice, 100)], clock=clock)
        item_id = meal.items[0].id

        with pytest.raises(ValidationError):
            meals.update_item_quantity(db, item_id, quantity, clock)

        item = db.get(MealItem, item_id)
        assert item.quantity == 100
        assert item.calories == pytest.approx(130)
        assert _day(db, user_a.id, today).calories == pytest.approx(130)

    def test_missing_item(self, db, clock):
        with pytest.raises(NotFoundError):
            meals.update_item_quantity(db, 1, 10, clock)

    def test_delete_item_updates_meal_and_day(self, db, clock, today, user_a, rice, egg):
        meal = meals.save_meal(db, user_a.id, "BREAKFAST", [line(rice), line(egg, 1, "unit")], clock=clock)
        egg_line = [i for i in meal.items if i.food_id == egg.id][0]

        remaining = meals.delete_meal_item(db, egg_line.id, clock)

        assert remaining is not None
        assert [i.food_id for i in remaining.items] == [rice.id]
        assert remaining.total_calories == pytest.approx(130)
        assert _day(db, user_a.id, today).calories == pytest.approx(130)

    def test_deleting_last_item_deletes_meal(self, db, clock, today, user_a, rice):
        meal = meals.save_meal(db, user_a.id, "BREAKFAST", [line(rice)], clock=clock)

        assert meals.delete_meal_item(db, meal.items[0].id, clock) is None
        assert db.query(Meal).count() == 0
        assert db.query(MealItem).count() == 0
        assert _day(db, user_a.id, today).calories == 0

    def test_delete_meal_cascades_and_recomputes(self, db, clock, today, user_a, rice, egg):
        first = meals.save_meal(db, user_a.id, "LUNCH", [line(rice), line(egg, 1, "unit")], clock=clock)
        meals.save_meal(db, user_a.id, "DINNER", [line(rice, 200)], clock=clock)

        meals.delete_meal(db, first.id, clock)

        assert db.query(Meal).count() == 1
        assert db.query(MealItem).count() == 1
        assert _day(db, user_a.id, today).calories == pytest.approx(260)

    def test_deleting_only_meal_withdraws_goal_and_points(self, db, clock, today, user_a, rice):
        meal = meals.save_meal(db, user_a.id, "LUNCH", [line(rice)], clock=clock)
        assert _day(db, user_a.id, today).goal_met is True
        assert points_ledger.get_daily_points(db, user_a.id, today).calorie_points == 2

        meals.delete_meal(db, meal.id, clock)

        day = _day(db, user_a.id, today)
        assert day.calories == 0
        assert day.goal_met is False
        points = points_ledger.get_daily_points(db, user_a.id, today)
        assert points.calorie_points == 0
        assert points.total_points == 0

    def test_delete_missing_meal(self, db, clock):
        with pytest.raises(NotFoundError):
            meals.delete_meal(db, 7, clock)


class TestListMeals:
    def test_lists_only_that_users_day(self, db, clock, today, user_a, user_b, rice):
        meals.save_meal(db, user_a.id, "BREAKFAST", [line(rice)], clock=clock)
        meals.save_meal(db, user_a.id, "LUNCH", [line(rice)], day=date(2024, 3, 14), clock=clock)
        meals.save_meal(db, user_b.id, "LUNCH", [line(rice)], clock=clock)

        listed = meals.list_meals_for_day(db, user_a.id, today, clock)
        assert [m.slot for m in listed] == ["BREAKFAST"]
