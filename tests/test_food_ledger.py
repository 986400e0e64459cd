"""Tests for the food catalog and name lookup."""

import asyncio

import pytest

from duofit.core.errors import NotFoundError, ValidationError
from duofit.models.food_item import FoodItem
from duofit.schemas.food import FoodCreate, ReferenceQuantityFood, ScaledQuantityFood
from duofit.services import food_ledger
from tests.helpers import FakeFoodSearch, external_candidate


class TestCatalog:
    def test_create_food(self, db):
        food = food_ledger.create_food(db, FoodCreate(name="  Feijão carioca ", calories=76, protein_g=4.8))
        assert food.id > 0
        assert food.name == "Feijão carioca"
        assert db.get(FoodItem, food.id).calories == 76

    def test_create_food_requires_name(self, db):
        with pytest.raises(ValidationError):
            food_ledger.create_food(db, FoodCreate(name="   ", calories=10))

    def test_transient_foods_get_unique_negative_ids(self, db):
        first = food_ledger.create_transient(FoodCreate(name="Pão de queijo", calories=300))
        second = food_ledger.create_transient(FoodCreate(name="Pão de queijo", calories=300))
        assert first.id < 0
        assert second.id < first.id
        assert db.query(FoodItem).count() == 0

    def test_get_missing_food(self, db):
        with pytest.raises(NotFoundError):
            food_ledger.get_food(db, 42)


class TestInlineFoods:
    def test_reference_food_is_stored_as_given(self, db):
        food = food_ledger.persist_inline(db, ReferenceQuantityFood(name="Banana", calories=89), 200, "g")
        assert food.calories == pytest.approx(89)

    def test_scaled_food_is_divided_back_to_reference(self, db):
        # 300 kcal for a 150 g portion is 200 kcal per 100 g
        food = food_ledger.persist_inline(
            db, ScaledQuantityFood(name="Batata frita", calories=300, fat_g=15), 150, "g"
        )
        assert food.calories == pytest.approx(200)
        assert food.fat_g == pytest.approx(10)

    def test_scaled_count_food_is_per_unit(self, db):
        food = food_ledger.persist_inline(db, ScaledQuantityFood(name="Coxinha", calories=500), 2, "unit")
        assert food.calories == pytest.approx(250)

    def test_missing_inline_food(self, db):
        with pytest.raises(ValidationError):
            food_ledger.persist_inline(db, None, 100, "g")


class TestRelevance:
    @pytest.mark.parametrize(
        "name,score",
        [
            ("Banana", 100),
            ("Banana prata", 80),
            ("Bolo de banana", 60),
            ("Vitamina de leite com banana e aveia", 30),
            ("Maçã", 10),
        ],
    )
    def test_scores(self, name, score):
        assert food_ledger.relevance(name, "banana") == score


class TestLookupByName:
    def test_short_query_returns_nothing(self, db):
        search = FakeFoodSearch([external_candidate("Banana", 89)])
        assert asyncio.run(food_ledger.lookup_by_name(db, "b", external=search)) == []
        assert search.queries == []

    def test_local_results_come_first(self, db, kcal_food):
        kcal_food(120, name="Bolo de banana")
        kcal_food(98, name="Banana prata")
        search = FakeFoodSearch([external_candidate("Banana", 89)])

        results = asyncio.run(food_ledger.lookup_by_name(db, "banana", external=search))

        assert [c.food.name for c in results] == ["Banana prata", "Bolo de banana", "Banana"]
        assert [c.origin for c in results] == ["LOCAL", "LOCAL", "OPEN_FOOD_FACTS"]
        assert results[0].food_id is not None
        assert search.queries == ["banana"]

    def test_duplicates_keep_the_local_entry(self, db, kcal_food):
        local = kcal_food(98, name="Banana prata")
        search = FakeFoodSearch([external_candidate("BANANA PRATA", 90), external_candidate("Banana nanica", 92)])

        results = asyncio.run(food_ledger.lookup_by_name(db, "banana", external=search))

        assert len(results) == 2
        assert results[0].origin == "LOCAL"
        assert results[0].food_id == local.id
        assert results[1].food.name == "Banana nanica"

    def test_works_without_external_search(self, db, kcal_food):
        kcal_food(130, name="Arroz branco")
        results = asyncio.run(food_ledger.lookup_by_name(db, "ARROZ"))
        assert [c.food.name for c in results] == ["Arroz branco"]

    @pytest.mark.parametrize("query", ["%%", "__", "a_z", "50%"])
    def test_wildcards_match_literally(self, db, kcal_food, query):
        kcal_food(130, name="Arroz branco")
        kcal_food(400, name="Chocolate 50% cacau")
        results = asyncio.run(food_ledger.lookup_by_name(db, query))
        expected = ["Chocolate 50% cacau"] if query == "50%" else []
        assert [c.food.name for c in results] == expected

    def test_results_are_capped(self, db):
        search = FakeFoodSearch([external_candidate(f"Queijo {i}", 300) for i in range(30)])
        results = asyncio.run(food_ledger.lookup_by_name(db, "queijo", external=search))
        assert len(results) == food_ledger.SEARCH_RESULT_LIMIT
