"""Pytest configuration and shared fixtures."""

from datetime import date, datetime

import pytest
import pytz
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from duofit import models  # noqa  # registers every table
from duofit.core.clock import CivilClock
from duofit.db.base import Base
from duofit.models.food_item import FoodItem
from duofit.models.user import User
from tests.helpers import FrozenNow

TIMEZONE = "America/Sao_Paulo"
# 12:00 in Sao Paulo (UTC-3)
DEFAULT_NOW = datetime(2024, 3, 15, 15, 0, tzinfo=pytz.utc)
TODAY = date(2024, 3, 15)


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = Session()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def frozen_now() -> FrozenNow:
    return FrozenNow(DEFAULT_NOW)


@pytest.fixture
def clock(frozen_now) -> CivilClock:
    return CivilClock(TIMEZONE, now=frozen_now)


@pytest.fixture
def today() -> date:
    return TODAY


def _add(db, obj):
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj


@pytest.fixture
def user_a(db) -> User:
    return _add(db, User(name="Ana", color="YELLOW", calorie_goal=2000))


@pytest.fixture
def user_b(db) -> User:
    return _add(db, User(name="Bruno", color="BLUE", calorie_goal=2500))


@pytest.fixture
def rice(db) -> FoodItem:
    """130 kcal per 100 g."""
    return _add(db, FoodItem(name="Arroz branco cozido", calories=130, protein_g=2.5, carbs_g=28.0, fat_g=0.3))


@pytest.fixture
def egg(db) -> FoodItem:
    """Counted per unit."""
    return _add(db, FoodItem(name="Ovo cozido", calories=78, protein_g=6.3, carbs_g=0.6, fat_g=5.3))


@pytest.fixture
def kcal_food(db):
    """Factory: catalog food worth exactly `calories` per 100 g."""

    def _make(calories: float, name: str = None) -> FoodItem:
        return _add(db, FoodItem(name=name or f"Food {calories:g}", calories=calories))

    return _make
