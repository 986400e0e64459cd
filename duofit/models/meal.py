from datetime import datetime

from sqlalchemy import (
    Column,
    Integer,
    DateTime,
    Float,
    String,
    ForeignKey,
)
from sqlalchemy.orm import relationship

from duofit.db.base import Base


class Meal(Base):
    __tablename__ = "meals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    slot = Column(String, nullable=False)  # BREAKFAST / LUNCH / SNACK / DINNER
    eaten_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, index=True)

    # cached sum of the line items
    total_calories = Column(Float, nullable=False, default=0)
    total_protein_g = Column(Float, nullable=False, default=0)
    total_fat_g = Column(Float, nullable=False, default=0)
    total_carbs_g = Column(Float, nullable=False, default=0)

    user = relationship("User", back_populates="meals")
    items = relationship(
        "MealItem",
        back_populates="meal",
        cascade="all, delete-orphan",
        order_by="MealItem.id",
    )


class MealItem(Base):
    __tablename__ = "meal_items"

    id = Column(Integer, primary_key=True, index=True)
    meal_id = Column(
        Integer, ForeignKey("meals.id", ondelete="CASCADE"), nullable=False, index=True
    )
    food_id = Column(Integer, ForeignKey("food_items.id"), nullable=False)

    quantity = Column(Float, nullable=False)
    unit = Column(String, nullable=False)

    calories = Column(Float, nullable=False, default=0)
    protein_g = Column(Float, nullable=False, default=0)
    fat_g = Column(Float, nullable=False, default=0)
    carbs_g = Column(Float, nullable=False, default=0)

    meal = relationship("Meal", back_populates="items")
    food = relationship("FoodItem")

    @property
    def food_name(self) -> str:
        return self.food.name if self.food is not None else ""
