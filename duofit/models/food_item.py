from sqlalchemy import Column, Integer, String, DateTime, Float, func

from duofit.db.base import Base


class FoodItem(Base):
    """
    Catalog food. Nutrition is per reference quantity: 100 g / 100 ml for
    mass and volume units, one unit for count units. Never mutated after
    creation; line totals are always computed from these values.
    """

    __tablename__ = "food_items"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)

    calories = Column(Float, nullable=False, default=0)
    protein_g = Column(Float, nullable=False, default=0)
    fat_g = Column(Float, nullable=False, default=0)
    carbs_g = Column(Float, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
