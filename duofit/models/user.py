from sqlalchemy import Column, Integer, String, DateTime, Float, func
from sqlalchemy.orm import relationship

from duofit.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    color = Column(String, nullable=False, default="YELLOW")
    avatar = Column(String, nullable=True)

    calorie_goal = Column(Float, nullable=False, default=2000)
    protein_goal_g = Column(Float, nullable=False, default=150)
    carbs_goal_g = Column(Float, nullable=False, default=250)
    fat_goal_g = Column(Float, nullable=False, default=65)

    created_at = Column(DateTime(timezone=True), server_default=func.now())

    meals = relationship("Meal", back_populates="user")
    exercises = relationship("Exercise", back_populates="user")
    streak = relationship("Streak", back_populates="user", uselist=False)
