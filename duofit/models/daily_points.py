from sqlalchemy import Column, Date, ForeignKey, Integer, UniqueConstraint

from duofit.db.base import Base


class DailyPoints(Base):
    __tablename__ = "daily_points"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    date = Column(Date, nullable=False, index=True)

    exercise_points = Column(Integer, nullable=False, default=0)
    calorie_points = Column(Integer, nullable=False, default=0)
    # always exercise_points + calorie_points
    total_points = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint("user_id", "date", name="uq_daily_points_user_date"),
    )
