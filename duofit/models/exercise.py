from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from duofit.db.base import Base


class Exercise(Base):
    __tablename__ = "exercises"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    type = Column(String, nullable=False)  # CARDIO / STRENGTH / OTHER
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    duration_min = Column(Integer, nullable=False, default=0)
    points = Column(Integer, nullable=False, default=0)

    performed_at = Column(DateTime(timezone=True), nullable=False, default=datetime.utcnow, index=True)

    user = relationship("User", back_populates="exercises")
