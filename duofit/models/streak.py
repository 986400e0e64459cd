from sqlalchemy import Column, Date, ForeignKey, Integer
from sqlalchemy.orm import relationship

from duofit.db.base import Base


class Streak(Base):
    __tablename__ = "streaks"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, unique=True)

    current = Column(Integer, nullable=False, default=0)
    longest = Column(Integer, nullable=False, default=0)
    last_date = Column(Date, nullable=True)

    user = relationship("User", back_populates="streak")
