"""Customer review model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from lifeshield.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    photo = Column(String)
    rating = Column(Integer)
    feedback = Column(Text)
    date = Column(DateTime)
