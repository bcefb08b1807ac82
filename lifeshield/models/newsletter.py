"""Newsletter subscription model definitions."""

from sqlalchemy import Column, DateTime, Integer, String
from lifeshield.database import Base


class Subscriber(Base):
    """Represents a newsletter subscriber."""
    __tablename__ = "newsletter"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String)
    email = Column(String, unique=True, index=True, nullable=False)
    subscribed_at = Column(DateTime)
