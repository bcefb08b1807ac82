"""Policy model definitions."""

from sqlalchemy import JSON, Column, Float, Integer, String, Text
from lifeshield.database import Base


class Policy(Base):
    """Represents an insurance policy offered on the marketplace."""
    __tablename__ = "policies"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False, index=True)
    category = Column(String, index=True)
    description = Column(Text)
    image = Column(String)
    price = Column(Float)
    purchased_count = Column(Integer, nullable=False, default=0)
    details = Column(JSON, nullable=False, default=dict)
