"""Blog model definitions."""

from sqlalchemy import Column, DateTime, Integer, String, Text
from lifeshield.database import Base


class Blog(Base):
    """Represents a published blog article."""
    __tablename__ = "blogs"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    content = Column(Text)
    author = Column(String)
    image = Column(String)
    date = Column(DateTime, index=True)
    total_visit = Column(Integer, nullable=False, default=0)
