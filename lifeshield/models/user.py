"""User model definitions."""

from sqlalchemy import Column, Integer, String
from lifeshield.database import Base


USER_ROLES = ("user", "agent", "admin")
DEFAULT_ROLE = "user"


class User(Base):
    """Represents a registered marketplace user."""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String)
    photo = Column(String)
    role = Column(String, nullable=False, default=DEFAULT_ROLE)  # user/agent/admin
