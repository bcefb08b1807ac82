"""Insurance application model definitions."""

import enum

from sqlalchemy import JSON, Column, DateTime, Float, Integer, String
from lifeshield.database import Base


class ApplicationStatus(str, enum.Enum):
    SUBMITTED = "Submitted"
    ASSIGNED = "Assigned"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    PAID = "Paid"


class Application(Base):
    """Represents a customer's request to purchase a policy."""
    __tablename__ = "applications"

    id = Column(Integer, primary_key=True, index=True)
    applicant_email = Column(String, index=True, nullable=False)
    applicant_name = Column(String)
    policy_id = Column(Integer, index=True)
    policy_title = Column(String)
    details = Column(JSON, nullable=False, default=dict)
    status = Column(String, nullable=False, default=ApplicationStatus.SUBMITTED.value)
    agent_email = Column(String, index=True)
    agent_name = Column(String)
    transaction_id = Column(String)
    payment_date = Column(DateTime)
    paid_amount = Column(Float)
    created_at = Column(DateTime)
