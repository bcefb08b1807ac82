"""Insurance application status workflow.

Applications move Submitted -> Assigned -> Approved | Rejected -> Paid.
Every mutation checks the transition against ``ALLOWED_TRANSITIONS`` before
writing, so an application can never go backwards or skip the approval step
on its way to Paid.
"""

import logging
from datetime import datetime, timezone

from sqlalchemy.orm import Session

from lifeshield.models.application import Application, ApplicationStatus
from lifeshield.models.policy import Policy
from lifeshield.models.user import User

logger = logging.getLogger(__name__)


class WorkflowError(ValueError):
    """Base class for rejected workflow operations."""


class InvalidTransitionError(WorkflowError):
    """Raised when an application status transition is not allowed."""


class InvalidAgentError(WorkflowError):
    """Raised when the assignee is not a registered agent."""


ALLOWED_TRANSITIONS: dict[ApplicationStatus, frozenset[ApplicationStatus]] = {
    ApplicationStatus.SUBMITTED: frozenset(
        {ApplicationStatus.ASSIGNED, ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.ASSIGNED: frozenset(
        {ApplicationStatus.ASSIGNED, ApplicationStatus.APPROVED, ApplicationStatus.REJECTED}
    ),
    ApplicationStatus.APPROVED: frozenset({ApplicationStatus.PAID}),
    ApplicationStatus.REJECTED: frozenset(),
    ApplicationStatus.PAID: frozenset(),
}

# Paid is only reachable through payment confirmation.
ADMIN_DECISIONS = frozenset({ApplicationStatus.APPROVED, ApplicationStatus.REJECTED})


def parse_status(value: str) -> ApplicationStatus:
    try:
        return ApplicationStatus(value)
    except ValueError as exc:
        raise InvalidTransitionError(f"Unknown application status '{value}'.") from exc


def check_transition(current: str, target: ApplicationStatus) -> None:
    current_status = parse_status(current)
    allowed = ALLOWED_TRANSITIONS[current_status]
    if target not in allowed:
        allowed_text = ", ".join(sorted(s.value for s in allowed)) if allowed else "none (terminal status)"
        raise InvalidTransitionError(
            f"Cannot move application from '{current_status.value}' to '{target.value}'. "
            f"Allowed: {allowed_text}."
        )


def create_application(
    db: Session,
    *,
    applicant_email: str,
    applicant_name: str | None = None,
    policy_id: int | None = None,
    policy_title: str | None = None,
    details: dict | None = None,
) -> Application:
    application = Application(
        applicant_email=applicant_email,
        applicant_name=applicant_name,
        policy_id=policy_id,
        policy_title=policy_title,
        details=details or {},
        status=ApplicationStatus.SUBMITTED.value,
        created_at=datetime.now(timezone.utc),
    )
    db.add(application)
    db.commit()
    db.refresh(application)
    logger.info("Application %s submitted by %s", application.id, applicant_email)
    return application


def set_status(db: Session, application: Application, status: str) -> Application:
    target = parse_status(status)
    if target not in ADMIN_DECISIONS:
        raise InvalidTransitionError(
            f"Status can only be set to Approved or Rejected, not '{target.value}'."
        )
    check_transition(application.status, target)

    application.status = target.value
    db.commit()
    db.refresh(application)
    logger.info("Application %s moved to %s", application.id, target.value)
    return application


def assign_agent(
    db: Session,
    application: Application,
    *,
    agent_email: str,
    agent_name: str | None = None,
    status: str = ApplicationStatus.ASSIGNED.value,
) -> Application:
    target = parse_status(status)
    if target == ApplicationStatus.PAID:
        raise InvalidTransitionError("Assigning an agent cannot mark an application as Paid.")
    check_transition(application.status, target)

    agent = db.query(User).filter(User.email == agent_email).first()
    if agent is None or agent.role != "agent":
        raise InvalidAgentError(f"'{agent_email}' is not a registered agent.")

    application.agent_email = agent_email
    application.agent_name = agent_name or agent.name
    application.status = target.value
    db.commit()
    db.refresh(application)
    logger.info("Application %s assigned to agent %s", application.id, agent_email)
    return application


def confirm_payment(
    db: Session,
    application: Application,
    *,
    transaction_id: str,
    paid_amount: float,
    payment_date: datetime | None = None,
) -> Application:
    check_transition(application.status, ApplicationStatus.PAID)

    application.status = ApplicationStatus.PAID.value
    application.transaction_id = transaction_id
    application.paid_amount = paid_amount
    application.payment_date = payment_date or datetime.now(timezone.utc)

    if application.policy_id is not None:
        policy = db.get(Policy, application.policy_id)
        if policy is not None:
            policy.purchased_count = (policy.purchased_count or 0) + 1

    db.commit()
    db.refresh(application)
    logger.info("Application %s paid (transaction %s)", application.id, transaction_id)
    return application


def list_paid_applications(db: Session, applicant_email: str) -> list[Application]:
    return db.query(Application).filter(
        Application.applicant_email == applicant_email,
        Application.status == ApplicationStatus.PAID.value,
    ).order_by(Application.id.asc()).all()
