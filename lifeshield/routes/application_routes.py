from datetime import datetime
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeshield.auth.dependencies import authenticate, is_admin, require_admin
from lifeshield.database import get_db
from lifeshield.models.application import Application, ApplicationStatus
from lifeshield.routes.common import CamelModel, internal_failure, parse_document_id
from lifeshield.services import workflow

router = APIRouter(tags=['applications'])

logger = logging.getLogger(__name__)

# Fields the workflow owns; clients cannot smuggle them in through the
# free-form applicant details.
RESERVED_DETAIL_KEYS = {
    'id',
    '_id',
    'status',
    'agentEmail',
    'agentName',
    'transactionId',
    'paymentDate',
    'paidAmount',
}


class CreateApplicationRequest(CamelModel):
    applicant_email: str
    applicant_name: str
    policy_id: int | None = None
    policy_title: str | None = None

    class Config:
        extra = 'allow'

    @field_validator('applicant_email', 'applicant_name')
    @classmethod
    def validate_required_text(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Applicant email and name are required.')
        return normalized


class UpdateStatusRequest(CamelModel):
    status: str


class AssignAgentRequest(CamelModel):
    agent_email: str
    agent_name: str | None = None
    status: str = ApplicationStatus.ASSIGNED.value


class PaymentConfirmationRequest(CamelModel):
    transaction_id: str
    date: datetime | None = None
    amount: float = Field(gt=0)

    @field_validator('transaction_id')
    @classmethod
    def validate_transaction_id(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Transaction id is required.')
        return normalized


class ApplicationResponse(CamelModel):
    id: int
    applicant_email: str
    applicant_name: str | None = None
    policy_id: int | None = None
    policy_title: str | None = None
    details: dict = {}
    status: str
    agent_email: str | None = None
    agent_name: str | None = None
    transaction_id: str | None = None
    payment_date: datetime | None = None
    paid_amount: float | None = None
    created_at: datetime | None = None


def get_application_or_404(db: Session, application_id: str) -> Application:
    document_id = parse_document_id(application_id)
    application = db.get(Application, document_id)
    if application is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Application not found')
    return application


def workflow_rejected(exc: workflow.WorkflowError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.post('/applications', response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
def submit_application(data: CreateApplicationRequest, db: Session = Depends(get_db)):
    details = {
        key: value
        for key, value in (data.model_extra or {}).items()
        if key not in RESERVED_DETAIL_KEYS
    }

    try:
        return workflow.create_application(
            db,
            applicant_email=data.applicant_email,
            applicant_name=data.applicant_name,
            policy_id=data.policy_id,
            policy_title=data.policy_title,
            details=details,
        )
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.patch('/applications/status/{application_id}', response_model=ApplicationResponse)
def update_application_status(
    application_id: str,
    data: UpdateStatusRequest,
    _admin: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        application = get_application_or_404(db, application_id)
        return workflow.set_status(db, application, data.status)
    except workflow.WorkflowError as exc:
        raise workflow_rejected(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.patch('/applications/assign/{application_id}', response_model=ApplicationResponse)
def assign_application_agent(
    application_id: str,
    data: AssignAgentRequest,
    _admin: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    try:
        application = get_application_or_404(db, application_id)
        return workflow.assign_agent(
            db,
            application,
            agent_email=data.agent_email,
            agent_name=data.agent_name,
            status=data.status,
        )
    except workflow.WorkflowError as exc:
        raise workflow_rejected(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.patch('/applications/payment/{application_id}', response_model=ApplicationResponse)
def confirm_application_payment(
    application_id: str,
    data: PaymentConfirmationRequest,
    claims: dict = Depends(authenticate),
    db: Session = Depends(get_db),
):
    try:
        application = get_application_or_404(db, application_id)

        if claims.get('email') != application.applicant_email and not is_admin(db, claims):
            logger.warning(
                'Payment confirmation for application %s refused for %s',
                application.id,
                claims.get('email'),
            )
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail='Forbidden Access')

        return workflow.confirm_payment(
            db,
            application,
            transaction_id=data.transaction_id,
            paid_amount=data.amount,
            payment_date=data.date,
        )
    except workflow.WorkflowError as exc:
        raise workflow_rejected(exc) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.get('/applied-policies/{email}', response_model=list[ApplicationResponse])
def list_applied_policies(email: str, db: Session = Depends(get_db)):
    try:
        return workflow.list_paid_applications(db, email)
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.get('/all-applications', response_model=list[ApplicationResponse])
def list_all_applications(_admin: dict = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return db.query(Application).order_by(Application.id.asc()).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc
