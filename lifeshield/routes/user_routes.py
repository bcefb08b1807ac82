import logging

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lifeshield.auth import jwt_handler
from lifeshield.auth.dependencies import authenticate, require_admin, require_self
from lifeshield.auth.roles import resolve_role
from lifeshield.database import get_db
from lifeshield.models.user import DEFAULT_ROLE, USER_ROLES, User
from lifeshield.routes.common import internal_failure, parse_document_id

router = APIRouter(tags=['users'])

logger = logging.getLogger(__name__)


class TokenResponse(BaseModel):
    token: str


class RoleResponse(BaseModel):
    role: str | None = None


class RegisterUserRequest(BaseModel):
    email: str
    name: str | None = None
    photo: str | None = None

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Email is required.')
        return normalized


class UpdateRoleRequest(BaseModel):
    role: str

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in USER_ROLES:
            raise ValueError('Role must be one of user, agent or admin.')
        return normalized


class UpdateProfileRequest(BaseModel):
    name: str | None = None
    photo: str | None = None


class UserResponse(BaseModel):
    id: int
    email: str
    name: str | None = None
    photo: str | None = None
    role: str

    class Config:
        from_attributes = True


@router.post('/jwt', response_model=TokenResponse)
def create_token(claims: dict = Body(...)):
    try:
        return TokenResponse(token=jwt_handler.issue_token(claims))
    except jwt_handler.ReservedClaimError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc


@router.get('/users/role/{email}', response_model=RoleResponse)
def get_user_role(email: str, db: Session = Depends(get_db)):
    try:
        return RoleResponse(role=resolve_role(db, email))
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.post('/users')
def register_user(data: RegisterUserRequest, db: Session = Depends(get_db)):
    try:
        existing_user = db.query(User).filter(User.email == data.email).first()
        if existing_user:
            return {'message': 'User already exists', 'insertedId': None}

        # Everyone starts as a plain user; roles change only through an admin.
        user = User(email=data.email, name=data.name, photo=data.photo, role=DEFAULT_ROLE)
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info('Registered user %s', user.email)

        return {'message': 'User created', 'insertedId': user.id}
    except IntegrityError:
        # A concurrent registration committed the same email first.
        db.rollback()
        return {'message': 'User already exists', 'insertedId': None}
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.get('/users', response_model=list[UserResponse])
def list_users(_admin: dict = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return db.query(User).order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.get('/users/agents', response_model=list[UserResponse])
def list_agents(_admin: dict = Depends(require_admin), db: Session = Depends(get_db)):
    try:
        return db.query(User).filter(User.role == 'agent').order_by(User.id.asc()).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.patch('/users/role/{user_id}', response_model=UserResponse)
def update_user_role(
    user_id: str,
    data: UpdateRoleRequest,
    admin: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    document_id = parse_document_id(user_id)

    try:
        user = db.get(User, document_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

        user.role = data.role
        db.commit()
        db.refresh(user)
        logger.info('%s changed role of %s to %s', admin.get('email'), user.email, user.role)

        return user
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.delete('/users/{user_id}')
def delete_user(
    user_id: str,
    admin: dict = Depends(require_admin),
    db: Session = Depends(get_db),
):
    document_id = parse_document_id(user_id)

    try:
        user = db.get(User, document_id)
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

        deleted_email = user.email
        db.delete(user)
        db.commit()
        logger.info('%s deleted user %s', admin.get('email'), deleted_email)

        return {'deletedCount': 1}
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.patch('/users/{email}', response_model=UserResponse)
def update_profile(
    email: str,
    data: UpdateProfileRequest,
    claims: dict = Depends(authenticate),
    db: Session = Depends(get_db),
):
    require_self(email, claims)

    try:
        user = db.query(User).filter(User.email == email).first()
        if user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='User not found')

        if data.name is not None:
            user.name = data.name
        if data.photo is not None:
            user.photo = data.photo
        db.commit()
        db.refresh(user)

        return user
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc
