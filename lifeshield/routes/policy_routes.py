from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeshield.database import get_db
from lifeshield.models.policy import Policy
from lifeshield.routes.common import internal_failure, parse_document_id

router = APIRouter(tags=['policies'])

POPULAR_POLICY_LIMIT = 6
DEFAULT_PAGE_SIZE = 9
ALL_CATEGORIES = 'All'


class PolicyResponse(BaseModel):
    id: int
    title: str
    category: str | None = None
    description: str | None = None
    image: str | None = None
    price: float | None = None
    purchased_count: int = 0
    details: dict = {}

    class Config:
        from_attributes = True


class PolicyPageResponse(BaseModel):
    result: list[PolicyResponse]
    count: int


def build_policy_query(db: Session, search: str | None, category: str | None):
    query = db.query(Policy)
    if search:
        pattern = search.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
        query = query.filter(Policy.title.ilike(f'%{pattern}%', escape='\\'))
    if category and category != ALL_CATEGORIES:
        query = query.filter(Policy.category == category)
    return query


@router.get('/popular-policies', response_model=list[PolicyResponse])
def list_popular_policies(db: Session = Depends(get_db)):
    try:
        return db.query(Policy).order_by(
            Policy.purchased_count.desc(),
            Policy.id.asc(),
        ).limit(POPULAR_POLICY_LIMIT).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.get('/policy/{policy_id}', response_model=PolicyResponse)
def get_policy(policy_id: str, db: Session = Depends(get_db)):
    document_id = parse_document_id(policy_id)

    try:
        policy = db.get(Policy, document_id)
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc

    if policy is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Policy not found')
    return policy


@router.get('/all-policies', response_model=PolicyPageResponse)
def list_policies(
    search: str | None = Query(default=None),
    category: str | None = Query(default=None),
    page: int = Query(default=0, ge=0),
    size: int = Query(default=DEFAULT_PAGE_SIZE, ge=1),
    db: Session = Depends(get_db),
):
    try:
        query = build_policy_query(db, search, category)
        result = query.order_by(Policy.id.asc()).offset(page * size).limit(size).all()
        count = query.count()

        return PolicyPageResponse(
            result=[PolicyResponse.model_validate(policy) for policy in result],
            count=count,
        )
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc
