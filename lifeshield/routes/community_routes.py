from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from lifeshield.database import get_db
from lifeshield.models.newsletter import Subscriber
from lifeshield.models.review import Review
from lifeshield.routes.common import internal_failure

router = APIRouter(tags=['community'])

logger = logging.getLogger(__name__)


class CreateReviewRequest(BaseModel):
    name: str | None = None
    photo: str | None = None
    rating: int | None = Field(default=None, ge=1, le=5)
    feedback: str | None = None


class ReviewResponse(BaseModel):
    id: int
    name: str | None = None
    photo: str | None = None
    rating: int | None = None
    feedback: str | None = None
    date: datetime | None = None

    class Config:
        from_attributes = True


class SubscribeRequest(BaseModel):
    name: str | None = None
    email: str

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized:
            raise ValueError('Email is required.')
        return normalized


class SubscriberResponse(BaseModel):
    id: int
    name: str | None = None
    email: str
    subscribed_at: datetime | None = None

    class Config:
        from_attributes = True


@router.get('/reviews', response_model=list[ReviewResponse])
def list_reviews(db: Session = Depends(get_db)):
    try:
        return db.query(Review).order_by(Review.id.desc()).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.post('/reviews', response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
def create_review(data: CreateReviewRequest, db: Session = Depends(get_db)):
    try:
        review = Review(
            name=data.name,
            photo=data.photo,
            rating=data.rating,
            feedback=data.feedback,
            date=datetime.now(timezone.utc),
        )
        db.add(review)
        db.commit()
        db.refresh(review)

        return review
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc


@router.post('/newsletter', response_model=SubscriberResponse, status_code=status.HTTP_201_CREATED)
def subscribe(data: SubscribeRequest, db: Session = Depends(get_db)):
    try:
        existing = db.query(Subscriber).filter(Subscriber.email == data.email).first()
        if existing:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Already Subscribed!')

        subscriber = Subscriber(
            name=data.name,
            email=data.email,
            subscribed_at=datetime.now(timezone.utc),
        )
        db.add(subscriber)
        db.commit()
        db.refresh(subscriber)
        logger.info('New newsletter subscriber %s', subscriber.email)

        return subscriber
    except IntegrityError as exc:
        db.rollback()
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Already Subscribed!') from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc
