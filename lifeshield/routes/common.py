import logging

from fastapi import HTTPException, status
from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


def parse_document_id(raw_id: str) -> int:
    try:
        document_id = int(raw_id)
    except (TypeError, ValueError) as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid ID format') from exc
    if document_id < 1:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail='Invalid ID format')
    return document_id


def internal_failure(exc: SQLAlchemyError) -> HTTPException:
    logger.error('Database operation failed: %s', exc)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail='Internal server error',
    )


class CamelModel(BaseModel):
    """Accepts and emits camelCase keys while keeping snake_case attributes."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
