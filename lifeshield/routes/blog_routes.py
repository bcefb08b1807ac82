from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from lifeshield.database import get_db
from lifeshield.models.blog import Blog
from lifeshield.routes.common import internal_failure, parse_document_id

router = APIRouter(tags=['blogs'])


class BlogResponse(BaseModel):
    id: int
    title: str
    content: str | None = None
    author: str | None = None
    image: str | None = None
    date: datetime | None = None
    total_visit: int = 0

    class Config:
        from_attributes = True


def get_blog_or_404(db: Session, blog_id: str) -> Blog:
    document_id = parse_document_id(blog_id)
    blog = db.get(Blog, document_id)
    if blog is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail='Blog not found')
    return blog


@router.get('/all-blogs', response_model=list[BlogResponse])
def list_blogs(db: Session = Depends(get_db)):
    try:
        return db.query(Blog).order_by(Blog.date.desc(), Blog.id.desc()).all()
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.get('/blog/{blog_id}', response_model=BlogResponse)
def get_blog(blog_id: str, db: Session = Depends(get_db)):
    try:
        return get_blog_or_404(db, blog_id)
    except SQLAlchemyError as exc:
        raise internal_failure(exc) from exc


@router.patch('/blog/visit/{blog_id}', response_model=BlogResponse)
def record_blog_visit(blog_id: str, db: Session = Depends(get_db)):
    try:
        blog = get_blog_or_404(db, blog_id)
        blog.total_visit = Blog.total_visit + 1
        db.commit()
        db.refresh(blog)

        return blog
    except SQLAlchemyError as exc:
        db.rollback()
        raise internal_failure(exc) from exc
