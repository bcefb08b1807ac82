from sqlalchemy.orm import Session

from lifeshield.models.user import User


def resolve_role(db: Session, email: str | None) -> str | None:
    """Look up the stored role for an email; ``None`` when no such user."""
    if not email:
        return None
    return db.query(User.role).filter(User.email == email).scalar()
