import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from lifeshield.auth import jwt_handler
from lifeshield.auth.roles import resolve_role
from lifeshield.database import get_db

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


def _unauthenticated(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _forbidden() -> HTTPException:
    return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden Access")


def authenticate(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    if credentials is None:
        raise _unauthenticated("Unauthorized Access")

    try:
        return jwt_handler.verify_token(credentials.credentials)
    except jwt.InvalidTokenError as exc:
        logger.info("Rejected bearer token: %s", type(exc).__name__)
        raise _unauthenticated("Invalid or expired token") from exc


def require_admin(
    claims: dict = Depends(authenticate),
    db: Session = Depends(get_db),
) -> dict:
    # The role is re-read on every request so demotions apply immediately.
    email = claims.get("email")
    role = resolve_role(db, email)
    if role != "admin":
        logger.warning("Admin route denied for %s (role=%s)", email, role)
        raise _forbidden()
    return claims


def require_self(email: str, claims: dict) -> None:
    if claims.get("email") != email:
        raise _forbidden()


def is_admin(db: Session, claims: dict) -> bool:
    return resolve_role(db, claims.get("email")) == "admin"
