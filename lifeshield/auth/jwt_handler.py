from datetime import datetime, timedelta, timezone

import jwt

from lifeshield.core import config

# Timing claims are set by the server; callers may not supply them.
RESERVED_CLAIMS = ("exp", "iat", "nbf")

# Claims are an opaque map, so registered names like aud/sub/jti are carried
# through without PyJWT's content checks.
DECODE_OPTIONS = {"verify_aud": False, "verify_sub": False, "verify_jti": False}


class ReservedClaimError(ValueError):
    """Raised when caller claims use a server-controlled timing claim."""


def issue_token(claims: dict, expires_delta: timedelta | None = None) -> str:
    """Sign the caller's claims with a fixed lifetime.

    The claims are trusted verbatim; downstream role checks expect an
    ``email`` entry.
    """
    reserved = sorted(key for key in claims if key in RESERVED_CLAIMS)
    if reserved:
        raise ReservedClaimError(f"Claims may not include {', '.join(reserved)}.")

    issued_at = datetime.now(timezone.utc)
    expire = issued_at + (expires_delta or timedelta(minutes=config.JWT_EXPIRES_MINUTES))
    payload = dict(claims)
    payload.update({"exp": expire, "iat": issued_at})
    return jwt.encode(payload, config.JWT_SECRET_KEY, algorithm=config.JWT_ALGORITHM)


def verify_token(token: str) -> dict:
    """Return the claims of a valid token.

    Raises ``jwt.InvalidTokenError`` (``ExpiredSignatureError`` included)
    when the token is malformed, tampered with or expired.
    """
    payload = jwt.decode(
        token,
        config.JWT_SECRET_KEY,
        algorithms=[config.JWT_ALGORITHM],
        options=DECODE_OPTIONS,
    )
    return {key: value for key, value in payload.items() if key not in ("exp", "iat")}
