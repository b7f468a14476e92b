from datetime import datetime, timedelta, timezone
from typing import Optional
import jwt
from app.core.config import settings

ACCESS_TOKEN_EXPIRE_MINUTES = 60


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    full_name: Optional[str] = None,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT shaped like the ones the identity provider issues.
    Used by local tooling and tests; production tokens come from Supabase.
    """
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode = {
        "sub": str(user_id),
        "email": email,
        "user_metadata": {"full_name": full_name} if full_name else {},
        "exp": expire,
    }
    if settings.JWT_AUDIENCE:
        to_encode["aud"] = settings.JWT_AUDIENCE
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> dict:
    """
    Verify a JWT and return its payload.
    Raises jwt.PyJWTError on a bad signature, expiry or audience mismatch.
    """
    options = {"verify_aud": bool(settings.JWT_AUDIENCE)}
    return jwt.decode(
        token,
        settings.jwt_secret,
        algorithms=[settings.ALGORITHM],
        audience=settings.JWT_AUDIENCE,
        options=options
    )
