from datetime import datetime, timedelta, timezone
from typing import Optional
from jose import JWTError, jwt
from storefront.config import settings


def create_access_token(user_id: str, role: Optional[str] = None, expires_minutes: int = 60) -> str:
    """Issue a token shaped like the auth provider's. Used by tests and local tooling."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    claims = {
        "sub": user_id,
        "aud": settings.JWT_AUDIENCE,
        "role": "authenticated",
        "exp": expire,
        "app_metadata": {"role": role} if role else {},
    }
    return jwt.encode(claims, settings.JWT_SECRET, settings.JWT_ALGORITHM)


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            audience=settings.JWT_AUDIENCE,
        )
    except JWTError:
        return None
