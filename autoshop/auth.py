import logging
from typing import Any, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from jose import jwt as jose_jwt

from .config import JWT_ALGORITHM, SECRET_KEY
from .shared.validators import validate_email

logger = logging.getLogger(__name__)

security = HTTPBearer()


def verify_jwt_token(token: str) -> Optional[dict[str, Any]]:
    """
    Verify and decode a JWT token

    Returns:
        Decoded payload if valid, None if invalid or expired
    """
    try:
        return jose_jwt.decode(token, SECRET_KEY, algorithms=[JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWT verification failed: {e}")
        return None


async def get_current_email(
    credentials: HTTPAuthorizationCredentials = Depends(security),
) -> str:
    """Resolve the caller's email from a bearer token issued by the identity service"""
    if not credentials:
        raise HTTPException(
            status_code=401,
            detail="Not authenticated. Please provide a valid Bearer token in the Authorization header.",
        )

    payload = verify_jwt_token(credentials.credentials)
    if payload is None:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    email = payload.get("email") or payload.get("sub")
    if not email:
        logger.error(f"❌ Token missing email claim. Available claims: {list(payload.keys())}")
        raise HTTPException(status_code=401, detail="Invalid token claims")

    try:
        return validate_email(email)
    except ValueError as e:
        raise HTTPException(status_code=401, detail="Invalid token claims") from e
