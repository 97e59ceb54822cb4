from typing import Optional
import logging
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from sqlalchemy.orm import Session
from .core.config import settings
from .database.base import get_db
from .database.operations import DatabaseOperations
from .models.auth import User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

def _credentials_exception(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )

def decode_access_token(token: str) -> Optional[int]:
    """Return the user id carried in the token's ``sub`` claim, or None if the token is unusable"""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected access token: {e}")
        return None

    subject = payload.get("sub")
    try:
        return int(subject)
    except (TypeError, ValueError):
        return None

async def get_current_user(
        credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
        db: Session = Depends(get_db)
) -> User:
    """Authenticated caller; identity comes only from the bearer token, never the request body"""
    if credentials is None:
        raise _credentials_exception("Authorization header missing")

    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        raise _credentials_exception("Could not validate credentials")

    user = DatabaseOperations.get_user(db, user_id)
    if user is None:
        raise _credentials_exception("Could not validate credentials")
    return user
