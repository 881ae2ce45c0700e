from typing import Optional
from fastapi import Cookie, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from app.core.database import get_db
from app.core.security import decode_access_token
from app.models.user import User

# OAuth2 password bearer scheme - extracts token from Authorization header
# auto_error=False so a remember-me cookie can stand in for the header
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login", auto_error=False)

# Name of the remember-me cookie set by /auth/login
AUTH_COOKIE_NAME = "jwt"


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    jwt_cookie: Optional[str] = Cookie(default=None, alias=AUTH_COOKIE_NAME),
    db: Session = Depends(get_db)
) -> User:
    """
    Get current authenticated user from a JWT.

    The Authorization header wins over the jwt cookie when both are sent.
    Raises 401 when no valid token is present or its user no longer exists.
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    token = token or jwt_cookie
    if not token:
        raise credentials_exception

    # Returns None if token is invalid, expired, or tampered with
    payload = decode_access_token(token)
    if payload is None:
        raise credentials_exception

    # Tokens carry the user name in the 'sub' claim
    user_name = payload.get("sub")
    if not user_name:
        raise credentials_exception

    user = db.query(User).filter(User.user_name == user_name).first()
    if user is None:
        raise credentials_exception

    return user
