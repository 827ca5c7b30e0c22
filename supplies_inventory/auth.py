"""
Sign-in and access control for the demo accounts.

A successful login hands out a bearer JWT naming the account and its role.
Every protected route decodes that token, reloads the account and checks the
role it needs: any signed-in account may read, admins and managers may change
stock and alerts, only admins may list accounts.
"""
from datetime import datetime, timedelta
from typing import Optional
import logging
from jose import JWTError, jwt
from passlib.context import CryptContext
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.orm import Session

from . import crud, models
from .database import get_db
from .config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer()

STAFF_ROLES = ("admin", "manager")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def issue_token(user: models.User) -> str:
    """
    Sign a session token for a demo account.

    Claims: sub (account id), email, role, and exp set
    ACCESS_TOKEN_EXPIRE_MINUTES from now.
    """
    claims = {
        "sub": user.id,
        "email": user.email,
        "role": user.role,
        "exp": datetime.utcnow() + timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def authenticate_user(db: Session, email: str, password: str) -> Optional[models.User]:
    """
    Check a login attempt against the seeded accounts.

    Returns:
        The account if it exists, is active and the password matches; otherwise None
    """
    account = crud.get_user_by_email(db, email)
    if account is None or not account.is_active:
        return None
    return account if pwd_context.verify(password, account.password_hash) else None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> models.User:
    """
    Resolve the bearer token to a live account.

    Raises:
        HTTPException: 401 for a bad or expired token, or an unknown account
        HTTPException: 403 if the account has been deactivated
    """
    try:
        claims = jwt.decode(credentials.credentials, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise _unauthorized("Could not validate credentials")

    account = crud.get_user(db, claims["sub"]) if claims.get("sub") else None
    if account is None:
        raise _unauthorized("Could not validate credentials")
    if not account.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")
    return account


def require_role(*roles: str, detail: str):
    """Build a dependency that admits only accounts holding one of `roles`."""
    def dependency(current_user: models.User = Depends(get_current_user)) -> models.User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user
    return dependency


require_staff = require_role(*STAFF_ROLES, detail="Manager or admin privileges required")
require_admin = require_role("admin", detail="Admin privileges required")
