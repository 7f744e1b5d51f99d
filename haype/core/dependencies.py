from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from haype.core.database import SessionLocal
from haype.core.security import decode_access_token
from haype.models.user import User, UserStatus


def get_db():
    """Dependency to get database session."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# HTTPBearer makes Swagger ask for a token
bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> User:
    """
    Get the currently authenticated user from the JWT token.
    Raises 401 if the token is missing or invalid or the user does not exist.
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if not payload:
        raise _unauthorized("Invalid token")

    user_email = payload.get("sub")
    if not user_email:
        raise _unauthorized("Token payload missing subject")

    user = db.query(User).filter(User.email == user_email).first()
    if not user:
        raise _unauthorized("User not found")

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user)
) -> User:
    """Reject users that were deactivated after their token was issued."""
    if current_user.status != UserStatus.active:
        raise _unauthorized("User is inactive")
    return current_user


def require_admin(
    current_user: User = Depends(get_current_active_user)
) -> User:
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Administrator access required"
        )
    return current_user
