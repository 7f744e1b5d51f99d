from datetime import timedelta
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from haype.core.dependencies import get_db, get_current_active_user, require_admin
from haype.core.security import create_access_token
from haype.core.config import settings
from haype.services.user_service import authenticate_user, create_user
from haype.schemas.auth import LoginRequest, LoginResponse, Logout, RegisterRequest, RegisterResponse, VerifyResponse
from haype.logger_config import logger
from haype.models.user import User

router = APIRouter()


def _user_payload(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "email": user.email,
        "role": user.role.value,
        "status": user.status.value,
    }


@router.post("/login", response_model=LoginResponse)
def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Login endpoint - Authenticate user and return JWT token.
    """
    try:
        logger.info(f"Login attempt for email: {login_data.email}")

        user = authenticate_user(db, login_data.email, login_data.password)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid credentials"
            )

        access_token = create_access_token(
            data={"sub": user.email, "user_id": user.id, "role": user.role.value},
            expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        )

        logger.info(f"User {user.email} logged in successfully")

        return LoginResponse(
            access_token=access_token,
            token_type="bearer",
            user=_user_payload(user)
        )
    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during login"
        )


@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(
    register_data: RegisterRequest,
    current_user: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    """
    Create a user account. Administrators only.
    """
    try:
        user = create_user(
            db=db,
            username=register_data.username,
            email=register_data.email,
            password=register_data.password,
            role=register_data.role
        )
        logger.info(f"User {user.email} registered by {current_user.email}")
        return RegisterResponse(message="User registered successfully", user_id=user.id)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )
    except Exception as e:
        logger.error(f"Error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An error occurred during registration"
        )


@router.get("/verify", response_model=VerifyResponse)
def verify(current_user: User = Depends(get_current_active_user)):
    """Return the user the bearer token belongs to."""
    return VerifyResponse(user=_user_payload(current_user))


@router.get("/logout", response_model=Logout)
def logout():
    """
    Tokens are stateless; the client discards its copy.
    """
    logger.info("User Logged out")
    return Logout(message="Logged out Successfully")
