from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Optional, List
from haype.models.user import User, UserRole, UserStatus
from haype.core.security import get_password_hash, verify_password
from haype.logger_config import logger


def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    """Get user by database ID."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Get user by email."""
    return db.query(User).filter(User.email == email).first()


def get_user_by_username(db: Session, username: str) -> Optional[User]:
    return db.query(User).filter(User.username == username).first()


def get_all_users(
    db: Session,
    skip: int = 0,
    limit: int = 100,
    role: Optional[UserRole] = None,
    search: Optional[str] = None
) -> tuple[List[User], int]:
    """Get all users with optional filtering."""
    query = db.query(User)

    if role:
        query = query.filter(User.role == role)

    if search:
        search_term = f"%{search}%"
        query = query.filter(
            (User.username.ilike(search_term)) |
            (User.email.ilike(search_term))
        )

    total = query.count()
    users = query.order_by(User.created_at.desc(), User.id.desc()).offset(skip).limit(limit).all()

    return users, total


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: UserRole = UserRole.operator,
) -> User:
    """Create a new user."""
    if get_user_by_email(db, email) or get_user_by_username(db, username):
        raise ValueError("Username or email already exists")

    user = User(
        username=username,
        email=email,
        password_hash=get_password_hash(password),
        role=role,
        status=UserStatus.active,
    )
    db.add(user)

    try:
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error creating user: {str(e)}")
        raise ValueError("Username or email already exists")


def update_user(
    db: Session,
    user_id: int,
    username: Optional[str] = None,
    email: Optional[str] = None,
    password: Optional[str] = None,
    role: Optional[UserRole] = None,
    status: Optional[UserStatus] = None,
) -> Optional[User]:
    """Update user information. A new password is hashed before it is stored."""
    user = get_user_by_id(db, user_id)
    if not user:
        return None

    if username is not None:
        existing_user = get_user_by_username(db, username)
        if existing_user and existing_user.id != user_id:
            raise ValueError("Username is already taken by another user")
        user.username = username
    if email is not None:
        # Check if email is already taken by another user
        existing_user = get_user_by_email(db, email)
        if existing_user and existing_user.id != user_id:
            raise ValueError("Email is already taken by another user")
        user.email = email
    if password is not None:
        user.password_hash = get_password_hash(password)
    if role is not None:
        user.role = role
    if status is not None:
        user.status = status

    try:
        db.commit()
        db.refresh(user)
        return user
    except IntegrityError as e:
        db.rollback()
        logger.error(f"Error updating user: {str(e)}")
        raise ValueError("Failed to update user.")


def delete_user(db: Session, user_id: int) -> bool:
    """Delete a user."""
    user = get_user_by_id(db, user_id)
    if not user:
        return False

    db.delete(user)
    try:
        db.commit()
        return True
    except Exception as e:
        db.rollback()
        logger.error(f"Error deleting user: {str(e)}")
        raise ValueError("Failed to delete user.")


def authenticate_user(db: Session, email: str, password: str) -> Optional[User]:
    """Authenticate an active user by email and password, stamping last_login."""
    user = get_user_by_email(db, email)
    if not user or user.status != UserStatus.active:
        return None

    if not verify_password(password, user.password_hash):
        return None

    user.last_login = datetime.now(timezone.utc)
    db.commit()
    db.refresh(user)
    return user


def ensure_admin_user(db: Session, username: str, email: str, password: str) -> Optional[User]:
    """Create the bootstrap administrator when the users table is empty."""
    if db.query(User).first():
        logger.info("Admin user already exists")
        return None

    user = create_user(db, username=username, email=email, password=password, role=UserRole.administrator)
    logger.info(f"Default admin user created: {user.email}")
    return user
