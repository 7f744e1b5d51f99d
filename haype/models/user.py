from sqlalchemy import Column, Enum, Integer, String, DateTime
from sqlalchemy.sql import func
import enum
from haype.core.database import Base


class UserRole(str, enum.Enum):
    administrator = "Administrator"
    manager = "Manager"
    operator = "Operator"


class UserStatus(str, enum.Enum):
    active = "Active"
    inactive = "Inactive"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(Enum(UserRole), nullable=False, default=UserRole.operator)
    status = Column(Enum(UserStatus), nullable=False, default=UserStatus.active)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.administrator

    def __repr__(self):
        return f"<User(username='{self.username}', email='{self.email}')>"
