"""User model definitions."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserRole(str, Enum):
    """User roles."""

    USER = "USER"
    ADMIN = "ADMIN"


class UserStatus(str, Enum):
    """Account status. Only active accounts may use the service."""

    PENDING = "PENDING"
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"


class UserBase(BaseModel):
    """Base user fields."""

    email: EmailStr
    name: str


class Identity(UserBase):
    """Verified identity returned by the sign-in provider."""

    subject: str


class User(UserBase):
    """User model (for API responses)."""

    id: str = Field(alias="_id", serialization_alias="id")
    role: UserRole = UserRole.USER
    status: UserStatus = UserStatus.PENDING
    default_template_id: Optional[str] = None
    last_login_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    model_config = {"populate_by_name": True}


class UserSummary(User):
    """User model with activity counts for the admin listing."""

    timesheet_count: int = 0


class UserAdminUpdate(BaseModel):
    """Admin update model - role and status both optional."""

    role: Optional[UserRole] = None
    status: Optional[UserStatus] = None
