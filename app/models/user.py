"""User model definitions."""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel


class UserBase(BaseModel):
    """Base user fields."""

    username: str
    name: str
    email: EmailStr


class SignupRequest(BaseModel):
    """Sign-up payload. Fields are optional so absent ones can be reported together."""

    username: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_absent(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value

    def missing_fields(self) -> list[str]:
        return [
            field
            for field in ("username", "password", "name", "email")
            if not getattr(self, field)
        ]


class SigninRequest(BaseModel):
    """Sign-in payload."""

    username: Optional[str] = None
    password: Optional[str] = None

    def missing_fields(self) -> list[str]:
        return [field for field in ("username", "password") if not getattr(self, field)]


class User(UserBase):
    """User model without password (for API responses)."""

    id: str = Field(alias="_id", serialization_alias="id")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UserInDB(User):
    """User model with hashed password (for database storage)."""

    hashed_password: str

    def to_public(self) -> User:
        return User.model_validate(self.model_dump(exclude={"hashed_password"}))


class UserSummary(BaseModel):
    """Minimal public projection used when resolving owners and authors."""

    id: str = Field(alias="_id", serialization_alias="id")
    username: str

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AuthResponse(BaseModel):
    """Token plus the public account it was issued for."""

    token: str
    user: User
