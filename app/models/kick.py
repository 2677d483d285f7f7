"""Kick and comment model definitions."""
from datetime import date, datetime
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints
from pydantic.alias_generators import to_camel

from app.models.user import UserSummary


CAMEL_CASE = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class KickCategory(str, Enum):
    """Closed set of kick categories."""

    TRAVEL = "Travel"
    ADVENTURE = "Adventure"
    HOBBIES = "Hobbies"
    SPORTS = "Sports"
    SKILLS = "Skills"
    FEARS = "Fears"
    OTHER = "Other"


class KickStatus(str, Enum):
    """Kick states."""

    OPEN = "Open"
    COMPLETED = "Completed"


class KickCreate(BaseModel):
    """
    Kick creation payload.

    Required fields are checked by the service so that every absent one
    can be named in a single error. Owner is never read from the body.
    """

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[KickCategory] = None
    status: Optional[KickStatus] = None
    location: Optional[str] = None
    target_date: Optional[date] = None
    completed_date: Optional[date] = None

    model_config = CAMEL_CASE


class KickUpdate(BaseModel):
    """Kick update model - all fields optional."""

    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[KickCategory] = None
    status: Optional[KickStatus] = None
    location: Optional[str] = None
    target_date: Optional[date] = None
    completed_date: Optional[date] = None

    model_config = CAMEL_CASE

    def supplied_fields(self) -> dict:
        """Fields the caller actually set to a value."""
        return self.model_dump(exclude_none=True)


class KickStatusUpdate(BaseModel):
    status: Optional[KickStatus] = None


class CommentText(BaseModel):
    """Body for creating or editing a comment."""

    text: Optional[str] = None

    def cleaned(self) -> str:
        return (self.text or "").strip()


class KickDocument(BaseModel):
    """
    Write-time validator for the mutable part of a kick document.

    Runs on create and again on the merged result of a partial update,
    so required and enum constraints hold for every stored kick.
    """

    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    description: Optional[str] = None
    category: KickCategory
    status: KickStatus = KickStatus.OPEN
    location: Optional[str] = None
    target_date: Optional[date] = None
    completed_date: Optional[date] = None


class Comment(BaseModel):
    """Comment embedded in a kick."""

    id: str = Field(alias="_id", serialization_alias="id")
    text: str
    author_id: str
    author: Optional[UserSummary] = None
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_CASE


class Kick(BaseModel):
    """Full kick model with database fields."""

    id: str = Field(alias="_id", serialization_alias="id")
    title: str
    description: Optional[str] = None
    category: KickCategory
    status: KickStatus = KickStatus.OPEN
    location: Optional[str] = None
    target_date: Optional[date] = None
    completed_date: Optional[date] = None
    owner_id: str
    owner: Optional[UserSummary] = None
    comments: list[Comment] = []
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_CASE


class MessageResponse(BaseModel):
    message: str
