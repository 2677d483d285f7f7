"""Kick service - business logic for kicks and their ownership rules."""
from datetime import date, datetime, timezone
from enum import Enum
from typing import Optional

from bson import ObjectId
from pydantic import ValidationError as PydanticValidationError
from pymongo import DESCENDING, ReturnDocument

from app.database import store_errors
from app.errors import (
    AuthzError,
    AuthzKind,
    NotFoundError,
    NotFoundKind,
    ValidationError,
    ValidationKind,
    format_validation_errors,
    is_enum_error,
)
from app.logging_config import get_logger
from app.models.kick import (
    Comment,
    Kick,
    KickCreate,
    KickDocument,
    KickStatus,
    KickUpdate,
)
from app.models.user import UserSummary
from app.services.auth_service import resolve_user_summaries
from app.utils.ids import parse_object_id


logger = get_logger(__name__)


def as_date(value) -> Optional[date]:
    """Stored dates come back from MongoDB as datetimes."""
    if isinstance(value, datetime):
        return value.date()
    return value


def to_storage(fields: dict) -> dict:
    """Convert validated field values into BSON friendly values."""
    stored = {}
    for key, value in fields.items():
        if isinstance(value, Enum):
            value = value.value
        elif isinstance(value, date) and not isinstance(value, datetime):
            value = datetime.combine(value, datetime.min.time())
        stored[key] = value
    return stored


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def doc_to_comment(doc: dict, users: dict[str, UserSummary]) -> Comment:
    """Convert an embedded comment document to a Comment model."""
    return Comment(
        _id=str(doc["_id"]),
        text=doc["text"],
        author_id=doc["author_id"],
        author=users.get(doc["author_id"]),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class KickService:
    """Service for handling kick operations."""

    def __init__(
        self,
        db,
        description_required: bool = False,
        restrict_reads_to_owner: bool = False,
    ):
        """
        Initialize service with database connection.

        Args:
            db: Database connection
            description_required: Whether kicks must have a description
            restrict_reads_to_owner: Whether fetching a kick by id is
                limited to its owner
        """
        self.db = db
        self.kicks = db["kicks"]
        self.users = db["users"]
        self.description_required = description_required
        self.restrict_reads_to_owner = restrict_reads_to_owner

    def _doc_to_kick(self, doc: dict, users: dict[str, UserSummary]) -> Kick:
        """
        Convert database document to Kick model.

        Handles datetime to date conversion for date fields.
        """
        return Kick(
            _id=str(doc["_id"]),
            title=doc["title"],
            description=doc.get("description"),
            category=doc["category"],
            status=doc.get("status", KickStatus.OPEN.value),
            location=doc.get("location"),
            target_date=as_date(doc.get("target_date")),
            completed_date=as_date(doc.get("completed_date")),
            owner_id=doc["owner_id"],
            owner=users.get(doc["owner_id"]),
            comments=[doc_to_comment(c, users) for c in doc.get("comments", [])],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def _resolve(self, doc: dict, with_comments: bool = False) -> Kick:
        user_ids = [doc["owner_id"]]
        if with_comments:
            user_ids.extend(c["author_id"] for c in doc.get("comments", []))
        users = await resolve_user_summaries(self.users, user_ids)
        return self._doc_to_kick(doc, users)

    def _validate_document(self, data: dict) -> dict:
        """
        Run the write-time validators over a full set of kick fields.

        Raises:
            ValidationError: If a required field is empty or an enum value
                is outside its set
        """
        if self.description_required and is_blank(data.get("description")):
            raise ValidationError.missing_fields(["description"])

        try:
            document = KickDocument.model_validate(data)
        except PydanticValidationError as e:
            errors = e.errors()
            kind = ValidationKind.INVALID_ENUM if is_enum_error(errors) else ValidationKind.INVALID
            raise ValidationError(format_validation_errors(errors), kind) from e

        return document.model_dump()

    async def _get_owned_doc(self, kick_id: str, caller_id: str) -> tuple[ObjectId, dict]:
        """
        Load a kick the caller is about to change.

        Raises:
            ValidationError: If the kick id is malformed
            NotFoundError: If the kick does not exist
            AuthzError: If the caller is not the owner
        """
        object_id = parse_object_id(kick_id, "kick id")

        with store_errors("find kick"):
            doc = await self.kicks.find_one({"_id": object_id})

        if not doc:
            raise NotFoundError(NotFoundKind.KICK)
        if doc["owner_id"] != caller_id:
            logger.info("User %s denied change to kick %s", caller_id, kick_id)
            raise AuthzError(AuthzKind.NOT_OWNER)

        return object_id, doc

    async def create_kick(self, owner_id: str, kick_create: KickCreate) -> Kick:
        """
        Create a new kick owned by the caller.

        Args:
            owner_id: ID of the authenticated caller
            kick_create: Kick creation data

        Returns:
            Created kick object

        Raises:
            ValidationError: If required fields are missing or invalid.
                Nothing is written in that case.
        """
        data = kick_create.model_dump(exclude_none=True)

        required = ["title"]
        if self.description_required:
            required.append("description")
        required.append("category")

        missing = [field for field in required if is_blank(data.get(field))]
        if missing:
            raise ValidationError.missing_fields(missing)

        validated = self._validate_document(data)

        now = datetime.now(timezone.utc)
        kick_doc = {
            **to_storage(validated),
            "owner_id": owner_id,
            "comments": [],
            "created_at": now,
            "updated_at": now,
        }

        with store_errors("create kick"):
            result = await self.kicks.insert_one(kick_doc)

        kick_doc["_id"] = result.inserted_id
        logger.info("User %s created kick %s", owner_id, result.inserted_id)

        return await self._resolve(kick_doc)

    async def list_kicks(self, owner_id: str) -> list[Kick]:
        """
        List the caller's kicks, newest first.

        Args:
            owner_id: ID of the authenticated caller

        Returns:
            List of kicks with the owner resolved
        """
        with store_errors("list kicks"):
            cursor = self.kicks.find(
                {"owner_id": owner_id},
                sort=[("created_at", DESCENDING), ("_id", DESCENDING)],
            )
            kick_docs = await cursor.to_list(length=None)

        if not kick_docs:
            return []

        users = await resolve_user_summaries(self.users, [owner_id])
        return [self._doc_to_kick(doc, users) for doc in kick_docs]

    async def get_kick(self, kick_id: str, caller_id: str) -> Kick:
        """
        Get a single kick by id, with owner and comment authors resolved.

        Any authenticated caller may read any kick unless the service was
        created with ``restrict_reads_to_owner``.

        Raises:
            ValidationError: If the kick id is malformed
            NotFoundError: If the kick does not exist
            AuthzError: If reads are restricted and the caller is not the owner
        """
        object_id = parse_object_id(kick_id, "kick id")

        with store_errors("get kick"):
            doc = await self.kicks.find_one({"_id": object_id})

        if not doc:
            raise NotFoundError(NotFoundKind.KICK)
        if self.restrict_reads_to_owner and doc["owner_id"] != caller_id:
            raise AuthzError(AuthzKind.NOT_OWNER)

        return await self._resolve(doc, with_comments=True)

    async def update_kick(self, kick_id: str, caller_id: str, kick_update: KickUpdate) -> Kick:
        """
        Apply a partial update to a kick the caller owns.

        Only supplied fields change. The merged kick is validated before
        the write, and the write itself is conditional on ownership.

        Raises:
            ValidationError: If the id is malformed, no field was supplied,
                or the result would be invalid
            NotFoundError: If the kick does not exist
            AuthzError: If the caller is not the owner
        """
        parse_object_id(kick_id, "kick id")

        updates = kick_update.supplied_fields()
        if not updates:
            raise ValidationError(
                "At least one field is required for update", ValidationKind.NO_FIELDS
            )

        object_id, existing = await self._get_owned_doc(kick_id, caller_id)

        merged = {
            field: as_date(existing[field])
            for field in KickDocument.model_fields
            if existing.get(field) is not None
        }
        merged.update(updates)
        validated = self._validate_document(merged)

        supplied = {field: validated[field] for field in updates}
        update_doc = {**to_storage(supplied), "updated_at": datetime.now(timezone.utc)}

        with store_errors("update kick"):
            updated_doc = await self.kicks.find_one_and_update(
                {"_id": object_id, "owner_id": caller_id},
                {"$set": update_doc},
                return_document=ReturnDocument.AFTER,
            )

        if not updated_doc:
            # Deleted between the ownership check and the write
            raise NotFoundError(NotFoundKind.KICK)

        return await self._resolve(updated_doc, with_comments=True)

    async def update_status(
        self, kick_id: str, caller_id: str, status: Optional[KickStatus]
    ) -> Kick:
        """
        Move a kick between Open and Completed.

        Raises:
            ValidationError: If status is missing
            NotFoundError: If the kick does not exist
            AuthzError: If the caller is not the owner
        """
        if status is None:
            raise ValidationError.missing_fields(["status"])

        return await self.update_kick(kick_id, caller_id, KickUpdate(status=status))

    async def delete_kick(self, kick_id: str, caller_id: str) -> dict:
        """
        Delete a kick the caller owns, along with its comments.

        Returns:
            Dictionary with a confirmation message

        Raises:
            ValidationError: If the kick id is malformed
            NotFoundError: If the kick does not exist
            AuthzError: If the caller is not the owner
        """
        object_id, _ = await self._get_owned_doc(kick_id, caller_id)

        with store_errors("delete kick"):
            result = await self.kicks.delete_one({"_id": object_id, "owner_id": caller_id})

        if result.deleted_count == 0:
            raise NotFoundError(NotFoundKind.KICK)

        logger.info("User %s deleted kick %s", caller_id, kick_id)
        return {"message": "Kick deleted successfully"}
