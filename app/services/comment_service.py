"""Comment service - comments embedded in a kick."""
from datetime import datetime, timezone

from bson import ObjectId

from app.database import store_errors
from app.errors import (
    AuthzError,
    AuthzKind,
    NotFoundError,
    NotFoundKind,
    ValidationError,
)
from app.logging_config import get_logger
from app.models.kick import Comment, CommentText
from app.services.auth_service import resolve_user_summaries
from app.services.kick_service import doc_to_comment
from app.utils.ids import parse_object_id


logger = get_logger(__name__)


class CommentService:
    """
    Service for handling comments on kicks.

    Comments live inside their kick document. Every write touches only the
    comment list (plus the kick's ``updated_at``) through ``$push``,
    positional ``$set`` or ``$pull``, so concurrent writers never overwrite
    each other's comments.
    """

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.kicks = db["kicks"]
        self.users = db["users"]

    async def _find_comment(self, kick_id: ObjectId, comment_id: ObjectId) -> dict:
        with store_errors("find comment"):
            doc = await self.kicks.find_one({"_id": kick_id}, {"comments": 1})

        if not doc:
            raise NotFoundError(NotFoundKind.KICK)

        for comment in doc.get("comments", []):
            if comment["_id"] == comment_id:
                return comment

        raise NotFoundError(NotFoundKind.COMMENT)

    async def _check_author(
        self, kick_id: str, comment_id: str, caller_id: str
    ) -> tuple[ObjectId, ObjectId, dict]:
        kick_object_id = parse_object_id(kick_id, "kick id")
        comment_object_id = parse_object_id(comment_id, "comment id")

        comment = await self._find_comment(kick_object_id, comment_object_id)
        if comment["author_id"] != caller_id:
            logger.info("User %s denied change to comment %s", caller_id, comment_id)
            raise AuthzError(AuthzKind.NOT_AUTHOR)

        return kick_object_id, comment_object_id, comment

    async def add_comment(self, kick_id: str, author_id: str, body: CommentText) -> Comment:
        """
        Append a comment to any existing kick.

        Args:
            kick_id: Parent kick ID
            author_id: ID of the authenticated caller
            body: Comment text

        Returns:
            Created comment

        Raises:
            ValidationError: If the id is malformed or the text is empty
            NotFoundError: If the kick does not exist
        """
        kick_object_id = parse_object_id(kick_id, "kick id")

        text = body.cleaned()
        if not text:
            raise ValidationError.missing_fields(["text"])

        now = datetime.now(timezone.utc)
        comment_doc = {
            "_id": ObjectId(),
            "text": text,
            "author_id": author_id,
            "created_at": now,
            "updated_at": now,
        }

        with store_errors("add comment"):
            result = await self.kicks.update_one(
                {"_id": kick_object_id},
                {"$push": {"comments": comment_doc}, "$set": {"updated_at": now}},
            )

        if result.matched_count == 0:
            raise NotFoundError(NotFoundKind.KICK)

        users = await resolve_user_summaries(self.users, [author_id])
        return doc_to_comment(comment_doc, users)

    async def update_comment(
        self, kick_id: str, comment_id: str, caller_id: str, body: CommentText
    ) -> Comment:
        """
        Replace the text of a comment the caller wrote.

        Owning the kick is not enough; only the comment's author may edit it.

        Raises:
            ValidationError: If an id is malformed or the text is empty
            NotFoundError: If the kick or comment does not exist
            AuthzError: If the caller is not the comment's author
        """
        text = body.cleaned()
        if not text:
            raise ValidationError.missing_fields(["text"])

        kick_object_id, comment_object_id, comment = await self._check_author(
            kick_id, comment_id, caller_id
        )

        now = datetime.now(timezone.utc)
        with store_errors("update comment"):
            result = await self.kicks.update_one(
                {
                    "_id": kick_object_id,
                    "comments": {"$elemMatch": {"_id": comment_object_id, "author_id": caller_id}},
                },
                {
                    "$set": {
                        "comments.$.text": text,
                        "comments.$.updated_at": now,
                        "updated_at": now,
                    }
                },
            )

        if result.matched_count == 0:
            raise NotFoundError(NotFoundKind.COMMENT)

        users = await resolve_user_summaries(self.users, [caller_id])
        return doc_to_comment({**comment, "text": text, "updated_at": now}, users)

    async def delete_comment(self, kick_id: str, comment_id: str, caller_id: str) -> dict:
        """
        Remove one comment the caller wrote.

        Raises:
            ValidationError: If an id is malformed
            NotFoundError: If the kick or comment does not exist
            AuthzError: If the caller is not the comment's author
        """
        kick_object_id, comment_object_id, _ = await self._check_author(
            kick_id, comment_id, caller_id
        )

        with store_errors("delete comment"):
            result = await self.kicks.update_one(
                {
                    "_id": kick_object_id,
                    "comments": {"$elemMatch": {"_id": comment_object_id, "author_id": caller_id}},
                },
                {
                    "$pull": {"comments": {"_id": comment_object_id}},
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
            )

        if result.matched_count == 0:
            raise NotFoundError(NotFoundKind.COMMENT)

        return {"message": "Comment deleted successfully"}
