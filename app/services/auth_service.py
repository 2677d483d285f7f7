"""Authentication service - account directory, sign-up and sign-in."""
from datetime import datetime, timezone
from typing import Iterable, Optional

from bson import ObjectId

from app.database import store_errors
from app.errors import (
    AuthError,
    AuthKind,
    ConflictError,
    ConflictKind,
    NotFoundError,
    NotFoundKind,
    ValidationError,
)
from app.logging_config import get_logger
from app.models.user import (
    AuthResponse,
    SigninRequest,
    SignupRequest,
    User,
    UserInDB,
    UserSummary,
)
from app.utils.auth import TokenService, hash_password, verify_password
from app.utils.ids import is_object_id


logger = get_logger(__name__)


class AuthService:
    """Service for handling accounts and authentication."""

    def __init__(self, db, tokens: TokenService):
        """Initialize service with database connection and token service."""
        self.db = db
        self.users = db["users"]
        self.tokens = tokens

    def _doc_to_user(self, doc: dict) -> UserInDB:
        return UserInDB(
            _id=str(doc["_id"]),
            username=doc["username"],
            name=doc["name"],
            email=doc["email"],
            hashed_password=doc["hashed_password"],
            created_at=doc["created_at"],
            updated_at=doc["updated_at"],
        )

    async def find_by_username(self, username: str) -> Optional[UserInDB]:
        with store_errors("find user by username"):
            doc = await self.users.find_one({"username": username})
        return self._doc_to_user(doc) if doc else None

    async def find_by_id(self, user_id: str) -> Optional[UserInDB]:
        if not is_object_id(user_id):
            return None
        with store_errors("find user by id"):
            doc = await self.users.find_one({"_id": ObjectId(user_id)})
        return self._doc_to_user(doc) if doc else None

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get the public representation of a user.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = await self.find_by_id(user_id)
        if user is None:
            raise NotFoundError(NotFoundKind.ACCOUNT)
        return user.to_public()

    async def create_account(
        self, username: str, name: str, email: str, hashed_password: str
    ) -> UserInDB:
        """
        Insert a new account.

        Raises:
            ConflictError: If the username or email is already taken. The
                unique indexes decide this, not any earlier lookup.
        """
        now = datetime.now(timezone.utc)
        user_doc = {
            "username": username,
            "name": name,
            "email": email,
            "hashed_password": hashed_password,
            "created_at": now,
            "updated_at": now,
        }

        with store_errors("create account"):
            result = await self.users.insert_one(user_doc)

        user_doc["_id"] = result.inserted_id
        return self._doc_to_user(user_doc)

    def _auth_response(self, user: UserInDB) -> AuthResponse:
        token = self.tokens.issue(user_id=user.id, username=user.username)
        return AuthResponse(token=token, user=user.to_public())

    async def signup(self, request: SignupRequest) -> AuthResponse:
        """
        Register a new account and sign it in.

        Raises:
            ValidationError: If any of username, password, name, email is absent
            ConflictError: If the username (or email) is already taken
        """
        missing = request.missing_fields()
        if missing:
            raise ValidationError.missing_fields(missing)

        if await self.find_by_username(request.username):
            raise ConflictError(ConflictKind.HANDLE_TAKEN)

        user = await self.create_account(
            username=request.username,
            name=request.name,
            email=str(request.email),
            hashed_password=hash_password(request.password),
        )
        logger.info("Registered user %s", user.username)

        return self._auth_response(user)

    async def signin(self, request: SigninRequest) -> AuthResponse:
        """
        Check credentials and issue a token.

        Unknown usernames and wrong passwords fail the same way so the
        response does not reveal which accounts exist.

        Raises:
            ValidationError: If username or password is absent
            AuthError: INVALID_CREDENTIALS
        """
        missing = request.missing_fields()
        if missing:
            raise ValidationError.missing_fields(missing)

        user = await self.find_by_username(request.username)
        if user is None or not verify_password(request.password, user.hashed_password):
            raise AuthError(AuthKind.INVALID_CREDENTIALS)

        return self._auth_response(user)


async def resolve_user_summaries(users, user_ids: Iterable[str]) -> dict[str, UserSummary]:
    """
    Resolve user ids to their minimal public projection.

    Ids that are malformed or no longer exist are left out of the result.

    Args:
        users: The users collection
        user_ids: Ids to resolve, duplicates allowed

    Returns:
        Mapping of user id to UserSummary
    """
    object_ids = list({ObjectId(uid) for uid in user_ids if is_object_id(uid)})
    if not object_ids:
        return {}

    with store_errors("resolve users"):
        cursor = users.find({"_id": {"$in": object_ids}}, {"username": 1})
        docs = await cursor.to_list(length=None)

    return {
        str(doc["_id"]): UserSummary(_id=str(doc["_id"]), username=doc["username"])
        for doc in docs
    }
