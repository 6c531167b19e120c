"""Authentication service - business logic for user sign-in."""
import logging
from datetime import datetime

from bson import ObjectId

from timesheet_service.config import settings
from timesheet_service.models.user import Identity, User, UserRole, UserStatus
from timesheet_service.utils.auth import create_access_token

logger = logging.getLogger(__name__)


def doc_to_user(doc: dict) -> User:
    """Convert database document to User model."""
    return User(
        _id=str(doc["_id"]),
        email=doc["email"],
        name=doc["name"],
        role=doc.get("role", UserRole.USER.value),
        status=doc.get("status", UserStatus.PENDING.value),
        default_template_id=doc.get("default_template_id"),
        last_login_at=doc.get("last_login_at"),
        created_at=doc["created_at"],
        updated_at=doc["updated_at"],
    )


class AuthService:
    """Service for handling user authentication."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]

    async def sign_in(self, identity: Identity) -> str:
        """
        Sign in a verified identity and return a JWT token.

        First sign-in creates the account. Accounts for configured admin
        emails start active with the admin role; all others start pending
        until an administrator activates them.

        Args:
            identity: Identity verified by the sign-in provider

        Returns:
            JWT access token

        Raises:
            ValueError: If the account is inactive
        """
        now = datetime.utcnow()
        email = identity.email.lower()

        user_doc = await self.users.find_one({"email": email})

        if not user_doc:
            is_admin = email in settings.admin_emails_list
            user_doc = {
                "email": email,
                "name": identity.name,
                "subject": identity.subject,
                "role": UserRole.ADMIN.value if is_admin else UserRole.USER.value,
                "status": UserStatus.ACTIVE.value if is_admin else UserStatus.PENDING.value,
                "default_template_id": None,
                "last_login_at": now,
                "created_at": now,
                "updated_at": now,
            }
            result = await self.users.insert_one(user_doc)
            user_doc["_id"] = result.inserted_id
            logger.info("Created %s account for %s", user_doc["role"], email)
        else:
            if user_doc.get("status") == UserStatus.INACTIVE.value:
                logger.info("Rejected sign-in for inactive account %s", email)
                raise ValueError("Account inactive")

            await self.users.update_one(
                {"_id": user_doc["_id"]},
                {"$set": {"last_login_at": now}},
            )

        return create_access_token(user_id=str(user_doc["_id"]))

    async def get_user_by_id(self, user_id: str) -> User:
        """
        Get user by ID.

        Args:
            user_id: User ID

        Returns:
            User object

        Raises:
            ValueError: If user not found
        """
        if not ObjectId.is_valid(user_id):
            raise ValueError("Invalid user ID format")

        user_doc = await self.users.find_one({"_id": ObjectId(user_id)})
        if not user_doc:
            raise ValueError("User not found")

        return doc_to_user(user_doc)
