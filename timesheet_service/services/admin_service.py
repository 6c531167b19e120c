"""Admin service - user management for administrators."""
import logging
from datetime import datetime

from bson import ObjectId

from timesheet_service.models.user import User, UserAdminUpdate, UserSummary
from timesheet_service.services.auth_service import doc_to_user

logger = logging.getLogger(__name__)


class AdminService:
    """Service for administrator operations on user accounts."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.users = db["users"]
        self.timesheets = db["timesheets"]

    async def list_users(self) -> list[UserSummary]:
        """
        List all users, newest first, with their saved timesheet counts.

        Returns:
            List of user summaries
        """
        counts_cursor = self.timesheets.aggregate([
            {"$group": {"_id": "$user_id", "count": {"$sum": 1}}},
        ])
        counts = {
            doc["_id"]: doc["count"]
            for doc in await counts_cursor.to_list(length=None)
        }

        cursor = self.users.find({}).sort("created_at", -1)
        user_docs = await cursor.to_list(length=None)

        return [
            UserSummary(
                **doc_to_user(doc).model_dump(by_alias=True),
                timesheet_count=counts.get(str(doc["_id"]), 0),
            )
            for doc in user_docs
        ]

    async def update_user(
        self,
        user_id: str,
        user_update: UserAdminUpdate,
    ) -> User:
        """
        Change a user's role and/or status.

        Args:
            user_id: ID of the user to change
            user_update: New role and/or status

        Returns:
            Updated user

        Raises:
            ValueError: If nothing to update or user not found
        """
        if user_update.role is None and user_update.status is None:
            raise ValueError("Nothing to update")

        if not ObjectId.is_valid(user_id):
            raise ValueError("User not found")

        update_doc = {"updated_at": datetime.utcnow()}
        if user_update.role is not None:
            update_doc["role"] = user_update.role.value
        if user_update.status is not None:
            update_doc["status"] = user_update.status.value

        updated_doc = await self.users.find_one_and_update(
            {"_id": ObjectId(user_id)},
            {"$set": update_doc},
            return_document=True,
        )

        if not updated_doc:
            raise ValueError("User not found")

        logger.info(
            "Updated user %s: %s",
            user_id,
            ", ".join(f"{key}={value}" for key, value in update_doc.items() if key != "updated_at"),
        )
        return doc_to_user(updated_doc)
