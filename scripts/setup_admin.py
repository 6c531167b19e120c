"""Promote a user to an active administrator."""
import asyncio
import sys
from datetime import datetime

from motor.motor_asyncio import AsyncIOMotorClient


async def setup_admin(mongodb_url: str, db_name: str, email: str):
    """Give the user with this email the ADMIN role and ACTIVE status."""
    client = AsyncIOMotorClient(mongodb_url)
    db = client[db_name]

    result = await db["users"].update_many(
        {"email": email.lower()},
        {"$set": {"role": "ADMIN", "status": "ACTIVE", "updated_at": datetime.utcnow()}},
    )
    print(f"Matched {result.matched_count} user(s), updated {result.modified_count}")

    print("Current users:")
    async for user in db["users"].find({}).sort("created_at", -1):
        print(f"  {user['email']:<40} {user.get('role', '-'):<6} {user.get('status', '-')}")

    client.close()


if __name__ == "__main__":
    if len(sys.argv) not in (3, 4):
        print("Usage: python setup_admin.py <mongodb_url> <email> [db_name]")
        sys.exit(1)

    db_name = sys.argv[3] if len(sys.argv) == 4 else "timesheets"
    asyncio.run(setup_admin(sys.argv[1], db_name, sys.argv[2]))
