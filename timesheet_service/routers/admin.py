"""Admin router - user management endpoints."""
from fastapi import APIRouter, Depends, HTTPException, status

from timesheet_service.database import get_database
from timesheet_service.models.user import User, UserAdminUpdate, UserSummary
from timesheet_service.routers.auth import require_admin
from timesheet_service.services.admin_service import AdminService

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/users", response_model=list[UserSummary])
async def list_users(
    admin: User = Depends(require_admin),
    db=Depends(get_database),
):
    """
    List all users, newest first.

    - Requires an active admin account
    """
    service = AdminService(db)
    return await service.list_users()


@router.patch("/users/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    user_update: UserAdminUpdate,
    admin: User = Depends(require_admin),
    db=Depends(get_database),
):
    """
    Change a user's role and/or status.

    Raises:
        HTTPException: If nothing to update (400) or user not found (404)
    """
    service = AdminService(db)

    try:
        return await service.update_user(user_id=user_id, user_update=user_update)
    except ValueError as e:
        code = (
            status.HTTP_404_NOT_FOUND
            if str(e) == "User not found"
            else status.HTTP_400_BAD_REQUEST
        )
        raise HTTPException(status_code=code, detail=str(e))
