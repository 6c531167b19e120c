"""Timesheet router - weekly timesheet endpoints."""
from datetime import date

from fastapi import APIRouter, Depends, HTTPException, status

from timesheet_service.database import get_database
from timesheet_service.models.timesheet import WeekNavigation, WeekTimesheet
from timesheet_service.models.user import User
from timesheet_service.routers.auth import get_active_user
from timesheet_service.services.timesheet_service import TimesheetService
from timesheet_service.utils.week import recompute, shift_week, week_start_for

router = APIRouter(prefix="/timesheets", tags=["timesheets"])


@router.get("/current", response_model=WeekTimesheet)
async def get_current_week(
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """Get this week's timesheet, saved or freshly initialised."""
    service = TimesheetService(db)
    return await service.get_or_initialize_week(
        user_id=user.id,
        week_start=week_start_for(date.today()),
    )


@router.post("/recompute", response_model=WeekTimesheet)
async def recompute_week(
    week: WeekTimesheet,
    user: User = Depends(get_active_user),
):
    """
    Recompute the totals of an edited week without saving it.

    - Requires an active account
    - Submitted totals are ignored and rebuilt from start, finish and break
    """
    return recompute(week)


@router.get("/{day}/navigation", response_model=WeekNavigation)
async def get_week_navigation(
    day: date,
    user: User = Depends(get_active_user),
):
    """Get the week containing ``day`` and its neighbouring week starts."""
    week_start = week_start_for(day)
    return WeekNavigation(
        week_start=week_start,
        previous_week=shift_week(week_start, -1),
        next_week=shift_week(week_start, 1),
        current_week=week_start_for(date.today()),
    )


@router.get("/{day}", response_model=WeekTimesheet)
async def get_week(
    day: date,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Get the timesheet for the week containing ``day``.

    - Any date jumps to the Monday of its week
    - Weeks never saved come back seeded with the default schedule
    """
    service = TimesheetService(db)
    return await service.get_or_initialize_week(
        user_id=user.id,
        week_start=week_start_for(day),
    )


@router.put("/{day}", response_model=WeekTimesheet)
async def save_week(
    day: date,
    week: WeekTimesheet,
    user: User = Depends(get_active_user),
    db=Depends(get_database),
):
    """
    Save the timesheet for the week containing ``day``.

    - The body's week start must be that week's Monday
    - Every day is replaced; totals are recomputed before saving

    Raises:
        HTTPException: If the body is for a different week (400)
    """
    if week.week_start != week_start_for(day):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Timesheet week does not match the requested week",
        )

    service = TimesheetService(db)
    return await service.save_week(user_id=user.id, week=week)
