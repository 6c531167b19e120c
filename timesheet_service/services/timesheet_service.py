"""Timesheet service - loading and saving weekly timesheets."""
import logging
from datetime import date, datetime
from typing import Optional

from timesheet_service.models.timesheet import DAY_NAMES, DayRecord, WeekTimesheet
from timesheet_service.utils.week import initialize_week, recompute

logger = logging.getLogger(__name__)


def _week_key(week_start: date) -> datetime:
    # BSON has no date type; store the Monday at midnight
    return datetime.combine(week_start, datetime.min.time())


class TimesheetService:
    """Service for weekly timesheet operations."""

    def __init__(self, db):
        """Initialize service with database connection."""
        self.db = db
        self.timesheets = db["timesheets"]

    def _doc_to_week(self, doc: dict) -> WeekTimesheet:
        """
        Convert database document to WeekTimesheet model.

        Stored totals are discarded and rebuilt from the day fields.
        """
        week_start = doc["week_start"]
        if isinstance(week_start, datetime):
            week_start = week_start.date()

        days = doc.get("days", {})
        week = WeekTimesheet(
            week_start=week_start,
            weekly_total=doc.get("weekly_total", "0:00"),
            data={name: DayRecord(**days.get(name, {})) for name in DAY_NAMES},
        )
        return recompute(week)

    def _week_to_doc(self, week: WeekTimesheet) -> dict:
        return {
            "weekly_total": week.weekly_total,
            "days": {
                name: {
                    "date": day.date,
                    "start": day.start,
                    "break_hours": day.break_hours,
                    "break_minutes": day.break_minutes,
                    "finish": day.finish,
                    "total": day.total,
                }
                for name, day in week.data.items()
            },
        }

    async def get_week(
        self,
        user_id: str,
        week_start: date,
    ) -> Optional[WeekTimesheet]:
        """
        Get the saved timesheet for a week.

        Args:
            user_id: User ID
            week_start: Monday of the week

        Returns:
            Saved week with recomputed totals, or None if never saved
        """
        doc = await self.timesheets.find_one({
            "user_id": user_id,
            "week_start": _week_key(week_start),
        })

        if not doc:
            return None

        return self._doc_to_week(doc)

    async def get_or_initialize_week(
        self,
        user_id: str,
        week_start: date,
    ) -> WeekTimesheet:
        """Get the saved week, or a fresh one seeded with the default schedule."""
        week = await self.get_week(user_id=user_id, week_start=week_start)
        if week is None:
            week = initialize_week(week_start)
        return week

    async def save_week(
        self,
        user_id: str,
        week: WeekTimesheet,
    ) -> WeekTimesheet:
        """
        Save a week, replacing every stored day.

        Args:
            user_id: User ID
            week: Week to save; totals are recomputed before storing

        Returns:
            The saved week
        """
        week = recompute(week)
        now = datetime.utcnow()

        update_doc = self._week_to_doc(week)
        update_doc["updated_at"] = now

        await self.timesheets.update_one(
            {"user_id": user_id, "week_start": _week_key(week.week_start)},
            {"$set": update_doc, "$setOnInsert": {"created_at": now}},
            upsert=True,
        )

        logger.info(
            "Saved timesheet for user %s week %s (%s)",
            user_id, week.week_start.isoformat(), week.weekly_total,
        )
        return week
