"""Daily and weekly hour totals."""
import logging
from datetime import date, timedelta

from timesheet_service.models.timesheet import DAY_NAMES, DayRecord, WeekTimesheet
from timesheet_service.utils.time_arithmetic import to_clock_string, to_minutes

logger = logging.getLogger(__name__)

DEFAULT_START = "08:30"
DEFAULT_FINISH = "17:00"
DEFAULT_BREAK_HOURS = 0
DEFAULT_BREAK_MINUTES = 30
WORKDAYS_PER_WEEK = 5
DATE_LABEL_FORMAT = "%d/%m/%Y"


def compute_day_total(day: DayRecord) -> int:
    """
    Compute worked minutes for one day.

    A day without both a start and a finish counts as zero. Spans that
    come out zero or negative after the break (including finishes past
    midnight) are floored to zero.

    Examples:
        >>> compute_day_total(DayRecord(start="08:30", finish="17:00", break_minutes=30))
        480
        >>> compute_day_total(DayRecord(start="08:00", finish="08:00"))
        0
    """
    if not day.start or not day.finish:
        return 0

    break_minutes = day.break_hours * 60 + day.break_minutes
    raw = to_minutes(day.finish) - to_minutes(day.start) - break_minutes

    if raw <= 0:
        if raw < 0:
            logger.debug(
                "Flooring negative span to zero: %s-%s less %d min break",
                day.start, day.finish, break_minutes,
            )
        return 0

    return raw


def weekly_total_minutes(week: WeekTimesheet) -> int:
    """Sum the worked minutes of all seven days."""
    return sum(compute_day_total(day) for day in week.data.values())


def recompute(week: WeekTimesheet) -> WeekTimesheet:
    """
    Return a copy of ``week`` with every derived total refreshed.

    Stored totals are never trusted; each day's total and the weekly total
    are rebuilt from start, finish and break.
    """
    minutes = {name: compute_day_total(day) for name, day in week.data.items()}
    data = {
        name: day.model_copy(update={"total": to_clock_string(minutes[name])})
        for name, day in week.data.items()
    }

    weekly = sum(minutes.values())
    return week.model_copy(update={"data": data, "weekly_total": to_clock_string(weekly)})


def has_working_hours(week: WeekTimesheet) -> bool:
    """True if any day has both a start and a finish entered."""
    return any(day.start and day.finish for day in week.data.values())


def week_start_for(d: date) -> date:
    """Get the Monday that starts the ISO week containing date d."""
    return d - timedelta(days=d.weekday())


def shift_week(week_start: date, weeks: int) -> date:
    """Move a week start forwards (positive) or backwards (negative)."""
    return week_start + timedelta(days=7 * weeks)


def initialize_week(week_start: date) -> WeekTimesheet:
    """
    Build a fresh week with the default schedule.

    Weekdays start at 08:30, finish at 17:00 with a 30 minute break;
    Saturday and Sunday are left blank.
    """
    data = {}
    for index, name in enumerate(DAY_NAMES):
        day_date = week_start + timedelta(days=index)
        if index < WORKDAYS_PER_WEEK:
            data[name] = DayRecord(
                date=day_date.strftime(DATE_LABEL_FORMAT),
                start=DEFAULT_START,
                finish=DEFAULT_FINISH,
                break_hours=DEFAULT_BREAK_HOURS,
                break_minutes=DEFAULT_BREAK_MINUTES,
            )
        else:
            data[name] = DayRecord(date=day_date.strftime(DATE_LABEL_FORMAT))

    return recompute(WeekTimesheet(week_start=week_start, data=data))


def blank_week(week_start: date) -> WeekTimesheet:
    """Build a week with nothing entered on any day."""
    data = {
        name: DayRecord(date=(week_start + timedelta(days=index)).strftime(DATE_LABEL_FORMAT))
        for index, name in enumerate(DAY_NAMES)
    }
    return recompute(WeekTimesheet(week_start=week_start, data=data))
