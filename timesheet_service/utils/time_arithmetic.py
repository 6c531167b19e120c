"""Clock time and duration arithmetic."""
import re
from typing import Optional

from timesheet_service.errors import InvalidFormatError

_CLOCK_PATTERN = re.compile(r"^([0-9]{1,2}):([0-9]{2})$")


def to_minutes(value: str) -> int:
    """
    Convert a clock time to minutes since midnight.

    Args:
        value: Time of day as ``H:MM`` or ``HH:MM``

    Returns:
        Minutes since midnight (0-1439)

    Raises:
        InvalidFormatError: If the value is not a valid time of day

    Examples:
        >>> to_minutes("08:30")
        510
        >>> to_minutes("7:05")
        425
    """
    match = _CLOCK_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidFormatError(f"Invalid time format: {value!r}")

    hours, minutes = int(match.group(1)), int(match.group(2))
    if hours > 23 or minutes > 59:
        raise InvalidFormatError(f"Invalid time format: {value!r}")

    return hours * 60 + minutes


def to_clock_string(minutes: int) -> str:
    """
    Format a duration in minutes as ``H:MM``.

    Hours are not padded and not capped at 24, so weekly totals such as
    ``40:00`` format the same way as a single day.

    Examples:
        >>> to_clock_string(480)
        '8:00'
        >>> to_clock_string(2400)
        '40:00'
    """
    hours, mins = divmod(minutes, 60)
    return f"{hours}:{mins:02d}"


def parse_clock_time(value: Optional[str]) -> Optional[str]:
    """
    Normalise an optional clock entry.

    Blank or missing entries mean "not entered yet" and become ``None``.
    Anything else must parse and is returned zero-padded as ``HH:MM``.
    """
    if value is None or not value.strip():
        return None

    minutes = to_minutes(value)
    hours, mins = divmod(minutes, 60)
    return f"{hours:02d}:{mins:02d}"
