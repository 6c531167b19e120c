"""Invoice number generation."""
import random
from datetime import datetime
from typing import Optional


def generate_invoice_number(
    now: Optional[datetime] = None,
    rng: Optional[random.Random] = None,
) -> str:
    """
    Generate a display invoice number from the date and a random suffix.

    The number is ``YYMMDD`` followed by two random digits. It is not
    stored and not guaranteed to be unique.

    Args:
        now: Timestamp to derive the date from (defaults to now)
        rng: Optional random source, mainly for tests

    Returns:
        Eight digit invoice number string

    Example:
        An invoice opened on 31 Jan 2025 gets a number like ``"25013147"``.
    """
    if now is None:
        now = datetime.now()
    if rng is None:
        rng = random

    return f"{now:%y%m%d}{rng.randint(0, 99):02d}"
