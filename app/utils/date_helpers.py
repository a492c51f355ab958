"""
Date and time helper functions
"""

from datetime import date, timedelta
from typing import Optional
import logging

from app.models.seo import DateRange
from app.utils.error_handlers import ValidationError

logger = logging.getLogger(__name__)

DEFAULT_RANGE_DAYS = 28


def resolve_date_range(
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    default_days: int = DEFAULT_RANGE_DAYS,
    today: Optional[date] = None
) -> DateRange:
    """
    Fill a partial date range

    A missing end date means today and a missing start date means
    `default_days` before the end.
    """
    end = end_date or today or date.today()
    start = start_date or (end - timedelta(days=default_days))

    if start > end:
        raise ValidationError(f"Start date {start} is after end date {end}")

    return DateRange(start_date=start, end_date=end)
