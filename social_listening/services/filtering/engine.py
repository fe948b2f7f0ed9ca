import datetime as dt
from enum import Enum
from typing import Iterable, List, Optional

from social_listening.core.logging import get_logger
from social_listening.models.filters import DIMENSION_FIELDS, DateRange, FilterSet
from social_listening.models.mention import Mention

logger = get_logger(__name__)

DEFAULT_WINDOW_DAYS = 30


class Timeframe(str, Enum):
    """Quick date presets offered next to the custom date picker."""
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    CUSTOM = "custom"


def _label(value) -> Optional[str]:
    if value is None:
        return None
    return value.value if isinstance(value, Enum) else value


def matches(record: Mention, filters: FilterSet) -> bool:
    """Check one record against every filter dimension."""
    if not filters.date_range.contains(record.date):
        return False

    for dimension, field_name in DIMENSION_FIELDS.items():
        allowed = getattr(filters, dimension)
        if allowed and _label(getattr(record, field_name)) not in allowed:
            return False

    return filters.engagement_range.contains(record.total_engagement)


def apply_filters(records: Iterable[Mention], filters: FilterSet) -> List[Mention]:
    """Return the records passing all filters, in their original order."""
    return [record for record in records if matches(record, filters)]


def previous_period(
    date_range: DateRange,
    reference: dt.date,
    default_days: int = DEFAULT_WINDOW_DAYS,
    earliest: Optional[dt.date] = None
) -> DateRange:
    """
    Window of equal length immediately before the current one.

    A missing end is taken as the reference date. A missing start is taken as
    earliest (the first dated record of the current collection) so the two
    windows never overlap; without it the current window is the default_days
    ending at end.
    """
    end = date_range.end or reference
    if date_range.start is not None:
        start = date_range.start
    elif earliest is not None:
        start = min(earliest, end)
    else:
        start = end - dt.timedelta(days=default_days - 1)

    span = max((end - start).days + 1, 1)
    return DateRange(
        start=start - dt.timedelta(days=span),
        end=start - dt.timedelta(days=1)
    )


def previous_period_filters(
    filters: FilterSet,
    reference: dt.date,
    default_days: int = DEFAULT_WINDOW_DAYS,
    earliest: Optional[dt.date] = None
) -> FilterSet:
    """Same filters with the date range moved to the preceding period."""
    window = previous_period(filters.date_range, reference, default_days, earliest)
    logger.debug(f"Previous period window: {window.start} .. {window.end}")
    return filters.model_copy(update={"date_range": window})


def timeframe_range(timeframe: Timeframe, today: Optional[dt.date] = None) -> Optional[DateRange]:
    """Date range for a preset. Custom returns None so the current range is kept."""
    today = today or dt.date.today()
    timeframe = Timeframe(timeframe)

    if timeframe == Timeframe.TODAY:
        return DateRange(start=today, end=today)
    if timeframe == Timeframe.WEEK:
        return DateRange(start=today - dt.timedelta(days=7), end=today)
    if timeframe == Timeframe.MONTH:
        return DateRange(start=today - dt.timedelta(days=DEFAULT_WINDOW_DAYS), end=today)
    return None
