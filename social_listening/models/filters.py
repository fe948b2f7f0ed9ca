import datetime as dt
from enum import Enum
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from social_listening.models.mention import to_calendar_date


# Set-valued filter dimensions and the Mention field each one restricts
DIMENSION_FIELDS = {
    "sentiment": "sentiment",
    "channels": "channel",
    "categories": "category",
    "sub_categories": "sub_category",
    "content_types": "content_type",
    "speaker_types": "type_of_speaker",
    "usernames": "username",
}

SET_DIMENSIONS = tuple(DIMENSION_FIELDS.keys())


class DateRange(BaseModel):
    """Inclusive calendar-date window. Either bound may be open."""
    model_config = ConfigDict(frozen=True)

    start: Optional[dt.date] = None
    end: Optional[dt.date] = None

    @field_validator("start", "end", mode="before")
    @classmethod
    def _normalize_bound(cls, value: Any) -> Optional[dt.date]:
        if value is None or (isinstance(value, str) and not value.strip()):
            return None
        day = to_calendar_date(value)
        if day is None:
            raise ValueError(f"unrecognised date bound {value!r}")
        return day

    @property
    def is_active(self) -> bool:
        return self.start is not None or self.end is not None

    def contains(self, day: Optional[dt.date]) -> bool:
        """Day-granularity membership. An undated record fails any active bound."""
        if not self.is_active:
            return True
        if day is None:
            return False
        if self.start is not None and day < self.start:
            return False
        if self.end is not None and day > self.end:
            return False
        return True

    @property
    def span_days(self) -> Optional[int]:
        if self.start is None or self.end is None:
            return None
        return (self.end - self.start).days + 1


class EngagementRange(BaseModel):
    """Inclusive engagement bounds; a max of None is unbounded."""
    model_config = ConfigDict(frozen=True)

    min: int = 0
    max: Optional[int] = None

    def is_restricted(self, ceiling: Optional[int] = None) -> bool:
        """True when the range excludes something below min or above ceiling."""
        if self.min > 0:
            return True
        if self.max is None:
            return False
        return ceiling is None or self.max < ceiling

    def contains(self, value: int) -> bool:
        if value < self.min:
            return False
        if self.max is not None and value > self.max:
            return False
        return True


def _as_labels(values: Iterable[Any]) -> List[str]:
    labels = []
    for value in values:
        label = value.value if isinstance(value, Enum) else str(value)
        if label not in labels:
            labels.append(label)
    return labels


class FilterSet(BaseModel):
    """Active slicing criteria. An empty set-valued dimension allows everything."""
    model_config = ConfigDict(frozen=True, extra="forbid")

    date_range: DateRange = Field(default_factory=DateRange)
    sentiment: List[str] = Field(default_factory=list)
    channels: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    sub_categories: List[str] = Field(default_factory=list)
    content_types: List[str] = Field(default_factory=list)
    speaker_types: List[str] = Field(default_factory=list)
    usernames: List[str] = Field(default_factory=list)
    engagement_range: EngagementRange = Field(default_factory=EngagementRange)

    @field_validator(*SET_DIMENSIONS, mode="before")
    @classmethod
    def _normalize_values(cls, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, (str, Enum)):
            value = [value]
        return _as_labels(value)

    @field_validator("date_range", mode="before")
    @classmethod
    def _open_date_range(cls, value: Any) -> Any:
        return DateRange() if value is None else value

    @field_validator("engagement_range", mode="before")
    @classmethod
    def _open_engagement_range(cls, value: Any) -> Any:
        return EngagementRange() if value is None else value

    @staticmethod
    def set_dimensions() -> tuple:
        return SET_DIMENSIONS

    def active_count(self, engagement_ceiling: Optional[int] = None) -> int:
        """
        Number of selected values plus one per active range filter.

        An engagement max at or above engagement_ceiling (the largest value
        loaded) does not count as a restriction.
        """
        count = sum(len(getattr(self, dimension)) for dimension in SET_DIMENSIONS)
        if self.date_range.is_active:
            count += 1
        if self.engagement_range.is_restricted(engagement_ceiling):
            count += 1
        return count
