import datetime as dt
import math
from enum import Enum
from typing import Any, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Sentiment(str, Enum):
    POSITIVE = "Positive"
    NEGATIVE = "Negative"
    NEUTRAL = "Neutral"


class Channel(str, Enum):
    FACEBOOK = "Facebook"
    WEBSITE = "Website"
    TWITTER = "Twitter"
    INSTAGRAM = "Instagram"
    TIKTOK = "TikTok"
    YOUTUBE = "YouTube"


class ContentType(str, Enum):
    POST = "Post"
    VIDEO = "Video"
    COMMENT = "Comment"
    STORY = "Story"


class Category(str, Enum):
    BUSINESS_BRANDING = "Business Branding"
    ESG_BRANDING = "ESG Branding"
    CRISIS_MANAGEMENT = "Crisis Management"


class SubCategory(str, Enum):
    SPORT = "Sport"
    STOCK = "Stock"
    NET_ZERO = "Net zero"
    CORPORATE = "Corporate"


class SpeakerType(str, Enum):
    PUBLISHER = "Publisher"
    INFLUENCER_VOICE = "Influencer voice"
    CONSUMER = "Consumer"
    MEDIA = "Media"


# Values substituted for anything an enum field does not recognise
ENUM_DEFAULTS = {
    "sentiment": Sentiment.NEUTRAL,
    "channel": Channel.WEBSITE,
    "content_type": ContentType.POST,
    "category": Category.BUSINESS_BRANDING,
    "sub_category": SubCategory.CORPORATE,
    "type_of_speaker": SpeakerType.CONSUMER,
}

ENUM_TYPES = {
    "sentiment": Sentiment,
    "channel": Channel,
    "content_type": ContentType,
    "category": Category,
    "sub_category": SubCategory,
    "type_of_speaker": SpeakerType,
}

COUNT_FIELDS = ("total_engagement", "comments", "reactions", "shares")


def coerce_enum(enum_cls: Type[Enum], value: Any, default: Enum) -> Enum:
    """Match a raw value against an enum by label, case-insensitively."""
    if isinstance(value, enum_cls):
        return value
    if value is None:
        return default

    text = str(value).strip().lower()
    for member in enum_cls:
        if member.value.lower() == text:
            return member
    return default


def coerce_count(value: Any) -> int:
    """Turn a raw engagement figure into a non-negative integer."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        number = float(str(value).replace(",", "").strip()) if isinstance(value, str) else float(value)
    except (TypeError, ValueError):
        return 0
    if math.isnan(number) or math.isinf(number):
        return 0
    return max(int(number), 0)


def to_calendar_date(value: Any) -> Optional[dt.date]:
    """
    Normalise a date-like value to a calendar date.

    Datetimes lose their time-of-day. Strings are read as ISO 8601 dates or
    timestamps. Anything else yields None.
    """
    if value is None:
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    try:
        return dt.datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        pass

    try:
        return dt.date.fromisoformat(text[:10])
    except ValueError:
        return None


class Mention(BaseModel):
    """One observed social-media item."""
    model_config = ConfigDict(frozen=True)

    id: Union[int, str]
    date: Optional[dt.date] = None
    content: str = ""
    sentiment: Sentiment = Sentiment.NEUTRAL
    channel: Channel = Channel.WEBSITE
    content_type: ContentType = ContentType.POST
    total_engagement: int = Field(default=0, ge=0)
    username: str = ""
    category: Category = Category.BUSINESS_BRANDING
    sub_category: SubCategory = SubCategory.CORPORATE
    type_of_speaker: SpeakerType = SpeakerType.CONSUMER
    comments: int = Field(default=0, ge=0)
    reactions: int = Field(default=0, ge=0)
    shares: int = Field(default=0, ge=0)
    url: Optional[str] = None

    @field_validator("date", mode="before")
    @classmethod
    def _normalize_date(cls, value: Any) -> Optional[dt.date]:
        return to_calendar_date(value)

    @field_validator("content", "username", mode="before")
    @classmethod
    def _normalize_text(cls, value: Any) -> str:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return ""
        return str(value).strip()

    @field_validator("url", mode="before")
    @classmethod
    def _normalize_url(cls, value: Any) -> Optional[str]:
        if value is None or (isinstance(value, float) and math.isnan(value)):
            return None
        text = str(value).strip()
        return text or None

    @field_validator(*COUNT_FIELDS, mode="before")
    @classmethod
    def _normalize_count(cls, value: Any) -> int:
        return coerce_count(value)

    @field_validator(*ENUM_TYPES.keys(), mode="before")
    @classmethod
    def _normalize_enum(cls, value: Any, info) -> Enum:
        return coerce_enum(ENUM_TYPES[info.field_name], value, ENUM_DEFAULTS[info.field_name])


SENTIMENT_OPTIONS = [member.value for member in Sentiment]
CHANNEL_OPTIONS = [member.value for member in Channel]
CONTENT_TYPE_OPTIONS = [member.value for member in ContentType]
CATEGORY_OPTIONS = [member.value for member in Category]
SUB_CATEGORY_OPTIONS = [member.value for member in SubCategory]
SPEAKER_TYPE_OPTIONS = [member.value for member in SpeakerType]
