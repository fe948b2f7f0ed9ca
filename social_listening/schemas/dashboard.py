import datetime as dt
from typing import List, Literal

from pydantic import BaseModel, Field

Trend = Literal["up", "down", "stable"]
ColorHint = Literal["success", "danger", "neutral"]
InsightType = Literal["success", "warning", "info", "trend"]


class KPIMetric(BaseModel):
    """Headline metric with its change against the previous period."""
    value: float
    change: float = 0.0
    trend: Trend = "stable"


class SentimentShares(BaseModel):
    """Share of each sentiment, in percent."""
    positive: float = 0.0
    negative: float = 0.0
    neutral: float = 0.0


class SentimentScore(BaseModel):
    """0-100 polarity index."""
    value: float = 50.0
    distribution: SentimentShares = Field(default_factory=SentimentShares)


class KPISummary(BaseModel):
    total_mentions: KPIMetric
    total_engagement: KPIMetric
    avg_engagement_rate: KPIMetric
    sentiment_score: SentimentScore


class SentimentSlice(BaseModel):
    name: str
    count: int
    percentage: float
    color_hint: ColorHint


class ChannelStat(BaseModel):
    channel: str
    mention_count: int
    total_engagement: int


class CategoryStat(BaseModel):
    category: str
    mention_count: int
    percentage: float


class TimelinePoint(BaseModel):
    date: dt.date
    mention_count: int
    total_engagement: int


class ChartData(BaseModel):
    """All chart-ready views of one filtered collection."""
    sentiment_distribution: List[SentimentSlice]
    channel_performance: List[ChannelStat]
    timeline_trend: List[TimelinePoint]
    top_categories: List[CategoryStat]


class Insight(BaseModel):
    """Short observation shown in the insights panel."""
    id: str
    type: InsightType
    title: str
    description: str
    action: str


class InfluencerStat(BaseModel):
    """One author's footprint in the filtered data."""
    username: str
    mention_count: int
    total_engagement: int
    avg_engagement: float
    channels: List[str]
    positive_rate: float
    negative_rate: float
    influence_score: float


class SpeakerTypeStat(BaseModel):
    speaker_type: str
    mention_count: int
    total_engagement: int
    unique_users: int
    avg_engagement: float


class ChannelSentimentStat(BaseModel):
    """Sentiment mix of one channel."""
    channel: str
    total: int
    positive: int
    negative: int
    neutral: int
    positive_rate: float


class ContentTypeStat(BaseModel):
    content_type: str
    mention_count: int
    percentage: float
    total_engagement: int
    avg_engagement: float
    positive_rate: float


class SubCategoryStat(BaseModel):
    sub_category: str
    mention_count: int
    percentage: float
    total_engagement: int


class InteractionTotals(BaseModel):
    """Comment, reaction and share totals for the performance view."""
    total_engagement: int = 0
    avg_engagement: float = 0.0
    comments: int = 0
    reactions: int = 0
    shares: int = 0
