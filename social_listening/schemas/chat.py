import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from social_listening.core.config import Settings
from social_listening.models.mention import Mention
from social_listening.schemas.dashboard import KPISummary

Role = Literal["user", "assistant", "system"]


class ChatMessage(BaseModel):
    """One turn of the conversation."""
    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    role: Role
    content: str
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class ChatSettings(BaseModel):
    """Model parameters for the chat endpoint."""
    system_prompt: str
    model: str = "gpt-4"
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)
    api_key: str = ""

    @classmethod
    def from_settings(cls, settings: Settings) -> "ChatSettings":
        return cls(
            system_prompt=settings.CHAT_SYSTEM_PROMPT,
            model=settings.OPENAI_MODEL,
            temperature=settings.OPENAI_TEMPERATURE,
            max_tokens=settings.OPENAI_MAX_TOKENS,
            api_key=settings.OPENAI_API_KEY
        )


class SampleMention(BaseModel):
    date: Optional[str]
    sentiment: str
    channel: str
    content: str
    engagement: int


class DashboardContext(BaseModel):
    """Snapshot of the dashboard attached to a chat question."""
    current_view: str
    total_items: int
    total_original_items: int
    applied_filters: Dict[str, Any]
    sample_data: List[SampleMention]
    kpis: KPISummary


class FilterCondition(BaseModel):
    field: str
    value: Any
    operator: Literal["equals", "contains", "greater_than", "less_than", "in"] = "equals"


class QueryType(BaseModel):
    """What a chat question asks for, inferred from its wording."""
    type: Literal["overview", "filtered", "content_analysis", "multi_dimension"]
    limit: int = 10
    filters: List[FilterCondition] = Field(default_factory=list)
    content_analysis: bool = False
    dimensions: List[str] = Field(default_factory=list)


class SentimentBucket(BaseModel):
    count: int = 0
    percentage: float = 0.0
    total_engagement: int = 0


class SentimentBreakdown(BaseModel):
    positive: SentimentBucket = Field(default_factory=SentimentBucket)
    negative: SentimentBucket = Field(default_factory=SentimentBucket)
    neutral: SentimentBucket = Field(default_factory=SentimentBucket)


class ChannelBreakdown(BaseModel):
    count: int
    percentage: float
    avg_engagement: float
    top_content: List[str]


class EngagementStats(BaseModel):
    total: int = 0
    average: float = 0.0
    median: float = 0.0
    top10_total: int = 0


class KeywordCount(BaseModel):
    word: str
    count: int


class HashtagCount(BaseModel):
    tag: str
    count: int


class ContentSample(BaseModel):
    content: str
    engagement: int
    sentiment: str
    channel: str


class ContentInsights(BaseModel):
    total_posts: int
    avg_content_length: float
    top_keywords: List[KeywordCount]
    top_hashtags: List[HashtagCount]
    content_samples: List[ContentSample]


class ProcessedContext(BaseModel):
    """Query-aware digest of the filtered data for the language model."""
    query_type: QueryType
    total_items: int
    filtered_items: int
    sentiment_breakdown: SentimentBreakdown
    channel_breakdown: Dict[str, ChannelBreakdown]
    engagement_stats: EngagementStats
    content_insights: Optional[ContentInsights] = None
    top_results: List[Mention]
    summary: str
