"""Dashboard snapshots handed to the chat model alongside a question."""
import re
import statistics
from collections import Counter
from enum import Enum
from typing import Any, Dict, List, Sequence

from social_listening.core.logging import get_logger
from social_listening.models.mention import Mention
from social_listening.schemas.chat import (
    ChannelBreakdown,
    ContentInsights,
    ContentSample,
    DashboardContext,
    EngagementStats,
    FilterCondition,
    HashtagCount,
    KeywordCount,
    ProcessedContext,
    QueryType,
    SampleMention,
    SentimentBreakdown,
    SentimentBucket,
)
from social_listening.services.dashboard.state import DashboardState

logger = get_logger(__name__)

DEFAULT_LIMIT = 10
OVERVIEW_LIMIT = 50
VIRAL_ENGAGEMENT = 1000

CONTENT_KEYWORDS = [
    "เนื้อหา", "content", "post", "caption", "ข้อความ",
    "คำ", "hashtag", "keyword", "เขียน", "พูด", "กล่าว",
]
MULTI_DIMENSION_KEYWORDS = [
    "เปรียบเทียบ", "compare", "แยกตาม", "กลุ่ม", "ประเภท",
    "ช่องทาง", "sentiment", "วิเคราะห์หลาก", "breakdown",
]
OVERVIEW_KEYWORDS = ["ทั้งหมด", "สรุป", "ภาพรวม", "total", "overall", "รวม"]

CATEGORY_KEYWORDS = {
    "business branding": "Business Branding",
    "esg": "ESG Branding",
    "crisis": "Crisis Management",
}
CHANNEL_KEYWORDS = {
    "facebook": "Facebook",
    "instagram": "Instagram",
    "tiktok": "TikTok",
    "youtube": "YouTube",
    "twitter": "Twitter",
    "website": "Website",
}
SENTIMENT_KEYWORDS = {
    "Positive": ["positive", "บวก"],
    "Negative": ["negative", "ลบ"],
    "Neutral": ["neutral", "กลาง"],
}
VIRAL_KEYWORDS = ["engagement สูง", "viral"]

TOP_N_PATTERN = re.compile(r"top\s*(\d+)|(\d+)\s*อันดับ|(\d+)\s*แรก")
WORD_STRIP_PATTERN = re.compile(r"[^\u0E00-\u0E7Fa-zA-Z0-9\s]")
HASHTAG_PATTERN = re.compile(r"#[\u0E00-\u0E7Fa-zA-Z0-9_]+")


def _label(value: Any) -> str:
    if isinstance(value, Enum):
        return value.value
    return "" if value is None else str(value)


def _truncate(text: str, length: int) -> str:
    return text[:length] + "..." if len(text) > length else text


def build_dashboard_context(state: DashboardState, sample_size: int = 5) -> DashboardContext:
    """Current view, counts, applied filters, a few sample rows and the KPIs."""
    filters = state.filters
    return DashboardContext(
        current_view=_label(state.view),
        total_items=len(state.filtered),
        total_original_items=len(state.records),
        applied_filters={
            "date_range": filters.date_range.model_dump(mode="json"),
            "channels": filters.channels,
            "sentiment": filters.sentiment,
            "categories": filters.categories,
            "content_types": filters.content_types,
            "speaker_types": filters.speaker_types,
        },
        sample_data=[
            SampleMention(
                date=record.date.isoformat() if record.date else None,
                sentiment=_label(record.sentiment),
                channel=_label(record.channel),
                content=_truncate(record.content, 100),
                engagement=record.total_engagement
            )
            for record in state.filtered[:sample_size]
        ],
        kpis=state.kpis
    )


class ContextProcessor:
    """Builds a query-aware digest of the filtered mentions for a chat question."""

    def detect_query_type(self, message: str) -> QueryType:
        """Infer the kind of answer wanted and any extra conditions from the wording."""
        text = message.lower()

        content_analysis = any(keyword in text for keyword in CONTENT_KEYWORDS)
        multi_dimension = any(keyword in text for keyword in MULTI_DIMENSION_KEYWORDS)

        if any(keyword in text for keyword in OVERVIEW_KEYWORDS):
            return QueryType(
                type="overview",
                limit=0,
                content_analysis=content_analysis,
                dimensions=["channel", "sentiment", "category"] if multi_dimension else []
            )

        limit = DEFAULT_LIMIT
        top_match = TOP_N_PATTERN.search(text)
        if top_match:
            digits = next(group for group in top_match.groups() if group)
            limit = int(digits) or DEFAULT_LIMIT

        conditions = []
        for keyword, category in CATEGORY_KEYWORDS.items():
            if keyword in text:
                conditions.append(FilterCondition(field="category", value=category))
        for keyword, channel in CHANNEL_KEYWORDS.items():
            if keyword in text:
                conditions.append(FilterCondition(field="channel", value=channel))
        for sentiment, keywords in SENTIMENT_KEYWORDS.items():
            if any(keyword in text for keyword in keywords):
                conditions.append(FilterCondition(field="sentiment", value=sentiment))
        if any(keyword in text for keyword in VIRAL_KEYWORDS):
            conditions.append(FilterCondition(
                field="total_engagement", value=VIRAL_ENGAGEMENT, operator="greater_than"
            ))

        if content_analysis:
            query_type = "content_analysis"
        elif multi_dimension:
            query_type = "multi_dimension"
        else:
            query_type = "filtered"

        return QueryType(
            type=query_type,
            limit=limit,
            filters=conditions,
            content_analysis=content_analysis,
            dimensions=["channel", "sentiment"] if multi_dimension else []
        )

    def apply_conditions(self, records: Sequence[Mention], conditions: List[FilterCondition]) -> List[Mention]:
        """Keep records satisfying every condition."""
        return [record for record in records if all(self._check(record, c) for c in conditions)]

    def _check(self, record: Mention, condition: FilterCondition) -> bool:
        value = getattr(record, condition.field, None)

        if condition.operator == "equals":
            return _label(value).lower() == _label(condition.value).lower()
        if condition.operator == "contains":
            return _label(condition.value).lower() in _label(value).lower()
        if condition.operator in ("greater_than", "less_than"):
            try:
                left, right = float(value), float(condition.value)
            except (TypeError, ValueError):
                return False
            return left > right if condition.operator == "greater_than" else left < right
        if condition.operator == "in":
            return isinstance(condition.value, (list, tuple, set)) and _label(value) in condition.value
        return True

    def sentiment_breakdown(self, records: Sequence[Mention]) -> SentimentBreakdown:
        total = len(records)
        buckets = {"positive": [0, 0], "negative": [0, 0], "neutral": [0, 0]}
        for record in records:
            key = _label(record.sentiment).lower()
            bucket = buckets.get(key, buckets["neutral"])
            bucket[0] += 1
            bucket[1] += record.total_engagement

        return SentimentBreakdown(**{
            key: SentimentBucket(
                count=count,
                percentage=count / total * 100 if total else 0.0,
                total_engagement=engagement
            )
            for key, (count, engagement) in buckets.items()
        })

    def channel_breakdown(self, records: Sequence[Mention]) -> Dict[str, ChannelBreakdown]:
        """Per-channel share, average engagement and three best-performing snippets."""
        total = len(records)
        grouped: Dict[str, List[Mention]] = {}
        for record in records:
            grouped.setdefault(_label(record.channel), []).append(record)

        result = {}
        for channel, items in grouped.items():
            engagement = sum(item.total_engagement for item in items)
            best = sorted(items, key=lambda item: item.total_engagement, reverse=True)[:3]
            result[channel] = ChannelBreakdown(
                count=len(items),
                percentage=len(items) / total * 100,
                avg_engagement=engagement / len(items),
                top_content=[item.content[:100] for item in best]
            )
        return result

    def engagement_stats(self, records: Sequence[Mention]) -> EngagementStats:
        if not records:
            return EngagementStats()

        engagements = sorted((record.total_engagement for record in records), reverse=True)
        total = sum(engagements)
        return EngagementStats(
            total=total,
            average=total / len(engagements),
            median=statistics.median(engagements),
            top10_total=sum(engagements[:10])
        )

    def analyze_content(self, records: Sequence[Mention]) -> ContentInsights:
        """Keyword, hashtag and high-engagement sample extraction."""
        contents = [record.content for record in records if record.content]
        joined = " ".join(contents)

        words = [
            word for word in WORD_STRIP_PATTERN.sub("", joined.lower()).split()
            if len(word) > 2
        ]
        hashtags = HASHTAG_PATTERN.findall(joined)

        samples = sorted(
            (record for record in records if len(record.content) > 10),
            key=lambda record: record.total_engagement,
            reverse=True
        )[:5]

        return ContentInsights(
            total_posts=len(records),
            avg_content_length=sum(len(c) for c in contents) / len(contents) if contents else 0.0,
            top_keywords=[KeywordCount(word=w, count=n) for w, n in Counter(words).most_common(10)],
            top_hashtags=[HashtagCount(tag=t, count=n) for t, n in Counter(hashtags).most_common(5)],
            content_samples=[
                ContentSample(
                    content=_truncate(record.content, 200),
                    engagement=record.total_engagement,
                    sentiment=_label(record.sentiment),
                    channel=_label(record.channel)
                )
                for record in samples
            ]
        )

    def summarize(self, query_type: QueryType, total_items: int, filtered: Sequence[Mention]) -> str:
        summary = f"Query Type: {query_type.type}"
        if query_type.filters:
            described = ", ".join(f"{c.field}={_label(c.value)}" for c in query_type.filters)
            summary += f" with filters: {described}"
        summary += f"\nOriginal data: {total_items} items"
        summary += f"\nFiltered data: {len(filtered)} items"
        if query_type.limit > 0:
            summary += f"\nShowing top {min(query_type.limit, len(filtered))} results"
        return summary

    def process(self, message: str, state: DashboardState) -> ProcessedContext:
        """
        Digest the dashboard's filtered mentions for one question.

        The dashboard filters are already applied by the state; conditions
        read from the question narrow the set further.
        """
        query_type = self.detect_query_type(message)
        matched = self.apply_conditions(state.filtered, query_type.filters)
        ranked = sorted(matched, key=lambda record: record.total_engagement, reverse=True)

        content_insights = None
        if query_type.content_analysis or _label(state.view) == "content":
            content_insights = self.analyze_content(ranked)

        limit = query_type.limit if query_type.limit > 0 else OVERVIEW_LIMIT
        logger.debug(f"Chat context: {query_type.type}, {len(ranked)} matching mentions")

        return ProcessedContext(
            query_type=query_type,
            total_items=len(state.records),
            filtered_items=len(ranked),
            sentiment_breakdown=self.sentiment_breakdown(ranked),
            channel_breakdown=self.channel_breakdown(ranked),
            engagement_stats=self.engagement_stats(ranked),
            content_insights=content_insights,
            top_results=ranked[:limit],
            summary=self.summarize(query_type, len(state.records), ranked)
        )
