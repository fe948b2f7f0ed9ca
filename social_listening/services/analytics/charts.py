from enum import Enum
from typing import Dict, List, Sequence

from social_listening.core.logging import get_logger
from social_listening.models.mention import Mention, Sentiment
from social_listening.schemas.dashboard import (
    CategoryStat,
    ChannelStat,
    ChartData,
    SentimentSlice,
    TimelinePoint,
)

logger = get_logger(__name__)

UNKNOWN_LABEL = "Unknown"

SENTIMENT_COLOR_HINTS = {
    Sentiment.POSITIVE.value: "success",
    Sentiment.NEGATIVE.value: "danger",
    Sentiment.NEUTRAL.value: "neutral",
}

# Display order for sentiment rows
SENTIMENT_ORDER = [Sentiment.POSITIVE.value, Sentiment.NEGATIVE.value, Sentiment.NEUTRAL.value, UNKNOWN_LABEL]


def _label(value) -> str:
    if isinstance(value, Enum):
        return value.value
    if value is None or value == "":
        return UNKNOWN_LABEL
    return str(value)


def _share(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0


def _count_by(records: Sequence[Mention], field_name: str) -> Dict[str, int]:
    # first-seen order
    counts: Dict[str, int] = {}
    for record in records:
        key = _label(getattr(record, field_name))
        counts[key] = counts.get(key, 0) + 1
    return counts


def _ordered_sentiments(counts: Dict[str, int]) -> List[str]:
    known = [name for name in SENTIMENT_ORDER if counts.get(name)]
    return known + [name for name in counts if name not in SENTIMENT_ORDER]


def sentiment_distribution(records: Sequence[Mention]) -> List[SentimentSlice]:
    """One row per sentiment present in the collection."""
    counts = _count_by(records, "sentiment")
    total = len(records)

    return [
        SentimentSlice(
            name=name,
            count=counts[name],
            percentage=_share(counts[name], total),
            color_hint=SENTIMENT_COLOR_HINTS.get(name, "neutral")
        )
        for name in _ordered_sentiments(counts)
    ]


def channel_performance(records: Sequence[Mention]) -> List[ChannelStat]:
    """Mentions and engagement per channel, in first-seen order."""
    stats: Dict[str, List[int]] = {}
    for record in records:
        entry = stats.setdefault(_label(record.channel), [0, 0])
        entry[0] += 1
        entry[1] += record.total_engagement

    return [
        ChannelStat(channel=channel, mention_count=mentions, total_engagement=engagement)
        for channel, (mentions, engagement) in stats.items()
    ]


def top_channels(rows: Sequence[ChannelStat], limit: int) -> List[ChannelStat]:
    """Busiest channels first; equal counts keep their order."""
    return sorted(rows, key=lambda row: row.mention_count, reverse=True)[:limit]


def category_ranking(records: Sequence[Mention]) -> List[CategoryStat]:
    """Categories by mention count, descending. Ties keep first-seen order."""
    counts = _count_by(records, "category")
    total = len(records)

    rows = [
        CategoryStat(category=category, mention_count=count, percentage=_share(count, total))
        for category, count in counts.items()
    ]
    # stable: equal counts keep first-seen order
    return sorted(rows, key=lambda row: row.mention_count, reverse=True)


def timeline_trend(records: Sequence[Mention]) -> List[TimelinePoint]:
    """Daily mentions and engagement, oldest first. Days without records are absent."""
    buckets: Dict = {}
    undated = 0
    for record in records:
        if record.date is None:
            undated += 1
            continue
        entry = buckets.setdefault(record.date, [0, 0])
        entry[0] += 1
        entry[1] += record.total_engagement

    if undated:
        logger.debug(f"Skipped {undated} undated records in timeline")

    return [
        TimelinePoint(date=day, mention_count=mentions, total_engagement=engagement)
        for day, (mentions, engagement) in sorted(buckets.items())
    ]


def build_chart_data(records: Sequence[Mention]) -> ChartData:
    return ChartData(
        sentiment_distribution=sentiment_distribution(records),
        channel_performance=channel_performance(records),
        timeline_trend=timeline_trend(records),
        top_categories=category_ranking(records)
    )
