"""Aggregations behind the influencer, sentiment, performance and content views."""
from typing import Dict, List, Sequence

from social_listening.models.mention import Mention, Sentiment
from social_listening.schemas.dashboard import (
    ChannelSentimentStat,
    ContentTypeStat,
    InfluencerStat,
    InteractionTotals,
    SpeakerTypeStat,
    SubCategoryStat,
)
from social_listening.services.analytics.charts import _label, _share

MAX_INFLUENCERS = 50
MAX_TOP_MENTIONS = 5

# Influence score weights
ENGAGEMENT_WEIGHT = 0.4
MENTION_WEIGHT = 0.3
POSITIVE_WEIGHT = 3.0


def _group_by(records: Sequence[Mention], field_name: str) -> Dict[str, List[Mention]]:
    groups: Dict[str, List[Mention]] = {}
    for record in records:
        groups.setdefault(_label(getattr(record, field_name)), []).append(record)
    return groups


def _engagement(records: Sequence[Mention]) -> int:
    return sum(record.total_engagement for record in records)


def _count_sentiment(records: Sequence[Mention], sentiment: Sentiment) -> int:
    return sum(1 for record in records if record.sentiment == sentiment)


def influence_score(total_engagement: int, mentions: int, positives: int) -> float:
    return total_engagement * ENGAGEMENT_WEIGHT + mentions * MENTION_WEIGHT + positives * POSITIVE_WEIGHT


def influencer_ranking(records: Sequence[Mention], limit: int = MAX_INFLUENCERS) -> List[InfluencerStat]:
    """
    Authors ranked by influence score, highest first.

    The score weighs total engagement, mention count and positive mentions.
    Equal scores keep first-seen order.
    """
    rows = []
    for username, items in _group_by(records, "username").items():
        engagement = _engagement(items)
        positives = _count_sentiment(items, Sentiment.POSITIVE)
        channels: List[str] = []
        for item in items:
            channel = _label(item.channel)
            if channel not in channels:
                channels.append(channel)

        rows.append(InfluencerStat(
            username=username,
            mention_count=len(items),
            total_engagement=engagement,
            avg_engagement=engagement / len(items),
            channels=channels,
            positive_rate=_share(positives, len(items)),
            negative_rate=_share(_count_sentiment(items, Sentiment.NEGATIVE), len(items)),
            influence_score=influence_score(engagement, len(items), positives)
        ))

    return sorted(rows, key=lambda row: row.influence_score, reverse=True)[:limit]


def speaker_type_metrics(records: Sequence[Mention]) -> List[SpeakerTypeStat]:
    rows = [
        SpeakerTypeStat(
            speaker_type=speaker_type,
            mention_count=len(items),
            total_engagement=_engagement(items),
            unique_users=len({item.username for item in items}),
            avg_engagement=_engagement(items) / len(items)
        )
        for speaker_type, items in _group_by(records, "type_of_speaker").items()
    ]
    return sorted(rows, key=lambda row: row.mention_count, reverse=True)


def channel_sentiment(records: Sequence[Mention]) -> List[ChannelSentimentStat]:
    """Sentiment counts per channel, best positive rate first."""
    rows = []
    for channel, items in _group_by(records, "channel").items():
        positive = _count_sentiment(items, Sentiment.POSITIVE)
        rows.append(ChannelSentimentStat(
            channel=channel,
            total=len(items),
            positive=positive,
            negative=_count_sentiment(items, Sentiment.NEGATIVE),
            neutral=_count_sentiment(items, Sentiment.NEUTRAL),
            positive_rate=_share(positive, len(items))
        ))
    return sorted(rows, key=lambda row: row.positive_rate, reverse=True)


def top_mentions(records: Sequence[Mention], sentiment: Sentiment, limit: int = MAX_TOP_MENTIONS) -> List[Mention]:
    """Highest-engagement mentions carrying the given sentiment."""
    matching = [record for record in records if record.sentiment == sentiment]
    return sorted(matching, key=lambda record: record.total_engagement, reverse=True)[:limit]


def content_type_performance(records: Sequence[Mention]) -> List[ContentTypeStat]:
    total = len(records)
    rows = []
    for content_type, items in _group_by(records, "content_type").items():
        engagement = _engagement(items)
        rows.append(ContentTypeStat(
            content_type=content_type,
            mention_count=len(items),
            percentage=_share(len(items), total),
            total_engagement=engagement,
            avg_engagement=engagement / len(items),
            positive_rate=_share(_count_sentiment(items, Sentiment.POSITIVE), len(items))
        ))
    return sorted(rows, key=lambda row: row.mention_count, reverse=True)


def sub_category_breakdown(records: Sequence[Mention]) -> List[SubCategoryStat]:
    total = len(records)
    rows = [
        SubCategoryStat(
            sub_category=sub_category,
            mention_count=len(items),
            percentage=_share(len(items), total),
            total_engagement=_engagement(items)
        )
        for sub_category, items in _group_by(records, "sub_category").items()
    ]
    return sorted(rows, key=lambda row: row.mention_count, reverse=True)


def interaction_totals(records: Sequence[Mention]) -> InteractionTotals:
    engagement = _engagement(records)
    return InteractionTotals(
        total_engagement=engagement,
        avg_engagement=engagement / len(records) if records else 0.0,
        comments=sum(record.comments for record in records),
        reactions=sum(record.reactions for record in records),
        shares=sum(record.shares for record in records)
    )
