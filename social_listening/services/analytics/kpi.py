from typing import List, Optional, Sequence

from social_listening.models.mention import Mention, Sentiment
from social_listening.schemas.dashboard import KPIMetric, KPISummary, SentimentScore, SentimentShares

NEUTRAL_SCORE = 50.0

# Contribution of each sentiment to the 0-100 score
SENTIMENT_WEIGHTS = {
    Sentiment.POSITIVE: 100.0,
    Sentiment.NEUTRAL: 50.0,
    Sentiment.NEGATIVE: 0.0,
}


def percent_change(current: float, previous: float) -> float:
    """Relative change in percent; 0 when there is nothing to compare against."""
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100


def trend_of(current: float, previous: float) -> str:
    if current > previous:
        return "up"
    if current < previous:
        return "down"
    return "stable"


def _metric(current: float, previous: float) -> KPIMetric:
    return KPIMetric(
        value=current,
        change=percent_change(current, previous),
        trend=trend_of(current, previous)
    )


def _engagement_totals(records: Sequence[Mention]) -> tuple:
    total = sum(record.total_engagement for record in records)
    average = total / len(records) if records else 0.0
    return total, average


def sentiment_score(records: Sequence[Mention]) -> SentimentScore:
    """
    Weighted sentiment index over a collection.

    Positive counts fully, Neutral half and Negative not at all, scaled to
    0-100. An empty collection sits at the neutral midpoint.
    """
    total = len(records)
    if total == 0:
        return SentimentScore(value=NEUTRAL_SCORE, distribution=SentimentShares())

    counts = {sentiment: 0 for sentiment in Sentiment}
    for record in records:
        if record.sentiment in counts:
            counts[record.sentiment] += 1

    score = sum(SENTIMENT_WEIGHTS[sentiment] * count for sentiment, count in counts.items()) / total

    return SentimentScore(
        value=score,
        distribution=SentimentShares(
            positive=counts[Sentiment.POSITIVE] / total * 100,
            negative=counts[Sentiment.NEGATIVE] / total * 100,
            neutral=counts[Sentiment.NEUTRAL] / total * 100
        )
    )


def calculate_kpis(current: Sequence[Mention], previous: Optional[Sequence[Mention]] = None) -> KPISummary:
    """
    Headline KPIs for the current collection compared against the previous period.

    Args:
        current: Filtered records of the active window
        previous: Records of the window of equal length just before it

    Returns:
        KPISummary with value, change and trend per metric
    """
    previous: List[Mention] = list(previous or [])

    current_engagement, current_average = _engagement_totals(current)
    previous_engagement, previous_average = _engagement_totals(previous)

    return KPISummary(
        total_mentions=_metric(len(current), len(previous)),
        total_engagement=_metric(current_engagement, previous_engagement),
        avg_engagement_rate=_metric(current_average, previous_average),
        sentiment_score=sentiment_score(current)
    )
