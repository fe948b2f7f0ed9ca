from typing import List

from social_listening.schemas.dashboard import ChartData, Insight, KPISummary
from social_listening.services.analytics.charts import top_channels

STRONG_SENTIMENT = 70
WEAK_SENTIMENT = 40
MAX_INSIGHTS = 4


def format_number(value: float) -> str:
    """Compact number for insight text (1.2K, 3.4M)."""
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    return f"{value:,.0f}"


def generate_insights(kpis: KPISummary, charts: ChartData, limit: int = MAX_INSIGHTS) -> List[Insight]:
    """Rule-based observations about the filtered data, most important first."""
    insights = []

    score = kpis.sentiment_score.value
    if score > STRONG_SENTIMENT:
        insights.append(Insight(
            id="positive-sentiment",
            type="success",
            title="Positive Sentiment Strong",
            description=f"{score:.1f}% positive sentiment indicates excellent brand perception.",
            action="Amplify Success"
        ))
    elif score < WEAK_SENTIMENT:
        insights.append(Insight(
            id="negative-sentiment",
            type="warning",
            title="Sentiment Needs Attention",
            description=f"{score:.1f}% sentiment score suggests addressing negative feedback.",
            action="Create Action Plan"
        ))

    leaders = top_channels(charts.channel_performance, 1)
    if leaders:
        top = leaders[0]
        insights.append(Insight(
            id="top-channel",
            type="info",
            title=f"{top.channel} Leading Performance",
            description=(
                f"{top.channel} generates {format_number(top.mention_count)} mentions "
                f"with {format_number(top.total_engagement)} engagement."
            ),
            action="Optimize Strategy"
        ))

    engagement = kpis.total_engagement
    if engagement.trend == "up":
        insights.append(Insight(
            id="engagement-up",
            type="success",
            title="Engagement Growing",
            description=f"Total engagement increased by {engagement.change:.1f}% from previous period.",
            action="Maintain Momentum"
        ))
    elif engagement.trend == "down":
        insights.append(Insight(
            id="engagement-down",
            type="warning",
            title="Engagement Declining",
            description=f"Total engagement decreased by {abs(engagement.change):.1f}% from previous period.",
            action="Boost Content"
        ))

    if charts.top_categories:
        category = charts.top_categories[0]
        insights.append(Insight(
            id="top-category",
            type="trend",
            title=f"{category.category} Trending",
            description=f"{category.category} accounts for {category.percentage:.1f}% of all discussions.",
            action="Leverage Topic"
        ))

    return insights[:limit]
