"""Dashboard state: the loaded mentions, active filters and derived views."""
import datetime as dt
from enum import Enum
from typing import Any, Iterable, List, Optional, Tuple

from pydantic import ValidationError

from social_listening.core.config import get_settings
from social_listening.core.errors import FilterError
from social_listening.core.logging import get_logger
from social_listening.models.filters import SET_DIMENSIONS, EngagementRange, FilterSet
from social_listening.models.mention import Mention, Sentiment
from social_listening.schemas.dashboard import (
    CategoryStat,
    ChannelSentimentStat,
    ChannelStat,
    ChartData,
    ContentTypeStat,
    InfluencerStat,
    Insight,
    InteractionTotals,
    KPISummary,
    SentimentSlice,
    SpeakerTypeStat,
    SubCategoryStat,
    TimelinePoint,
)
from social_listening.services.analytics import charts, views
from social_listening.services.analytics.insights import generate_insights
from social_listening.services.analytics.kpi import calculate_kpis
from social_listening.services.filtering.engine import (
    Timeframe,
    apply_filters,
    previous_period_filters,
    timeframe_range,
)

logger = get_logger(__name__)


class DashboardView(str, Enum):
    OVERVIEW = "overview"
    SENTIMENT = "sentiment"
    PERFORMANCE = "performance"
    INFLUENCER = "influencer"
    CONTENT = "content"


class DashboardState:
    """
    Single source of truth for one dashboard session.

    Every mutation that touches records or filters recomputes the filtered
    collection before returning. Aggregates are derived on each read from
    the filtered collection, so they never lag behind it.
    """

    def __init__(self, default_engagement_max: Optional[int] = None, window_days: Optional[int] = None):
        settings = get_settings()
        self.default_engagement_max = (
            default_engagement_max if default_engagement_max is not None else settings.DEFAULT_ENGAGEMENT_MAX
        )
        self.window_days = window_days or settings.DEFAULT_WINDOW_DAYS

        self._records: Tuple[Mention, ...] = ()
        self._filtered: Tuple[Mention, ...] = ()
        self._filters = FilterSet()
        self._view = DashboardView.OVERVIEW
        self._loading = False
        self._error: Optional[str] = None

    # Mutations

    def set_records(self, records: Iterable[Mention]) -> None:
        """Replace the whole collection and fit the engagement ceiling to it."""
        self._records = tuple(records)
        engagement = self._filters.engagement_range
        self._filters = self._filters.model_copy(update={
            "engagement_range": EngagementRange(min=engagement.min, max=self.max_engagement)
        })
        self._recompute()
        logger.info(f"Loaded {len(self._records)} mentions, {len(self._filtered)} pass current filters")

    def set_filters(self, **partial: Any) -> None:
        """Replace the given filter fields wholesale; other fields are kept."""
        unknown = set(partial) - set(FilterSet.model_fields)
        if unknown:
            raise FilterError(f"Unknown filter fields: {', '.join(sorted(unknown))}")

        try:
            self._filters = FilterSet.model_validate({**self._filters.model_dump(), **partial})
        except ValidationError as e:
            raise FilterError(f"Invalid filter value: {e}") from e

        self._recompute()

    def add_filter_value(self, dimension: str, value: Any) -> None:
        """Allow one more value in a set-valued dimension."""
        current = self._set_dimension(dimension)
        label = _label(value)
        if label in current:
            return
        self.set_filters(**{dimension: current + [label]})

    def remove_filter_value(self, dimension: str, value: Any) -> None:
        """Stop allowing a value in a set-valued dimension."""
        current = self._set_dimension(dimension)
        label = _label(value)
        if label not in current:
            return
        self.set_filters(**{dimension: [item for item in current if item != label]})

    def clear_filters(self) -> None:
        """Reset to permissive filters that admit every loaded record."""
        self._filters = FilterSet(engagement_range=EngagementRange(max=self.max_engagement))
        self._recompute()

    def set_timeframe(self, timeframe: Timeframe, today: Optional[dt.date] = None) -> None:
        """Apply a date preset. Custom leaves the current range alone."""
        window = timeframe_range(timeframe, today)
        if window is not None:
            self.set_filters(date_range=window)

    def set_view(self, view: DashboardView) -> None:
        self._view = DashboardView(view)

    def set_loading(self, loading: bool) -> None:
        self._loading = bool(loading)

    def set_error(self, error: Optional[str]) -> None:
        self._error = error

    def _recompute(self) -> None:
        self._filtered = tuple(apply_filters(self._records, self._filters))
        logger.debug(f"Recomputed filtered collection: {len(self._filtered)}/{len(self._records)}")

    def _set_dimension(self, dimension: str) -> List[str]:
        if dimension not in SET_DIMENSIONS:
            raise FilterError(f"'{dimension}' is not a set-valued filter dimension")
        return list(getattr(self._filters, dimension))

    # Read-only views

    @property
    def records(self) -> Tuple[Mention, ...]:
        return self._records

    @property
    def filtered(self) -> Tuple[Mention, ...]:
        return self._filtered

    @property
    def filters(self) -> FilterSet:
        return self._filters

    @property
    def view(self) -> DashboardView:
        return self._view

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def max_engagement(self) -> int:
        """Largest engagement in the collection, or the configured fallback when empty."""
        if not self._records:
            return self.default_engagement_max
        return max(record.total_engagement for record in self._records)

    @property
    def active_filter_count(self) -> int:
        return self._filters.active_count(engagement_ceiling=self.max_engagement)

    @property
    def reference_date(self) -> dt.date:
        """Latest dated record, else today. Anchors open-ended date windows."""
        dates = [record.date for record in self._records if record.date is not None]
        return max(dates) if dates else dt.date.today()

    @property
    def earliest_filtered_date(self) -> Optional[dt.date]:
        dates = [record.date for record in self._filtered if record.date is not None]
        return min(dates) if dates else None

    @property
    def previous_period_records(self) -> List[Mention]:
        """Records of the equal-length window just before the filtered collection."""
        previous = previous_period_filters(
            self._filters, self.reference_date, self.window_days, earliest=self.earliest_filtered_date
        )
        return apply_filters(self._records, previous)

    @property
    def kpis(self) -> KPISummary:
        return calculate_kpis(self._filtered, self.previous_period_records)

    @property
    def sentiment_distribution(self) -> List[SentimentSlice]:
        return charts.sentiment_distribution(self._filtered)

    @property
    def channel_performance(self) -> List[ChannelStat]:
        return charts.channel_performance(self._filtered)

    @property
    def category_ranking(self) -> List[CategoryStat]:
        return charts.category_ranking(self._filtered)

    @property
    def timeline_trend(self) -> List[TimelinePoint]:
        return charts.timeline_trend(self._filtered)

    @property
    def chart_data(self) -> ChartData:
        return charts.build_chart_data(self._filtered)

    @property
    def insights(self) -> List[Insight]:
        return generate_insights(self.kpis, self.chart_data)

    # Per-view analytics

    @property
    def influencer_ranking(self) -> List[InfluencerStat]:
        return views.influencer_ranking(self._filtered)

    @property
    def speaker_type_metrics(self) -> List[SpeakerTypeStat]:
        return views.speaker_type_metrics(self._filtered)

    @property
    def channel_sentiment(self) -> List[ChannelSentimentStat]:
        return views.channel_sentiment(self._filtered)

    @property
    def top_positive_mentions(self) -> List[Mention]:
        return views.top_mentions(self._filtered, Sentiment.POSITIVE)

    @property
    def top_negative_mentions(self) -> List[Mention]:
        return views.top_mentions(self._filtered, Sentiment.NEGATIVE)

    @property
    def content_type_performance(self) -> List[ContentTypeStat]:
        return views.content_type_performance(self._filtered)

    @property
    def sub_category_breakdown(self) -> List[SubCategoryStat]:
        return views.sub_category_breakdown(self._filtered)

    @property
    def interaction_totals(self) -> InteractionTotals:
        return views.interaction_totals(self._filtered)


def _label(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)
