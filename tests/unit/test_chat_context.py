import pytest

from social_listening.schemas.chat import FilterCondition
from social_listening.services.chat.context import ContextProcessor, build_dashboard_context
from social_listening.services.dashboard.state import DashboardState


class TestContextProcessor:

    @pytest.fixture
    def processor(self):
        return ContextProcessor()

    @pytest.fixture
    def state(self, five_mentions):
        state = DashboardState(default_engagement_max=100_000)
        state.set_records(five_mentions)
        return state

    def test_detect_top_n_with_channel(self, processor):
        """Test a top-N request naming a channel."""
        query = processor.detect_query_type("Show the top 3 Facebook mentions")

        assert query.type == "filtered"
        assert query.limit == 3
        assert [(c.field, c.value) for c in query.filters] == [("channel", "Facebook")]

    def test_detect_overview(self, processor):
        """Test overview wording selects the overview query."""
        query = processor.detect_query_type("Give me an overall picture")

        assert query.type == "overview"
        assert query.limit == 0

    def test_detect_viral_negative(self, processor):
        """Test viral and negative keywords become conditions."""
        query = processor.detect_query_type("Which negative items went viral?")
        fields = {c.field: c for c in query.filters}

        assert fields["sentiment"].value == "Negative"
        assert fields["total_engagement"].operator == "greater_than"

    def test_detect_content_analysis(self, processor):
        """Test hashtag questions trigger content analysis."""
        query = processor.detect_query_type("What hashtag shows up most?")
        assert query.type == "content_analysis"
        assert query.content_analysis

    def test_apply_conditions(self, processor, five_mentions):
        """Test every condition must match."""
        conditions = [
            FilterCondition(field="total_engagement", value=1000, operator="greater_than"),
            FilterCondition(field="sentiment", value="positive"),
        ]
        matched = processor.apply_conditions(five_mentions, conditions)

        assert [m.total_engagement for m in matched] == [1250, 2100, 3200]

    def test_breakdowns(self, processor, five_mentions):
        """Test sentiment, channel and engagement breakdowns."""
        sentiment = processor.sentiment_breakdown(five_mentions)
        channels = processor.channel_breakdown(five_mentions)
        stats = processor.engagement_stats(five_mentions)

        assert sentiment.positive.count == 3
        assert sentiment.positive.percentage == pytest.approx(60)
        assert channels["Facebook"].avg_engagement == pytest.approx(1675)
        assert stats.total == 8330
        assert stats.median == 1250

    def test_empty_breakdowns(self, processor):
        """Test breakdowns of an empty collection."""
        assert processor.engagement_stats([]).total == 0
        assert processor.channel_breakdown([]) == {}
        assert processor.sentiment_breakdown([]).neutral.percentage == 0

    def test_analyze_content(self, processor, make_mention):
        """Test hashtags, keywords and samples are extracted."""
        records = [
            make_mention(content="Loving the #launch event today", total_engagement=50),
            make_mention(content="The #launch was late #fail", total_engagement=90),
        ]
        insights = processor.analyze_content(records)

        assert insights.top_hashtags[0].tag == "#launch"
        assert insights.top_hashtags[0].count == 2
        assert insights.content_samples[0].engagement == 90
        assert "launch" in [k.word for k in insights.top_keywords]

    def test_process_ranks_matching_records(self, processor, state):
        """Test matches are ranked by engagement and limited."""
        context = processor.process("top 2 facebook", state)

        assert context.total_items == 5
        assert context.filtered_items == 2
        assert [m.total_engagement for m in context.top_results] == [2100, 1250]
        assert context.content_insights is None
        assert "Filtered data: 2 items" in context.summary

    def test_process_respects_dashboard_filters(self, processor, state):
        """Test only records passing the dashboard filters are considered."""
        state.set_filters(sentiment=["Negative"])
        context = processor.process("facebook", state)

        assert context.filtered_items == 0


class TestDashboardContext:

    def test_snapshot(self, five_mentions):
        """Test the snapshot reflects the filtered state."""
        state = DashboardState(default_engagement_max=100_000)
        state.set_records(five_mentions)
        state.set_filters(channels=["Facebook"])

        context = build_dashboard_context(state)

        assert context.current_view == "overview"
        assert context.total_items == 2
        assert context.total_original_items == 5
        assert context.applied_filters["channels"] == ["Facebook"]
        assert len(context.sample_data) == 2
        assert context.kpis.total_mentions.value == 2

    def test_sample_content_is_shortened_only_when_long(self, make_mention):
        """Test short content is kept as is and long content is cut with an ellipsis."""
        state = DashboardState(default_engagement_max=100_000)
        state.set_records([make_mention(content="Short post"), make_mention(content="x" * 150)])

        samples = build_dashboard_context(state).sample_data

        assert samples[0].content == "Short post"
        assert samples[1].content == "x" * 100 + "..."
