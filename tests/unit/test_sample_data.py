import datetime as dt

from social_listening.services.ingest.sample_data import generate_sample_mentions


class TestSampleData:

    today = dt.date(2024, 3, 31)

    def test_count_and_window(self):
        """Test the count and the 30-day window."""
        mentions = generate_sample_mentions(count=200, seed=7, today=self.today)

        assert len(mentions) == 200
        assert all(self.today - dt.timedelta(days=29) <= m.date <= self.today for m in mentions)

    def test_newest_first(self):
        """Test sample mentions are sorted newest first."""
        mentions = generate_sample_mentions(count=50, seed=1, today=self.today)
        dates = [m.date for m in mentions]

        assert dates == sorted(dates, reverse=True)

    def test_seed_is_reproducible(self):
        """Test the same seed gives the same mentions."""
        first = generate_sample_mentions(count=20, seed=42, today=self.today)
        second = generate_sample_mentions(count=20, seed=42, today=self.today)

        assert [m.model_dump() for m in first] == [m.model_dump() for m in second]

    def test_engagement_breakdown_adds_up(self):
        """Test reactions, comments and shares sum to total engagement."""
        for mention in generate_sample_mentions(count=300, seed=3, today=self.today):
            assert mention.reactions + mention.comments + mention.shares == mention.total_engagement

    def test_sentiment_mix_favours_positive(self):
        """Test the sentiment mix leans positive."""
        mentions = generate_sample_mentions(count=1200, seed=11, today=self.today)
        positive = sum(1 for m in mentions if m.sentiment.value == "Positive")

        assert positive > len(mentions) / 2
