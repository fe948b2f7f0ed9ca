import datetime as dt

import pytest

from social_listening.models.mention import Mention


@pytest.fixture
def make_mention():
    """Factory for mentions with sensible defaults; ids increase per call."""
    counter = {"next": 1}

    def _make(**overrides):
        values = {
            "id": counter["next"],
            "date": dt.date(2024, 1, 15),
            "content": "Sample mention",
            "sentiment": "Positive",
            "channel": "Facebook",
            "content_type": "Post",
            "total_engagement": 100,
            "username": "user1",
            "category": "Business Branding",
            "sub_category": "Corporate",
            "type_of_speaker": "Consumer",
        }
        values.update(overrides)
        counter["next"] += 1
        return Mention(**values)

    return _make


@pytest.fixture
def five_mentions(make_mention):
    """Five consecutive days of mentions, 2024-01-11 to 2024-01-15."""
    sentiments = ["Positive", "Negative", "Positive", "Neutral", "Positive"]
    engagements = [1250, 830, 2100, 950, 3200]
    channels = ["Facebook", "Twitter", "Facebook", "Instagram", "Website"]
    categories = ["Business Branding", "ESG Branding", "ESG Branding", "Business Branding", "Crisis Management"]

    return [
        make_mention(
            date=dt.date(2024, 1, 11) + dt.timedelta(days=i),
            sentiment=sentiments[i],
            total_engagement=engagements[i],
            channel=channels[i],
            category=categories[i],
            username=f"user{i + 1}"
        )
        for i in range(5)
    ]
