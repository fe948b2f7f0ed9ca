"""Bundled sample data set for demos and first load."""
import datetime as dt
import random
from typing import List, Optional

from social_listening.models.mention import (
    CATEGORY_OPTIONS,
    CONTENT_TYPE_OPTIONS,
    SPEAKER_TYPE_OPTIONS,
    SUB_CATEGORY_OPTIONS,
    Mention,
)

SAMPLE_CONTENTS = [
    "Great service from this company! Highly recommend their approach to customer satisfaction.",
    "The new product launch was fantastic. Really impressed with the innovation.",
    "Could be better. The customer service response time needs improvement.",
    "Love the company's commitment to sustainability and environmental responsibility.",
    "Amazing results from their recent ESG initiatives. True corporate leadership.",
    "The latest announcement shows they really care about their community impact.",
    "Not satisfied with the recent changes. Hope they address customer concerns soon.",
    "Excellent presentation at the conference. Very professional and insightful.",
    "Their stock performance has been impressive this quarter.",
    "The company's response to the crisis was handled professionally and transparently.",
]

SAMPLE_USERNAMES = [
    "social_enthusiast", "business_watcher", "green_advocate", "market_analyst",
    "customer_voice", "industry_insider", "brand_follower", "stock_trader",
    "sustainability_fan", "corporate_observer", "consumer_rights", "media_reporter",
    "investment_guru", "eco_warrior", "business_student", "marketing_pro",
]

# (min, max) engagement per channel before the sentiment multiplier
CHANNEL_ENGAGEMENT = {
    "Facebook": (10, 200),
    "Website": (5, 100),
    "Twitter": (15, 150),
    "Instagram": (20, 300),
    "TikTok": (50, 500),
    "YouTube": (30, 250),
}

MINOR_CHANNELS = ["Twitter", "Instagram", "TikTok", "YouTube"]

SENTIMENT_MULTIPLIER = {"Positive": 1.5, "Neutral": 1.0, "Negative": 0.7}

WINDOW_DAYS = 30


def _pick_sentiment(rng: random.Random) -> str:
    # 60% positive, 35% neutral, 5% negative
    roll = rng.random()
    if roll < 0.6:
        return "Positive"
    if roll < 0.95:
        return "Neutral"
    return "Negative"


def _pick_channel(rng: random.Random) -> str:
    # Facebook 40%, Website 35%, the rest shared evenly
    roll = rng.random()
    if roll < 0.4:
        return "Facebook"
    if roll < 0.75:
        return "Website"
    return rng.choice(MINOR_CHANNELS)


def generate_sample_mentions(
    count: int = 1200,
    seed: Optional[int] = None,
    today: Optional[dt.date] = None
) -> List[Mention]:
    """
    Generate realistic-looking mentions spread over the last 30 days.

    Args:
        count: Number of mentions
        seed: Seed for reproducible output
        today: Last day of the generated window

    Returns:
        Mentions sorted newest first
    """
    rng = random.Random(seed)
    today = today or dt.date.today()
    mentions = []

    for i in range(count):
        sentiment = _pick_sentiment(rng)
        channel = _pick_channel(rng)

        low, high = CHANNEL_ENGAGEMENT[channel]
        multiplier = SENTIMENT_MULTIPLIER[sentiment]
        min_engagement = int(low * multiplier)
        max_engagement = int(high * multiplier)
        total_engagement = int(rng.random() * (max_engagement - min_engagement) + min_engagement)

        # Split engagement into reactions (60-90%), comments (5-20%) and shares
        reactions = int(total_engagement * (0.6 + rng.random() * 0.3))
        comments = min(int(total_engagement * (0.05 + rng.random() * 0.15)), total_engagement - reactions)
        shares = total_engagement - reactions - comments

        mentions.append(Mention(
            id=i + 1,
            date=today - dt.timedelta(days=rng.randrange(WINDOW_DAYS)),
            content=rng.choice(SAMPLE_CONTENTS),
            sentiment=sentiment,
            channel=channel,
            content_type=rng.choice(CONTENT_TYPE_OPTIONS),
            total_engagement=total_engagement,
            username=rng.choice(SAMPLE_USERNAMES),
            category=rng.choice(CATEGORY_OPTIONS),
            sub_category=rng.choice(SUB_CATEGORY_OPTIONS),
            type_of_speaker=rng.choice(SPEAKER_TYPE_OPTIONS),
            comments=comments,
            reactions=reactions,
            shares=shares
        ))

    return sorted(mentions, key=lambda mention: mention.date, reverse=True)
