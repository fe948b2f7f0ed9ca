"""Load a data source into a dashboard and log its headline numbers."""
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

from social_listening.core.config import get_settings
from social_listening.core.logging import setup_logging
from social_listening.services.analytics.charts import top_channels
from social_listening.services.dashboard.session import DashboardSession

logger = logging.getLogger(__name__)


class DashboardPipeline:
    """Loads mentions from a file, the configured sheet, or sample data."""

    def __init__(self, session: Optional[DashboardSession] = None):
        self.settings = get_settings()
        self.session = session or DashboardSession()

    async def load(self, path: Optional[Path] = None) -> bool:
        if path is not None:
            return self.session.load_file(path)
        if self.settings.GOOGLE_SHEET_ID:
            return await self.session.load_google_sheet()
        return self.session.load_sample(count=self.settings.SAMPLE_SIZE, seed=0)

    def report(self) -> None:
        state = self.session.state
        kpis = state.kpis

        logger.info(f"Mentions: {kpis.total_mentions.value} ({kpis.total_mentions.change:+.1f}%)")
        logger.info(f"Engagement: {kpis.total_engagement.value} ({kpis.total_engagement.change:+.1f}%)")
        logger.info(f"Avg engagement: {kpis.avg_engagement_rate.value:.1f}")
        logger.info(f"Sentiment score: {kpis.sentiment_score.value:.1f}")

        for channel in top_channels(state.channel_performance, 3):
            logger.info(f"  {channel.channel}: {channel.mention_count} mentions, {channel.total_engagement} engagement")

        for insight in state.insights:
            logger.info(f"[{insight.type}] {insight.title}: {insight.description}")

    async def run_pipeline(self, path: Optional[Path] = None) -> None:
        logger.info("Starting dashboard load...")

        try:
            if await self.load(path):
                self.report()
            else:
                logger.warning(f"No data loaded: {self.session.state.error}")
        finally:
            await self.session.close()


async def main():
    """Main entry point for the pipeline."""
    setup_logging()
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else None
    pipeline = DashboardPipeline()
    await pipeline.run_pipeline(path)


if __name__ == "__main__":
    asyncio.run(main())
