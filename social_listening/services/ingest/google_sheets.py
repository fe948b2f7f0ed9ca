from typing import List, Optional

import httpx

from social_listening.core.config import get_settings
from social_listening.core.errors import ConfigurationError, IngestionError
from social_listening.core.logging import get_logger
from social_listening.models.mention import Mention
from social_listening.services.ingest.spreadsheet import MentionImporter

logger = get_logger(__name__)


class GoogleSheetsClient:
    """Client for a published Google Sheet exported as CSV."""

    def __init__(
        self,
        sheet_id: Optional[str] = None,
        gid: Optional[int] = None,
        importer: Optional[MentionImporter] = None,
        client: Optional[httpx.AsyncClient] = None
    ):
        settings = get_settings()
        self.sheet_id = sheet_id if sheet_id is not None else settings.GOOGLE_SHEET_ID
        self.gid = gid if gid is not None else settings.GOOGLE_SHEET_GID
        self.base_url = "https://docs.google.com/spreadsheets/d"
        self.importer = importer or MentionImporter()
        self.client = client or httpx.AsyncClient(timeout=settings.HTTP_TIMEOUT, follow_redirects=True)

    def build_csv_url(self) -> str:
        if not self.sheet_id:
            raise ConfigurationError("Google Sheet id is not configured")
        return f"{self.base_url}/{self.sheet_id}/export?format=csv&gid={self.gid}"

    async def fetch_csv(self) -> str:
        """Download the sheet as CSV text."""
        url = self.build_csv_url()
        logger.info(f"Fetching Google Sheet ...{self.sheet_id[-8:]} (gid={self.gid})")

        try:
            response = await self.client.get(url, headers={"Accept": "text/csv"})
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Google Sheets API error: {e}")
            raise IngestionError(
                f"Google Sheets request failed with status {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            logger.error(f"Google Sheets connection error: {e}")
            raise IngestionError(f"Could not reach Google Sheets: {e}") from e

        text = response.text
        if not text or not text.strip():
            raise IngestionError("Google Sheet returned no data")

        logger.debug(f"CSV data received, length: {len(text)}")
        return text

    async def fetch_mentions(self) -> List[Mention]:
        """Fetch the sheet and convert its rows to mentions."""
        text = await self.fetch_csv()
        mentions = self.importer.load_csv_text(text)
        logger.info(f"Fetched {len(mentions)} mentions from Google Sheets")
        return mentions

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()
