import datetime as dt

import httpx
import pytest

from social_listening.core.errors import ConfigurationError, IngestionError
from social_listening.services.ingest.google_sheets import GoogleSheetsClient
from social_listening.services.ingest.spreadsheet import MentionImporter

SHEET_CSV = (
    "Date,Content,Sentiment,Channel,Total Engagement,Username\n"
    "2024-01-15,Great product,Positive,Facebook,120,alice\n"
    "2024-01-14,Meh,Neutral,Website,15,bob\n"
)


def make_client(handler, sheet_id="sheet-1234567890"):
    transport = httpx.MockTransport(handler)
    return GoogleSheetsClient(
        sheet_id=sheet_id,
        gid=7,
        importer=MentionImporter(today=dt.date(2024, 2, 1)),
        client=httpx.AsyncClient(transport=transport)
    )


class TestGoogleSheetsClient:

    def test_csv_url(self):
        """Test the CSV export url of the sheet."""
        client = make_client(lambda request: httpx.Response(200))
        assert client.build_csv_url() == "https://docs.google.com/spreadsheets/d/sheet-1234567890/export?format=csv&gid=7"

    def test_missing_sheet_id(self):
        """Test a missing sheet id raises ConfigurationError."""
        client = make_client(lambda request: httpx.Response(200), sheet_id="")

        with pytest.raises(ConfigurationError):
            client.build_csv_url()

    @pytest.mark.asyncio
    async def test_fetch_mentions(self):
        """Test a sheet export is fetched and parsed."""
        requests = []

        def handler(request):
            requests.append(request)
            return httpx.Response(200, text=SHEET_CSV)

        client = make_client(handler)
        mentions = await client.fetch_mentions()
        await client.close()

        assert len(requests) == 1
        assert requests[0].url.params["gid"] == "7"
        assert [m.username for m in mentions] == ["alice", "bob"]
        assert mentions[0].total_engagement == 120

    @pytest.mark.asyncio
    async def test_http_error_is_reported(self):
        """Test HTTP errors raise with the status."""
        client = make_client(lambda request: httpx.Response(404, text="not found"))

        with pytest.raises(IngestionError, match="status 404"):
            await client.fetch_csv()

    @pytest.mark.asyncio
    async def test_empty_sheet(self):
        """Test an empty export raises."""
        client = make_client(lambda request: httpx.Response(200, text="   "))

        with pytest.raises(IngestionError, match="no data"):
            await client.fetch_mentions()

    @pytest.mark.asyncio
    async def test_connection_error(self):
        """Test transport errors raise."""
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        client = make_client(handler)

        with pytest.raises(IngestionError, match="Could not reach"):
            await client.fetch_csv()
