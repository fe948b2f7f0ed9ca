import datetime as dt
import json

import httpx
import pytest

from social_listening.schemas.chat import ChatSettings
from social_listening.services.chat.client import ChatClient, ChatSession
from social_listening.services.dashboard.session import DashboardSession
from social_listening.services.dashboard.state import DashboardState
from social_listening.services.ingest.google_sheets import GoogleSheetsClient
from social_listening.services.ingest.spreadsheet import MentionImporter

FULL_CSV = (
    "Date,Content,Sentiment,Channel,Content Type,Total Engagement,Username,"
    "Category,Sub_Category,Type of Speaker,Comment,Reactions,Share\n"
    "2024-01-15,Great launch,Positive,Facebook,Post,1250,alice,ESG Branding,Net zero,Consumer,20,1200,30\n"
    "2024-01-14,Slow support,Negative,Twitter,Comment,830,bob,Crisis Management,Corporate,Consumer,50,700,80\n"
)


class TestDashboardSession:

    @pytest.fixture
    def session(self):
        state = DashboardState(default_engagement_max=100_000, window_days=30)
        return DashboardSession(state=state, importer=MentionImporter(today=dt.date(2024, 2, 1)))

    def test_load_sample(self, session):
        """Test sample data fills the state."""
        assert session.load_sample(count=100, seed=5)

        assert len(session.state.records) == 100
        assert session.state.filtered == session.state.records
        assert session.state.error is None
        assert not session.state.is_loading

    def test_load_file(self, session, tmp_path):
        """Test a file upload fills the state."""
        path = tmp_path / "mentions.csv"
        path.write_text(FULL_CSV, encoding="utf-8")

        assert session.load_file(path)
        assert session.state.kpis.total_engagement.value == 2080
        assert session.state.filters.engagement_range.max == 1250

    def test_failed_load_keeps_previous_records(self, session, tmp_path):
        """Test a failed load keeps the loaded records and sets the error."""
        session.load_sample(count=10, seed=1)
        path = tmp_path / "broken.csv"
        path.write_text("Date,Content\n2024-01-15,hello\n", encoding="utf-8")

        assert not session.load_file(path)
        assert len(session.state.records) == 10
        assert "Missing required columns" in session.state.error
        assert not session.state.is_loading

    def test_successful_load_clears_error(self, session):
        """Test a later successful load clears the error."""
        session.load_bytes("bad.txt", b"nope")
        assert session.state.error

        session.load_bytes("good.csv", FULL_CSV.encode("utf-8"))
        assert session.state.error is None
        assert len(session.state.records) == 2

    @pytest.mark.asyncio
    async def test_load_google_sheet(self, session):
        """Test the configured sheet is loaded."""
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=FULL_CSV))
        session.sheets_client = GoogleSheetsClient(
            sheet_id="abc123",
            importer=session.importer,
            client=httpx.AsyncClient(transport=transport)
        )

        assert await session.load_google_sheet()
        assert [m.username for m in session.state.records] == ["alice", "bob"]
        await session.close()

    @pytest.mark.asyncio
    async def test_unconfigured_sheet_sets_error(self, session):
        """Test a missing sheet id sets the error."""
        session.sheets_client = GoogleSheetsClient(
            sheet_id="",
            importer=session.importer,
            client=httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(200)))
        )

        assert not await session.load_google_sheet()
        assert "not configured" in session.state.error
        assert session.state.records == ()

    @pytest.mark.asyncio
    async def test_ask_sends_dashboard_snapshot(self, session):
        """Test chat questions carry the dashboard snapshot."""
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"choices": [{"message": {"content": "Negative is rare."}}]})

        client = ChatClient(
            settings=ChatSettings(system_prompt="Analyst", api_key="sk-test"),
            base_url="https://llm.example.com/v1",
            client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )
        session.chat = ChatSession(client)
        session.load_bytes("good.csv", FULL_CSV.encode("utf-8"))

        answer = await session.ask("How is sentiment?")
        await session.ask("top 1 twitter", query_aware=True)

        assert answer.content == "Negative is rare."
        assert '"total_original_items": 2' in bodies[0]["messages"][1]["content"]
        assert '"filtered_items": 1' in bodies[1]["messages"][1]["content"]
