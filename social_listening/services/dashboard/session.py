"""Wires the data sources and the chat assistant to a dashboard state."""
from pathlib import Path
from typing import Awaitable, Callable, List, Optional

from social_listening.core.config import get_settings
from social_listening.core.errors import ConfigurationError, IngestionError
from social_listening.core.logging import get_logger
from social_listening.models.mention import Mention
from social_listening.schemas.chat import ChatMessage
from social_listening.services.chat.client import ChatClient, ChatSession
from social_listening.services.chat.context import ContextProcessor, build_dashboard_context
from social_listening.services.dashboard.state import DashboardState
from social_listening.services.ingest.google_sheets import GoogleSheetsClient
from social_listening.services.ingest.sample_data import generate_sample_mentions
from social_listening.services.ingest.spreadsheet import MentionImporter

logger = get_logger(__name__)


class DashboardSession:
    """
    One user's dashboard: a state plus the collaborators that feed it.

    Load failures are reported through the state's error slot and leave the
    previously loaded mentions in place.
    """

    def __init__(
        self,
        state: Optional[DashboardState] = None,
        importer: Optional[MentionImporter] = None,
        sheets_client: Optional[GoogleSheetsClient] = None,
        chat: Optional[ChatSession] = None
    ):
        self.state = state or DashboardState()
        self.importer = importer or MentionImporter()
        self.sheets_client = sheets_client
        self.chat = chat
        self.context_processor = ContextProcessor()

    def load_sample(self, count: Optional[int] = None, seed: Optional[int] = None) -> bool:
        """Load the generated sample set."""
        count = count if count is not None else get_settings().SAMPLE_SIZE
        return self._load(lambda: generate_sample_mentions(count=count, seed=seed), "sample data")

    def load_file(self, path: Path) -> bool:
        """Load an uploaded spreadsheet from disk."""
        return self._load(lambda: self.importer.load_file(path), str(path))

    def load_bytes(self, filename: str, data: bytes) -> bool:
        return self._load(lambda: self.importer.load_bytes(filename, data), filename)

    async def load_google_sheet(self) -> bool:
        """Fetch the configured published sheet."""
        if self.sheets_client is None:
            self.sheets_client = GoogleSheetsClient(importer=self.importer)
        return await self._load_async(self.sheets_client.fetch_mentions, "Google Sheets")

    def _load(self, loader: Callable[[], List[Mention]], source: str) -> bool:
        self.state.set_loading(True)
        try:
            mentions = loader()
        except (IngestionError, ConfigurationError) as e:
            return self._fail(source, e)
        finally:
            self.state.set_loading(False)
        return self._succeed(source, mentions)

    async def _load_async(self, loader: Callable[[], Awaitable[List[Mention]]], source: str) -> bool:
        self.state.set_loading(True)
        try:
            mentions = await loader()
        except (IngestionError, ConfigurationError) as e:
            return self._fail(source, e)
        finally:
            self.state.set_loading(False)
        return self._succeed(source, mentions)

    def _succeed(self, source: str, mentions: List[Mention]) -> bool:
        self.state.set_records(mentions)
        self.state.set_error(None)
        logger.info(f"Loaded {len(mentions)} mentions from {source}")
        return True

    def _fail(self, source: str, error: Exception) -> bool:
        logger.error(f"Failed to load {source}: {error}")
        self.state.set_error(str(error))
        return False

    async def ask(self, question: str, query_aware: bool = False) -> Optional[ChatMessage]:
        """
        Forward a question to the chat assistant with a dashboard snapshot.

        With query_aware the snapshot is digested for the question (filters
        and top results read from its wording) instead of the generic summary.
        """
        if self.chat is None:
            self.chat = ChatSession(ChatClient())

        if query_aware:
            context = self.context_processor.process(question, self.state)
        else:
            context = build_dashboard_context(self.state)
        return await self.chat.send(question, context)

    async def close(self) -> None:
        if self.sheets_client is not None:
            await self.sheets_client.close()
        if self.chat is not None:
            await self.chat.client.close()
