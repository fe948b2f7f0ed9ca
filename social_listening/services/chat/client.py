import json
from typing import Any, Dict, List, Optional, Sequence

import httpx
from pydantic import BaseModel

from social_listening.core.config import get_settings
from social_listening.core.errors import ChatError
from social_listening.core.logging import get_logger
from social_listening.schemas.chat import ChatMessage, ChatSettings

logger = get_logger(__name__)


class ChatClient:
    """Client for an OpenAI-compatible chat completions endpoint."""

    def __init__(
        self,
        settings: Optional[ChatSettings] = None,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        history_limit: Optional[int] = None
    ):
        app_settings = get_settings()
        self.settings = settings or ChatSettings.from_settings(app_settings)
        self.base_url = (base_url or app_settings.OPENAI_BASE_URL).rstrip("/")
        self.history_limit = history_limit or app_settings.CHAT_HISTORY_LIMIT
        self.client = client or httpx.AsyncClient(timeout=app_settings.HTTP_TIMEOUT)

    @property
    def has_api_key(self) -> bool:
        return bool(self.settings.api_key)

    def build_messages(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        context: Optional[BaseModel] = None
    ) -> List[Dict[str, str]]:
        """
        Assemble the request conversation.

        Args:
            message: The new user question
            history: Earlier turns; only the most recent ones are sent
            context: Dashboard snapshot to attach as a system message

        Returns:
            List of role/content dicts
        """
        messages = [{"role": "system", "content": self.settings.system_prompt}]

        if context is not None:
            snapshot = json.dumps(context.model_dump(mode="json"), indent=2, default=str, ensure_ascii=False)
            messages.append({"role": "system", "content": f"Current dashboard data:\n{snapshot}"})

        recent = list(history)[-self.history_limit:] if self.history_limit > 0 else []
        messages.extend({"role": turn.role, "content": turn.content} for turn in recent)
        messages.append({"role": "user", "content": message})
        return messages

    async def complete(
        self,
        message: str,
        history: Sequence[ChatMessage] = (),
        context: Optional[BaseModel] = None
    ) -> str:
        """Send one question and return the assistant's reply text."""
        if not self.has_api_key:
            raise ChatError("Chat API key is not configured")

        payload = {
            "model": self.settings.model,
            "messages": self.build_messages(message, history, context),
            "temperature": self.settings.temperature,
            "max_tokens": self.settings.max_tokens
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.settings.api_key}"
        }

        try:
            response = await self.client.post(f"{self.base_url}/chat/completions", json=payload, headers=headers)
        except httpx.RequestError as e:
            logger.error(f"Chat API connection error: {e}")
            raise ChatError(f"Could not reach chat API: {e}") from e

        if response.is_error:
            detail = _error_message(response)
            logger.error(f"Chat API error {response.status_code}: {detail}")
            raise ChatError(detail)

        try:
            reply = response.json()["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as e:
            logger.error(f"Unexpected chat API response: {e}")
            raise ChatError("Unexpected response from chat API") from e

        logger.info(f"Chat reply received ({len(reply or '')} chars)")
        return reply or ""

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()


def _error_message(response: httpx.Response) -> str:
    try:
        body: Any = response.json()
    except ValueError:
        return "API Error"
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        return body["error"].get("message") or "API Error"
    return "API Error"


class ChatSession:
    """Conversation history with a loading flag and the last error."""

    def __init__(self, client: ChatClient):
        self.client = client
        self.messages: List[ChatMessage] = []
        self.error: Optional[str] = None
        self.is_loading = False

    async def send(self, message: str, context: Optional[BaseModel] = None) -> Optional[ChatMessage]:
        """
        Ask a question and record both turns.

        Returns the assistant message, or None when the question was not
        answered. The reason is left in `error`.
        """
        if not message.strip():
            return None

        if not self.client.has_api_key:
            self.error = "Please configure the chat API key in settings"
            return None

        history = list(self.messages)
        self.messages.append(ChatMessage(role="user", content=message.strip()))
        self.is_loading = True
        self.error = None

        try:
            reply = await self.client.complete(message.strip(), history, context)
        except ChatError as e:
            self.error = str(e)
            return None
        finally:
            self.is_loading = False

        answer = ChatMessage(role="assistant", content=reply)
        self.messages.append(answer)
        return answer

    def clear(self) -> None:
        self.messages = []
        self.error = None
