import json

import httpx
import pytest

from social_listening.core.errors import ChatError
from social_listening.schemas.chat import ChatMessage, ChatSettings
from social_listening.services.chat.client import ChatClient, ChatSession
from social_listening.services.chat.context import build_dashboard_context
from social_listening.services.dashboard.state import DashboardState


def make_client(handler, api_key="sk-test", history_limit=10):
    settings = ChatSettings(system_prompt="You are a helpful analyst.", model="gpt-test", api_key=api_key)
    return ChatClient(
        settings=settings,
        base_url="https://llm.example.com/v1/",
        client=httpx.AsyncClient(transport=httpx.MockTransport(handler)),
        history_limit=history_limit
    )


def reply(text):
    return httpx.Response(200, json={"choices": [{"message": {"role": "assistant", "content": text}}]})


class TestChatClient:

    def test_build_messages_trims_history(self):
        """Test only the latest history turns are sent after the system prompt."""
        client = make_client(lambda request: reply("ok"), history_limit=2)
        history = [ChatMessage(role="user", content=f"q{i}") for i in range(5)]

        messages = client.build_messages("latest", history)

        assert messages[0] == {"role": "system", "content": "You are a helpful analyst."}
        assert [m["content"] for m in messages[1:]] == ["q3", "q4", "latest"]

    def test_context_is_sent_as_system_message(self, five_mentions):
        """Test the dashboard snapshot travels as a second system message."""
        state = DashboardState(default_engagement_max=100_000)
        state.set_records(five_mentions)
        client = make_client(lambda request: reply("ok"))

        messages = client.build_messages("hi", context=build_dashboard_context(state))

        assert messages[1]["role"] == "system"
        assert '"total_items": 5' in messages[1]["content"]

    @pytest.mark.asyncio
    async def test_complete(self):
        """Test the request shape and the returned answer."""
        captured = {}

        def handler(request):
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return reply("Facebook is leading.")

        client = make_client(handler)
        answer = await client.complete("Which channel leads?")
        await client.close()

        assert answer == "Facebook is leading."
        assert captured["url"] == "https://llm.example.com/v1/chat/completions"
        assert captured["auth"] == "Bearer sk-test"
        assert captured["body"]["model"] == "gpt-test"
        assert captured["body"]["messages"][-1] == {"role": "user", "content": "Which channel leads?"}

    @pytest.mark.asyncio
    async def test_missing_api_key(self):
        """Test a missing key fails before any request."""
        client = make_client(lambda request: reply("unused"), api_key="")

        with pytest.raises(ChatError):
            await client.complete("hello")

    @pytest.mark.asyncio
    async def test_api_error_message(self):
        """Test the API error message is surfaced."""
        client = make_client(lambda request: httpx.Response(429, json={"error": {"message": "Rate limit reached"}}))

        with pytest.raises(ChatError, match="Rate limit reached"):
            await client.complete("hello")

    @pytest.mark.asyncio
    async def test_malformed_response(self):
        """Test a reply without choices raises ChatError."""
        client = make_client(lambda request: httpx.Response(200, json={"unexpected": True}))

        with pytest.raises(ChatError, match="Unexpected response"):
            await client.complete("hello")


class TestChatSession:

    @pytest.mark.asyncio
    async def test_send_records_both_turns(self):
        """Test both question and answer are kept in order."""
        bodies = []

        def handler(request):
            bodies.append(json.loads(request.content))
            return reply(f"answer {len(bodies)}")

        session = ChatSession(make_client(handler))
        await session.send("first")
        answer = await session.send("second")

        assert answer.content == "answer 2"
        assert [m.role for m in session.messages] == ["user", "assistant", "user", "assistant"]
        # the pending question is sent once, after the earlier turns
        assert [m["content"] for m in bodies[1]["messages"][1:]] == ["first", "answer 1", "second"]
        assert session.error is None
        assert not session.is_loading

    @pytest.mark.asyncio
    async def test_missing_key_sets_error(self):
        """Test a missing key sets the error and keeps no turns."""
        session = ChatSession(make_client(lambda request: reply("unused"), api_key=""))

        assert await session.send("hello") is None
        assert session.error
        assert session.messages == []

    @pytest.mark.asyncio
    async def test_failure_keeps_question_and_error(self):
        """Test a failed request keeps the question and sets the error."""
        session = ChatSession(make_client(lambda request: httpx.Response(500, text="oops")))

        assert await session.send("hello") is None
        assert session.error == "API Error"
        assert [m.role for m in session.messages] == ["user"]

    def test_clear(self):
        """Test clearing drops messages and the error."""
        session = ChatSession(make_client(lambda request: reply("ok")))
        session.messages.append(ChatMessage(role="user", content="hi"))
        session.error = "old"

        session.clear()

        assert session.messages == []
        assert session.error is None


class TestChatMessage:

    def test_timestamp_is_timezone_aware(self):
        """Test new messages are stamped in UTC."""
        message = ChatMessage(role="user", content="hi")

        assert message.timestamp.tzinfo is not None
        assert message.timestamp.utcoffset().total_seconds() == 0
