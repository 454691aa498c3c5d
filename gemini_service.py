"""
Gemini chat assistant and marketing copy generator.

A ChatSession owns one remote chat context, created lazily on the first
message, and the visible message history. Replies are streamed as text
fragments; any failure mid-stream ends the reply with APOLOGY_TEXT.
"""
import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Iterator, List, Optional

from dotenv import load_dotenv
from google import genai
from google.genai import types

from catalog_seed import SYSTEM_INSTRUCTION, WELCOME_MESSAGE
from schemas import ChatMessage

# Load environment variables from .env file
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"
TEMPERATURE = 0.7
MAX_OUTPUT_TOKENS = 1000

APOLOGY_TEXT = (
    "I apologize, but I'm having trouble connecting to the library archives right now. "
    "Please try again in a moment."
)
MARKETING_EMPTY_TEXT = "Could not generate content."
MARKETING_ERROR_TEXT = "Error generating marketing copy."

# Turn states
IDLE = "idle"
AWAITING_FIRST_CHUNK = "awaiting-first-chunk"
STREAMING = "streaming"
COMPLETE = "complete"


class MissingAPIKeyError(RuntimeError):
    pass


class ChatBusyError(RuntimeError):
    pass


_client: Optional[genai.Client] = None


def get_client() -> genai.Client:
    global _client
    if _client is None:
        api_key = os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")
        if not api_key:
            logger.error("API_KEY is missing from environment variables.")
            raise MissingAPIKeyError("API Key not found")
        _client = genai.Client(api_key=api_key)
    return _client


def model_name() -> str:
    return os.getenv("GEMINI_MODEL", DEFAULT_MODEL)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class ChatSession:
    def __init__(self, client_factory: Callable[[], Any] = get_client, system_instruction: str = SYSTEM_INSTRUCTION):
        self._client_factory = client_factory
        self._system_instruction = system_instruction
        self._chat = None
        self._counter = 0
        self._active: Optional[Iterator[str]] = None
        self._active_reply: Optional[ChatMessage] = None
        self.state = IDLE
        self.messages: List[ChatMessage] = [
            ChatMessage(id="welcome", role="model", text=WELCOME_MESSAGE, timestamp=_now())
        ]

    @property
    def is_loading(self) -> bool:
        return self.state in (AWAITING_FIRST_CHUNK, STREAMING)

    def _next_id(self) -> str:
        self._counter += 1
        return f"{int(_now().timestamp() * 1000)}-{self._counter}"

    def _ensure_chat(self):
        if self._chat is None:
            client = self._client_factory()
            self._chat = client.chats.create(
                model=model_name(),
                config=types.GenerateContentConfig(
                    system_instruction=self._system_instruction,
                    temperature=TEMPERATURE,
                    max_output_tokens=MAX_OUTPUT_TOKENS,
                ),
            )
        return self._chat

    def _stream_reply(self, chat, text: str) -> Iterator[str]:
        try:
            for chunk in chat.send_message_stream(text):
                if chunk.text:
                    yield chunk.text
        except Exception:
            logger.exception("Error sending message to Gemini")
            yield APOLOGY_TEXT

    def send_message(self, text: str) -> Iterator[str]:
        """Record a user turn and return the reply as a stream of fragments.

        Each fragment is appended to the reply message as it arrives; once
        the iterator finishes the reply stops streaming. A stream left
        unfinished by its caller is abandoned by the next send, which closes
        it and marks its reply complete with whatever text arrived.

        Raises MissingAPIKeyError before touching the history when no key is
        configured, and ChatBusyError while another reply is being produced
        on a different thread.
        """
        chat = self._ensure_chat()
        self._abandon_active()

        self.messages.append(ChatMessage(id=self._next_id(), role="user", text=text, timestamp=_now()))
        reply = ChatMessage(id=self._next_id(), role="model", text="", timestamp=_now(), is_streaming=True)
        self.messages.append(reply)
        self.state = AWAITING_FIRST_CHUNK
        self._active_reply = reply
        self._active = self._drain(chat, text, reply)
        return self._active

    def _abandon_active(self) -> None:
        if self._active is None:
            return
        stream, reply = self._active, self._active_reply
        try:
            stream.close()
        except ValueError:
            # generator already executing
            raise ChatBusyError("A reply is already streaming")
        self._finish(reply)

    def _finish(self, reply: ChatMessage) -> None:
        reply.is_streaming = False
        if self._active_reply is reply:
            self.state = COMPLETE
            self._active = None
            self._active_reply = None

    def _drain(self, chat, text: str, reply: ChatMessage) -> Iterator[str]:
        try:
            for fragment in self._stream_reply(chat, text):
                self.state = STREAMING
                reply.text += fragment
                yield fragment
        finally:
            self._finish(reply)


chat_session = ChatSession()


def get_chat_session() -> ChatSession:
    return chat_session


def generate_marketing_copy(topic: str, client_factory: Callable[[], Any] = get_client) -> str:
    client = client_factory()
    try:
        response = client.models.generate_content(
            model=model_name(),
            contents=(
                "Write a short, engaging social media post (max 100 words) for Kavithedal Publication "
                f"about: {topic}. Use emojis and hashtags."
            ),
        )
        return response.text or MARKETING_EMPTY_TEXT
    except Exception:
        logger.exception("Error generating marketing copy")
        return MARKETING_ERROR_TEXT
